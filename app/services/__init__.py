"""
Service layer for business logic implementation.
Contains services for authentication, listings, agents, stories, content and error handling.
"""

from .auth import AuthService
from .agent import AgentService
from .property import PropertyService
from .category import CategoryService
from .service_catalog import ServiceCatalogService
from .contact import ContactService
from .project import ProjectService, NewProjectService
from .story import StoryService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "AgentService",
    "PropertyService",
    "CategoryService",
    "ServiceCatalogService",
    "ContactService",
    "ProjectService",
    "NewProjectService",
    "StoryService",
    "ErrorHandlerService"
]
