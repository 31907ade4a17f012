"""
API route handlers for the Real Estate Marketplace API.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .properties import router as properties_router, admin_router as admin_properties_router
from .agents import router as agents_router, admin_router as admin_agents_router
from .categories import router as categories_router
from .services import router as services_router
from .contacts import router as contacts_router
from .projects import (
    router as projects_router,
    new_projects_router,
    admin_router as admin_projects_router
)
from .stories import router as stories_router

__all__ = [
    "auth_router",
    "properties_router",
    "admin_properties_router",
    "agents_router",
    "admin_agents_router",
    "categories_router",
    "services_router",
    "contacts_router",
    "projects_router",
    "new_projects_router",
    "admin_projects_router",
    "stories_router",
    "api_routers"
]

api_routers = [
    auth_router,
    properties_router,
    admin_properties_router,
    agents_router,
    admin_agents_router,
    categories_router,
    services_router,
    contacts_router,
    projects_router,
    new_projects_router,
    admin_projects_router,
    stories_router,
]
