"""
Repository layer for data access operations.
Provides database operations with proper error handling and logging.
"""

from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.password_reset import PasswordResetTokenRepository
from app.repositories.agent import AgentRepository
from app.repositories.property import PropertyRepository
from app.repositories.category import CategoryRepository
from app.repositories.service import ServiceRepository
from app.repositories.contact import ContactRepository
from app.repositories.project import ProjectRepository, NewProjectRepository
from app.repositories.story import StoryRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PasswordResetTokenRepository",
    "AgentRepository",
    "PropertyRepository",
    "CategoryRepository",
    "ServiceRepository",
    "ContactRepository",
    "ProjectRepository",
    "NewProjectRepository",
    "StoryRepository",
]
