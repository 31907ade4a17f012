"""
FastAPI dependency injection utilities for authentication and database sessions.
Resolves the bearer token of each request into an explicit Session object.
"""

from dataclasses import dataclass
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.agent import Agent
from app.models.user import User
from app.services.auth import AuthService
from app.services.agent import AgentService
from app.services.property import PropertyService
from app.services.category import CategoryService
from app.services.service_catalog import ServiceCatalogService
from app.services.contact import ContactService
from app.services.project import ProjectService, NewProjectService
from app.services.story import StoryService
from app.utils.file_utils import FileStorage
from app.utils.exceptions import (
    APIException,
    UnauthorizedError,
    AgentProfileRequiredError,
    InsufficientPermissionsError
)
import logging

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


@dataclass
class Session:
    """Authenticated caller: the user and its linked agent profile, if any."""

    user: User
    token: str

    @property
    def agent(self) -> Optional[Agent]:
        return self.user.agent

    @property
    def agent_id(self) -> Optional[int]:
        return self.user.agent_id

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin

    @property
    def is_agent(self) -> bool:
        return self.user.is_agent


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Session:
    """
    Resolve the request's bearer token into a Session.

    Raises:
        UnauthorizedError: If no token is provided or it is invalid
        InactiveUserError: If the account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    try:
        user = await auth_service.get_current_user(credentials.credentials)
        return Session(user=user, token=credentials.credentials)
    except APIException:
        raise
    except Exception as e:
        raise UnauthorizedError(f"Authentication failed: {str(e)}")


async def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Session]:
    """
    Resolve the bearer token if one is present; never blocks the request.

    Returns:
        Session if authenticated, None otherwise
    """
    if not credentials:
        return None

    try:
        user = await auth_service.get_current_user(credentials.credentials)
        return Session(user=user, token=credentials.credentials)
    except APIException as e:
        logger.debug(f"Ignoring invalid optional credentials: {e.detail}")
        return None


async def require_admin(session: Session = Depends(get_session)) -> Session:
    """
    Require an administrator.

    Raises:
        InsufficientPermissionsError: If the caller is not an admin
    """
    if not session.is_admin:
        raise InsufficientPermissionsError("access admin resources")
    return session


async def require_staff(session: Session = Depends(get_session)) -> Session:
    """
    Require an administrator or an agent.

    Raises:
        InsufficientPermissionsError: If the caller is a plain user
    """
    if not (session.is_admin or session.is_agent):
        raise InsufficientPermissionsError("access agent resources")
    return session


async def require_agent(session: Session = Depends(get_session)) -> Session:
    """
    Require a caller with a linked agent profile.

    Raises:
        AgentProfileRequiredError: If the caller has no agent profile
    """
    if session.agent_id is None:
        raise AgentProfileRequiredError("Only agents with a profile can perform this action")
    return session


def get_file_storage() -> FileStorage:
    """Storage for uploaded media under the configured upload directory."""
    return FileStorage()


async def get_agent_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> AgentService:
    return AgentService(db, storage)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session
        storage: Upload storage

    Returns:
        PropertyService instance
    """
    return PropertyService(db, storage)


async def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


async def get_service_catalog(db: AsyncSession = Depends(get_db)) -> ServiceCatalogService:
    return ServiceCatalogService(db)


async def get_contact_service(db: AsyncSession = Depends(get_db)) -> ContactService:
    return ContactService(db)


async def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


async def get_new_project_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> NewProjectService:
    return NewProjectService(db, storage)


async def get_story_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> StoryService:
    return StoryService(db, storage)
