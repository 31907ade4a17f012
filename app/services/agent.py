"""
Agent service for the agent directory and agent account management.
Handles profile CRUD, listing counts, photo uploads and the atomic
creation of an agent together with its login account.
"""

from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from fastapi import UploadFile
from app.repositories.agent import AgentRepository
from app.repositories.story import StoryRepository
from app.repositories.user import UserRepository
from app.models.agent import Agent
from app.models.user import UserRole
from app.schemas.agent import AgentCreate, AgentUpdate, AgentAccountCreate
from app.utils.filters import AgentFilters
from app.utils.file_utils import FileValidator, FileStorage
from app.utils.stories import utc_now
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    ValidationError,
    DuplicateResourceError
)
import secrets
import logging

logger = logging.getLogger(__name__)

LATEST_STORIES_ON_PROFILE = 3


def generate_temp_password() -> str:
    """Random password handed to a new agent once."""
    return secrets.token_urlsafe(9)


class AgentService:
    """
    Agent service for directory listings and profile management.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.agent_repo = AgentRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.story_repo = StoryRepository(db_session)
        self.storage = storage

    async def list_agents(
        self,
        filters: Optional[AgentFilters] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List agents, best rated first, with published listing counts.

        Returns:
            Tuple of (agent dictionaries, total count)
        """
        agents, total = await self.agent_repo.search_agents(filters, skip=(page - 1) * limit, limit=limit)
        counts = await self.agent_repo.count_published_properties([agent.id for agent in agents])
        return [agent.to_dict(properties_count=counts.get(agent.id, 0)) for agent in agents], total

    async def get_agent(self, agent_id: int) -> Agent:
        """
        Get an agent by id.

        Raises:
            NotFoundError: If the agent doesn't exist
        """
        agent = await self.agent_repo.get_by_id(agent_id)
        if not agent:
            raise NotFoundError("Agent", agent_id)
        return agent

    async def get_agent_profile(self, agent_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Agent profile with email, published listing count and latest active stories.

        Args:
            agent_id: Agent id
            now: Reference time for story expiry

        Returns:
            Profile dictionary
        """
        agent = await self.get_agent(agent_id)
        counts = await self.agent_repo.count_published_properties([agent.id])
        stories = await self.story_repo.get_active(
            now or utc_now(),
            agent_id=agent.id,
            limit=LATEST_STORIES_ON_PROFILE
        )
        data = agent.to_dict(properties_count=counts.get(agent.id, 0))
        data["active_stories"] = [story.to_dict() for story in stories]
        return data

    async def create_agent(self, agent_data: AgentCreate) -> Agent:
        """Create an agent profile without a login account."""
        try:
            agent = await self.agent_repo.create(agent_data.model_dump(exclude_none=True))
            logger.info(f"Created agent profile: {agent.name} (ID: {agent.id})")
            return agent
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create agent: {e}")
            raise BadRequestError(f"Failed to create agent: {str(e)}")

    async def create_agent_with_account(self, data: AgentAccountCreate) -> Dict[str, Any]:
        """
        Create a user account with the agent role and its agent profile atomically.

        A temporary password is generated when none is supplied and is
        returned exactly once.

        Args:
            data: Account and profile data

        Returns:
            Dictionary with agent, user_id, email and temp_password

        Raises:
            DuplicateResourceError: If the email is already registered
            ValidationError: If the account data is invalid
        """
        if await self.user_repo.get_by_email(data.email):
            raise DuplicateResourceError("User", data.email)

        temp_password = None if data.password else generate_temp_password()
        profile = data.model_dump(exclude={"email", "password"}, exclude_none=True)

        try:
            agent, user = await self.agent_repo.create_with_user(
                {
                    "name": data.name,
                    "email": data.email,
                    "password": data.password or temp_password,
                    "role": UserRole.AGENT,
                },
                profile
            )
        except ValueError as e:
            raise ValidationError(str(e))
        except IntegrityError as e:
            # Another request registered the email after the check above
            logger.warning(f"Agent account for {data.email} hit a unique constraint: {e}")
            raise DuplicateResourceError("User", data.email)
        except Exception as e:
            logger.error(f"Failed to create agent account for {data.email}: {e}")
            raise BadRequestError(f"Failed to create agent account: {str(e)}")

        logger.info(f"Created agent {agent.id} with account {user.email}")
        return {
            "agent": agent.to_dict(),
            "user_id": user.id,
            "email": user.email,
            "temp_password": temp_password,
        }

    async def update_agent(self, agent_id: int, agent_data: AgentUpdate) -> Agent:
        """
        Update an agent profile.

        Raises:
            NotFoundError: If the agent doesn't exist
        """
        try:
            await self.get_agent(agent_id)
            updated = await self.agent_repo.update(agent_id, agent_data.model_dump(exclude_unset=True))
            if not updated:
                raise NotFoundError("Agent", agent_id)
            logger.info(f"Updated agent {agent_id}")
            return updated
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update agent {agent_id}: {e}")
            raise BadRequestError(f"Failed to update agent: {str(e)}")

    async def delete_agent(self, agent_id: int) -> None:
        """
        Delete an agent profile. Listings keep existing without an agent.

        Raises:
            NotFoundError: If the agent doesn't exist
        """
        agent = await self.get_agent(agent_id)
        photo_url = agent.profile_photo
        if not await self.agent_repo.delete(agent_id):
            raise NotFoundError("Agent", agent_id)
        if self.storage:
            self.storage.delete_file(photo_url)
        logger.info(f"Deleted agent {agent_id}")

    async def upload_photo(self, agent_id: int, file: UploadFile) -> Agent:
        """
        Store a new profile photo and point the agent at it.

        Raises:
            NotFoundError: If the agent doesn't exist
            FileUploadError: If the upload is not a valid image
        """
        agent = await self.get_agent(agent_id)
        previous = agent.profile_photo

        content = await FileValidator.read_image(file)
        url = await self.storage.save_bytes(content, file.filename, "agents")
        updated = await self.agent_repo.update(agent_id, {"profile_photo": url})

        if previous and previous != url:
            self.storage.delete_file(previous)
        logger.info(f"Updated photo of agent {agent_id}")
        return updated
