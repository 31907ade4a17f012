"""
Story service: agent story creation, deletion and the public feed.
Stories are hidden once expired; expiry is evaluated against the ``now``
each read is given, there is no cleanup job.
"""

from typing import Optional, List, Dict, Any, TYPE_CHECKING
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from app.config import settings
from app.repositories.story import StoryRepository
from app.repositories.agent import AgentRepository
from app.models.story import Story, MediaType, DEFAULT_STORY_DURATION
from app.utils.file_utils import FileValidator, FileStorage
from app.utils.stories import (
    utc_now,
    days_ago,
    time_until_expiry,
    story_expiry,
    group_stories_by_agent
)
from app.utils.exceptions import (
    NotFoundError,
    BadRequestError,
    OwnershipError,
    AgentProfileRequiredError
)
import logging

if TYPE_CHECKING:
    from app.utils.dependencies import Session

logger = logging.getLogger(__name__)


def clamp_duration(value: Any, maximum: Optional[int] = None) -> int:
    """
    Normalize a story duration to 1..maximum seconds.

    Missing, non-numeric and zero values fall back to the default duration.
    """
    maximum = maximum or settings.story_max_duration_sec
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        seconds = 0
    if not seconds:
        seconds = DEFAULT_STORY_DURATION
    return min(maximum, max(1, seconds))


class StoryService:
    """Business logic for agent stories."""

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.story_repo = StoryRepository(db_session)
        self.agent_repo = AgentRepository(db_session)
        self.storage = storage

    @staticmethod
    def serialize(story: Story, now: datetime) -> Dict[str, Any]:
        """Flattened story with its relative posted and expiry labels."""
        data = story.to_dict()
        data["posted"] = days_ago(data["created_at"], now)
        data["expires_in"] = time_until_expiry(data["expires_at"], now)
        return data

    async def list_active(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Active stories of every agent, newest first."""
        now = now or utc_now()
        stories = await self.story_repo.get_active(now, limit=settings.story_feed_limit)
        return [self.serialize(story, now) for story in stories]

    async def list_grouped(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Active stories grouped per agent, most recently active agent first."""
        return group_stories_by_agent(await self.list_active(now))

    async def list_for_agent(self, agent_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Active stories of one agent.

        Raises:
            NotFoundError: If the agent doesn't exist
        """
        if not await self.agent_repo.exists(agent_id):
            raise NotFoundError("Agent", agent_id)
        now = now or utc_now()
        stories = await self.story_repo.get_active(now, agent_id=agent_id)
        return [self.serialize(story, now) for story in stories]

    async def create_story(
        self,
        session: "Session",
        title: Optional[str] = None,
        project_name: Optional[str] = None,
        caption: Optional[str] = None,
        duration: Any = None,
        media_type: Optional[str] = None,
        media_url: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
        media: Optional[UploadFile] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Publish a story for the caller's agent profile.

        An uploaded file takes precedence over ``media_url`` and decides the
        media type. The story expires after the configured lifetime.

        Raises:
            AgentProfileRequiredError: If the caller has no agent profile
            BadRequestError: If neither a file nor a media URL was given
            FileUploadError: If the upload is invalid
        """
        agent_id = session.agent_id
        if agent_id is None:
            raise AgentProfileRequiredError(
                "No agent profile linked to this user. Please contact admin to create your agent profile."
            )

        stored_url = None
        if media is not None and media.filename:
            content = await FileValidator.read_story_media(media)
            kind = MediaType.VIDEO if FileValidator.is_video(media.content_type) else MediaType.IMAGE
            media_url = await self.storage.save_bytes(content, media.filename, "stories")
            stored_url = media_url
        else:
            media_url = (media_url or "").strip() or None
            if not media_url:
                raise BadRequestError("Provide media file or URL")
            try:
                kind = MediaType(media_type) if media_type else MediaType.IMAGE
            except ValueError:
                raise BadRequestError(f"Invalid media type: {media_type}")

        now = now or utc_now()
        try:
            story = await self.story_repo.create({
                "agent_id": agent_id,
                "title": title or None,
                "project_name": project_name or None,
                "caption": caption or None,
                "media_type": kind,
                "media_url": media_url,
                "thumbnail_url": thumbnail_url or None,
                "duration_sec": clamp_duration(duration),
                "is_active": True,
                "created_at": now,
                "expires_at": story_expiry(now, settings.story_ttl_hours),
            })
        except Exception:
            if stored_url:
                self.storage.delete_file(stored_url)
            raise
        logger.info(f"Agent {agent_id} posted story {story.id}")
        return self.serialize(story, now)

    async def delete_story(self, story_id: int, session: "Session") -> None:
        """
        Delete one of the caller's stories and its uploaded media.

        Raises:
            NotFoundError: If the story doesn't exist
            OwnershipError: If it belongs to another agent
        """
        story = await self.story_repo.get_by_id(story_id)
        if not story:
            raise NotFoundError("Story", story_id)
        if session.agent_id is None or story.agent_id != session.agent_id:
            raise OwnershipError("stories")

        urls = [story.media_url, story.thumbnail_url]
        await self.story_repo.delete(story_id)
        if self.storage:
            for url in urls:
                self.storage.delete_file(url)
        logger.info(f"Agent {session.agent_id} deleted story {story_id}")
