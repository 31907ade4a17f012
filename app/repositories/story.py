"""
Story repository. Expiry is applied when reading: a story is listed while
it is active and its expiry lies after the caller-supplied ``now``.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.story import Story
from datetime import datetime
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class StoryRepository(BaseRepository[Story]):
    """Repository for agent stories."""

    def __init__(self, db: AsyncSession):
        super().__init__(Story, db)

    async def get_active(
        self,
        now: datetime,
        agent_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Story]:
        """
        Get visible stories, newest first.

        Args:
            now: Reference time; stories expiring at or before it are hidden
            agent_id: Restrict to one agent
            limit: Maximum number of stories

        Returns:
            List of stories
        """
        try:
            query = select(Story).where(Story.is_active.is_(True), Story.expires_at > now)
            if agent_id is not None:
                query = query.where(Story.agent_id == agent_id)
            query = query.order_by(Story.created_at.desc(), Story.id.desc())
            if limit:
                query = query.limit(limit)

            stories = list((await self.db.execute(query)).scalars().all())
            logger.debug(f"Retrieved {len(stories)} active stories")
            return stories
        except Exception as e:
            logger.error(f"Failed to get active stories: {e}")
            raise
