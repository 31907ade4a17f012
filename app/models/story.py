"""
Story model: short-lived agent media posts.
"""

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base, enum_type
from app.utils.stories import to_utc
from datetime import datetime
import enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.agent import Agent

DEFAULT_STORY_DURATION = 30


class MediaType(str, enum.Enum):
    """Kind of media a story carries."""
    IMAGE = "image"
    VIDEO = "video"


class Story(Base):
    """
    Agent story with a single media item.
    Visible while is_active and until expires_at; expiry is applied when reading.
    """

    __tablename__ = "stories"

    agent_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("agents.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    project_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    media_type: Mapped[MediaType] = mapped_column(enum_type(MediaType, 8), nullable=False)
    media_url: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    duration_sec: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_STORY_DURATION)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    agent: Mapped["Agent"] = relationship("Agent", lazy="selectin")

    def to_dict(self) -> dict:
        """
        Flatten the story with its agent's display fields.

        Returns:
            Dictionary in the shape consumed by the stories row
        """
        agent = self.agent
        created_at = to_utc(self.created_at)
        expires_at = to_utc(self.expires_at)
        return {
            "id": self.id,
            "story_id": self.id,
            "agent_id": self.agent_id,
            "agent_name": agent.name if agent else None,
            "agent_title": agent.title if agent else None,
            "agent_photo": agent.photo if agent else None,
            "phone": agent.phone if agent else None,
            "whatsapp": agent.whatsapp if agent else None,
            "title": self.title,
            "project_name": self.project_name,
            "caption": self.caption,
            "media_type": self.media_type.value,
            "media_url": self.media_url,
            "thumbnail_url": self.thumbnail_url or self.media_url,
            "duration": self.duration_sec or DEFAULT_STORY_DURATION,
            "created_at": created_at.isoformat() if created_at else None,
            "expires_at": expires_at.isoformat() if expires_at else None,
        }


active_story_index = Index(
    'idx_stories_active_expires',
    Story.is_active,
    Story.expires_at
)
