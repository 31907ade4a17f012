"""
Pydantic schemas for stories and story groups.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from app.models.story import MediaType


class StoryResponse(BaseModel):
    """Story flattened with its agent's display fields."""

    id: int
    story_id: int
    agent_id: int
    agent_name: Optional[str] = None
    agent_title: Optional[str] = None
    agent_photo: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    title: Optional[str] = None
    project_name: Optional[str] = None
    caption: Optional[str] = None
    media_type: MediaType
    media_url: str
    thumbnail_url: Optional[str] = None
    duration: int = Field(..., ge=1, le=30, description="Display duration in seconds")
    created_at: Optional[str] = None
    expires_at: Optional[str] = None
    posted: Optional[str] = Field(None, description="Relative age, e.g. '2 hours ago'")
    expires_in: Optional[str] = Field(None, description="Remaining lifetime, e.g. 'Expires in 3h 12m'")


class StoryGroupResponse(BaseModel):
    """One agent's stories, newest first."""

    agent_id: int
    agent_name: Optional[str] = None
    agent_title: Optional[str] = None
    agent_photo: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    posted_at: Optional[str] = None
    stories: List[StoryResponse]
