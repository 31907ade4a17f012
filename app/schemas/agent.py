"""
Pydantic schemas for agent profiles.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from decimal import Decimal
from app.models.agent import is_local_file_path
from app.schemas.story import StoryResponse


class AgentFields(BaseModel):
    """Editable agent profile fields."""

    title: Optional[str] = Field(None, max_length=255, examples=["Senior Property Consultant"])
    specialty: Optional[str] = Field(None, max_length=255, examples=["Luxury Villas"])
    specialization: Optional[str] = Field(None, max_length=100, examples=["Residential"])
    bio: Optional[str] = Field(None, max_length=5000)
    experience: Optional[int] = Field(None, ge=0, le=80)
    rating: Optional[Decimal] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)
    sales: Optional[str] = Field(None, max_length=50)
    languages: Optional[str] = Field(None, max_length=255, examples=["English, Somali, Arabic"])
    profile_photo: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100, examples=["Mogadishu"])
    company: Optional[str] = Field(None, max_length=150)
    phone: Optional[str] = Field(None, max_length=50)
    whatsapp: Optional[str] = Field(None, max_length=50)
    is_trubroker: Optional[bool] = None

    @field_validator('profile_photo', 'image')
    @classmethod
    def reject_local_paths(cls, v):
        """Photos must be URLs or /uploads paths, never local file paths."""
        if v and is_local_file_path(v):
            raise ValueError("Local file paths are not allowed; upload the photo or use a URL")
        return v


class AgentCreate(AgentFields):
    """Schema for creating an agent profile."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Sarah Johnson"])

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Strip and require a non-blank name."""
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class AgentUpdate(AgentFields):
    """Schema for updating an agent profile; every field is optional."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)


class AgentAccountCreate(AgentCreate):
    """Schema for creating a user account together with its agent profile."""

    email: EmailStr = Field(..., description="Login email for the new agent account")
    password: Optional[str] = Field(
        None,
        min_length=6,
        max_length=128,
        description="Initial password; a temporary one is generated when omitted"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class AgentResponse(BaseModel):
    """Agent profile as returned by the API."""

    id: int
    user_id: Optional[int] = None
    name: str
    title: Optional[str] = None
    specialty: Optional[str] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    experience: int = 0
    rating: float = 0.0
    reviews: int = 0
    sales: Optional[str] = None
    languages: Optional[str] = None
    profile_photo: Optional[str] = None
    image: Optional[str] = None
    photo: Optional[str] = Field(None, description="Resolved display photo")
    city: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    is_trubroker: bool = False
    email: Optional[str] = None
    properties_count: Optional[int] = None
    created_at: Optional[str] = None


class AgentDetailResponse(AgentResponse):
    """Agent profile with its latest active stories."""

    active_stories: List[StoryResponse] = Field(default_factory=list)


class AgentAccountResponse(BaseModel):
    """Result of creating an agent together with its user account."""

    agent: AgentResponse
    user_id: int
    email: str
    temp_password: Optional[str] = Field(
        None,
        description="Generated password, returned only when none was supplied"
    )
