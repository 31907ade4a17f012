"""
Pydantic schemas for projects and off-plan new projects.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from decimal import Decimal
from app.models.project import ProjectStatus, NewProjectStatus
from app.utils.slug import is_valid_slug


class ProjectCreate(BaseModel):
    """Schema for creating a project listing."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Ocean Breeze Residences"])
    location: str = Field(..., min_length=1, max_length=255, examples=["Lido Beach, Mogadishu"])
    price_from: Optional[Decimal] = Field(None, ge=0, examples=[85000])
    developer: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    status: ProjectStatus = ProjectStatus.UPCOMING
    is_featured: bool = False


class ProjectUpdate(BaseModel):
    """Schema for updating a project listing."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    price_from: Optional[Decimal] = Field(None, ge=0)
    developer: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    status: Optional[ProjectStatus] = None
    is_featured: Optional[bool] = None


class ProjectResponse(BaseModel):
    """Project listing as returned by the API."""

    id: int
    title: str
    location: str
    price_from: Optional[float] = None
    developer: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    status: ProjectStatus
    is_featured: bool
    created_at: Optional[str] = None


class MilestoneIn(BaseModel):
    """Payment plan step."""

    label: str = Field(..., min_length=1, max_length=255, examples=["On booking"])
    percent: Decimal = Field(..., ge=0, le=100, examples=[20])
    note: Optional[str] = Field(None, max_length=255)


class NewProjectFields(BaseModel):
    """Optional fields shared by create and update."""

    status: Optional[NewProjectStatus] = None
    handover: Optional[str] = Field(None, max_length=50, examples=["Q4 2026"])
    launch_price: Optional[str] = Field(None, max_length=50, examples=["From $95,000"])
    payment_plan_label: Optional[str] = Field(None, max_length=20, examples=["60/40"])
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50, examples=["Apartments"])
    beds: Optional[int] = Field(None, ge=0, le=50)
    baths: Optional[int] = Field(None, ge=0, le=50)
    completion_percent: Optional[int] = Field(None, ge=0, le=100)
    is_published: Optional[bool] = None
    payment_plan: Optional[List[MilestoneIn]] = Field(
        None,
        description="Replaces the whole payment plan when provided"
    )

    @field_validator('payment_plan')
    @classmethod
    def validate_plan_total(cls, v):
        """Milestone percentages cannot exceed 100 in total."""
        if v and sum(m.percent for m in v) > 100:
            raise ValueError("Payment plan percentages cannot exceed 100")
        return v


class NewProjectCreate(NewProjectFields):
    """Schema for creating a new project."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Garowe Heights"])
    developer: str = Field(..., min_length=1, max_length=255, examples=["Faith Developers"])
    location: str = Field(..., min_length=1, max_length=255, examples=["Garowe"])
    slug: Optional[str] = Field(None, max_length=100, description="Generated from the name when omitted")

    @field_validator('name', 'developer', 'location')
    @classmethod
    def strip_required(cls, v):
        """Strip and require non-blank text."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        if v is not None and not is_valid_slug(v):
            raise ValueError("Slug may only contain lowercase letters, numbers and hyphens")
        return v


class NewProjectUpdate(NewProjectFields):
    """Schema for updating a new project."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    developer: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)


class ProjectImageResponse(BaseModel):
    id: int
    url: str
    sort_order: int


class MilestoneResponse(BaseModel):
    id: int
    label: str
    percent: float
    note: Optional[str] = None
    sort_order: int


class NewProjectResponse(BaseModel):
    """New project as returned by the API."""

    id: int
    name: str
    slug: str
    developer: str
    location: str
    status: NewProjectStatus
    handover: Optional[str] = None
    launch_price: Optional[str] = None
    payment_plan_label: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    beds: Optional[int] = None
    baths: Optional[int] = None
    completion_percent: Optional[int] = None
    is_published: bool
    tags: List[str]
    cover_image: Optional[str] = None
    created_at: Optional[str] = None


class NewProjectDetailResponse(NewProjectResponse):
    """New project with gallery and payment plan."""

    images: List[ProjectImageResponse] = Field(default_factory=list)
    payment_plan: List[MilestoneResponse] = Field(default_factory=list)
