"""
Pydantic schemas for property categories.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from app.utils.slug import is_valid_slug


def _check_slug(v):
    if v is not None and not is_valid_slug(v):
        raise ValueError("Slug may only contain lowercase letters, numbers and hyphens")
    return v


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Residential"])
    slug: str = Field(..., min_length=1, max_length=100, examples=["residential"])
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100, examples=["home"])
    color: Optional[str] = Field(None, max_length=50, examples=["#3B82F6"])
    is_active: bool = True

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        return _check_slug(v)


class CategoryUpdate(BaseModel):
    """Schema for updating a category."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        return _check_slug(v)


class CategoryResponse(BaseModel):
    """Category as returned by the API."""

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: bool
    properties_count: Optional[int] = None
    created_at: Optional[str] = None
