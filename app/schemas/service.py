"""
Pydantic schemas for service offerings.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ServiceCreate(BaseModel):
    """Schema for creating a service offering."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Property Valuation"])
    description: Optional[str] = Field(None, examples=["Accurate market valuation by certified agents."])
    icon: Optional[str] = Field(None, max_length=255, examples=["calculator"])
    is_active: bool = True

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Strip and require a non-blank title."""
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class ServiceUpdate(BaseModel):
    """Schema for updating a service offering."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    """Service offering as returned by the API."""

    id: int
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
