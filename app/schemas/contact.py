"""
Pydantic schemas for contact form submissions.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from app.models.contact import ContactStatus


class ContactCreate(BaseModel):
    """Contact form submission."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Hodan Ali"])
    email: EmailStr = Field(..., examples=["hodan@example.com"])
    phone: Optional[str] = Field(None, max_length=50, examples=["+252 61 555 0101"])
    message: str = Field(..., min_length=1, max_length=1000, examples=["Is the villa still available?"])
    property_id: Optional[int] = Field(None, ge=1, description="Property the inquiry is about")

    @field_validator('name', 'message')
    @classmethod
    def not_blank(cls, v):
        """Strip and require non-blank text."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class ContactStatusUpdate(BaseModel):
    """Follow-up status change."""

    status: ContactStatus


class ContactResponse(BaseModel):
    """Contact submission as returned to staff."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    property_id: Optional[int] = None
    status: ContactStatus
    created_at: Optional[str] = None


class ContactCreated(BaseModel):
    """Acknowledgement of a new submission."""

    id: int
