"""
Pydantic schemas for user data.
"""

from pydantic import BaseModel, Field
from typing import Optional
from app.models.user import UserRole


class UserResponse(BaseModel):
    """Public representation of a user account."""

    id: int = Field(..., description="User ID", examples=[1])
    name: str = Field(..., description="Display name", examples=["Sarah Johnson"])
    email: str = Field(..., description="Email address", examples=["sarah@faithstate.com"])
    role: UserRole = Field(..., description="Account role", examples=["agent"])
    is_active: bool = Field(True, description="Whether the account is active")
    agent_id: Optional[int] = Field(None, description="Linked agent profile, if any")
    created_at: Optional[str] = Field(None, description="Creation timestamp")
