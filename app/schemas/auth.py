"""
Pydantic schemas for authentication requests and responses.
Handles registration, login and password reset validation.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from app.models.user import MIN_PASSWORD_LENGTH
from app.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    """Registration request schema."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name", examples=["Amina Yusuf"])
    email: EmailStr = Field(..., description="Email address", examples=["amina@example.com"])
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (minimum {MIN_PASSWORD_LENGTH} characters)",
        examples=["secret123"]
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Strip and require a non-blank name."""
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["admin@faithstate.com"])
    password: str = Field(..., min_length=1, max_length=128, description="User's password")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthPayload(BaseModel):
    """Token issued on login or registration."""

    token: str = Field(..., description="JWT bearer token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds", examples=[604800])
    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    """Password reset request schema."""

    email: EmailStr = Field(..., description="Account email address")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class ResetPasswordRequest(BaseModel):
    """Password reset confirmation schema."""

    token: str = Field(..., min_length=1, description="Raw reset token from the reset link")
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"New password (minimum {MIN_PASSWORD_LENGTH} characters)"
    )
