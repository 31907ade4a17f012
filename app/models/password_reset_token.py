"""
Password reset token model.
Only the SHA-256 hash of a token is stored; the raw token is sent to the user once.
"""

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.stories import to_utc
from datetime import datetime


class PasswordResetToken(Base):
    """Single-use, time-limited password reset token."""

    __tablename__ = "password_reset_tokens"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def is_usable(self, now: datetime) -> bool:
        """Check the token is unused and not yet expired at ``now``."""
        expires_at = to_utc(self.expires_at)
        return not self.used and expires_at is not None and expires_at > to_utc(now)
