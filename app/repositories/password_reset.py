"""
Repository for password reset tokens.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from app.repositories.base import BaseRepository
from app.models.password_reset_token import PasswordResetToken
from datetime import datetime
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class PasswordResetTokenRepository(BaseRepository[PasswordResetToken]):
    """Stores hashed reset tokens and looks up usable ones."""

    def __init__(self, db: AsyncSession):
        super().__init__(PasswordResetToken, db)

    async def get_usable(self, token_hash: str, now: datetime) -> Optional[PasswordResetToken]:
        """
        Find an unused, unexpired token by its hash.

        Args:
            token_hash: SHA-256 hex digest of the raw token
            now: Reference time for the expiry check

        Returns:
            Matching token or None
        """
        try:
            query = (
                select(PasswordResetToken)
                .where(
                    PasswordResetToken.token_hash == token_hash,
                    PasswordResetToken.used.is_(False),
                    PasswordResetToken.expires_at > now
                )
                .order_by(PasswordResetToken.id.desc())
            )
            result = await self.db.execute(query)
            return result.scalars().first()
        except Exception as e:
            logger.error(f"Failed to look up reset token: {e}")
            raise

    async def mark_used(self, token_id: int, commit: bool = True) -> None:
        """Mark a token as consumed."""
        try:
            await self.db.execute(
                update(PasswordResetToken)
                .where(PasswordResetToken.id == token_id)
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            if commit:
                await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to mark reset token {token_id} as used: {e}")
            raise

    async def invalidate_for_user(self, user_id: int) -> None:
        """Mark every outstanding token of a user as used."""
        try:
            await self.db.execute(
                update(PasswordResetToken)
                .where(PasswordResetToken.user_id == user_id, PasswordResetToken.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to invalidate reset tokens for user {user_id}: {e}")
            raise
