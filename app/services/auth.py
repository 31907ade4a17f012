"""
Authentication service for registration, login, token validation and password reset.
Handles JWT token generation, validation, user authentication flows, and business logic validation.
"""

from typing import Optional, Dict, Any, Tuple
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.repositories.user import UserRepository
from app.repositories.password_reset import PasswordResetTokenRepository
from app.models.user import User, UserRole
from app.schemas.auth import RegisterRequest
from app.utils.auth import create_access_token, verify_token, access_token_lifetime
from app.utils.stories import utc_now
from app.utils.exceptions import (
    APIException,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    BadRequestError,
    DuplicateResourceError
)
from jose import JWTError, ExpiredSignatureError
import hashlib
import secrets
import logging

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists for that email, a reset link has been sent."


def hash_reset_token(token: str) -> str:
    """SHA-256 hex digest of a raw reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """
    Authentication service for managing user accounts and sessions.
    Handles registration, login, token validation and password reset.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.reset_repo = PasswordResetTokenRepository(db_session)

    def build_auth_payload(self, user: User) -> Dict[str, Any]:
        """
        Issue an access token for a user.

        Args:
            user: Authenticated user

        Returns:
            Dictionary with token, token_type, expires_in and user
        """
        token = create_access_token(user_id=user.id, email=user.email, role=user.role)
        return {
            "token": token,
            "token_type": "bearer",
            "expires_in": int(access_token_lifetime().total_seconds()),
            "user": user.to_dict(),
        }

    async def register(self, data: RegisterRequest) -> Tuple[User, Dict[str, Any]]:
        """
        Register a new user account with the ``user`` role.

        Args:
            data: Registration data

        Returns:
            Tuple of (user, auth payload)

        Raises:
            DuplicateResourceError: If the email is already registered
            BadRequestError: If the account could not be created
        """
        try:
            if await self.user_repo.get_by_email(data.email):
                raise DuplicateResourceError("User", data.email)

            user = await self.user_repo.create_user({
                "name": data.name,
                "email": data.email,
                "password": data.password,
                "role": UserRole.USER,
            })
            logger.info(f"Registered user {user.email}")
            return user, self.build_auth_payload(user)

        except APIException:
            raise
        except ValueError as e:
            raise BadRequestError(str(e))
        except Exception as e:
            logger.error(f"Registration failed for {data.email}: {e}")
            raise BadRequestError(f"Registration failed: {str(e)}")

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            InvalidCredentialsError: If credentials are invalid or the account is inactive
        """
        try:
            user = await self.user_repo.authenticate_user(email, password)

            if not user:
                logger.warning(f"Failed authentication attempt for email: {email}")
                raise InvalidCredentialsError()

            return user

        except InvalidCredentialsError:
            raise
        except Exception as e:
            logger.error(f"Authentication error for {email}: {e}")
            raise InvalidCredentialsError()

    async def login(self, email: str, password: str) -> Tuple[User, Dict[str, Any]]:
        """
        Authenticate user and issue a token.

        Returns:
            Tuple of (user, auth payload)
        """
        user = await self.authenticate_user(email, password)
        return user, self.build_auth_payload(user)

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user a bearer token belongs to.

        Args:
            token: JWT access token

        Returns:
            Active user

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or the user no longer exists
            InactiveUserError: If the account is inactive
        """
        try:
            payload = verify_token(token)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(payload.user_id)
        if not user:
            raise InvalidTokenError("User not found")
        if not user.is_active:
            raise InactiveUserError()
        return user

    async def request_password_reset(self, email: str, now: Optional[datetime] = None) -> Optional[str]:
        """
        Issue a password reset token when the account exists.

        Only the token's SHA-256 hash is stored. The caller always answers
        with the same generic message, so whether the account exists is
        never revealed.

        Args:
            email: Account email
            now: Reference time, defaults to the current UTC time

        Returns:
            The raw token, or None when no account matches
        """
        now = now or utc_now()
        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.info(f"Password reset requested for unknown email: {email}")
            return None

        # A new link supersedes any earlier one
        await self.reset_repo.invalidate_for_user(user.id)
        token = secrets.token_hex(32)
        await self.reset_repo.create({
            "user_id": user.id,
            "token_hash": hash_reset_token(token),
            "expires_at": now + timedelta(minutes=settings.password_reset_token_expire_minutes),
            "used": False,
        })

        reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
        logger.info(f"Password reset link for user {user.id}: {reset_url}")
        return token

    async def reset_password(self, token: str, new_password: str, now: Optional[datetime] = None) -> User:
        """
        Set a new password using a reset token.

        Args:
            token: Raw reset token
            new_password: New plain text password
            now: Reference time, defaults to the current UTC time

        Returns:
            The updated user

        Raises:
            BadRequestError: If the token is invalid, used or expired
        """
        now = now or utc_now()
        reset_token = await self.reset_repo.get_usable(hash_reset_token(token), now)
        if not reset_token:
            raise BadRequestError("Invalid or expired reset token")

        try:
            await self.user_repo.update_password(reset_token.user_id, new_password, commit=False)
            await self.reset_repo.mark_used(reset_token.id, commit=False)
            await self.db.commit()
        except ValueError as e:
            await self.db.rollback()
            raise BadRequestError(str(e))
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Password reset failed: {e}")
            raise BadRequestError("Password reset failed")

        logger.info(f"Password reset for user {reset_token.user_id}")
        return await self.user_repo.get_by_id(reset_token.user_id)
