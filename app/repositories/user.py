"""
User repository for authentication and user management operations.
Provides secure user operations with password handling and role-based access.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication and authorization support.
    Handles secure user operations and role-based access control.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    @staticmethod
    def build_user(user_data: Dict[str, Any]) -> User:
        """
        Build an unsaved user with a normalized email and hashed password.

        Args:
            user_data: Must include email, password and name; role defaults to USER

        Returns:
            Transient User instance

        Raises:
            ValueError: If the email or password is invalid
        """
        data = dict(user_data)
        email = User.validate_email_format(data.pop("email"))
        hashed_password = User.hash_password(data.pop("password"))
        data.setdefault("role", UserRole.USER)
        data.setdefault("is_active", True)
        return User(**data, email=email, hashed_password=hashed_password)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password, name
                      Optional: role (defaults to USER)

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails
            Exception: If database operation fails
        """
        try:
            user = self.build_user(user_data)
            self.db.add(user)
            await self.db.commit()
            logger.info(f"Created user: {user.email} (ID: {user.id})")
            return await self.get_by_id(user.id)
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {email}")
            else:
                logger.debug(f"User with email {email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User instance if authentication successful, None otherwise
        """
        try:
            user = await self.get_by_email(email)

            if not user:
                logger.debug(f"Authentication failed: user {email} not found")
                return None

            if not user.is_active:
                logger.debug(f"Authentication failed: user {email} is inactive")
                return None

            if not user.verify_password(password):
                logger.debug(f"Authentication failed: invalid password for {email}")
                return None

            logger.info(f"User authenticated successfully: {email}")
            return user
        except Exception as e:
            logger.error(f"Failed to authenticate user {email}: {e}")
            raise

    async def update_password(self, user_id: int, new_password: str, commit: bool = True) -> bool:
        """
        Update user's password with proper hashing.

        Args:
            user_id: ID of the user
            new_password: New plain text password
            commit: Commit immediately; pass False to join a larger transaction

        Returns:
            True if the user exists and was updated
        """
        try:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(hashed_password=User.hash_password(new_password))
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            if commit:
                await self.db.commit()
            logger.info(f"Updated password for user {user_id}")
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update password for user {user_id}: {e}")
            raise
