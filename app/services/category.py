"""
Category service for the property categories catalogue.
"""

from typing import List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.category import CategoryRepository
from app.models.category import Category
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.utils.exceptions import APIException, NotFoundError, BadRequestError, DuplicateResourceError
import logging

logger = logging.getLogger(__name__)


class CategoryService:
    """Manages property categories; slugs are unique."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.category_repo = CategoryRepository(db_session)

    async def list_categories(self, active_only: bool = True) -> List[Dict[str, Any]]:
        """Categories ordered by name with published property counts."""
        rows = await self.category_repo.list_with_counts(active_only=active_only)
        return [category.to_dict(properties_count=count) for category, count in rows]

    async def get_category(self, category_id: int) -> Category:
        category = await self.category_repo.get_by_id(category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    async def _check_slug_free(self, slug: str, exclude_id: int = None) -> None:
        existing = await self.category_repo.get_by_slug(slug)
        if existing and existing.id != exclude_id:
            raise DuplicateResourceError("Category", slug)

    async def create_category(self, data: CategoryCreate) -> Category:
        """
        Create a category.

        Raises:
            DuplicateResourceError: If the slug is taken
        """
        try:
            await self._check_slug_free(data.slug)
            category = await self.category_repo.create(data.model_dump())
            logger.info(f"Created category {category.slug}")
            return category
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create category: {e}")
            raise BadRequestError(f"Failed to create category: {str(e)}")

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        """
        Update a category.

        Raises:
            NotFoundError: If the category doesn't exist
            DuplicateResourceError: If the new slug is taken
        """
        try:
            await self.get_category(category_id)
            update_data = data.model_dump(exclude_unset=True)
            if update_data.get("slug"):
                await self._check_slug_free(update_data["slug"], exclude_id=category_id)
            category = await self.category_repo.update(category_id, update_data)
            if not category:
                raise NotFoundError("Category", category_id)
            logger.info(f"Updated category {category_id}")
            return category
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update category {category_id}: {e}")
            raise BadRequestError(f"Failed to update category: {str(e)}")

    async def toggle_category(self, category_id: int) -> Category:
        """
        Flip a category between active and inactive.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        category = await self.get_category(category_id)
        updated = await self.category_repo.update(category_id, {"is_active": not category.is_active})
        logger.info(f"Category {category_id} is now {'active' if updated.is_active else 'inactive'}")
        return updated

    async def delete_category(self, category_id: int) -> bool:
        """
        Delete a category, or only deactivate it while listings still use it.

        Returns:
            True if the category was deleted, False if it was deactivated

        Raises:
            NotFoundError: If the category doesn't exist
        """
        await self.get_category(category_id)

        if await self.category_repo.count_properties(category_id):
            await self.category_repo.update(category_id, {"is_active": False})
            logger.info(f"Deactivated category {category_id} (has associated properties)")
            return False

        if not await self.category_repo.delete(category_id):
            raise NotFoundError("Category", category_id)
        logger.info(f"Deleted category {category_id}")
        return True
