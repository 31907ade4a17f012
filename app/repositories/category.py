"""
Category repository with published listing counts.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.repositories.base import BaseRepository
from app.models.category import Category
from app.models.property import Property
from typing import List, Tuple
import logging

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository[Category]):
    """Repository for property categories."""

    def __init__(self, db: AsyncSession):
        super().__init__(Category, db)

    async def list_with_counts(self, active_only: bool = True) -> List[Tuple[Category, int]]:
        """
        List categories ordered by name with their published property counts.

        Args:
            active_only: Only include active categories

        Returns:
            List of (category, property count) pairs
        """
        try:
            property_count = (
                select(func.count(Property.id))
                .where(Property.category_id == Category.id, Property.is_published.is_(True))
                .correlate(Category)
                .scalar_subquery()
            )
            query = select(Category, property_count).order_by(Category.name.asc(), Category.id.asc())
            if active_only:
                query = query.where(Category.is_active.is_(True))

            rows = (await self.db.execute(query)).all()
            logger.debug(f"Retrieved {len(rows)} categories")
            return [(category, count or 0) for category, count in rows]
        except Exception as e:
            logger.error(f"Failed to list categories: {e}")
            raise

    async def get_by_slug(self, slug: str):
        """Get a category by slug."""
        return await self.get_by_field("slug", slug)

    async def count_properties(self, category_id: int) -> int:
        """Count every listing in a category, published or not."""
        query = select(func.count(Property.id)).where(Property.category_id == category_id)
        return (await self.db.execute(query)).scalar() or 0
