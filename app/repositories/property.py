"""
Property repository for managing property listings with search and filtering.
Applies role-based visibility and featured-first ordering to listing queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, delete
from app.repositories.base import BaseRepository
from app.models.property import Property
from app.models.image import PropertyImage
from app.utils.filters import PropertyFilters
from typing import Optional, List, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property management with search and filtering capabilities.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    @staticmethod
    def visibility_condition(is_admin: bool = False, agent_id: Optional[int] = None):
        """
        Build the visibility condition for a viewer.

        Admins see every listing, agents see their own plus published
        listings and everyone else sees published listings only.

        Args:
            is_admin: Whether the viewer is an administrator
            agent_id: The viewer's agent profile id, if any

        Returns:
            SQLAlchemy condition or None when unrestricted
        """
        if is_admin:
            return None
        if agent_id is not None:
            return or_(Property.agent_id == agent_id, Property.is_published.is_(True))
        return Property.is_published.is_(True)

    def _build_filter_conditions(self, filters: Optional[PropertyFilters]) -> List[Any]:
        """
        Build filter conditions from search filters.

        Args:
            filters: Property search filters

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []
        if not filters:
            return conditions

        if filters.purpose:
            conditions.append(Property.purpose == filters.purpose)
        if filters.property_type:
            conditions.append(func.lower(Property.type) == filters.property_type.lower())
        if filters.location:
            conditions.append(Property.location.ilike(f"%{filters.location}%"))
        if filters.city:
            conditions.append(Property.city.ilike(f"%{filters.city}%"))

        # Bedroom and bathroom ranges
        if filters.min_beds is not None:
            conditions.append(Property.beds >= filters.min_beds)
        if filters.max_beds is not None:
            conditions.append(Property.beds <= filters.max_beds)
        if filters.min_baths is not None:
            conditions.append(Property.baths >= filters.min_baths)
        if filters.max_baths is not None:
            conditions.append(Property.baths <= filters.max_baths)

        # Price range
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        return conditions

    async def search_properties(
        self,
        filters: Optional[PropertyFilters] = None,
        skip: int = 0,
        limit: int = 20,
        is_admin: bool = False,
        viewer_agent_id: Optional[int] = None,
        owner_agent_id: Optional[int] = None,
        search: Optional[str] = None,
        order_by: str = "featured"
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering, visibility rules and pagination.

        Args:
            filters: Property search filters
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
            is_admin: Viewer is an administrator
            viewer_agent_id: Viewer's agent profile, widens visibility to own drafts
            owner_agent_id: Restrict to a single agent's listings
            search: Free text matched against title, location and city
            order_by: "featured" (featured first, newest next), "updated" or "newest"

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            conditions = self._build_filter_conditions(filters)

            visibility = self.visibility_condition(is_admin, viewer_agent_id)
            if visibility is not None:
                conditions.append(visibility)
            if owner_agent_id is not None:
                conditions.append(Property.agent_id == owner_agent_id)
            if search:
                pattern = f"%{search.strip()}%"
                conditions.append(or_(
                    Property.title.ilike(pattern),
                    Property.location.ilike(pattern),
                    Property.city.ilike(pattern)
                ))

            where = and_(*conditions) if conditions else None

            count_query = select(func.count(Property.id))
            query = select(Property)
            if where is not None:
                count_query = count_query.where(where)
                query = query.where(where)

            total_count = (await self.db.execute(count_query)).scalar() or 0

            if order_by == "updated":
                query = query.order_by(Property.updated_at.desc(), Property.id.desc())
            elif order_by == "newest":
                query = query.order_by(Property.created_at.desc(), Property.id.desc())
            else:
                query = query.order_by(
                    Property.is_featured.desc(),
                    Property.created_at.desc(),
                    Property.id.desc()
                )

            query = query.offset(skip).limit(limit)
            properties = list((await self.db.execute(query)).scalars().all())

            logger.debug(f"Property search returned {len(properties)} of {total_count} results")
            return properties, total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    async def get_featured(self, limit: int = 6) -> List[Property]:
        """
        Get published featured listings that have an agent, newest first.

        Args:
            limit: Maximum number of listings

        Returns:
            List of properties
        """
        try:
            query = (
                select(Property)
                .where(
                    Property.is_published.is_(True),
                    Property.is_featured.is_(True),
                    Property.agent_id.is_not(None)
                )
                .order_by(Property.created_at.desc(), Property.id.desc())
                .limit(limit)
            )
            return list((await self.db.execute(query)).scalars().all())
        except Exception as e:
            logger.error(f"Failed to get featured properties: {e}")
            raise

    async def get_by_slug(self, slug: str) -> Optional[Property]:
        """Get a property by its slug."""
        return await self.get_by_field("slug", slug)

    async def get_taken_slugs(self, base: str) -> List[str]:
        """Slugs already used by listings whose slug starts with ``base``."""
        return await self.get_taken_values("slug", base)

    # Images

    async def count_images(self, property_id: int) -> int:
        """Count images attached to a property."""
        query = select(func.count(PropertyImage.id)).where(PropertyImage.property_id == property_id)
        return (await self.db.execute(query)).scalar() or 0

    async def next_image_sort_order(self, property_id: int) -> int:
        """Sort order for the next image appended to a property."""
        query = select(func.max(PropertyImage.sort_order)).where(PropertyImage.property_id == property_id)
        current = (await self.db.execute(query)).scalar()
        return 0 if current is None else current + 1

    async def add_images(self, property_id: int, urls: List[str]) -> List[PropertyImage]:
        """
        Append images to a property in the given order.

        Args:
            property_id: Owning property
            urls: Stored image URLs

        Returns:
            Created image records
        """
        try:
            start = await self.next_image_sort_order(property_id)
            images = [
                PropertyImage(property_id=property_id, url=url, sort_order=start + offset)
                for offset, url in enumerate(urls)
            ]
            self.db.add_all(images)
            await self.db.commit()
            logger.info(f"Added {len(images)} images to property {property_id}")
            return images
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add images to property {property_id}: {e}")
            raise

    async def get_image(self, image_id: int) -> Optional[PropertyImage]:
        """Get a property image by id."""
        result = await self.db.execute(select(PropertyImage).where(PropertyImage.id == image_id))
        return result.scalar_one_or_none()

    async def delete_image(self, image_id: int) -> bool:
        """Delete a property image record."""
        try:
            result = await self.db.execute(
                delete(PropertyImage)
                .where(PropertyImage.id == image_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property image {image_id}: {e}")
            raise
