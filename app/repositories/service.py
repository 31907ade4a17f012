"""
Repository for service offerings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.base import BaseRepository
from app.models.service import Service
from typing import List


class ServiceRepository(BaseRepository[Service]):
    """Repository for the services catalogue."""

    def __init__(self, db: AsyncSession):
        super().__init__(Service, db)

    async def list_services(self, active_only: bool = True, limit: int = 100) -> List[Service]:
        """List services newest first, optionally only active ones."""
        filters = {"is_active": True} if active_only else None
        return await self.get_multi(limit=limit, filters=filters, order_by="-created_at")
