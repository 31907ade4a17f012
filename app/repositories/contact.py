"""
Repository for contact form submissions.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.base import BaseRepository
from app.models.contact import Contact, ContactStatus
from typing import List, Optional, Tuple


class ContactRepository(BaseRepository[Contact]):
    """Repository for inquiries sent through the contact form."""

    def __init__(self, db: AsyncSession):
        super().__init__(Contact, db)

    async def list_contacts(
        self,
        status: Optional[ContactStatus] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Contact], int]:
        """
        List submissions newest first.

        Args:
            status: Only include submissions in this status
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (contacts, total count)
        """
        filters = {"status": status} if status else None
        contacts = await self.get_multi(skip=skip, limit=limit, filters=filters, order_by="-created_at")
        total = await self.count(filters)
        return contacts, total
