"""
Contact service for inquiries sent through the contact form.
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.contact import ContactRepository
from app.repositories.property import PropertyRepository
from app.models.contact import Contact, ContactStatus
from app.schemas.contact import ContactCreate
from app.utils.exceptions import NotFoundError
import logging

logger = logging.getLogger(__name__)


class ContactService:
    """Stores contact submissions and tracks their follow-up status."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.contact_repo = ContactRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def submit(self, data: ContactCreate) -> Contact:
        """
        Store a new submission with status ``new``.

        Raises:
            NotFoundError: If the referenced property doesn't exist
        """
        if data.property_id is not None and not await self.property_repo.exists(data.property_id):
            raise NotFoundError("Property", data.property_id)

        contact = await self.contact_repo.create({**data.model_dump(), "status": ContactStatus.NEW})
        logger.info(f"Contact submission {contact.id} received")
        return contact

    async def list_contacts(
        self,
        status: Optional[ContactStatus] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Contact], int]:
        return await self.contact_repo.list_contacts(status, skip=(page - 1) * limit, limit=limit)

    async def get_contact(self, contact_id: int) -> Contact:
        contact = await self.contact_repo.get_by_id(contact_id)
        if not contact:
            raise NotFoundError("Contact", contact_id)
        return contact

    async def update_status(self, contact_id: int, status: ContactStatus) -> Contact:
        contact = await self.contact_repo.update(contact_id, {"status": status})
        if not contact:
            raise NotFoundError("Contact", contact_id)
        logger.info(f"Contact {contact_id} marked {status.value}")
        return contact

    async def delete_contact(self, contact_id: int) -> None:
        if not await self.contact_repo.delete(contact_id):
            raise NotFoundError("Contact", contact_id)
        logger.info(f"Deleted contact {contact_id}")
