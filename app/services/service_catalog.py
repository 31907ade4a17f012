"""
Service catalogue: the agency's service offerings (valuation, management, ...).
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.service import ServiceRepository
from app.models.service import Service
from app.schemas.service import ServiceCreate, ServiceUpdate
from app.utils.exceptions import NotFoundError
import logging

logger = logging.getLogger(__name__)


class ServiceCatalogService:
    """CRUD for service offerings."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.service_repo = ServiceRepository(db_session)

    async def list_services(self, active_only: bool = True) -> List[Service]:
        return await self.service_repo.list_services(active_only=active_only)

    async def get_service(self, service_id: int, active_only: bool = False) -> Service:
        """
        Get a service offering.

        Raises:
            NotFoundError: If missing, or inactive when ``active_only``
        """
        service = await self.service_repo.get_by_id(service_id)
        if not service or (active_only and not service.is_active):
            raise NotFoundError("Service", service_id)
        return service

    async def create_service(self, data: ServiceCreate) -> Service:
        service = await self.service_repo.create(data.model_dump())
        logger.info(f"Created service {service.id}: {service.title}")
        return service

    async def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        service = await self.service_repo.update(service_id, data.model_dump(exclude_unset=True))
        if not service:
            raise NotFoundError("Service", service_id)
        logger.info(f"Updated service {service_id}")
        return service

    async def delete_service(self, service_id: int) -> None:
        if not await self.service_repo.delete(service_id):
            raise NotFoundError("Service", service_id)
        logger.info(f"Deleted service {service_id}")
