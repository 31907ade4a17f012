"""
Service offering API endpoints (valuation, property management and similar).
"""

from fastapi import APIRouter, Depends, status
from typing import List
from app.services.service_catalog import ServiceCatalogService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, ok
from app.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse
from app.utils.dependencies import Session, get_service_catalog, require_admin

router = APIRouter(prefix="/services", tags=["Services"])


@router.get(
    "",
    response_model=ApiResponse[List[ServiceResponse]],
    summary="List active services",
    description="Active service offerings, newest first"
)
async def list_services(catalog: ServiceCatalogService = Depends(get_service_catalog)):
    services = await catalog.list_services(active_only=True)
    return ok([service.to_dict() for service in services])


@router.get(
    "/all",
    response_model=ApiResponse[List[ServiceResponse]],
    summary="List all services",
    responses=error_responses(401, 403)
)
async def list_all_services(
    session: Session = Depends(require_admin),
    catalog: ServiceCatalogService = Depends(get_service_catalog)
):
    services = await catalog.list_services(active_only=False)
    return ok([service.to_dict() for service in services])


@router.get(
    "/{service_id}",
    response_model=ApiResponse[ServiceResponse],
    summary="Get service",
    description="Get an active service offering",
    responses=error_responses(404)
)
async def get_service(
    service_id: int,
    catalog: ServiceCatalogService = Depends(get_service_catalog)
):
    service = await catalog.get_service(service_id, active_only=True)
    return ok(service.to_dict())


@router.post(
    "",
    response_model=ApiResponse[ServiceResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create service",
    responses=error_responses(401, 403, 422)
)
async def create_service(
    data: ServiceCreate,
    session: Session = Depends(require_admin),
    catalog: ServiceCatalogService = Depends(get_service_catalog)
):
    service = await catalog.create_service(data)
    return ok(service.to_dict(), "Service created successfully")


@router.put(
    "/{service_id}",
    response_model=ApiResponse[ServiceResponse],
    summary="Update service",
    responses=error_responses(401, 403, 404, 422)
)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    session: Session = Depends(require_admin),
    catalog: ServiceCatalogService = Depends(get_service_catalog)
):
    service = await catalog.update_service(service_id, data)
    return ok(service.to_dict(), "Service updated successfully")


@router.delete(
    "/{service_id}",
    response_model=ApiResponse[None],
    summary="Delete service",
    responses=error_responses(401, 403, 404)
)
async def delete_service(
    service_id: int,
    session: Session = Depends(require_admin),
    catalog: ServiceCatalogService = Depends(get_service_catalog)
):
    await catalog.delete_service(service_id)
    return ok(message="Service deleted successfully")
