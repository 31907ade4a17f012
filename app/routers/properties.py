"""
Property API endpoints: the public listing and the back-office management routes.
Visibility follows the caller's role: admins see everything, agents their own
listings plus published ones, everyone else published listings only.
"""

from fastapi import APIRouter, Depends, Query, File, UploadFile, status
from typing import Optional, List
from decimal import Decimal
from app.config import settings
from app.services.property import PropertyService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination, ok
from app.schemas.property import PropertyCreate, PropertyUpdate, PropertyResponse
from app.utils.dependencies import (
    Session,
    get_optional_session,
    get_property_service,
    require_staff
)
from app.utils.filters import PropertyFilters
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["Properties"])
admin_router = APIRouter(prefix="/admin/properties", tags=["Property Management"])


@router.get(
    "",
    response_model=PaginatedResponse[PropertyResponse],
    summary="List properties",
    description="Search listings with filters; featured listings come first, then the newest",
    responses=error_responses(400, 422)
)
async def list_properties(
    purpose: Optional[str] = Query(None, description="Sale/Rent, or the labels buy/rent"),
    type: Optional[str] = Query(None, description="Property type, case-insensitive"),
    beds: Optional[int] = Query(None, ge=0, description="Minimum bedrooms"),
    max_beds: Optional[int] = Query(None, ge=0, alias="maxBeds", description="Maximum bedrooms"),
    baths: Optional[int] = Query(None, ge=0, description="Minimum bathrooms"),
    max_baths: Optional[int] = Query(None, ge=0, alias="maxBaths", description="Maximum bathrooms"),
    min_price: Optional[Decimal] = Query(None, ge=0, alias="minPrice", description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, alias="maxPrice", description="Maximum price"),
    location: Optional[str] = Query(None, description="Location substring"),
    city: Optional[str] = Query(None, description="City substring"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page"),
    session: Optional[Session] = Depends(get_optional_session),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    List properties visible to the caller.

    Args:
        purpose: Listing purpose; no purpose filter when omitted
        page: Page number (1-based)
        limit: Page size
        session: Optional authenticated session

    Returns:
        Paginated property listing
    """
    filters = PropertyFilters(
        purpose=purpose,
        location=location,
        type=type,
        beds=beds,
        maxBeds=max_beds,
        baths=baths,
        maxBaths=max_baths,
        minPrice=min_price,
        maxPrice=max_price,
        city=city
    )
    items, total = await property_service.list_properties(filters, session, page=page, limit=limit)
    return ok(items, pagination=Pagination.build(page, limit, total).model_dump())


@router.get(
    "/featured",
    response_model=ApiResponse[List[PropertyResponse]],
    summary="Featured properties",
    description="Published featured listings that have an agent"
)
async def list_featured(
    limit: int = Query(6, ge=1, le=24, description="Maximum number of listings"),
    property_service: PropertyService = Depends(get_property_service)
):
    return ok(await property_service.list_featured(limit))


@router.get(
    "/{slug_or_id}",
    response_model=ApiResponse[PropertyResponse],
    summary="Get property",
    description="Look a listing up by slug or numeric id",
    responses=error_responses(404)
)
async def get_property(
    slug_or_id: str,
    session: Optional[Session] = Depends(get_optional_session),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Raises:
        NotFoundError: If the listing doesn't exist or isn't visible to the caller
    """
    property_obj = await property_service.get_by_slug_or_id(slug_or_id, session)
    return ok(property_obj.to_dict())


# Back office


@admin_router.get(
    "",
    response_model=PaginatedResponse[PropertyResponse],
    summary="List managed properties",
    description="Admins see every listing; agents see their own and published listings",
    responses=error_responses(401, 403)
)
async def list_managed_properties(
    search: Optional[str] = Query(None, description="Match title, location or city"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    items, total = await property_service.list_managed(session, search=search, page=page, limit=limit)
    return ok(items, pagination=Pagination.build(page, limit, total).model_dump())


@admin_router.get(
    "/{property_id}",
    response_model=ApiResponse[PropertyResponse],
    summary="Get managed property",
    responses=error_responses(401, 403, 404)
)
async def get_managed_property(
    property_id: int,
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    property_obj = await property_service.get_property(property_id, session)
    return ok(property_obj.to_dict())


@admin_router.post(
    "",
    response_model=ApiResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a listing; agents always create listings for their own profile",
    responses=error_responses(400, 401, 403, 404, 422)
)
async def create_property(
    property_data: PropertyCreate,
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Create a new property listing.

    Args:
        property_data: Listing fields
        session: Admin or agent session

    Returns:
        Created property

    Raises:
        AgentProfileRequiredError: If an agent has no profile
        BadRequestError: If no slug can be derived from the title
    """
    property_obj = await property_service.create_property(property_data, session)
    return ok(property_obj.to_dict(), "Property created successfully")


@admin_router.put(
    "/{property_id}",
    response_model=ApiResponse[PropertyResponse],
    summary="Update property",
    description="Update a listing; only admins may reassign the agent",
    responses=error_responses(400, 401, 403, 404, 422)
)
async def update_property(
    property_id: int,
    property_data: PropertyUpdate,
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    property_obj = await property_service.update_property(property_id, property_data, session)
    return ok(property_obj.to_dict(), "Property updated successfully")


@admin_router.delete(
    "/{property_id}",
    response_model=ApiResponse[None],
    summary="Delete property",
    description="Delete a listing and its images",
    responses=error_responses(401, 403, 404)
)
async def delete_property(
    property_id: int,
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    await property_service.delete_property(property_id, session)
    return ok(message="Property deleted successfully")


@admin_router.post(
    "/{property_id}/images",
    response_model=ApiResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload property images",
    description=f"Attach up to {settings.max_images_per_upload} images to a listing",
    responses=error_responses(400, 401, 403, 404)
)
async def upload_property_images(
    property_id: int,
    images: List[UploadFile] = File(..., description="Image files"),
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Upload images for a listing.

    Raises:
        ResourceLimitExceededError: If too many files were sent
        FileUploadError: If any file is not a valid image
    """
    property_obj = await property_service.add_images(property_id, images, session)
    return ok(property_obj.to_dict(), f"{len(images)} image(s) uploaded")


@admin_router.delete(
    "/images/{image_id}",
    response_model=ApiResponse[None],
    summary="Delete property image",
    responses=error_responses(401, 403, 404)
)
async def delete_property_image(
    image_id: int,
    session: Session = Depends(require_staff),
    property_service: PropertyService = Depends(get_property_service)
):
    await property_service.delete_image(image_id, session)
    return ok(message="Image deleted successfully")
