"""
Contact form API endpoints.
Anyone may submit an inquiry; staff read them and admins manage their status.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from app.config import settings
from app.models.contact import ContactStatus
from app.services.contact import ContactService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination, ok
from app.schemas.contact import ContactCreate, ContactCreated, ContactStatusUpdate, ContactResponse
from app.utils.dependencies import Session, get_contact_service, require_admin, require_staff

router = APIRouter(prefix="/contacts", tags=["Contacts"])


@router.post(
    "",
    response_model=ApiResponse[ContactCreated],
    status_code=status.HTTP_201_CREATED,
    summary="Submit contact request",
    description="Send an inquiry, optionally about a specific property",
    responses=error_responses(404, 422)
)
async def submit_contact(
    data: ContactCreate,
    contact_service: ContactService = Depends(get_contact_service)
):
    """
    Raises:
        NotFoundError: If the referenced property doesn't exist
    """
    contact = await contact_service.submit(data)
    return ok({"id": contact.id}, "Thank you! We will get back to you shortly.")


@router.get(
    "",
    response_model=PaginatedResponse[ContactResponse],
    summary="List contact requests",
    description="Newest first, optionally filtered by status",
    responses=error_responses(401, 403, 422)
)
async def list_contacts(
    status_filter: Optional[ContactStatus] = Query(None, alias="status", description="new, contacted or closed"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    session: Session = Depends(require_staff),
    contact_service: ContactService = Depends(get_contact_service)
):
    contacts, total = await contact_service.list_contacts(status_filter, page=page, limit=limit)
    return ok(
        [contact.to_dict() for contact in contacts],
        pagination=Pagination.build(page, limit, total).model_dump()
    )


@router.get(
    "/{contact_id}",
    response_model=ApiResponse[ContactResponse],
    summary="Get contact request",
    responses=error_responses(401, 403, 404)
)
async def get_contact(
    contact_id: int,
    session: Session = Depends(require_staff),
    contact_service: ContactService = Depends(get_contact_service)
):
    contact = await contact_service.get_contact(contact_id)
    return ok(contact.to_dict())


@router.patch(
    "/{contact_id}/status",
    response_model=ApiResponse[ContactResponse],
    summary="Update contact status",
    responses=error_responses(401, 403, 404, 422)
)
async def update_contact_status(
    contact_id: int,
    data: ContactStatusUpdate,
    session: Session = Depends(require_admin),
    contact_service: ContactService = Depends(get_contact_service)
):
    contact = await contact_service.update_status(contact_id, data.status)
    return ok(contact.to_dict(), "Status updated")


@router.delete(
    "/{contact_id}",
    response_model=ApiResponse[None],
    summary="Delete contact request",
    responses=error_responses(401, 403, 404)
)
async def delete_contact(
    contact_id: int,
    session: Session = Depends(require_admin),
    contact_service: ContactService = Depends(get_contact_service)
):
    await contact_service.delete_contact(contact_id)
    return ok(message="Contact deleted successfully")
