"""
Agent API endpoints: the public directory, profile pages and admin management.
"""

from fastapi import APIRouter, Depends, Query, File, UploadFile, status
from typing import Optional
from app.config import settings
from app.services.agent import AgentService
from app.services.property import PropertyService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination, ok
from app.schemas.agent import (
    AgentCreate,
    AgentUpdate,
    AgentAccountCreate,
    AgentResponse,
    AgentDetailResponse,
    AgentAccountResponse
)
from app.schemas.property import PropertyResponse
from app.utils.dependencies import Session, get_agent_service, get_property_service, require_admin
from app.utils.filters import AgentFilters
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agents", tags=["Agents"])
admin_router = APIRouter(prefix="/admin/agents", tags=["Agent Management"])


@router.get(
    "",
    response_model=PaginatedResponse[AgentResponse],
    summary="List agents",
    description="Find agents by city, language, name or specialization; best rated first",
    responses=error_responses(422)
)
async def list_agents(
    city: Optional[str] = Query(None, description="City substring"),
    language: Optional[str] = Query(None, description="Spoken language"),
    name: Optional[str] = Query(None, description="Name substring"),
    specialization: Optional[str] = Query(None, description="Specialization or specialty"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    agent_service: AgentService = Depends(get_agent_service)
):
    filters = AgentFilters(city=city, language=language, name=name, specialization=specialization)
    items, total = await agent_service.list_agents(filters, page=page, limit=limit)
    return ok(items, pagination=Pagination.build(page, limit, total).model_dump())


@router.get(
    "/{agent_id}",
    response_model=ApiResponse[AgentDetailResponse],
    summary="Get agent profile",
    description="Agent profile with contact email, published listing count and latest active stories",
    responses=error_responses(404)
)
async def get_agent(
    agent_id: int,
    agent_service: AgentService = Depends(get_agent_service)
):
    return ok(await agent_service.get_agent_profile(agent_id))


@router.get(
    "/{agent_id}/properties",
    response_model=PaginatedResponse[PropertyResponse],
    summary="List an agent's properties",
    description="Published listings of one agent, newest first",
    responses=error_responses(404, 422)
)
async def list_agent_properties(
    agent_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    property_service: PropertyService = Depends(get_property_service)
):
    items, total = await property_service.list_agent_properties(agent_id, page=page, limit=limit)
    return ok(items, pagination=Pagination.build(page, limit, total).model_dump())


@router.post(
    "",
    response_model=ApiResponse[AgentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create agent profile",
    description="Create an agent profile without a login account",
    responses=error_responses(400, 401, 403, 422)
)
async def create_agent(
    agent_data: AgentCreate,
    session: Session = Depends(require_admin),
    agent_service: AgentService = Depends(get_agent_service)
):
    agent = await agent_service.create_agent(agent_data)
    return ok(agent.to_dict(), "Agent created successfully")


@router.put(
    "/{agent_id}",
    response_model=ApiResponse[AgentResponse],
    summary="Update agent profile",
    responses=error_responses(400, 401, 403, 404, 422)
)
async def update_agent(
    agent_id: int,
    agent_data: AgentUpdate,
    session: Session = Depends(require_admin),
    agent_service: AgentService = Depends(get_agent_service)
):
    agent = await agent_service.update_agent(agent_id, agent_data)
    return ok(agent.to_dict(), "Agent updated successfully")


@router.delete(
    "/{agent_id}",
    response_model=ApiResponse[None],
    summary="Delete agent profile",
    description="Delete an agent; their listings remain without an agent",
    responses=error_responses(401, 403, 404)
)
async def delete_agent(
    agent_id: int,
    session: Session = Depends(require_admin),
    agent_service: AgentService = Depends(get_agent_service)
):
    await agent_service.delete_agent(agent_id)
    return ok(message="Agent deleted successfully")


@router.post(
    "/{agent_id}/photo",
    response_model=ApiResponse[AgentResponse],
    summary="Upload agent photo",
    description="Replace the agent's profile photo",
    responses=error_responses(400, 401, 403, 404)
)
async def upload_agent_photo(
    agent_id: int,
    photo: UploadFile = File(..., description="Profile photo"),
    session: Session = Depends(require_admin),
    agent_service: AgentService = Depends(get_agent_service)
):
    """
    Raises:
        FileUploadError: If the upload is not a valid image
    """
    agent = await agent_service.upload_photo(agent_id, photo)
    return ok(agent.to_dict(), "Photo uploaded successfully")


@admin_router.post(
    "",
    response_model=ApiResponse[AgentAccountResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create agent with account",
    description=(
        "Create a login account with the agent role and its profile in one transaction. "
        "When no password is given a temporary one is generated and returned once."
    ),
    responses=error_responses(400, 401, 403, 409, 422)
)
async def create_agent_account(
    data: AgentAccountCreate,
    session: Session = Depends(require_admin),
    agent_service: AgentService = Depends(get_agent_service)
):
    """
    Create an agent together with its user account.

    Args:
        data: Account email, optional password and profile fields
        session: Admin session

    Returns:
        Agent, account id and email, and the temporary password if one was generated

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    result = await agent_service.create_agent_with_account(data)
    logger.info(f"Admin {session.user.email} created agent account {result['email']}")
    return ok(result, "Agent account created successfully")
