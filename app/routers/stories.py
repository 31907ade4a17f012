"""
Story API endpoints: the public feed, per-agent stories and agent publishing.
Stories disappear from every read once they expire.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import Optional, List
from app.services.story import StoryService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, ok
from app.schemas.story import StoryResponse, StoryGroupResponse
from app.utils.dependencies import (
    Session,
    get_optional_session,
    get_story_service,
    require_agent
)
from app.utils.exceptions import UnauthorizedError, AgentProfileRequiredError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stories", tags=["Stories"])


@router.get(
    "",
    response_model=ApiResponse[List[StoryResponse]],
    summary="List active stories",
    description="Unexpired stories of every agent, newest first"
)
async def list_stories(story_service: StoryService = Depends(get_story_service)):
    return ok(await story_service.list_active())


@router.get(
    "/grouped",
    response_model=ApiResponse[List[StoryGroupResponse]],
    summary="Stories grouped by agent",
    description="One group per agent, the agent with the most recent story first"
)
async def list_grouped_stories(story_service: StoryService = Depends(get_story_service)):
    return ok(await story_service.list_grouped())


@router.get(
    "/agent/{agent_id}",
    response_model=ApiResponse[List[StoryResponse]],
    summary="List an agent's stories",
    description="Active stories of one agent; use 0 for the authenticated agent",
    responses=error_responses(401, 403, 404)
)
async def list_agent_stories(
    agent_id: int,
    session: Optional[Session] = Depends(get_optional_session),
    story_service: StoryService = Depends(get_story_service)
):
    """
    Raises:
        UnauthorizedError: If ``0`` is requested without authentication
        AgentProfileRequiredError: If ``0`` is requested by a user without an agent profile
        NotFoundError: If the agent doesn't exist
    """
    if agent_id == 0:
        if session is None:
            raise UnauthorizedError("Authentication token required")
        if session.agent_id is None:
            raise AgentProfileRequiredError()
        agent_id = session.agent_id
    return ok(await story_service.list_for_agent(agent_id))


@router.post(
    "",
    response_model=ApiResponse[StoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Publish a story",
    description="Upload a photo or video as ``media``, or reference one with ``media_url``",
    responses=error_responses(400, 401, 403, 422)
)
async def create_story(
    media: Optional[UploadFile] = File(None, description="Image or video file"),
    title: Optional[str] = Form(None),
    project_name: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    duration: Optional[str] = Form(None, description="Display seconds, clamped to 1..30"),
    media_type: Optional[str] = Form(None, description="image or video, for media_url stories"),
    media_url: Optional[str] = Form(None),
    thumbnail_url: Optional[str] = Form(None),
    session: Session = Depends(require_agent),
    story_service: StoryService = Depends(get_story_service)
):
    """
    Publish a story for the caller's agent profile.

    Args:
        media: Uploaded file; takes precedence over ``media_url``
        duration: Display duration in seconds
        session: Session with a linked agent profile

    Returns:
        Created story

    Raises:
        BadRequestError: If neither a file nor a URL was given
        FileUploadError: If the file type or size is not accepted
    """
    story = await story_service.create_story(
        session,
        title=title,
        project_name=project_name,
        caption=caption,
        duration=duration,
        media_type=media_type,
        media_url=media_url,
        thumbnail_url=thumbnail_url,
        media=media
    )
    return ok(story, "Story published")


@router.delete(
    "/{story_id}",
    response_model=ApiResponse[None],
    summary="Delete a story",
    description="Agents may delete only their own stories",
    responses=error_responses(401, 403, 404)
)
async def delete_story(
    story_id: int,
    session: Session = Depends(require_agent),
    story_service: StoryService = Depends(get_story_service)
):
    await story_service.delete_story(story_id, session)
    return ok(message="Story deleted")
