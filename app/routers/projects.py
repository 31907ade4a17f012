"""
Project API endpoints.

Three routers live here: the projects listing (``/projects``), the public
off-plan catalogue (``/new-projects``) and its administration
(``/admin/projects``).
"""

from fastapi import APIRouter, Depends, Query, File, UploadFile, status
from typing import Optional, List
from decimal import Decimal
from app.models.project import ProjectStatus
from app.services.project import ProjectService, NewProjectService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination, ok
from app.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    NewProjectCreate,
    NewProjectUpdate,
    NewProjectResponse,
    NewProjectDetailResponse
)
from app.utils.dependencies import Session, get_project_service, get_new_project_service, require_admin
from app.utils.filters import NewProjectFilters
from app.config import settings

router = APIRouter(prefix="/projects", tags=["Projects"])
new_projects_router = APIRouter(prefix="/new-projects", tags=["New Projects"])
admin_router = APIRouter(prefix="/admin/projects", tags=["Project Management"])


# Projects listing


@router.get(
    "",
    response_model=PaginatedResponse[ProjectResponse],
    summary="List projects",
    description="Featured projects first, then the newest",
    responses=error_responses(422)
)
async def list_projects(
    location: Optional[str] = Query(None, description="Location substring"),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status", description="upcoming, ongoing or completed"),
    min_price: Optional[Decimal] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, ge=0, alias="maxPrice"),
    featured: Optional[bool] = Query(None, description="Only featured projects"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=settings.max_page_size),
    project_service: ProjectService = Depends(get_project_service)
):
    projects, total = await project_service.list_projects(
        location=location,
        status=status_filter,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        page=page,
        limit=limit
    )
    return ok(
        [project.to_dict() for project in projects],
        pagination=Pagination.build(page, limit, total).model_dump()
    )


@router.get(
    "/featured",
    response_model=ApiResponse[List[ProjectResponse]],
    summary="Featured projects",
    description="Up to six featured projects, newest first"
)
async def featured_projects(project_service: ProjectService = Depends(get_project_service)):
    projects = await project_service.featured_projects()
    return ok([project.to_dict() for project in projects])


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectResponse],
    summary="Get project",
    responses=error_responses(404)
)
async def get_project(
    project_id: int,
    project_service: ProjectService = Depends(get_project_service)
):
    project = await project_service.get_project(project_id)
    return ok(project.to_dict())


@router.post(
    "",
    response_model=ApiResponse[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    responses=error_responses(401, 403, 422)
)
async def create_project(
    data: ProjectCreate,
    session: Session = Depends(require_admin),
    project_service: ProjectService = Depends(get_project_service)
):
    project = await project_service.create_project(data)
    return ok(project.to_dict(), "Project created successfully")


@router.put(
    "/{project_id}",
    response_model=ApiResponse[ProjectResponse],
    summary="Update project",
    responses=error_responses(401, 403, 404, 422)
)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    session: Session = Depends(require_admin),
    project_service: ProjectService = Depends(get_project_service)
):
    project = await project_service.update_project(project_id, data)
    return ok(project.to_dict(), "Project updated successfully")


@router.delete(
    "/{project_id}",
    response_model=ApiResponse[None],
    summary="Delete project",
    responses=error_responses(401, 403, 404)
)
async def delete_project(
    project_id: int,
    session: Session = Depends(require_admin),
    project_service: ProjectService = Depends(get_project_service)
):
    await project_service.delete_project(project_id)
    return ok(message="Project deleted successfully")


# Public off-plan catalogue


@new_projects_router.get(
    "",
    response_model=ApiResponse[List[NewProjectResponse]],
    summary="List new projects",
    description="Published projects matching the filters, newest first",
    responses=error_responses(422)
)
async def list_new_projects(
    location: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status", description="Under Construction or Ready"),
    category: Optional[str] = Query(None),
    beds: Optional[int] = Query(None, ge=0, description="Minimum bedrooms"),
    handover: Optional[str] = Query(None, description="Handover substring, e.g. 2026"),
    payment_plan: Optional[str] = Query(None, alias="paymentPlan", description="Payment plan label substring"),
    completion: Optional[int] = Query(None, ge=0, le=100, description="Minimum completion percent"),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    filters = NewProjectFilters(
        location=location,
        status=status_filter,
        category=category,
        beds=beds,
        handover=handover,
        paymentPlan=payment_plan,
        completion=completion
    )
    return ok(await project_service.list_published(filters))


@new_projects_router.get(
    "/{slug}",
    response_model=ApiResponse[NewProjectDetailResponse],
    summary="Get new project",
    description="Published project with its gallery and payment plan",
    responses=error_responses(404)
)
async def get_new_project(
    slug: str,
    project_service: NewProjectService = Depends(get_new_project_service)
):
    return ok(await project_service.get_published(slug))


# Administration


@admin_router.get(
    "",
    response_model=ApiResponse[List[NewProjectResponse]],
    summary="List all new projects",
    description="Every project including unpublished ones",
    responses=error_responses(401, 403)
)
async def admin_list_projects(
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    projects = await project_service.list_all()
    return ok([project.to_dict() for project in projects])


@admin_router.get(
    "/{project_id}",
    response_model=ApiResponse[NewProjectDetailResponse],
    summary="Get new project by id",
    responses=error_responses(401, 403, 404)
)
async def admin_get_project(
    project_id: int,
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    project = await project_service.get_project(project_id)
    return ok(project.to_dict(include_details=True))


@admin_router.post(
    "",
    response_model=ApiResponse[NewProjectDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create new project",
    description="The slug is derived from the name when not given",
    responses=error_responses(400, 401, 403, 409, 422)
)
async def admin_create_project(
    data: NewProjectCreate,
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    """
    Raises:
        DuplicateResourceError: If an explicit slug is already used
    """
    project = await project_service.create_project(data)
    return ok(project.to_dict(include_details=True), "Project created successfully")


@admin_router.put(
    "/{project_id}",
    response_model=ApiResponse[NewProjectDetailResponse],
    summary="Update new project",
    description="A provided payment plan replaces the existing one",
    responses=error_responses(400, 401, 403, 404, 422)
)
async def admin_update_project(
    project_id: int,
    data: NewProjectUpdate,
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    project = await project_service.update_project(project_id, data)
    return ok(project.to_dict(include_details=True), "Project updated successfully")


@admin_router.delete(
    "/{project_id}",
    response_model=ApiResponse[None],
    summary="Delete new project",
    responses=error_responses(401, 403, 404)
)
async def admin_delete_project(
    project_id: int,
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    await project_service.delete_project(project_id)
    return ok(message="Project deleted successfully")


@admin_router.post(
    "/{project_id}/images",
    response_model=ApiResponse[NewProjectDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload project images",
    description=f"Attach up to {settings.max_images_per_upload} images to a project",
    responses=error_responses(400, 401, 403, 404)
)
async def admin_upload_project_images(
    project_id: int,
    images: List[UploadFile] = File(..., description="Image files"),
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    project = await project_service.add_images(project_id, images)
    return ok(project.to_dict(include_details=True), f"{len(images)} image(s) uploaded")


@admin_router.delete(
    "/images/{image_id}",
    response_model=ApiResponse[None],
    summary="Delete project image",
    responses=error_responses(401, 403, 404)
)
async def admin_delete_project_image(
    image_id: int,
    session: Session = Depends(require_admin),
    project_service: NewProjectService = Depends(get_new_project_service)
):
    await project_service.delete_image(image_id)
    return ok(message="Image deleted successfully")
