"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from app.services.category import CategoryService
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, ok
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from app.utils.dependencies import Session, get_category_service, require_admin

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=ApiResponse[List[CategoryResponse]],
    summary="List active categories",
    description="Active categories ordered by name, with their published property counts"
)
async def list_categories(category_service: CategoryService = Depends(get_category_service)):
    return ok(await category_service.list_categories(active_only=True))


@router.get(
    "/all",
    response_model=ApiResponse[List[CategoryResponse]],
    summary="List all categories",
    description="Every category including inactive ones",
    responses=error_responses(401, 403)
)
async def list_all_categories(
    session: Session = Depends(require_admin),
    category_service: CategoryService = Depends(get_category_service)
):
    return ok(await category_service.list_categories(active_only=False))


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Get category",
    responses=error_responses(401, 403, 404)
)
async def get_category(
    category_id: int,
    session: Session = Depends(require_admin),
    category_service: CategoryService = Depends(get_category_service)
):
    category = await category_service.get_category(category_id)
    return ok(category.to_dict())


@router.post(
    "",
    response_model=ApiResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
    responses=error_responses(400, 401, 403, 409, 422)
)
async def create_category(
    data: CategoryCreate,
    session: Session = Depends(require_admin),
    category_service: CategoryService = Depends(get_category_service)
):
    """
    Raises:
        DuplicateResourceError: If the slug is already used
    """
    category = await category_service.create_category(data)
    return ok(category.to_dict(), "Category created successfully")


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Update category",
    responses=error_responses(400, 401, 403, 404, 409, 422)
)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    session: Session = Depends(require_admin),
    category_service: CategoryService = Depends(get_category_service)
):
    category = await category_service.update_category(category_id, data)
    return ok(category.to_dict(), "Category updated successfully")


@router.patch(
    "/{category_id}/toggle",
    response_model=ApiResponse[CategoryResponse],
    summary="Toggle category",
    description="Activate an inactive category or deactivate an active one",
    responses=error_responses(401, 403, 404)
)
async def toggle_category(
    category_id: int,
    session: Session = Depends(require_admin),
    category_service: CategoryService = Depends(get_category_service)
):
    category = await category_service.toggle_category(category_id)
    state = "activated" if category.is_active else "deactivated"
    return ok(category.to_dict(), f"Category {state} successfully")


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[None],
    summary="Delete category",
    description="Delete an unused category; a category that still has listings is only deactivated",
    responses=error_responses(401, 403, 404)
)
async def delete_category(
    category_id: int,
    session: Session = Depends(require_admin),
    category_service: CategoryService = Depends(get_category_service)
):
    if await category_service.delete_category(category_id):
        return ok(message="Category deleted successfully")
    return ok(message="Category deactivated (has associated properties)")
