"""
Categories API Endpoints.

Product categories form a tree through `parent_id`.
"""

from fastapi import APIRouter, Query

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from modules.backend.services.catalog import CategoryService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[CategoryResponse]], summary="List categories")
async def list_categories(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    search: str | None = Query(default=None, max_length=100),
    parent_id: str | None = Query(default=None, description="Only children of this category"),
) -> ApiResponse[list[CategoryResponse]]:
    service = CategoryService(db)
    return ApiResponse(data=await service.list_categories(search=search, parent_id=parent_id))


@router.post("", response_model=ApiResponse[CategoryResponse], status_code=201, summary="Create a category")
async def create_category(
    data: CategoryCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    return ApiResponse(data=await service.create_category(data))


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Get a category",
    description="Includes the parent and the direct children.",
)
async def get_category(
    category_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    return ApiResponse(data=await service.get_category(category_id))


@router.patch("/{category_id}", response_model=ApiResponse[CategoryResponse], summary="Update a category")
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    return ApiResponse(data=await service.update_category(category_id, data))


@router.delete("/{category_id}", status_code=204, summary="Delete a category")
async def delete_category(
    category_id: str,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = CategoryService(db)
    await service.delete_category(category_id)
