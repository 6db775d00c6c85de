"""
Brands API Endpoints.
"""

from fastapi import APIRouter, Query

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.catalog import BrandCreate, BrandResponse, BrandUpdate
from modules.backend.services.catalog import BrandService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[BrandResponse]],
    summary="List brands",
    description="All brands by name, each with its product count.",
)
async def list_brands(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    search: str | None = Query(default=None, max_length=100),
) -> ApiResponse[list[BrandResponse]]:
    service = BrandService(db)
    return ApiResponse(data=await service.list_brands(search=search))


@router.post("", response_model=ApiResponse[BrandResponse], status_code=201, summary="Create a brand")
async def create_brand(
    data: BrandCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[BrandResponse]:
    service = BrandService(db)
    return ApiResponse(data=await service.create_brand(data))


@router.get("/{brand_id}", response_model=ApiResponse[BrandResponse], summary="Get a brand")
async def get_brand(
    brand_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[BrandResponse]:
    service = BrandService(db)
    return ApiResponse(data=await service.get_brand(brand_id))


@router.patch(
    "/{brand_id}",
    response_model=ApiResponse[BrandResponse],
    summary="Update a brand",
    description="Translations are replaced only when at least one entry has a language code.",
)
async def update_brand(
    brand_id: str,
    data: BrandUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[BrandResponse]:
    service = BrandService(db)
    return ApiResponse(data=await service.update_brand(brand_id, data))


@router.delete("/{brand_id}", status_code=204, summary="Delete a brand")
async def delete_brand(
    brand_id: str,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = BrandService(db)
    await service.delete_brand(brand_id)
