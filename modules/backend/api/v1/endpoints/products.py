"""
Products API Endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.catalog import ProductCreate, ProductResponse, ProductUpdate
from modules.backend.services.catalog import ProductService

router = APIRouter()


@router.get(
    "",
    summary="List products (paginated)",
    description="Search matches name or code.",
)
async def list_products(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    pagination: PaginationParams = Depends(get_pagination_params),
    search: str | None = Query(default=None, max_length=100),
    brand_id: str | None = Query(default=None),
    category_id: str | None = Query(default=None),
) -> dict[str, Any]:
    service = ProductService(db)
    products, total = await service.list_products(
        search=search,
        brand_id=brand_id,
        category_id=category_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return create_paginated_response(
        items=products,
        item_schema=ProductResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.post("", response_model=ApiResponse[ProductResponse], status_code=201, summary="Create a product")
async def create_product(
    data: ProductCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[ProductResponse]:
    service = ProductService(db)
    product = await service.create_product(data)
    return ApiResponse(data=ProductResponse.model_validate(product))


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse], summary="Get a product")
async def get_product(
    product_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[ProductResponse]:
    service = ProductService(db)
    product = await service.get_product(product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))


@router.patch("/{product_id}", response_model=ApiResponse[ProductResponse], summary="Update a product")
async def update_product(
    product_id: str,
    data: ProductUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[ProductResponse]:
    service = ProductService(db)
    product = await service.update_product(product_id, data)
    return ApiResponse(data=ProductResponse.model_validate(product))


@router.delete("/{product_id}", status_code=204, summary="Delete a product")
async def delete_product(
    product_id: str,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = ProductService(db)
    await service.delete_product(product_id)
