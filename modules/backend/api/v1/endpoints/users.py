"""
Users API Endpoints.

User administration. Every endpoint requires the ADMIN role.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from modules.backend.core.dependencies import AdminUser, DbSession, RequestId
from modules.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from modules.backend.models.user import UserRole
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.user import UserResponse, UserUpdate
from modules.backend.services.user import UserService

router = APIRouter()


@router.get(
    "",
    summary="List users (paginated)",
    description="Filter by role, department, branch, active flag, or search name/email.",
)
async def list_users(
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
    pagination: PaginationParams = Depends(get_pagination_params),
    role: UserRole | None = Query(default=None),
    department_id: str | None = Query(default=None),
    branch_id: str | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
) -> dict[str, Any]:
    service = UserService(db)
    users, total = await service.list_users(
        role=role.value if role else None,
        department_id=department_id,
        branch_id=branch_id,
        is_active=is_active,
        search=search,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return create_paginated_response(
        items=users,
        item_schema=UserResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.get("/{user_id}", response_model=ApiResponse[UserResponse], summary="Get a user")
async def get_user(
    user_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[UserResponse]:
    service = UserService(db)
    user = await service.get_user(user_id)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.patch(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Update a user",
    description="Department, work position and branch accept \"none\" to clear.",
)
async def update_user(
    user_id: str,
    data: UserUpdate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[UserResponse]:
    service = UserService(db)
    user = await service.update_user(user_id, data)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.delete(
    "/{user_id}",
    status_code=204,
    summary="Deactivate a user",
    description="Users are deactivated, never removed.",
)
async def delete_user(
    user_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> None:
    service = UserService(db)
    await service.deactivate_user(user_id)
