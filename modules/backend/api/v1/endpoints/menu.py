"""
Menu API Endpoints.

Navigation groups and items with per-role visibility.
"""

from fastapi import APIRouter, Query

from modules.backend.core.dependencies import AdminUser, CurrentUser, DbSession, RequestId
from modules.backend.models.user import UserRole
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.menu import (
    MenuGroupCreate,
    MenuGroupResponse,
    MenuGroupUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MenuReorderRequest,
)
from modules.backend.services.menu import MenuService

router = APIRouter()


# -----------------------------------------------------------------------------
# Groups
# -----------------------------------------------------------------------------


@router.get(
    "/groups",
    response_model=ApiResponse[list[MenuGroupResponse]],
    summary="List menu groups",
    description=(
        "Active groups by order. With `role`, only items that role may view "
        "are included; items without a permission for the role are visible."
    ),
)
async def list_menu_groups(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    include_items: bool = Query(default=True),
    role: UserRole | None = Query(default=None),
) -> ApiResponse[list[MenuGroupResponse]]:
    service = MenuService(db)
    groups = await service.list_groups(
        include_items=include_items,
        role=role.value if role else None,
    )
    return ApiResponse(data=groups)


@router.post(
    "/groups",
    response_model=ApiResponse[MenuGroupResponse],
    status_code=201,
    summary="Create a menu group",
)
async def create_menu_group(
    data: MenuGroupCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[MenuGroupResponse]:
    service = MenuService(db)
    return ApiResponse(data=await service.create_group(data))


@router.get("/groups/{group_id}", response_model=ApiResponse[MenuGroupResponse], summary="Get a menu group")
async def get_menu_group(
    group_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[MenuGroupResponse]:
    service = MenuService(db)
    return ApiResponse(data=await service.get_group(group_id))


@router.patch("/groups/{group_id}", response_model=ApiResponse[MenuGroupResponse], summary="Update a menu group")
async def update_menu_group(
    group_id: str,
    data: MenuGroupUpdate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[MenuGroupResponse]:
    service = MenuService(db)
    return ApiResponse(data=await service.update_group(group_id, data))


@router.delete("/groups/{group_id}", status_code=204, summary="Delete a menu group")
async def delete_menu_group(
    group_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> None:
    service = MenuService(db)
    await service.delete_group(group_id)


# -----------------------------------------------------------------------------
# Items
# -----------------------------------------------------------------------------


@router.get("/items", response_model=ApiResponse[list[MenuItemResponse]], summary="List menu items")
async def list_menu_items(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    group_id: str | None = Query(default=None),
    role: UserRole | None = Query(default=None),
) -> ApiResponse[list[MenuItemResponse]]:
    service = MenuService(db)
    items = await service.list_items(group_id=group_id, role=role.value if role else None)
    return ApiResponse(data=items)


@router.post(
    "/items",
    response_model=ApiResponse[MenuItemResponse],
    status_code=201,
    summary="Create a menu item",
)
async def create_menu_item(
    data: MenuItemCreate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[MenuItemResponse]:
    service = MenuService(db)
    item = await service.create_item(data)
    return ApiResponse(data=MenuItemResponse.model_validate(item))


@router.patch(
    "/items/{item_id}",
    response_model=ApiResponse[MenuItemResponse],
    summary="Update a menu item",
    description="Supplied permissions replace the item's permissions.",
)
async def update_menu_item(
    item_id: str,
    data: MenuItemUpdate,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[MenuItemResponse]:
    service = MenuService(db)
    item = await service.update_item(item_id, data)
    return ApiResponse(data=MenuItemResponse.model_validate(item))


@router.delete("/items/{item_id}", status_code=204, summary="Delete a menu item")
async def delete_menu_item(
    item_id: str,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> None:
    service = MenuService(db)
    await service.delete_item(item_id)


@router.post(
    "/reorder",
    response_model=ApiResponse[dict[str, int]],
    summary="Reorder menu items",
    description="Persist a drag-and-drop result: order, and group or parent when given.",
)
async def reorder_menu_items(
    data: MenuReorderRequest,
    db: DbSession,
    request_id: RequestId,
    admin: AdminUser,
) -> ApiResponse[dict[str, int]]:
    service = MenuService(db)
    updated = await service.reorder(data.items)
    return ApiResponse(data={"updated": updated})
