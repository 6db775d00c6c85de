"""
Menu Schemas.

Pydantic schemas for navigation menu groups, items and role permissions.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from modules.backend.models.user import UserRole


class MenuPermissionInput(BaseModel):
    role: UserRole
    can_view: bool = True
    can_edit: bool = False

    model_config = ConfigDict(use_enum_values=True)


class MenuPermissionResponse(BaseModel):
    role: str
    can_view: bool
    can_edit: bool

    model_config = ConfigDict(from_attributes=True)


class MenuGroupCreate(BaseModel):
    """Schema for creating a menu group."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Sales"])
    key: str = Field(..., min_length=1, max_length=128, examples=["sales"])
    icon: str | None = Field(default=None, max_length=128)
    icon_color: str | None = Field(default=None, max_length=32)
    order: int = 0
    is_collapsible: bool = True
    is_active: bool = True


class MenuGroupUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    key: str | None = Field(default=None, min_length=1, max_length=128)
    icon: str | None = Field(default=None, max_length=128)
    icon_color: str | None = Field(default=None, max_length=32)
    order: int | None = None
    is_collapsible: bool | None = None
    is_active: bool | None = None


class MenuItemCreate(BaseModel):
    """Schema for creating a menu item with its role permissions."""

    group_id: str = Field(..., min_length=1)
    parent_id: str | None = None
    name: str = Field(..., min_length=1, max_length=255, examples=["Leads"])
    key: str = Field(..., min_length=1, max_length=128, examples=["leads"])
    path: str | None = Field(default=None, max_length=512, examples=["/leads"])
    icon: str | None = Field(default=None, max_length=128)
    icon_color: str | None = Field(default=None, max_length=32)
    order: int = 0
    is_active: bool = True
    is_external: bool = False
    permissions: list[MenuPermissionInput] = Field(default_factory=list)


class MenuItemUpdate(BaseModel):
    """Schema for updating a menu item. Permissions are replaced when supplied."""

    group_id: str | None = None
    parent_id: str | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    key: str | None = Field(default=None, min_length=1, max_length=128)
    path: str | None = Field(default=None, max_length=512)
    icon: str | None = Field(default=None, max_length=128)
    icon_color: str | None = Field(default=None, max_length=32)
    order: int | None = None
    is_active: bool | None = None
    is_external: bool | None = None
    permissions: list[MenuPermissionInput] | None = None


class MenuItemResponse(BaseModel):
    id: str
    group_id: str
    parent_id: str | None
    name: str
    key: str
    path: str | None
    icon: str | None
    icon_color: str | None
    order: int
    is_active: bool
    is_external: bool
    permissions: list[MenuPermissionResponse] = []
    children: list["MenuItemResponse"] = []

    model_config = ConfigDict(from_attributes=True)


class MenuGroupResponse(BaseModel):
    id: str
    name: str
    key: str
    icon: str | None
    icon_color: str | None
    order: int
    is_collapsible: bool
    is_active: bool
    items: list[MenuItemResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MenuReorderEntry(BaseModel):
    """
    New position of one item after a drag-and-drop.

    `group_id` and `parent_id` are applied only when present in the payload,
    so an explicit null moves the item to the top level.
    """

    id: str
    order: int
    group_id: str | None = None
    parent_id: str | None = None


class MenuReorderRequest(BaseModel):
    items: list[MenuReorderEntry] = Field(..., min_length=1)
