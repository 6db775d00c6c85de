"""
Menu Service.

Navigation menu configuration. Items are nested one level under a parent
item; visibility per role comes from item permissions, and an item with
no permission row for a role is visible to it.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError, ValidationError
from modules.backend.models.menu import MenuGroup, MenuItem
from modules.backend.repositories.menu import MenuGroupRepository, MenuItemRepository
from modules.backend.schemas.menu import (
    MenuGroupCreate,
    MenuGroupResponse,
    MenuGroupUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MenuReorderEntry,
)
from modules.backend.services.base import BaseService


def is_visible(item: MenuItem, role: str | None) -> bool:
    """Whether a role may see an item. No role means no filtering."""
    if role is None:
        return True
    for permission in item.permissions:
        if permission.role == role:
            return permission.can_view
    return True


def build_tree(items: list[MenuItem]) -> list[MenuItemResponse]:
    """Nest items under their parent; orphans of hidden parents are dropped."""
    responses = {item.id: MenuItemResponse.model_validate(item) for item in items}
    roots = []
    for item in items:
        node = responses[item.id]
        if item.parent_id is None:
            roots.append(node)
        elif item.parent_id in responses:
            responses[item.parent_id].children.append(node)
    return roots


def group_response(group: MenuGroup, items: list[MenuItemResponse]) -> MenuGroupResponse:
    return MenuGroupResponse(
        id=group.id,
        name=group.name,
        key=group.key,
        icon=group.icon,
        icon_color=group.icon_color,
        order=group.order,
        is_collapsible=group.is_collapsible,
        is_active=group.is_active,
        items=items,
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


class MenuService(BaseService):
    """Service for menu groups, items and permissions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.groups = MenuGroupRepository(session)
        self.items = MenuItemRepository(session)

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    async def list_groups(
        self,
        include_items: bool = True,
        role: str | None = None,
    ) -> list[MenuGroupResponse]:
        """Active groups by order, optionally with the items the role may view."""
        groups = await self.groups.list_active()
        by_group: dict[str, list[MenuItem]] = {group.id: [] for group in groups}
        if include_items:
            for item in await self.items.list_by_groups(list(by_group)):
                if is_visible(item, role):
                    by_group[item.group_id].append(item)

        return [group_response(group, build_tree(by_group[group.id])) for group in groups]

    async def get_group(self, group_id: str) -> MenuGroupResponse:
        group = await self.groups.get_by_id(group_id)
        items = await self.items.list_filtered(group_id=group_id)
        return group_response(group, build_tree(items))

    async def create_group(self, data: MenuGroupCreate) -> MenuGroupResponse:
        self._log_operation("Creating menu group", key=data.key)
        group = await self._execute_db_operation(
            "create_menu_group",
            self.groups.create(**data.model_dump()),
        )
        return group_response(group, [])

    async def update_group(self, group_id: str, data: MenuGroupUpdate) -> MenuGroupResponse:
        update_data = self._changes(data)
        if update_data:
            self._log_operation(
                "Updating menu group",
                group_id=group_id,
                fields=list(update_data.keys()),
            )
            await self._execute_db_operation(
                "update_menu_group",
                self.groups.update(group_id, **update_data),
            )
        return await self.get_group(group_id)

    async def delete_group(self, group_id: str) -> None:
        """Delete a group; its items and their permissions cascade."""
        self._log_operation("Deleting menu group", group_id=group_id)
        await self._execute_db_operation("delete_menu_group", self.groups.delete(group_id))

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    async def _check_placement(self, group_id: str | None, parent_id: str | None) -> None:
        if group_id and not await self.groups.exists(group_id):
            raise NotFoundError("Menu group not found")
        if parent_id and not await self.items.exists(parent_id):
            raise NotFoundError("Parent menu item not found")

    async def list_items(
        self,
        group_id: str | None = None,
        role: str | None = None,
    ) -> list[MenuItemResponse]:
        items = await self.items.list_filtered(group_id=group_id)
        return [
            MenuItemResponse.model_validate(item) for item in items if is_visible(item, role)
        ]

    async def create_item(self, data: MenuItemCreate) -> MenuItem:
        await self._check_placement(data.group_id, data.parent_id)

        self._log_operation("Creating menu item", key=data.key, group_id=data.group_id)
        item = await self._execute_db_operation(
            "create_menu_item",
            self.items.create(**data.model_dump(exclude={"permissions"})),
        )
        if data.permissions:
            item = await self._execute_db_operation(
                "create_menu_item_permissions",
                self.items.replace_permissions(
                    item,
                    [permission.model_dump() for permission in data.permissions],
                ),
            )
        return item

    async def update_item(self, item_id: str, data: MenuItemUpdate) -> MenuItem:
        """Update an item. Permissions are replaced as a set when supplied."""
        update_data = self._changes(data, exclude={"permissions"})
        if update_data.get("parent_id") == item_id:
            raise ValidationError("A menu item cannot be its own parent")
        await self._check_placement(update_data.get("group_id"), update_data.get("parent_id"))

        item = await self.items.get_by_id(item_id)
        if update_data:
            self._log_operation(
                "Updating menu item",
                item_id=item_id,
                fields=list(update_data.keys()),
            )
            item = await self._execute_db_operation(
                "update_menu_item",
                self.items.update(item_id, **update_data),
            )
        if data.permissions is not None:
            item = await self._execute_db_operation(
                "update_menu_item_permissions",
                self.items.replace_permissions(
                    item,
                    [permission.model_dump() for permission in data.permissions],
                ),
            )
        return item

    async def delete_item(self, item_id: str) -> None:
        self._log_operation("Deleting menu item", item_id=item_id)
        await self._execute_db_operation("delete_menu_item", self.items.delete(item_id))

    async def reorder(self, entries: list[MenuReorderEntry]) -> int:
        """
        Persist a drag-and-drop result.

        Group and parent are moved only for entries that name them.

        Returns:
            Number of items updated

        Raises:
            NotFoundError: If any item id is unknown
        """
        items = await self.items.get_many([entry.id for entry in entries])
        missing = [entry.id for entry in entries if entry.id not in items]
        if missing:
            raise NotFoundError(f"Menu items not found: {', '.join(missing)}")

        for entry in entries:
            item = items[entry.id]
            item.order = entry.order
            if "group_id" in entry.model_fields_set and entry.group_id:
                item.group_id = entry.group_id
            if "parent_id" in entry.model_fields_set:
                item.parent_id = entry.parent_id or None

        await self._execute_db_operation("reorder_menu_items", self.session.flush())
        self._log_operation("Menu items reordered", count=len(entries))
        return len(entries)
