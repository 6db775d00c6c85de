"""
Menu Repository.

Data access for menu groups, items and per-role item permissions.
"""

from typing import Any

from sqlalchemy import delete, select

from modules.backend.models.menu import MenuGroup, MenuItem, MenuItemPermission
from modules.backend.repositories.base import BaseRepository


class MenuGroupRepository(BaseRepository[MenuGroup]):
    """Repository for MenuGroup model."""

    model = MenuGroup

    async def list_active(self) -> list[MenuGroup]:
        result = await self.session.execute(
            select(MenuGroup)
            .where(MenuGroup.is_active == True)  # noqa: E712
            .order_by(MenuGroup.order.asc(), MenuGroup.name.asc())
        )
        return list(result.scalars().all())


class MenuItemRepository(BaseRepository[MenuItem]):
    """Repository for MenuItem model."""

    model = MenuItem

    async def list_by_groups(self, group_ids: list[str]) -> list[MenuItem]:
        """Active items of the given groups, ordered for display."""
        if not group_ids:
            return []
        result = await self.session.execute(
            select(MenuItem)
            .where(MenuItem.group_id.in_(group_ids))
            .where(MenuItem.is_active == True)  # noqa: E712
            .order_by(MenuItem.order.asc(), MenuItem.name.asc())
        )
        return list(result.scalars().all())

    async def list_filtered(self, group_id: str | None = None) -> list[MenuItem]:
        query = select(MenuItem).order_by(MenuItem.order.asc(), MenuItem.name.asc())
        if group_id:
            query = query.where(MenuItem.group_id == group_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def replace_permissions(
        self,
        item: MenuItem,
        permissions: list[dict[str, Any]],
    ) -> MenuItem:
        """Replace all role permissions of a menu item."""
        await self.session.execute(
            delete(MenuItemPermission).where(MenuItemPermission.menu_item_id == item.id)
        )
        for values in permissions:
            self.session.add(MenuItemPermission(menu_item_id=item.id, **values))
        await self.session.flush()
        await self.session.refresh(item, attribute_names=["permissions"])
        return item

    async def get_many(self, ids: list[str]) -> dict[str, MenuItem]:
        if not ids:
            return {}
        result = await self.session.execute(select(MenuItem).where(MenuItem.id.in_(ids)))
        return {item.id: item for item in result.scalars().all()}
