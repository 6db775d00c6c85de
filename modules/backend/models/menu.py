"""
Menu Models.

Navigation menu configuration: collapsible groups of items, items nested
one level under a parent item, and per-role visibility permissions.
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin


class MenuGroup(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "menu_groups"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    icon: Mapped[str | None] = mapped_column(String(128), nullable=True)
    icon_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_collapsible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    items: Mapped[list["MenuItem"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MenuItem.order",
    )


class MenuItem(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "menu_items"

    group_id: Mapped[str] = mapped_column(
        ForeignKey("menu_groups.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(128), nullable=True)
    icon_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_external: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    group: Mapped[MenuGroup] = relationship(back_populates="items")
    permissions: Mapped[list["MenuItemPermission"]] = relationship(
        back_populates="menu_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


class MenuItemPermission(UUIDMixin, Base):
    __tablename__ = "menu_item_permissions"
    __table_args__ = (UniqueConstraint("menu_item_id", "role"),)

    menu_item_id: Mapped[str] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    can_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    menu_item: Mapped[MenuItem] = relationship(back_populates="permissions")
