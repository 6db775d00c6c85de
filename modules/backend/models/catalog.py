"""
Catalog Models.

Master data for the product catalog: brands, categories (a self-referencing
tree), their per-language translations, and products.
"""

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin


class Brand(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    logo_id: Mapped[str | None] = mapped_column(
        ForeignKey("files.id", ondelete="SET NULL"), nullable=True,
    )
    image_id: Mapped[str | None] = mapped_column(
        ForeignKey("files.id", ondelete="SET NULL"), nullable=True,
    )

    translations: Mapped[list["BrandTranslation"]] = relationship(
        back_populates="brand",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="BrandTranslation.language_code",
    )

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name={self.name!r})>"


class BrandTranslation(UUIDMixin, Base):
    __tablename__ = "brand_translations"
    __table_args__ = (UniqueConstraint("brand_id", "language_code"),)

    brand_id: Mapped[str] = mapped_column(
        ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    brand: Mapped[Brand] = relationship(back_populates="translations")


class Category(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    softone_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    parent: Mapped["Category | None"] = relationship(
        remote_side="Category.id", back_populates="children",
    )
    children: Mapped[list["Category"]] = relationship(
        back_populates="parent", order_by="Category.name", passive_deletes=True,
    )
    translations: Mapped[list["CategoryTranslation"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="CategoryTranslation.language_code",
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name!r})>"


class CategoryTranslation(UUIDMixin, Base):
    __tablename__ = "category_translations"
    __table_args__ = (UniqueConstraint("category_id", "language_code"),)

    category_id: Mapped[str] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    category: Mapped[Category] = relationship(back_populates="translations")


class Product(UUIDMixin, TimestampMixin, Base):
    """
    Product database model.

    `code1` holds the EAN barcode and `code2` the manufacturer part number;
    both are printed on the bill of materials.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    code1: Mapped[str | None] = mapped_column(String(64), nullable=True)
    code2: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    brand_id: Mapped[str | None] = mapped_column(
        ForeignKey("brands.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    category_id: Mapped[str | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    brand: Mapped[Brand | None] = relationship(lazy="selectin")
    category: Mapped[Category | None] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, code={self.code!r})>"
