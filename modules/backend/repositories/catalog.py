"""
Catalog Repositories.

Data access for brands, categories, their translations, and products.
"""

from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import selectinload

from modules.backend.models.catalog import (
    Brand,
    BrandTranslation,
    Category,
    CategoryTranslation,
    Product,
)
from modules.backend.repositories.base import BaseRepository, contains


def _product_counts(column: Any):
    """Subquery of product counts grouped by a product foreign key column."""
    return (
        select(column.label("owner_id"), func.count(Product.id).label("product_count"))
        .group_by(column)
        .subquery()
    )


class BrandRepository(BaseRepository[Brand]):
    """Repository for Brand model."""

    model = Brand

    async def list_with_product_counts(
        self,
        search: str | None = None,
    ) -> list[tuple[Brand, int]]:
        """
        List brands ordered by name, each paired with its product count.

        Args:
            search: Optional case-insensitive filter on name and description
        """
        counts = _product_counts(Product.brand_id)
        query = (
            select(Brand, func.coalesce(counts.c.product_count, 0))
            .outerjoin(counts, counts.c.owner_id == Brand.id)
            .order_by(Brand.name.asc())
        )
        if search:
            query = query.where(
                or_(contains(Brand.name, search), contains(Brand.description, search))
            )
        result = await self.session.execute(query)
        return [(brand, count) for brand, count in result.all()]

    async def product_count(self, brand_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Product.id)).where(Product.brand_id == brand_id)
        )
        return result.scalar_one()

    async def replace_translations(
        self,
        brand: Brand,
        translations: list[dict[str, Any]],
    ) -> Brand:
        """
        Replace all translations of a brand.

        Existing rows are removed with a bulk delete and flushed before the
        new rows are inserted so the (brand_id, language_code) constraint
        never sees both generations.
        """
        await self.session.execute(
            delete(BrandTranslation).where(BrandTranslation.brand_id == brand.id)
        )
        for item in translations:
            self.session.add(BrandTranslation(brand_id=brand.id, **item))
        await self.session.flush()
        await self.session.refresh(brand, attribute_names=["translations"])
        return brand


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model."""

    model = Category

    async def get_with_tree(self, category_id: str) -> Category | None:
        """Get a category with its parent and children loaded."""
        result = await self.session.execute(
            select(Category)
            .where(Category.id == category_id)
            .options(selectinload(Category.parent), selectinload(Category.children))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_with_product_counts(
        self,
        search: str | None = None,
        parent_id: str | None = None,
    ) -> list[tuple[Category, int]]:
        """
        List categories ordered by name with parent, children and product count.

        Args:
            search: Optional case-insensitive filter on name and description
            parent_id: Parent filter; the literal "null" selects top-level rows
        """
        counts = _product_counts(Product.category_id)
        query = (
            select(Category, func.coalesce(counts.c.product_count, 0))
            .outerjoin(counts, counts.c.owner_id == Category.id)
            .options(selectinload(Category.parent), selectinload(Category.children))
            .order_by(Category.name.asc())
        )
        if search:
            query = query.where(
                or_(contains(Category.name, search), contains(Category.description, search))
            )
        if parent_id == "null":
            query = query.where(Category.parent_id.is_(None))
        elif parent_id:
            query = query.where(Category.parent_id == parent_id)

        result = await self.session.execute(query)
        return [(category, count) for category, count in result.all()]

    async def product_count(self, category_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )
        return result.scalar_one()

    async def replace_translations(
        self,
        category: Category,
        translations: list[dict[str, Any]],
    ) -> Category:
        """Replace all translations of a category."""
        await self.session.execute(
            delete(CategoryTranslation).where(CategoryTranslation.category_id == category.id)
        )
        for item in translations:
            self.session.add(CategoryTranslation(category_id=category.id, **item))
        await self.session.flush()
        await self.session.refresh(category, attribute_names=["translations"])
        return category


class ProductRepository(BaseRepository[Product]):
    """Repository for Product model."""

    model = Product

    async def list_filtered(
        self,
        search: str | None = None,
        brand_id: str | None = None,
        category_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """List products by name, code or EAN with optional brand/category filters."""
        query = select(Product)
        if search:
            query = query.where(
                or_(
                    contains(Product.name, search),
                    contains(Product.code, search),
                    contains(Product.code1, search),
                    contains(Product.code2, search),
                )
            )
        if brand_id:
            query = query.where(Product.brand_id == brand_id)
        if category_id:
            query = query.where(Product.category_id == category_id)
        query = query.order_by(Product.name.asc())
        return await self._fetch_page(query, limit, offset)

    async def get_many(self, ids: list[str]) -> list[Product]:
        """Get products by id; unknown ids are silently absent."""
        if not ids:
            return []
        result = await self.session.execute(select(Product).where(Product.id.in_(ids)))
        return list(result.scalars().all())
