"""
Catalog Service.

Business rules for brands, categories and products. Translations are
replaced as a whole set; rows without a language code are dropped.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError, ValidationError
from modules.backend.models.catalog import Brand, Category, Product
from modules.backend.repositories.catalog import (
    BrandRepository,
    CategoryRepository,
    ProductRepository,
)
from modules.backend.schemas.catalog import (
    BrandCreate,
    BrandResponse,
    BrandUpdate,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
    TranslationInput,
)
from modules.backend.services.base import BaseService


def _clean_translations(translations: list[TranslationInput] | None) -> list[dict]:
    """Translation rows that carry a language code, as column dicts."""
    return [
        {
            "language_code": item.language_code.strip(),
            "name": item.name,
            "description": item.description,
        }
        for item in translations or []
        if item.language_code and item.language_code.strip()
    ]


class BrandService(BaseService):
    """Service for brand business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = BrandRepository(session)

    async def _response(self, brand: Brand) -> BrandResponse:
        count = await self.repo.product_count(brand.id)
        return BrandResponse.model_validate(brand).model_copy(update={"product_count": count})

    async def list_brands(self, search: str | None = None) -> list[BrandResponse]:
        rows = await self.repo.list_with_product_counts(search=search)
        return [
            BrandResponse.model_validate(brand).model_copy(update={"product_count": count})
            for brand, count in rows
        ]

    async def get_brand(self, brand_id: str) -> BrandResponse:
        return await self._response(await self.repo.get_by_id(brand_id))

    async def create_brand(self, data: BrandCreate) -> BrandResponse:
        self._log_operation("Creating brand", name=data.name)
        brand = await self._execute_db_operation(
            "create_brand",
            self.repo.create(
                name=data.name,
                description=data.description,
                website=data.website,
                logo_id=data.logo_id,
                image_id=data.image_id,
            ),
        )
        translations = _clean_translations(data.translations)
        if translations:
            brand = await self._execute_db_operation(
                "create_brand_translations",
                self.repo.replace_translations(brand, translations),
            )
        return await self._response(brand)

    async def update_brand(self, brand_id: str, data: BrandUpdate) -> BrandResponse:
        """
        Update a brand.

        Name, logo and image are written only when they change; translations
        are replaced only when at least one carries a language code.
        """
        brand = await self.repo.get_by_id(brand_id)
        supplied = self._changes(data)
        changes = {}

        if data.name is not None and data.name != brand.name:
            changes["name"] = data.name
        if "description" in supplied:
            changes["description"] = data.description
        if data.website is not None:
            changes["website"] = data.website
        for field in ("logo_id", "image_id"):
            if field in supplied and supplied[field] != getattr(brand, field):
                changes[field] = supplied[field]

        if changes:
            self._log_operation("Updating brand", brand_id=brand_id, fields=list(changes))
            brand = await self._execute_db_operation(
                "update_brand",
                self.repo.update(brand_id, **changes),
            )

        translations = _clean_translations(data.translations)
        if translations:
            brand = await self._execute_db_operation(
                "update_brand_translations",
                self.repo.replace_translations(brand, translations),
            )
        return await self._response(brand)

    async def delete_brand(self, brand_id: str) -> None:
        self._log_operation("Deleting brand", brand_id=brand_id)
        await self._execute_db_operation("delete_brand", self.repo.delete(brand_id))


class CategoryService(BaseService):
    """Service for the category tree."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = CategoryRepository(session)

    async def _response(self, category_id: str) -> CategoryResponse:
        category = await self.repo.get_with_tree(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        count = await self.repo.product_count(category_id)
        return CategoryResponse.model_validate(category).model_copy(update={"product_count": count})

    async def _check_parent(self, parent_id: str | None) -> None:
        if parent_id and not await self.repo.exists(parent_id):
            raise NotFoundError("Parent category not found")

    async def list_categories(
        self,
        search: str | None = None,
        parent_id: str | None = None,
    ) -> list[CategoryResponse]:
        rows = await self.repo.list_with_product_counts(search=search, parent_id=parent_id)
        return [
            CategoryResponse.model_validate(category).model_copy(update={"product_count": count})
            for category, count in rows
        ]

    async def get_category(self, category_id: str) -> CategoryResponse:
        return await self._response(category_id)

    async def create_category(self, data: CategoryCreate) -> CategoryResponse:
        await self._check_parent(data.parent_id)

        self._log_operation("Creating category", name=data.name, parent_id=data.parent_id)
        category = await self._execute_db_operation(
            "create_category",
            self.repo.create(
                name=data.name,
                description=data.description,
                parent_id=data.parent_id or None,
                softone_code=data.softone_code,
            ),
        )
        translations = _clean_translations(data.translations)
        if translations:
            await self._execute_db_operation(
                "create_category_translations",
                self.repo.replace_translations(category, translations),
            )
        return await self._response(category.id)

    async def update_category(self, category_id: str, data: CategoryUpdate) -> CategoryResponse:
        """
        Update a category.

        Raises:
            NotFoundError: If the category or the new parent does not exist
            ValidationError: If the category is made its own parent
        """
        category = await self.repo.get_by_id(category_id)
        update_data = self._changes(data, exclude={"translations"})

        if "parent_id" in update_data:
            update_data["parent_id"] = update_data["parent_id"] or None
            if update_data["parent_id"] == category_id:
                raise ValidationError(
                    "A category cannot be its own parent",
                    details={"parent_id": category_id},
                )
            await self._check_parent(update_data["parent_id"])

        if update_data:
            self._log_operation(
                "Updating category",
                category_id=category_id,
                fields=list(update_data.keys()),
            )
            category = await self._execute_db_operation(
                "update_category",
                self.repo.update(category_id, **update_data),
            )

        if data.translations is not None:
            await self._execute_db_operation(
                "update_category_translations",
                self.repo.replace_translations(category, _clean_translations(data.translations)),
            )
        return await self._response(category_id)

    async def delete_category(self, category_id: str) -> None:
        self._log_operation("Deleting category", category_id=category_id)
        await self._execute_db_operation("delete_category", self.repo.delete(category_id))


class ProductService(BaseService):
    """Service for products."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ProductRepository(session)
        self.brands = BrandRepository(session)
        self.categories = CategoryRepository(session)

    async def _check_references(self, brand_id: str | None, category_id: str | None) -> None:
        if brand_id and not await self.brands.exists(brand_id):
            raise NotFoundError("Brand not found")
        if category_id and not await self.categories.exists(category_id):
            raise NotFoundError("Category not found")

    async def list_products(
        self,
        search: str | None = None,
        brand_id: str | None = None,
        category_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        return await self.repo.list_filtered(
            search=search,
            brand_id=brand_id,
            category_id=category_id,
            limit=limit,
            offset=offset,
        )

    async def get_product(self, product_id: str) -> Product:
        return await self.repo.get_by_id(product_id)

    async def create_product(self, data: ProductCreate) -> Product:
        await self._check_references(data.brand_id, data.category_id)
        self._log_operation("Creating product", name=data.name, code=data.code)
        return await self._execute_db_operation(
            "create_product",
            self.repo.create(**data.model_dump()),
        )

    async def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        update_data = self._changes(data)
        if not update_data:
            return await self.repo.get_by_id(product_id)

        await self._check_references(update_data.get("brand_id"), update_data.get("category_id"))
        self._log_operation(
            "Updating product",
            product_id=product_id,
            fields=list(update_data.keys()),
        )
        return await self._execute_db_operation(
            "update_product",
            self.repo.update(product_id, **update_data),
        )

    async def delete_product(self, product_id: str) -> None:
        self._log_operation("Deleting product", product_id=product_id)
        await self._execute_db_operation("delete_product", self.repo.delete(product_id))
