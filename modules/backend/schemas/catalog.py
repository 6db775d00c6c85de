"""
Catalog Schemas.

Pydantic schemas for brands, categories, their translations, and products.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TranslationInput(BaseModel):
    """Localized name/description. Rows with an empty language code are ignored."""

    language_code: str = Field(default="", max_length=8, examples=["el"])
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None


class TranslationResponse(BaseModel):
    language_code: str
    name: str | None
    description: str | None

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Brands
# =============================================================================


class BrandCreate(BaseModel):
    """Schema for creating a brand."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Cisco"])
    description: str | None = None
    website: bool = Field(default=False, description="Show on the public website")
    logo_id: str | None = Field(default=None, description="File id of the logo")
    image_id: str | None = Field(default=None, description="File id of the cover image")
    translations: list[TranslationInput] = Field(default_factory=list)


class BrandUpdate(BaseModel):
    """
    Schema for updating a brand.

    Translations are replaced only when at least one entry carries a
    language code.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    website: bool | None = None
    logo_id: str | None = None
    image_id: str | None = None
    translations: list[TranslationInput] | None = None


class BrandResponse(BaseModel):
    id: str
    name: str
    description: str | None
    website: bool
    logo_id: str | None
    image_id: str | None
    translations: list[TranslationResponse] = []
    product_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Categories
# =============================================================================


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Switches"])
    description: str | None = None
    parent_id: str | None = None
    softone_code: str | None = Field(default=None, max_length=64, description="ERP category code")
    translations: list[TranslationInput] = Field(default_factory=list)


class CategoryUpdate(BaseModel):
    """Schema for updating a category. Translations are replaced when supplied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    parent_id: str | None = None
    softone_code: str | None = Field(default=None, max_length=64)
    translations: list[TranslationInput] | None = None


class CatalogRef(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str | None
    softone_code: str | None
    parent_id: str | None
    parent: CatalogRef | None = None
    children: list[CatalogRef] = []
    translations: list[TranslationResponse] = []
    product_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Products
# =============================================================================


class ProductCreate(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=255)
    code: str | None = Field(default=None, max_length=64, description="Internal product code")
    code1: str | None = Field(default=None, max_length=64, description="EAN code")
    code2: str | None = Field(default=None, max_length=64, description="Manufacturer code")
    brand_id: str | None = None
    category_id: str | None = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, max_length=64)
    code1: str | None = Field(default=None, max_length=64)
    code2: str | None = Field(default=None, max_length=64)
    brand_id: str | None = None
    category_id: str | None = None
    is_active: bool | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    code: str | None
    code1: str | None
    code2: str | None
    is_active: bool
    brand_id: str | None
    category_id: str | None
    brand: CatalogRef | None = None
    category: CatalogRef | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
