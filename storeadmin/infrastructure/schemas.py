"""Wire schemas for the Catalog Service.

Pydantic models for the camelCase JSON the admin API speaks, and the
mapping between them and the domain entities / requests.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeadmin.domain.entities import (
    DEFAULT_CATEGORY_ICON,
    DEFAULT_SUBCATEGORY_ICON,
    Category,
    Product,
    SubCategory,
    Variant,
)
from storeadmin.domain.requests import CategoryRequest, ProductRequest, VariantRequest
from storeadmin.domain.value_objects import (
    CategoryId,
    Price,
    ProductId,
    SubCategoryId,
    VariantId,
)


class WireModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", "category_id", "product_id", mode="before", check_fields=False)
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        # identifiers are opaque; the server sends integers
        return None if value is None else str(value)


# ============================================================================
# Response Schemas
# ============================================================================


class SubCategorySchema(WireModel):
    """Sub-category as returned by the API."""

    id: str
    name: str
    description: str | None = None
    icon_class: str = Field(default=DEFAULT_SUBCATEGORY_ICON, alias="iconClass")
    is_enabled: bool = Field(default=True, alias="isEnabled")
    display_order: int = Field(default=0, alias="displayOrder")
    category_id: str = Field(..., alias="categoryId")
    category_name: str | None = Field(default=None, alias="categoryName")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def to_domain(self) -> SubCategory:
        return SubCategory(
            id=SubCategoryId(self.id),
            name=self.name,
            category_id=CategoryId(self.category_id),
            description=self.description,
            icon_class=self.icon_class,
            is_enabled=self.is_enabled,
            display_order=self.display_order,
            category_name=self.category_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CategorySchema(WireModel):
    """Category as returned by the API, with embedded sub-categories."""

    id: str
    name: str
    description: str | None = None
    icon_class: str = Field(default=DEFAULT_CATEGORY_ICON, alias="iconClass")
    is_enabled: bool = Field(default=True, alias="isEnabled")
    display_order: int = Field(default=0, alias="displayOrder")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    subcategories: list[SubCategorySchema] | None = Field(default=None, alias="subCategories")

    def to_domain(self) -> Category:
        return Category(
            id=CategoryId(self.id),
            name=self.name,
            description=self.description,
            icon_class=self.icon_class,
            is_enabled=self.is_enabled,
            display_order=self.display_order,
            subcategory_ids=tuple(SubCategoryId(s.id) for s in self.subcategories or []),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def subcategories_to_domain(self) -> list[SubCategory]:
        return [s.to_domain() for s in self.subcategories or []]


class VariantSchema(WireModel):
    """Product variant as returned by the API."""

    id: str
    product_id: str = Field(..., alias="productId")
    name: str
    sku: str | None = None
    stock_quantity: int = Field(default=0, alias="stockQuantity")
    image_url: str | None = Field(default=None, alias="imageUrl")
    price_override: Decimal | None = Field(default=None, alias="priceOverride")
    is_available: bool = Field(default=True, alias="isAvailable")
    is_featured: bool = Field(default=False, alias="isFeatured")
    display_order: int = Field(default=0, alias="displayOrder")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def to_domain(self) -> Variant:
        return Variant(
            id=VariantId(self.id),
            product_id=ProductId(self.product_id),
            name=self.name,
            stock_quantity=self.stock_quantity,
            sku=self.sku,
            image_url=self.image_url,
            price_override=Price(self.price_override) if self.price_override is not None else None,
            is_available=self.is_available,
            is_featured=self.is_featured,
            display_order=self.display_order,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ProductSchema(WireModel):
    """Product as returned by the API."""

    id: str
    name: str
    description: str | None = None
    price: Decimal
    stock_quantity: int = Field(default=0, alias="stockQuantity")
    image_url: str | None = Field(default=None, alias="imageUrl")
    category: str | None = None
    is_active: bool = Field(default=True, alias="isActive")
    has_variants: bool = Field(default=False, alias="hasVariants")
    variants: list[VariantSchema] | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def to_domain(self) -> Product:
        return Product(
            id=ProductId(self.id),
            name=self.name,
            price=Price(self.price),
            stock_quantity=self.stock_quantity,
            description=self.description,
            category=self.category,
            image_url=self.image_url,
            is_active=self.is_active,
            has_variants=self.has_variants,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class VariantListSchema(WireModel):
    """Variant list envelope."""

    variants: list[VariantSchema]
    total_count: int = Field(default=0, alias="totalCount")


# ============================================================================
# Request Payloads
# ============================================================================


def category_payload(request: CategoryRequest) -> dict[str, Any]:
    """Serialize a category / sub-category request."""
    payload: dict[str, Any] = {
        "name": request.name,
        "description": request.description,
        "iconClass": request.icon_class,
        "isEnabled": request.is_enabled,
        "displayOrder": request.display_order,
    }
    return {k: v for k, v in payload.items() if v is not None}


def product_payload(request: ProductRequest) -> dict[str, Any]:
    """Serialize a product request."""
    payload: dict[str, Any] = {
        "name": request.name,
        "description": request.description,
        "price": float(request.price.amount),
        "stockQuantity": request.stock_quantity,
        "category": request.category,
        "imageUrl": request.image_url,
        "isActive": request.is_active,
        "hasVariants": request.has_variants,
    }
    return {k: v for k, v in payload.items() if v is not None}


def variant_payload(request: VariantRequest) -> dict[str, Any]:
    """Serialize a variant request.

    ``priceOverride`` is sent as null when absent so that an update can
    remove an existing override.
    """
    return {
        "name": request.name,
        "sku": request.sku,
        "stockQuantity": request.stock_quantity,
        "imageUrl": request.image_url,
        "priceOverride": (
            float(request.price_override.amount) if request.price_override else None
        ),
        "isAvailable": request.is_available,
        "isFeatured": request.is_featured,
        "displayOrder": request.display_order,
    }
