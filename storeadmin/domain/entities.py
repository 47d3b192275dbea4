"""Catalog entities.

Category, SubCategory, Product and Variant as received from the
Catalog Service. Entities are immutable; edits go through the
validation engine and come back from the server as a new canonical
value which replaces the old one wholesale.

Construction only normalizes structure (trimmed strings, blank
optional strings become None). Business rules live in
``storeadmin.catalog.validation``.
"""

from dataclasses import dataclass, field, replace
from typing import Self

from storeadmin.domain.base import ValueObject
from storeadmin.domain.value_objects import (
    CategoryId,
    Price,
    ProductId,
    SubCategoryId,
    VariantId,
)

DEFAULT_CATEGORY_ICON = "bi-tag"
DEFAULT_SUBCATEGORY_ICON = "bi-tag-fill"


def clean_text(value: str | None) -> str | None:
    """Trim a string, mapping blank or missing values to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _set(obj: object, name: str, value: object) -> None:
    object.__setattr__(obj, name, value)


# ============================================================================
# Category Hierarchy
# ============================================================================


@dataclass(frozen=True)
class Category(ValueObject):
    """A top-level catalog category.

    A category lists its sub-categories by identifier but does not own
    their lifecycle: deleting a category is the server's business and
    disabling one only changes the *effective* visibility of its
    children, never their stored ``is_enabled`` flag.

    Attributes:
        id: Server-assigned identifier.
        name: Display name.
        description: Optional description.
        icon_class: Symbolic icon tag.
        is_enabled: Whether the category is enabled.
        display_order: Sort key, lower first.
        subcategory_ids: Ordered member sub-category identifiers.
        created_at: Server creation timestamp, opaque.
        updated_at: Server update timestamp, opaque.
    """

    id: CategoryId
    name: str
    description: str | None = None
    icon_class: str = DEFAULT_CATEGORY_ICON
    is_enabled: bool = True
    display_order: int = 0
    subcategory_ids: tuple[SubCategoryId, ...] = ()
    created_at: str | None = field(default=None, compare=False)
    updated_at: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "description", clean_text(self.description))
        _set(self, "icon_class", clean_text(self.icon_class) or DEFAULT_CATEGORY_ICON)
        _set(self, "subcategory_ids", tuple(self.subcategory_ids))

    @property
    def has_subcategories(self) -> bool:
        """Check whether any sub-category is listed as a member."""
        return len(self.subcategory_ids) > 0

    def with_enabled(self, is_enabled: bool) -> Self:
        """Return a copy with a different enabled flag."""
        return replace(self, is_enabled=is_enabled)


@dataclass(frozen=True)
class SubCategory(ValueObject):
    """A sub-category belonging to exactly one parent category.

    Attributes:
        id: Server-assigned identifier.
        name: Display name.
        category_id: Parent category identifier.
        description: Optional description.
        icon_class: Symbolic icon tag.
        is_enabled: Stored enabled flag (not the effective visibility).
        display_order: Sort key, lower first.
        category_name: Parent name as denormalized by the server.
    """

    id: SubCategoryId
    name: str
    category_id: CategoryId
    description: str | None = None
    icon_class: str = DEFAULT_SUBCATEGORY_ICON
    is_enabled: bool = True
    display_order: int = 0
    category_name: str | None = None
    created_at: str | None = field(default=None, compare=False)
    updated_at: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "description", clean_text(self.description))
        _set(self, "icon_class", clean_text(self.icon_class) or DEFAULT_SUBCATEGORY_ICON)
        _set(self, "category_name", clean_text(self.category_name))


# ============================================================================
# Products and Variants
# ============================================================================


@dataclass(frozen=True)
class Product(ValueObject):
    """A sellable product.

    ``has_variants`` is the product's declared intent and is independent
    of whether any variants are currently loaded.

    Attributes:
        id: Server-assigned identifier.
        name: Display name.
        price: Base price, used by variants without an override.
        stock_quantity: Product-level stock.
        description: Optional description.
        category: Free-text category label.
        image_url: Optional image URL.
        is_active: Whether the product is listed.
        has_variants: Whether the product is meant to be sold as variants.
    """

    id: ProductId
    name: str
    price: Price
    stock_quantity: int = 0
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    is_active: bool = True
    has_variants: bool = False
    created_at: str | None = field(default=None, compare=False)
    updated_at: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "description", clean_text(self.description))
        _set(self, "category", clean_text(self.category))
        _set(self, "image_url", clean_text(self.image_url))


@dataclass(frozen=True)
class Variant(ValueObject):
    """A purchasable variant of a product.

    Attributes:
        id: Server-assigned identifier.
        product_id: Owning product.
        name: Display name (e.g. "Red / XL").
        stock_quantity: Variant stock, independent of the product's stock.
        sku: Optional stock keeping unit.
        image_url: Optional image URL.
        price_override: Replaces the product price when set.
        is_available: Whether the variant can be bought.
        is_featured: Highlighted variant; at most one per product.
        display_order: Sort key, lower first.
    """

    id: VariantId
    product_id: ProductId
    name: str
    stock_quantity: int = 0
    sku: str | None = None
    image_url: str | None = None
    price_override: Price | None = None
    is_available: bool = True
    is_featured: bool = False
    display_order: int = 0
    created_at: str | None = field(default=None, compare=False)
    updated_at: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "sku", clean_text(self.sku))
        _set(self, "image_url", clean_text(self.image_url))

    def with_featured(self, is_featured: bool) -> Self:
        """Return a copy with a different featured flag."""
        return replace(self, is_featured=is_featured)
