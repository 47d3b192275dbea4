"""Form input and request shapes.

Forms hold what the operator typed, exactly as typed: numeric inputs
are strings so the validation engine can tell "blank" from "not a
number". Requests are the normalized payloads that the validation
engine produces and the mutation coordinator sends to the Catalog
Service. The same request shape serves create and update: the admin
forms always submit every field.
"""

from dataclasses import dataclass
from typing import Self

from storeadmin.domain.base import ValueObject
from storeadmin.domain.entities import (
    DEFAULT_CATEGORY_ICON,
    Category,
    Product,
    SubCategory,
    Variant,
    clean_text,
)
from storeadmin.domain.value_objects import Price, VariantId


def _set(obj: object, name: str, value: object) -> None:
    object.__setattr__(obj, name, value)


# ============================================================================
# Forms (raw operator input)
# ============================================================================


@dataclass(frozen=True)
class CategoryForm(ValueObject):
    """Raw input of the category / sub-category form."""

    name: str = ""
    description: str = ""
    icon_class: str = DEFAULT_CATEGORY_ICON
    display_order: str = "0"
    is_enabled: bool = True

    @classmethod
    def from_category(cls, category: Category | SubCategory) -> Self:
        """Prefill the form for editing an existing entity."""
        return cls(
            name=category.name,
            description=category.description or "",
            icon_class=category.icon_class,
            display_order=str(category.display_order),
            is_enabled=category.is_enabled,
        )


@dataclass(frozen=True)
class ProductForm(ValueObject):
    """Raw input of the product create / edit form."""

    name: str = ""
    price: str = ""
    stock_quantity: str = ""
    description: str = ""
    category: str = ""
    image_url: str = ""
    is_active: bool = True
    has_variants: bool = False


@dataclass(frozen=True)
class VariantForm(ValueObject):
    """Raw input of the variant form.

    ``variant_id`` is set when editing an existing variant so that the
    variant is not treated as its own featured sibling.
    """

    name: str = ""
    stock_quantity: str = "0"
    price_override: str = ""
    sku: str = ""
    image_url: str = ""
    display_order: str = "0"
    is_available: bool = True
    is_featured: bool = False
    variant_id: VariantId | None = None

    @classmethod
    def from_variant(cls, variant: Variant) -> Self:
        """Prefill the form for editing an existing variant."""
        return cls(
            name=variant.name,
            stock_quantity=str(variant.stock_quantity),
            price_override=str(variant.price_override.amount) if variant.price_override else "",
            sku=variant.sku or "",
            image_url=variant.image_url or "",
            display_order=str(variant.display_order),
            is_available=variant.is_available,
            is_featured=variant.is_featured,
            variant_id=variant.id,
        )


# ============================================================================
# Requests (normalized payloads)
# ============================================================================


@dataclass(frozen=True)
class CategoryRequest(ValueObject):
    """Create / update payload for categories and sub-categories."""

    name: str
    description: str | None = None
    icon_class: str | None = None
    is_enabled: bool = True
    display_order: int | None = 0

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "description", clean_text(self.description))
        _set(self, "icon_class", clean_text(self.icon_class))
        _set(self, "display_order", self.display_order or 0)

    @classmethod
    def from_category(cls, category: Category | SubCategory) -> Self:
        """Build the payload that would recreate the entity as it is."""
        return cls(
            name=category.name,
            description=category.description,
            icon_class=category.icon_class,
            is_enabled=category.is_enabled,
            display_order=category.display_order,
        )


@dataclass(frozen=True)
class ProductRequest(ValueObject):
    """Create / update payload for products."""

    name: str
    price: Price
    stock_quantity: int | None = 0
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    is_active: bool = True
    has_variants: bool = False

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "stock_quantity", self.stock_quantity or 0)
        _set(self, "description", clean_text(self.description))
        _set(self, "category", clean_text(self.category))
        _set(self, "image_url", clean_text(self.image_url))

    @classmethod
    def from_product(cls, product: Product) -> Self:
        """Build the payload that would recreate the product as it is."""
        return cls(
            name=product.name,
            price=product.price,
            stock_quantity=product.stock_quantity,
            description=product.description,
            category=product.category,
            image_url=product.image_url,
            is_active=product.is_active,
            has_variants=product.has_variants,
        )


@dataclass(frozen=True)
class VariantRequest(ValueObject):
    """Create / update payload for variants."""

    name: str
    stock_quantity: int | None = 0
    sku: str | None = None
    image_url: str | None = None
    price_override: Price | None = None
    is_available: bool = True
    is_featured: bool = False
    display_order: int | None = 0

    def __post_init__(self) -> None:
        _set(self, "name", self.name.strip())
        _set(self, "stock_quantity", self.stock_quantity or 0)
        _set(self, "sku", clean_text(self.sku))
        _set(self, "image_url", clean_text(self.image_url))
        _set(self, "display_order", self.display_order or 0)

    @classmethod
    def from_variant(cls, variant: Variant, **changes: object) -> Self:
        """Build the payload for a variant, optionally overriding fields.

        Used for companion mutations, which resend a sibling unchanged
        except for the cleared flag.
        """
        fields: dict[str, object] = {
            "name": variant.name,
            "stock_quantity": variant.stock_quantity,
            "sku": variant.sku,
            "image_url": variant.image_url,
            "price_override": variant.price_override,
            "is_available": variant.is_available,
            "is_featured": variant.is_featured,
            "display_order": variant.display_order,
        }
        fields.update(changes)
        return cls(**fields)  # type: ignore[arg-type]
