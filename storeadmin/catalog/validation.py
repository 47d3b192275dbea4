"""Validation engine for catalog forms.

Turns raw operator input into normalized request payloads. Every
validator is synchronous, total over its input and free of side
effects: it returns either ``Accepted`` with the normalized request or
``Rejected`` with one ``ValidationError`` per offending field. Nothing
here talks to the Catalog Service.

Featured-variant exclusivity is not a rejection. When a variant is
marked featured, ``validate_variant`` accepts it and attaches a
``ClearFeaturedInstruction`` for every other featured sibling; the
mutation coordinator applies them after the primary write commits.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Generic, TypeVar

from storeadmin.domain.entities import Category, Variant
from storeadmin.domain.exceptions import (
    FormValidationError,
    InvalidPriceError,
    UnknownParentCategoryError,
)
from storeadmin.domain.requests import (
    CategoryForm,
    CategoryRequest,
    ProductForm,
    ProductRequest,
    VariantForm,
    VariantRequest,
)
from storeadmin.domain.value_objects import CategoryId, Price, VariantId

NAME_MAX_LENGTH = 100
CATEGORY_NAME_MIN_LENGTH = 2
VARIANT_NAME_MIN_LENGTH = 1

_NON_NEGATIVE_INT = re.compile(r"^\+?[0-9]+$")

T = TypeVar("T")


# ============================================================================
# Result Types
# ============================================================================


class ValidationErrorCode(str, Enum):
    """Machine-readable validation failure codes."""

    NAME_REQUIRED = "name_required"
    NAME_TOO_SHORT = "name_too_short"
    NAME_TOO_LONG = "name_too_long"
    STOCK_REQUIRED = "stock_required"
    STOCK_INVALID = "stock_invalid"
    PRICE_REQUIRED = "price_required"
    PRICE_INVALID = "price_invalid"
    INVALID_ORDER = "invalid_order"
    SKU_DUPLICATE = "sku_duplicate"


@dataclass(frozen=True)
class ValidationError:
    """A field-scoped validation failure.

    Attributes:
        code: Failure code.
        field: Name of the offending form field, for UI binding.
        message: Human-readable message.
    """

    code: ValidationErrorCode
    field: str
    message: str


@dataclass(frozen=True)
class ClearFeaturedInstruction:
    """Companion write: clear flags on a sibling variant.

    Attributes:
        variant_id: Sibling variant to update.
        fields: Boolean fields to set to False.
    """

    variant_id: VariantId
    fields: tuple[str, ...] = ("is_featured",)


@dataclass(frozen=True)
class Accepted(Generic[T]):
    """Validation succeeded.

    Attributes:
        value: Normalized request payload.
        instructions: Companion writes to apply after the primary commits.
    """

    value: T
    instructions: tuple[ClearFeaturedInstruction, ...] = ()

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Validation failed on one or more fields."""

    errors: tuple[ValidationError, ...]

    @property
    def is_valid(self) -> bool:
        return False

    def error_for(self, field: str) -> ValidationError | None:
        """Get the error bound to a form field, if any."""
        for error in self.errors:
            if error.field == field:
                return error
        return None

    @property
    def codes(self) -> set[ValidationErrorCode]:
        """All failure codes in this result."""
        return {error.code for error in self.errors}


ValidationResult = Accepted[T] | Rejected


class SkuScope(str, Enum):
    """How widely variant SKUs must be unique.

    The Catalog Service does not document its rule, so the client
    checks nothing by default and can be configured to check per
    product or across every loaded variant.
    """

    NONE = "none"
    PRODUCT = "product"
    GLOBAL = "global"


def require_valid(result: "ValidationResult[T]") -> Accepted[T]:
    """Unwrap an accepted result or raise.

    Args:
        result: Result of a validator.

    Returns:
        The accepted result.

    Raises:
        FormValidationError: If the result was rejected.
    """
    if isinstance(result, Rejected):
        raise FormValidationError(result.errors)
    return result


# ============================================================================
# Field Rules
# ============================================================================


def _check_name(
    raw: str,
    field: str,
    min_length: int,
    max_length: int = NAME_MAX_LENGTH,
) -> ValidationError | None:
    name = raw.strip()
    if not name:
        return ValidationError(ValidationErrorCode.NAME_REQUIRED, field, "Name is required")
    if len(name) < min_length:
        return ValidationError(
            ValidationErrorCode.NAME_TOO_SHORT,
            field,
            f"Name must be at least {min_length} characters",
        )
    if len(name) > max_length:
        return ValidationError(
            ValidationErrorCode.NAME_TOO_LONG,
            field,
            f"Name must be at most {max_length} characters",
        )
    return None


def _parse_non_negative_int(raw: str) -> int | None:
    text = raw.strip()
    if not _NON_NEGATIVE_INT.match(text):
        return None
    return int(text)


def _parse_order(raw: str | int | None, field: str = "display_order") -> int | ValidationError:
    """Parse a display order, blank meaning 0."""
    if raw is None:
        return 0
    if isinstance(raw, int):
        if raw < 0:
            return _invalid_order(field)
        return raw
    if not raw.strip():
        return 0
    value = _parse_non_negative_int(raw)
    if value is None:
        return _invalid_order(field)
    return value


def _invalid_order(field: str) -> ValidationError:
    return ValidationError(
        ValidationErrorCode.INVALID_ORDER,
        field,
        "Display order must be a whole number, 0 or greater",
    )


def _parse_stock(raw: str | int | None, field: str = "stock_quantity") -> int | ValidationError:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return ValidationError(
            ValidationErrorCode.STOCK_REQUIRED, field, "Stock quantity is required"
        )
    value = raw if isinstance(raw, int) else _parse_non_negative_int(raw)
    if value is None or value < 0:
        return ValidationError(
            ValidationErrorCode.STOCK_INVALID, field, "Stock must be a whole number, 0 or greater"
        )
    return value


def _parse_price(raw: str, field: str) -> Price | ValidationError:
    """Parse a non-blank price string into a positive two-digit amount."""
    try:
        return Price(amount=Decimal(raw.strip()))
    except (InvalidOperation, InvalidPriceError):
        return ValidationError(
            ValidationErrorCode.PRICE_INVALID, field, "Must be a valid positive price"
        )


def _collect(*outcomes: object) -> tuple[ValidationError, ...]:
    return tuple(o for o in outcomes if isinstance(o, ValidationError))


# ============================================================================
# Categories
# ============================================================================


def validate_category(
    form: CategoryForm | CategoryRequest,
) -> "ValidationResult[CategoryRequest]":
    """Validate category (or sub-category) input.

    Accepts either the raw form or an already-normalized request, so
    that validating an accepted value yields the same value again.

    Args:
        form: Raw form input or a normalized request.

    Returns:
        Accepted with a CategoryRequest, or Rejected.
    """
    name_error = _check_name(form.name, "name", CATEGORY_NAME_MIN_LENGTH)
    order = _parse_order(form.display_order)

    errors = _collect(name_error, order)
    if errors:
        return Rejected(errors)

    return Accepted(
        CategoryRequest(
            name=form.name,
            description=form.description,
            icon_class=form.icon_class,
            is_enabled=form.is_enabled,
            display_order=order,  # type: ignore[arg-type]
        )
    )


def validate_subcategory(
    form: CategoryForm | CategoryRequest,
    parent_id: CategoryId,
    categories: Iterable[Category],
) -> "ValidationResult[CategoryRequest]":
    """Validate sub-category input for a given parent.

    The parent is picked from a list rather than typed, so an unknown
    parent is a programming error and raises instead of rejecting.

    Args:
        form: Raw form input or a normalized request.
        parent_id: Parent category identifier.
        categories: Currently loaded categories.

    Returns:
        Accepted with a CategoryRequest, or Rejected.

    Raises:
        UnknownParentCategoryError: If the parent is not among ``categories``.
    """
    if not any(category.id == parent_id for category in categories):
        raise UnknownParentCategoryError(str(parent_id))
    return validate_category(form)


# ============================================================================
# Products
# ============================================================================


def validate_product(form: ProductForm) -> "ValidationResult[ProductRequest]":
    """Validate product create / edit input.

    Args:
        form: Raw form input.

    Returns:
        Accepted with a ProductRequest, or Rejected.
    """
    name_error = _check_name(form.name, "name", VARIANT_NAME_MIN_LENGTH)

    price: Price | ValidationError
    if not form.price.strip():
        price = ValidationError(ValidationErrorCode.PRICE_REQUIRED, "price", "Price is required")
    else:
        price = _parse_price(form.price, "price")

    stock = _parse_stock(form.stock_quantity)

    errors = _collect(name_error, price, stock)
    if errors:
        return Rejected(errors)

    return Accepted(
        ProductRequest(
            name=form.name,
            price=price,  # type: ignore[arg-type]
            stock_quantity=stock,  # type: ignore[arg-type]
            description=form.description,
            category=form.category,
            image_url=form.image_url,
            is_active=form.is_active,
            has_variants=form.has_variants,
        )
    )


# ============================================================================
# Variants
# ============================================================================


def _check_sku(
    form: VariantForm,
    siblings: list[Variant],
    sku_scope: SkuScope,
    catalog: Iterable[Variant],
) -> ValidationError | None:
    sku = form.sku.strip()
    if not sku or sku_scope == SkuScope.NONE:
        return None

    candidates = siblings if sku_scope == SkuScope.PRODUCT else catalog
    for other in candidates:
        if other.id != form.variant_id and other.sku == sku:
            return ValidationError(
                ValidationErrorCode.SKU_DUPLICATE,
                "sku",
                f"SKU is already used by variant '{other.name}'",
            )
    return None


def validate_variant(
    form: VariantForm,
    siblings: Iterable[Variant],
    *,
    sku_scope: SkuScope = SkuScope.NONE,
    catalog: Iterable[Variant] = (),
) -> "ValidationResult[VariantRequest]":
    """Validate variant input against its siblings.

    Args:
        form: Raw form input.
        siblings: Loaded variants of the same product. The variant being
            edited (``form.variant_id``) may be included; it is skipped.
        sku_scope: SKU uniqueness rule to enforce.
        catalog: Every loaded variant, used when ``sku_scope`` is GLOBAL.

    Returns:
        Accepted with a VariantRequest and any companion instructions,
        or Rejected.
    """
    siblings = list(siblings)

    name_error = _check_name(form.name, "name", VARIANT_NAME_MIN_LENGTH)
    stock = _parse_stock(form.stock_quantity)

    price_override: Price | ValidationError | None = None
    if form.price_override.strip():
        price_override = _parse_price(form.price_override, "price_override")

    order = _parse_order(form.display_order)
    sku_error = _check_sku(form, siblings, sku_scope, catalog)

    errors = _collect(name_error, stock, price_override, order, sku_error)
    if errors:
        return Rejected(errors)

    instructions: tuple[ClearFeaturedInstruction, ...] = ()
    if form.is_featured:
        instructions = tuple(
            ClearFeaturedInstruction(variant_id=sibling.id)
            for sibling in siblings
            if sibling.is_featured and sibling.id != form.variant_id
        )

    return Accepted(
        VariantRequest(
            name=form.name,
            stock_quantity=stock,  # type: ignore[arg-type]
            sku=form.sku,
            image_url=form.image_url,
            price_override=price_override,  # type: ignore[arg-type]
            is_available=form.is_available,
            is_featured=form.is_featured,
            display_order=order,  # type: ignore[arg-type]
        ),
        instructions,
    )
