"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self
from uuid import uuid4

from storeadmin.domain.base import ValueObject
from storeadmin.domain.exceptions import InvalidPriceError


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class CategoryId(ValueObject):
    """Strongly-typed category identifier.

    Identifiers are assigned by the Catalog Service and are opaque to
    the client, so they are kept as strings.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate category ID format."""
        if not str(self.value).strip():
            raise ValueError("Category ID cannot be empty")
        object.__setattr__(self, "value", str(self.value).strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubCategoryId(ValueObject):
    """Strongly-typed sub-category identifier."""

    value: str

    def __post_init__(self) -> None:
        """Validate sub-category ID format."""
        if not str(self.value).strip():
            raise ValueError("Sub-category ID cannot be empty")
        object.__setattr__(self, "value", str(self.value).strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProductId(ValueObject):
    """Strongly-typed product identifier."""

    value: str

    def __post_init__(self) -> None:
        """Validate product ID format."""
        if not str(self.value).strip():
            raise ValueError("Product ID cannot be empty")
        object.__setattr__(self, "value", str(self.value).strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VariantId(ValueObject):
    """Strongly-typed variant identifier."""

    value: str

    def __post_init__(self) -> None:
        """Validate variant ID format."""
        if not str(self.value).strip():
            raise ValueError("Variant ID cannot be empty")
        object.__setattr__(self, "value", str(self.value).strip())

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Entity Keys
# ============================================================================


class EntityKind(str, Enum):
    """Kinds of catalog entities the admin console can mutate."""

    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    PRODUCT = "product"
    VARIANT = "variant"


@dataclass(frozen=True)
class EntityKey(ValueObject):
    """Identifies one entity for mutation bookkeeping.

    Entities that do not exist on the server yet are keyed by a
    client-side draft identifier (see ``draft``) so that a create form
    cannot be submitted twice while the first request is in flight.

    Attributes:
        kind: Entity kind.
        id: Server identifier, or a ``draft-`` prefixed client identifier.
    """

    kind: EntityKind
    id: str

    @classmethod
    def draft(cls, kind: EntityKind) -> Self:
        """Create a key for an entity that has not been created yet.

        Args:
            kind: Entity kind.

        Returns:
            EntityKey with a random draft identifier.
        """
        return cls(kind=kind, id=f"draft-{uuid4()}")

    @classmethod
    def of(cls, identifier: CategoryId | SubCategoryId | ProductId | VariantId) -> Self:
        """Create a key from a typed identifier.

        Args:
            identifier: Typed entity identifier.

        Returns:
            EntityKey for that entity.
        """
        kind = {
            CategoryId: EntityKind.CATEGORY,
            SubCategoryId: EntityKind.SUBCATEGORY,
            ProductId: EntityKind.PRODUCT,
            VariantId: EntityKind.VARIANT,
        }[type(identifier)]
        return cls(kind=kind, id=str(identifier))

    @property
    def is_draft(self) -> bool:
        """Check whether the key refers to an entity not yet created."""
        return self.id.startswith("draft-")

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


# ============================================================================
# Price Value Object
# ============================================================================


_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Price(ValueObject):
    """A positive monetary amount with two fractional digits.

    The store runs in a single currency, so only the amount is kept.
    Amounts are quantized with ROUND_HALF_UP on construction.

    Attributes:
        amount: Decimal amount in major units.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        """Quantize and validate the amount."""
        amount = self.amount
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        if not amount.is_finite():
            raise InvalidPriceError(amount)
        amount = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise InvalidPriceError(amount)
        object.__setattr__(self, "amount", amount)

    @classmethod
    def of(cls, amount: Decimal | str | int | float) -> Self:
        """Create a price from any numeric representation.

        Floats go through ``str`` first so that 19.99 stays 19.99.

        Args:
            amount: Amount in major units.

        Returns:
            Price instance.

        Raises:
            InvalidPriceError: If the amount is not positive.
        """
        return cls(amount=Decimal(str(amount)))

    def __str__(self) -> str:
        """Return formatted string representation (e.g. '$12.99')."""
        return f"${self.amount:.2f}"
