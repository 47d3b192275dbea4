"""Base classes for domain layer.

Provides the foundational abstraction shared by catalog value types.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. Catalog entities received from the server are
    modelled as value objects too: an edit never mutates an entity in
    place, it produces a new value that replaces the old one wholesale.

    Example:
        @dataclass(frozen=True)
        class Price(ValueObject):
            amount: Decimal
    """

    pass
