"""Load state of asynchronously fetched resources.

Each list the console shows (categories, the variants of a product,
a single product) moves through Loading, then Loaded or Failed.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from storeadmin.domain.exceptions import MutationError

T = TypeVar("T")


@dataclass(frozen=True)
class Loading:
    """Request in flight."""

    resource: str


@dataclass(frozen=True)
class Loaded(Generic[T]):
    """Request succeeded; ``data`` is the resolved view model."""

    resource: str
    data: T


@dataclass(frozen=True)
class Failed:
    """Request failed with a classified service error."""

    resource: str
    error: MutationError

    @property
    def message(self) -> str:
        return self.error.message


ResourceState = Union[Loading, Loaded[Any], Failed]


def categories_resource() -> str:
    return "categories"


def variants_resource(product_id: object) -> str:
    return f"variants:{product_id}"


def product_resource(product_id: object) -> str:
    return f"product:{product_id}"
