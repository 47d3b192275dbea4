"""Catalog Service boundary.

The remote CRUD API is an injected collaborator. The core only sees
this protocol: async calls that either return domain entities or raise
``CatalogServiceError`` carrying the HTTP status (or None when no
response was received). The mutation coordinator classifies those
failures; nothing else in the core calls the service.
"""

from dataclasses import dataclass, field
from typing import Protocol

from storeadmin.domain.entities import Category, Product, SubCategory, Variant
from storeadmin.domain.requests import CategoryRequest, ProductRequest, VariantRequest
from storeadmin.domain.value_objects import CategoryId, ProductId, SubCategoryId, VariantId


class CatalogServiceError(Exception):
    """Failure reported by the Catalog Service or its transport.

    Attributes:
        message: Server message, or transport error description.
        status_code: HTTP status code, None if no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"[{status_code}] {message}")

    @property
    def is_transient(self) -> bool:
        """Network failures and 5xx responses may succeed on retry."""
        return self.status_code is None or self.status_code >= 500


@dataclass
class CategoryListing:
    """Categories with their embedded sub-categories."""

    categories: list[Category] = field(default_factory=list)
    subcategories: list[SubCategory] = field(default_factory=list)


class CatalogService(Protocol):
    """Remote catalog CRUD operations consumed by the core."""

    async def list_categories(self, include_disabled: bool = False) -> CategoryListing: ...

    async def get_category(self, category_id: CategoryId) -> Category: ...

    async def create_category(self, request: CategoryRequest) -> Category: ...

    async def update_category(
        self, category_id: CategoryId, request: CategoryRequest
    ) -> Category: ...

    async def delete_category(self, category_id: CategoryId) -> None: ...

    async def create_subcategory(
        self, category_id: CategoryId, request: CategoryRequest
    ) -> SubCategory: ...

    async def update_subcategory(
        self, subcategory_id: SubCategoryId, request: CategoryRequest
    ) -> SubCategory: ...

    async def delete_subcategory(self, subcategory_id: SubCategoryId) -> None: ...

    async def get_product(self, product_id: ProductId) -> Product: ...

    async def create_product(self, request: ProductRequest) -> Product: ...

    async def update_product(self, product_id: ProductId, request: ProductRequest) -> Product: ...

    async def delete_product(self, product_id: ProductId) -> None: ...

    async def list_variants(self, product_id: ProductId) -> list[Variant]: ...

    async def get_variant(self, product_id: ProductId, variant_id: VariantId) -> Variant: ...

    async def create_variant(self, product_id: ProductId, request: VariantRequest) -> Variant: ...

    async def update_variant(
        self, product_id: ProductId, variant_id: VariantId, request: VariantRequest
    ) -> Variant: ...

    async def delete_variant(self, product_id: ProductId, variant_id: VariantId) -> None: ...
