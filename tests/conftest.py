"""Pytest configuration and fixtures for the catalog core tests."""

import asyncio
import itertools
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import pytest

from storeadmin.application import (
    CatalogServiceError,
    CategoryListing,
    MutationCoordinator,
    SnapshotHolder,
)
from storeadmin.domain import (
    DEFAULT_CATEGORY_ICON,
    DEFAULT_SUBCATEGORY_ICON,
    Category,
    CategoryId,
    CategoryRequest,
    Product,
    ProductId,
    ProductRequest,
    SubCategory,
    SubCategoryId,
    Variant,
    VariantId,
    VariantRequest,
)


class Pause:
    """Holds a service call open until ``release`` is set."""

    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self.release = asyncio.Event()


class FakeCatalogService:
    """In-memory Catalog Service.

    Calls can be scripted to fail (``fail``) or to block until
    released (``pause``). Every call is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self.categories: dict[str, Category] = {}
        self.subcategories: dict[str, SubCategory] = {}
        self.products: dict[str, Product] = {}
        self.variants: dict[str, Variant] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._failures: dict[str, tuple[Exception, Callable[..., bool] | None]] = {}
        self._pauses: dict[str, Pause] = {}
        self._ids = itertools.count(100)

    # Scripting ------------------------------------------------------------

    def fail(
        self,
        method: str,
        error: Exception,
        when: Callable[..., bool] | None = None,
    ) -> None:
        """Make ``method`` raise ``error`` (only for matching args if ``when`` is given)."""
        self._failures[method] = (error, when)

    def heal(self, method: str) -> None:
        """Stop failing ``method``."""
        self._failures.pop(method, None)

    def pause(self, method: str) -> Pause:
        """Block ``method`` until the returned pause is released."""
        pause = Pause()
        self._pauses[method] = pause
        return pause

    def seed(self, *entities: Any) -> None:
        """Store entities as if they already existed on the server."""
        for entity in entities:
            table = {
                Category: self.categories,
                SubCategory: self.subcategories,
                Product: self.products,
                Variant: self.variants,
            }[type(entity)]
            table[str(entity.id)] = entity

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    async def _enter(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        pause = self._pauses.get(method)
        if pause is not None:
            pause.entered.set()
            await pause.release.wait()
        failure = self._failures.get(method)
        if failure is not None:
            error, when = failure
            if when is None or when(*args):
                raise error

    def _next_id(self) -> str:
        return str(next(self._ids))

    @staticmethod
    def _require(table: dict[str, Any], key: object) -> Any:
        if str(key) not in table:
            raise CatalogServiceError("Not found", 404)
        return table[str(key)]

    # Categories -----------------------------------------------------------

    async def list_categories(self, include_disabled: bool = False) -> CategoryListing:
        await self._enter("list_categories", include_disabled)
        categories = [c for c in self.categories.values() if include_disabled or c.is_enabled]
        ids = {c.id for c in categories}
        return CategoryListing(
            categories=categories,
            subcategories=[s for s in self.subcategories.values() if s.category_id in ids],
        )

    async def get_category(self, category_id: CategoryId) -> Category:
        await self._enter("get_category", category_id)
        return self._require(self.categories, category_id)

    async def create_category(self, request: CategoryRequest) -> Category:
        await self._enter("create_category", request)
        category = Category(
            id=CategoryId(self._next_id()),
            name=request.name,
            description=request.description,
            icon_class=request.icon_class or DEFAULT_CATEGORY_ICON,
            is_enabled=request.is_enabled,
            display_order=request.display_order or 0,
        )
        self.categories[str(category.id)] = category
        return category

    async def update_category(self, category_id: CategoryId, request: CategoryRequest) -> Category:
        await self._enter("update_category", category_id, request)
        category = replace(
            self._require(self.categories, category_id),
            name=request.name,
            description=request.description,
            icon_class=request.icon_class or DEFAULT_CATEGORY_ICON,
            is_enabled=request.is_enabled,
            display_order=request.display_order or 0,
        )
        self.categories[str(category_id)] = category
        return category

    async def delete_category(self, category_id: CategoryId) -> None:
        await self._enter("delete_category", category_id)
        self._require(self.categories, category_id)
        del self.categories[str(category_id)]

    # Sub-categories -------------------------------------------------------

    async def create_subcategory(
        self, category_id: CategoryId, request: CategoryRequest
    ) -> SubCategory:
        await self._enter("create_subcategory", category_id, request)
        parent = self._require(self.categories, category_id)
        sub = SubCategory(
            id=SubCategoryId(self._next_id()),
            name=request.name,
            category_id=category_id,
            description=request.description,
            icon_class=request.icon_class or DEFAULT_SUBCATEGORY_ICON,
            is_enabled=request.is_enabled,
            display_order=request.display_order or 0,
            category_name=parent.name,
        )
        self.subcategories[str(sub.id)] = sub
        self.categories[str(category_id)] = replace(
            parent, subcategory_ids=parent.subcategory_ids + (sub.id,)
        )
        return sub

    async def update_subcategory(
        self, subcategory_id: SubCategoryId, request: CategoryRequest
    ) -> SubCategory:
        await self._enter("update_subcategory", subcategory_id, request)
        sub = replace(
            self._require(self.subcategories, subcategory_id),
            name=request.name,
            description=request.description,
            icon_class=request.icon_class or DEFAULT_SUBCATEGORY_ICON,
            is_enabled=request.is_enabled,
            display_order=request.display_order or 0,
        )
        self.subcategories[str(subcategory_id)] = sub
        return sub

    async def delete_subcategory(self, subcategory_id: SubCategoryId) -> None:
        await self._enter("delete_subcategory", subcategory_id)
        self._require(self.subcategories, subcategory_id)
        del self.subcategories[str(subcategory_id)]

    # Products -------------------------------------------------------------

    async def get_product(self, product_id: ProductId) -> Product:
        await self._enter("get_product", product_id)
        return self._require(self.products, product_id)

    async def create_product(self, request: ProductRequest) -> Product:
        await self._enter("create_product", request)
        product = Product(
            id=ProductId(self._next_id()),
            name=request.name,
            price=request.price,
            stock_quantity=request.stock_quantity or 0,
            description=request.description,
            category=request.category,
            image_url=request.image_url,
            is_active=request.is_active,
            has_variants=request.has_variants,
        )
        self.products[str(product.id)] = product
        return product

    async def update_product(self, product_id: ProductId, request: ProductRequest) -> Product:
        await self._enter("update_product", product_id, request)
        product = replace(
            self._require(self.products, product_id),
            name=request.name,
            price=request.price,
            stock_quantity=request.stock_quantity or 0,
            description=request.description,
            category=request.category,
            image_url=request.image_url,
            is_active=request.is_active,
            has_variants=request.has_variants,
        )
        self.products[str(product_id)] = product
        return product

    async def delete_product(self, product_id: ProductId) -> None:
        await self._enter("delete_product", product_id)
        self._require(self.products, product_id)
        del self.products[str(product_id)]

    # Variants -------------------------------------------------------------

    async def list_variants(self, product_id: ProductId) -> list[Variant]:
        await self._enter("list_variants", product_id)
        return [v for v in self.variants.values() if v.product_id == product_id]

    async def get_variant(self, product_id: ProductId, variant_id: VariantId) -> Variant:
        await self._enter("get_variant", product_id, variant_id)
        return self._require(self.variants, variant_id)

    async def create_variant(self, product_id: ProductId, request: VariantRequest) -> Variant:
        await self._enter("create_variant", product_id, request)
        variant = self._variant_from(VariantId(self._next_id()), product_id, request)
        self.variants[str(variant.id)] = variant
        return variant

    async def update_variant(
        self, product_id: ProductId, variant_id: VariantId, request: VariantRequest
    ) -> Variant:
        await self._enter("update_variant", product_id, variant_id, request)
        self._require(self.variants, variant_id)
        variant = self._variant_from(variant_id, product_id, request)
        self.variants[str(variant_id)] = variant
        return variant

    async def delete_variant(self, product_id: ProductId, variant_id: VariantId) -> None:
        await self._enter("delete_variant", product_id, variant_id)
        self._require(self.variants, variant_id)
        del self.variants[str(variant_id)]

    @staticmethod
    def _variant_from(
        variant_id: VariantId, product_id: ProductId, request: VariantRequest
    ) -> Variant:
        return Variant(
            id=variant_id,
            product_id=product_id,
            name=request.name,
            stock_quantity=request.stock_quantity or 0,
            sku=request.sku,
            image_url=request.image_url,
            price_override=request.price_override,
            is_available=request.is_available,
            is_featured=request.is_featured,
            display_order=request.display_order or 0,
        )


@pytest.fixture
def service() -> FakeCatalogService:
    """Create an empty in-memory Catalog Service."""
    return FakeCatalogService()


@pytest.fixture
def holder() -> SnapshotHolder:
    """Create an empty snapshot holder."""
    return SnapshotHolder()


@pytest.fixture
def coordinator(service: FakeCatalogService, holder: SnapshotHolder) -> MutationCoordinator:
    """Create a coordinator wired to the fake service."""
    return MutationCoordinator(service, holder)
