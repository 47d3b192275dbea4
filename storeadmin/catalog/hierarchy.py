"""Hierarchy resolver.

Computes the effective state of a loaded catalog tree: which
sub-categories are visible, which variant is featured, what a variant
costs and how entities are ordered on screen. Everything here is
derived on read; nothing is written back to the entities.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

import structlog

from storeadmin.domain.entities import Category, Product, SubCategory, Variant
from storeadmin.domain.value_objects import Price

logger = structlog.get_logger()


class Displayable(Protocol):
    """Anything listed in display order."""

    @property
    def display_order(self) -> int: ...

    @property
    def name(self) -> str: ...

    @property
    def id(self) -> object: ...


D = TypeVar("D", bound=Displayable)


# ============================================================================
# View Models
# ============================================================================


@dataclass(frozen=True)
class VisibleSubCategory:
    """A sub-category annotated with its effective visibility."""

    subcategory: SubCategory
    visible: bool


@dataclass(frozen=True)
class CategoryNode:
    """A category with its sorted, visibility-annotated children."""

    category: Category
    children: tuple[VisibleSubCategory, ...]

    @property
    def visible_children(self) -> list[SubCategory]:
        return [child.subcategory for child in self.children if child.visible]


@dataclass(frozen=True)
class CategoryDeleteWarning:
    """Deleting this category may affect its sub-categories.

    What the server does with them (cascade, orphan or refuse) is up to
    the Catalog Service; the console only warns.
    """

    category: Category
    subcategory_count: int

    @property
    def message(self) -> str:
        noun = "sub-category" if self.subcategory_count == 1 else "sub-categories"
        return (
            f"'{self.category.name}' still has {self.subcategory_count} {noun}. "
            f"Deleting it may also remove or detach them."
        )


# ============================================================================
# Resolution
# ============================================================================


def resolve_effective_visibility(
    category: Category,
    subcategories: Iterable[SubCategory],
) -> list[VisibleSubCategory]:
    """Annotate sub-categories of ``category`` with effective visibility.

    A sub-category is visible only if both it and its parent are
    enabled. Stored flags are left untouched.

    Args:
        category: Parent category.
        subcategories: Its sub-categories.

    Returns:
        One entry per sub-category, in input order.
    """
    return [
        VisibleSubCategory(subcategory=sub, visible=sub.is_enabled and category.is_enabled)
        for sub in subcategories
    ]


def resolve_effective_price(product: Product, variant: Variant | None) -> Price:
    """Price a variant of ``product``.

    Args:
        product: Owning product.
        variant: Variant being priced, or None for the product itself.

    Returns:
        The variant's override if it has one, else the product price.
    """
    if variant is not None and variant.price_override is not None:
        return variant.price_override
    return product.price


def resolve_effective_stock(product: Product, variants: Iterable[Variant]) -> int:
    """Stock shown for a product.

    A product sold as variants counts the stock of its available
    variants; otherwise, or while no variants are loaded, the
    product-level stock is used.
    """
    variants = list(variants)
    if not product.has_variants or not variants:
        return product.stock_quantity
    return sum(v.stock_quantity for v in variants if v.is_available)


def resolve_featured_variant(variants: Iterable[Variant]) -> Variant | None:
    """Find the featured variant of a product.

    More than one featured variant means stale or concurrently edited
    server data. In that case the one shown first (lowest display
    order, then identifier) wins and a consistency warning is logged.

    Args:
        variants: Variants of one product.

    Returns:
        The featured variant, or None.
    """
    featured = [v for v in variants if v.is_featured]
    if not featured:
        return None
    if len(featured) > 1:
        logger.warning(
            "Multiple featured variants",
            product_id=str(featured[0].product_id),
            variant_ids=[str(v.id) for v in featured],
        )
    return min(featured, key=lambda v: (v.display_order, str(v.id)))


def sort_for_display(entities: Iterable[D]) -> list[D]:
    """Order entities for display.

    Sorts by display order, then name, then identifier, all ascending.

    Args:
        entities: Categories, sub-categories or variants.

    Returns:
        A new sorted list.
    """
    return sorted(entities, key=lambda e: (e.display_order, e.name, str(e.id)))


def filter_enabled(categories: Iterable[Category], include_disabled: bool) -> list[Category]:
    """Apply the ``include_disabled`` list filter to loaded categories."""
    if include_disabled:
        return list(categories)
    return [c for c in categories if c.is_enabled]


def build_category_tree(
    categories: Iterable[Category],
    subcategories: Iterable[SubCategory],
    include_disabled: bool = True,
) -> list[CategoryNode]:
    """Build the category list view model.

    Sub-categories are attached to their parent by ``category_id``;
    sub-categories whose parent is not loaded are dropped.

    Args:
        categories: Loaded categories.
        subcategories: Loaded sub-categories of any parent.
        include_disabled: Whether disabled categories are listed.

    Returns:
        Sorted category nodes with sorted, annotated children.
    """
    children: dict[str, list[SubCategory]] = {}
    for sub in subcategories:
        children.setdefault(str(sub.category_id), []).append(sub)

    return [
        CategoryNode(
            category=category,
            children=tuple(
                resolve_effective_visibility(
                    category, sort_for_display(children.get(str(category.id), []))
                )
            ),
        )
        for category in sort_for_display(filter_enabled(categories, include_disabled))
    ]


def category_delete_warning(
    category: Category,
    subcategories: Sequence[SubCategory] = (),
) -> CategoryDeleteWarning | None:
    """Warn before deleting a category that still has members.

    Membership is the union of the category's listed sub-category ids
    and loaded sub-categories pointing at it. Never blocks deletion.

    Args:
        category: Category about to be deleted.
        subcategories: Loaded sub-categories of any parent.

    Returns:
        A warning, or None if the category has no members.
    """
    members = {str(sid) for sid in category.subcategory_ids}
    members.update(str(sub.id) for sub in subcategories if sub.category_id == category.id)
    if not members:
        return None
    return CategoryDeleteWarning(category=category, subcategory_count=len(members))
