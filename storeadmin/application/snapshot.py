"""In-memory catalog snapshot.

One screen session works on a single immutable ``CatalogSnapshot``.
The mutation coordinator is its only writer: each committed mutation
or completed load builds a new snapshot and swaps it into the
``SnapshotHolder`` in one step. Readers hold on to whichever snapshot
they fetched and never see a half-applied change.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Union

import structlog

from storeadmin.domain.entities import Category, Product, SubCategory, Variant
from storeadmin.domain.value_objects import (
    CategoryId,
    EntityKey,
    EntityKind,
    ProductId,
    SubCategoryId,
    VariantId,
)

logger = structlog.get_logger()

CatalogEntity = Union[Category, SubCategory, Product, Variant]

_TABLES: dict[EntityKind, str] = {
    EntityKind.CATEGORY: "categories",
    EntityKind.SUBCATEGORY: "subcategories",
    EntityKind.PRODUCT: "products",
    EntityKind.VARIANT: "variants",
}


def entity_key_for(entity: CatalogEntity) -> EntityKey:
    """Get the mutation key of a catalog entity."""
    return EntityKey.of(entity.id)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable view of the loaded catalog.

    Entities are stored by their string identifier. Every ``with_*`` /
    ``without`` method returns a new snapshot.
    """

    categories: dict[str, Category] = field(default_factory=dict)
    subcategories: dict[str, SubCategory] = field(default_factory=dict)
    products: dict[str, Product] = field(default_factory=dict)
    variants: dict[str, Variant] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def category(self, category_id: CategoryId) -> Category | None:
        return self.categories.get(str(category_id))

    def subcategory(self, subcategory_id: SubCategoryId) -> SubCategory | None:
        return self.subcategories.get(str(subcategory_id))

    def product(self, product_id: ProductId) -> Product | None:
        return self.products.get(str(product_id))

    def variant(self, variant_id: VariantId) -> Variant | None:
        return self.variants.get(str(variant_id))

    def subcategories_of(self, category_id: CategoryId) -> list[SubCategory]:
        """Loaded sub-categories whose parent is ``category_id``."""
        return [s for s in self.subcategories.values() if s.category_id == category_id]

    def variants_of(self, product_id: ProductId) -> list[Variant]:
        """Loaded variants of ``product_id``."""
        return [v for v in self.variants.values() if v.product_id == product_id]

    def get(self, key: EntityKey) -> CatalogEntity | None:
        """Look an entity up by its mutation key."""
        return self._table(key.kind).get(key.id)

    # ------------------------------------------------------------------
    # Copy-on-write updates
    # ------------------------------------------------------------------

    def with_entity(self, entity: CatalogEntity) -> "CatalogSnapshot":
        """Insert or replace one entity wholesale.

        A new or moved sub-category is also listed on its parent.
        """
        key = entity_key_for(entity)
        snapshot = self._replace_table(key.kind, {**self._table(key.kind), key.id: entity})

        if isinstance(entity, SubCategory):
            previous = self.subcategories.get(key.id)
            if previous is not None and previous.category_id != entity.category_id:
                snapshot = snapshot._unlist_subcategory(previous)
            parent = snapshot.category(entity.category_id)
            if parent is not None and entity.id not in parent.subcategory_ids:
                snapshot = snapshot._put_category(
                    replace(parent, subcategory_ids=parent.subcategory_ids + (entity.id,))
                )
        return snapshot

    def without(self, key: EntityKey) -> "CatalogSnapshot":
        """Remove one entity, if present."""
        table = dict(self._table(key.kind))
        removed = table.pop(key.id, None)
        snapshot = self._replace_table(key.kind, table)
        if isinstance(removed, SubCategory):
            snapshot = snapshot._unlist_subcategory(removed)
        return snapshot

    def with_categories(
        self,
        categories: Iterable[Category],
        subcategories: Iterable[SubCategory],
    ) -> "CatalogSnapshot":
        """Replace the whole category hierarchy with a fresh listing."""
        return replace(
            self,
            categories={str(c.id): c for c in categories},
            subcategories={str(s.id): s for s in subcategories},
        )

    def with_variants(self, product_id: ProductId, variants: Iterable[Variant]) -> "CatalogSnapshot":
        """Replace every variant of one product with a fresh listing."""
        kept = {k: v for k, v in self.variants.items() if v.product_id != product_id}
        kept.update({str(v.id): v for v in variants})
        return replace(self, variants=kept)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _table(self, kind: EntityKind) -> dict[str, CatalogEntity]:
        return getattr(self, _TABLES[kind])

    def _replace_table(self, kind: EntityKind, table: dict) -> "CatalogSnapshot":
        return replace(self, **{_TABLES[kind]: table})

    def _put_category(self, category: Category) -> "CatalogSnapshot":
        return replace(self, categories={**self.categories, str(category.id): category})

    def _unlist_subcategory(self, sub: SubCategory) -> "CatalogSnapshot":
        parent = self.category(sub.category_id)
        if parent is None or sub.id not in parent.subcategory_ids:
            return self
        return self._put_category(
            replace(
                parent,
                subcategory_ids=tuple(s for s in parent.subcategory_ids if s != sub.id),
            )
        )


class SnapshotHolder:
    """Owns the current snapshot of one screen session.

    Passed by reference into the mutation coordinator, which swaps in a
    new snapshot after every commit. Everyone else only reads
    ``current``.
    """

    def __init__(self, initial: CatalogSnapshot | None = None) -> None:
        self._current = initial or CatalogSnapshot()
        self._version = 0

    @property
    def current(self) -> CatalogSnapshot:
        return self._current

    @property
    def version(self) -> int:
        """Number of swaps performed so far."""
        return self._version

    def swap(self, snapshot: CatalogSnapshot) -> CatalogSnapshot:
        """Replace the current snapshot.

        Args:
            snapshot: The new snapshot.

        Returns:
            The snapshot that was replaced.
        """
        previous = self._current
        self._current = snapshot
        self._version += 1
        logger.debug("Catalog snapshot swapped", version=self._version)
        return previous
