"""Tests for the catalog snapshot."""

from storeadmin.application import CatalogSnapshot, SnapshotHolder
from storeadmin.domain import CategoryId, EntityKey, ProductId, SubCategoryId, VariantId
from tests.factories import make_category, make_product, make_subcategory, make_variant


class TestCatalogSnapshot:
    """Tests for CatalogSnapshot."""

    def test_with_entity_returns_new_snapshot(self) -> None:
        """The original snapshot is left unchanged."""
        empty = CatalogSnapshot()
        snapshot = empty.with_entity(make_product())

        assert empty.product(ProductId("p1")) is None
        assert snapshot.product(ProductId("p1")).name == "T-Shirt"

    def test_with_entity_replaces_wholesale(self) -> None:
        """A second value for the same id replaces the first."""
        snapshot = CatalogSnapshot().with_entity(make_variant(stock_quantity=1))
        snapshot = snapshot.with_entity(make_variant(stock_quantity=9))

        assert snapshot.variant(VariantId("v1")).stock_quantity == 9
        assert len(snapshot.variants) == 1

    def test_new_subcategory_is_listed_on_parent(self) -> None:
        """Adding a sub-category updates its parent's member list."""
        snapshot = CatalogSnapshot().with_entity(make_category("1"))
        snapshot = snapshot.with_entity(make_subcategory("10", category_id="1"))

        assert snapshot.category(CategoryId("1")).subcategory_ids == (SubCategoryId("10"),)

    def test_moved_subcategory_changes_parent(self) -> None:
        """Moving a sub-category unlists it from the old parent."""
        snapshot = CatalogSnapshot().with_categories(
            [make_category("1", subcategory_ids=["10"]), make_category("2", name="Home")],
            [make_subcategory("10", category_id="1")],
        )

        snapshot = snapshot.with_entity(make_subcategory("10", category_id="2"))

        assert snapshot.category(CategoryId("1")).subcategory_ids == ()
        assert snapshot.category(CategoryId("2")).subcategory_ids == (SubCategoryId("10"),)

    def test_without_removes_entity_and_membership(self) -> None:
        """Deleting a sub-category also removes it from its parent."""
        snapshot = CatalogSnapshot().with_categories(
            [make_category("1", subcategory_ids=["10"])],
            [make_subcategory("10")],
        )

        snapshot = snapshot.without(EntityKey.of(SubCategoryId("10")))

        assert snapshot.subcategory(SubCategoryId("10")) is None
        assert not snapshot.category(CategoryId("1")).has_subcategories

    def test_without_unknown_key_is_noop(self) -> None:
        """Removing something that is not loaded changes nothing."""
        snapshot = CatalogSnapshot().with_entity(make_product())

        assert snapshot.without(EntityKey.of(ProductId("nope"))) == snapshot

    def test_with_variants_replaces_one_product(self) -> None:
        """Variants of other products survive a reload."""
        snapshot = CatalogSnapshot()
        snapshot = snapshot.with_entity(make_variant("a", product_id="p1"))
        snapshot = snapshot.with_entity(make_variant("b", product_id="p2"))

        snapshot = snapshot.with_variants(ProductId("p1"), [make_variant("c", product_id="p1")])

        assert {str(v.id) for v in snapshot.variants_of(ProductId("p1"))} == {"c"}
        assert {str(v.id) for v in snapshot.variants_of(ProductId("p2"))} == {"b"}

    def test_get_by_key(self) -> None:
        """Entities can be looked up by their mutation key."""
        variant = make_variant()
        snapshot = CatalogSnapshot().with_entity(variant)

        assert snapshot.get(EntityKey.of(variant.id)) == variant


class TestSnapshotHolder:
    """Tests for SnapshotHolder."""

    def test_swap_returns_previous(self) -> None:
        """swap replaces the current snapshot in one step."""
        holder = SnapshotHolder()
        first = holder.current
        second = first.with_entity(make_product())

        assert holder.swap(second) is first
        assert holder.current is second
        assert holder.version == 1

    def test_reader_keeps_old_snapshot(self) -> None:
        """A snapshot fetched before a swap never changes."""
        holder = SnapshotHolder()
        seen = holder.current

        holder.swap(seen.with_entity(make_product()))

        assert seen.products == {}
