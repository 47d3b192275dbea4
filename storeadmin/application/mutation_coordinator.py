"""Mutation coordinator.

Sends validated catalog mutations to the Catalog Service and
reconciles the results into the session's catalog snapshot.

Provides:
- At most one outstanding mutation per entity key
- Failure classification (transient vs. rejected by the server)
- Wholesale replacement of entities with the server's canonical value
- Sequential companion writes for featured-variant exclusivity
- Completion of in-flight writes even if the caller goes away
- Status and resource-state streams for the presentation layer
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import structlog

from storeadmin.application.catalog_service import CatalogService, CatalogServiceError
from storeadmin.application.resource_state import (
    Failed,
    Loaded,
    Loading,
    ResourceState,
    categories_resource,
    product_resource,
    variants_resource,
)
from storeadmin.application.snapshot import CatalogEntity, SnapshotHolder
from storeadmin.catalog.hierarchy import (
    CategoryDeleteWarning,
    CategoryNode,
    build_category_tree,
    category_delete_warning,
    sort_for_display,
)
from storeadmin.catalog.validation import (
    ClearFeaturedInstruction,
    SkuScope,
    ValidationResult,
    validate_variant,
)
from storeadmin.domain.entities import Product, Variant
from storeadmin.domain.exceptions import (
    ConcurrentMutationError,
    MutationError,
    PartialReconciliationError,
    RejectedByServiceError,
    TransientServiceError,
)
from storeadmin.domain.requests import VariantForm, VariantRequest
from storeadmin.domain.state_machines import (
    MutationKind,
    MutationStatus,
    validate_mutation_transition,
)
from storeadmin.domain.value_objects import (
    CategoryId,
    EntityKey,
    EntityKind,
    ProductId,
    SubCategoryId,
    VariantId,
)
from storeadmin.infrastructure.config import settings

logger = structlog.get_logger()

StatusListener = Callable[[EntityKey, MutationStatus], None]
ResourceListener = Callable[[ResourceState], None]


def classify_service_error(target: str, error: CatalogServiceError) -> MutationError:
    """Map a raw service failure onto the mutation error taxonomy.

    Args:
        target: Entity key or resource name the request was about.
        error: Failure raised by the Catalog Service.

    Returns:
        TransientServiceError for network failures and 5xx,
        RejectedByServiceError (message verbatim) for 4xx.
    """
    if error.is_transient:
        return TransientServiceError(target, error.message, error.status_code)
    return RejectedByServiceError(target, error.message, error.status_code)  # type: ignore[arg-type]


class MutationCoordinator:
    """Single writer of the catalog snapshot.

    Example usage:
        holder = SnapshotHolder()
        coordinator = MutationCoordinator(service, holder)

        result = validate_category(form)
        if result.is_valid:
            category = await coordinator.submit(
                EntityKey.draft(EntityKind.CATEGORY),
                MutationKind.CREATE,
                result.value,
            )
    """

    def __init__(
        self,
        service: CatalogService,
        snapshot: SnapshotHolder,
        sku_scope: SkuScope | None = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            service: Catalog Service collaborator.
            snapshot: Holder of the session snapshot this coordinator writes.
            sku_scope: SKU uniqueness rule. Defaults to the configured scope.
        """
        self._service = service
        self._snapshot = snapshot
        self._sku_scope = sku_scope if sku_scope is not None else settings.sku_uniqueness_scope
        self._statuses: dict[EntityKey, MutationStatus] = {}
        self._in_flight: dict[EntityKey, asyncio.Task[Any]] = {}
        self._status_listeners: list[StatusListener] = []
        self._resource_listeners: list[ResourceListener] = []

    @property
    def snapshot(self) -> SnapshotHolder:
        return self._snapshot

    # ========================================================================
    # Status stream
    # ========================================================================

    def status(self, key: EntityKey) -> MutationStatus:
        """Get the current mutation status of an entity."""
        return self._statuses.get(key, MutationStatus.IDLE)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Receive every mutation status transition.

        Args:
            listener: Called with (entity key, new status).

        Returns:
            Function that removes the listener.
        """
        self._status_listeners.append(listener)
        return lambda: self._status_listeners.remove(listener)

    def subscribe_resources(self, listener: ResourceListener) -> Callable[[], None]:
        """Receive every resource load state change.

        Args:
            listener: Called with the new resource state.

        Returns:
            Function that removes the listener.
        """
        self._resource_listeners.append(listener)
        return lambda: self._resource_listeners.remove(listener)

    def acknowledge(self, key: EntityKey) -> None:
        """Reset a finished mutation to IDLE (the next user action)."""
        if self.status(key).is_terminal():
            self._transition(key, MutationStatus.IDLE)

    def _transition(self, key: EntityKey, target: MutationStatus) -> None:
        validate_mutation_transition(str(key), self.status(key), target)
        if target == MutationStatus.IDLE:
            self._statuses.pop(key, None)
        else:
            self._statuses[key] = target
        for listener in list(self._status_listeners):
            listener(key, target)

    def _publish(self, state: ResourceState) -> None:
        for listener in list(self._resource_listeners):
            listener(state)

    # ========================================================================
    # Mutations
    # ========================================================================

    async def submit(
        self,
        key: EntityKey,
        operation: MutationKind,
        payload: Any = None,
        *,
        parent: CategoryId | ProductId | None = None,
    ) -> CatalogEntity | None:
        """Submit one validated mutation.

        The payload is not re-validated. If the caller is cancelled
        while the request is in flight, the request still completes and
        its result is still committed to the snapshot.
        A committed draft key goes back to IDLE once its COMMITTED status
        has been published; failed drafts keep REJECTED until retried or
        acknowledged.

        Args:
            key: Entity being mutated (a draft key for creates).
            operation: Create, update or delete.
            payload: Validated request; unused for deletes.
            parent: Parent category for sub-category creates, owning
                product for variant mutations.

        Returns:
            The server's canonical entity, or None for deletes.

        Raises:
            ConcurrentMutationError: A mutation for ``key`` is already in flight.
            TransientServiceError: Network failure or 5xx.
            RejectedByServiceError: 4xx from the Catalog Service.
        """
        if self.status(key).is_in_flight():
            logger.warning("Rejected concurrent mutation", entity=str(key), operation=operation.value)
            raise ConcurrentMutationError(str(key))

        call = self._dispatch(key, operation, payload, parent)

        self.acknowledge(key)
        self._transition(key, MutationStatus.SUBMITTING)

        task = asyncio.ensure_future(self._run(key, operation, call))
        self._in_flight[key] = task
        task.add_done_callback(lambda t: self._forget(key, t))
        return await asyncio.shield(task)

    def _forget(self, key: EntityKey, task: asyncio.Task[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # mark the outcome as retrieved even if the caller is gone
            task.exception()

    async def _run(
        self,
        key: EntityKey,
        operation: MutationKind,
        call: Awaitable[CatalogEntity | None],
    ) -> CatalogEntity | None:
        log = logger.bind(entity=str(key), operation=operation.value)
        log.info("Submitting mutation")
        try:
            result = await call
        except CatalogServiceError as e:
            error = classify_service_error(str(key), e)
            self._transition(key, MutationStatus.REJECTED)
            log.warning(
                "Mutation failed",
                error_type=type(error).__name__,
                status_code=e.status_code,
                error=e.message,
            )
            raise error from e
        except Exception:
            self._transition(key, MutationStatus.REJECTED)
            log.exception("Mutation crashed")
            raise

        snapshot = self._snapshot.current
        if operation == MutationKind.DELETE:
            self._snapshot.swap(snapshot.without(key))
        else:
            self._snapshot.swap(snapshot.with_entity(result))  # type: ignore[arg-type]
        self._transition(key, MutationStatus.COMMITTED)
        if key.is_draft:
            # the entity now lives under its server id
            self._statuses.pop(key, None)
        log.info("Mutation committed", result_id=str(result.id) if result is not None else None)
        return result

    def _dispatch(
        self,
        key: EntityKey,
        operation: MutationKind,
        payload: Any,
        parent: CategoryId | ProductId | None,
    ) -> Awaitable[CatalogEntity | None]:
        """Pick the service call for an entity kind and operation."""
        service = self._service

        if key.kind == EntityKind.CATEGORY:
            category_id = CategoryId(key.id)
            if operation == MutationKind.CREATE:
                return service.create_category(payload)
            if operation == MutationKind.UPDATE:
                return service.update_category(category_id, payload)
            return service.delete_category(category_id)

        if key.kind == EntityKind.SUBCATEGORY:
            subcategory_id = SubCategoryId(key.id)
            if operation == MutationKind.CREATE:
                if not isinstance(parent, CategoryId):
                    raise ValueError("Creating a sub-category requires its parent CategoryId")
                return service.create_subcategory(parent, payload)
            if operation == MutationKind.UPDATE:
                return service.update_subcategory(subcategory_id, payload)
            return service.delete_subcategory(subcategory_id)

        if key.kind == EntityKind.PRODUCT:
            product_id = ProductId(key.id)
            if operation == MutationKind.CREATE:
                return service.create_product(payload)
            if operation == MutationKind.UPDATE:
                return service.update_product(product_id, payload)
            return service.delete_product(product_id)

        product = self._variant_parent(key, parent)
        variant_id = VariantId(key.id)
        if operation == MutationKind.CREATE:
            return service.create_variant(product, payload)
        if operation == MutationKind.UPDATE:
            return service.update_variant(product, variant_id, payload)
        return service.delete_variant(product, variant_id)

    def _variant_parent(self, key: EntityKey, parent: CategoryId | ProductId | None) -> ProductId:
        if isinstance(parent, ProductId):
            return parent
        known = self._snapshot.current.get(key)
        if isinstance(known, Variant):
            return known.product_id
        raise ValueError(f"Cannot determine the product of {key}; pass parent=ProductId(...)")

    # ========================================================================
    # Variants and featured exclusivity
    # ========================================================================

    async def submit_variant(
        self,
        key: EntityKey,
        operation: MutationKind,
        payload: VariantRequest,
        instructions: Iterable[ClearFeaturedInstruction] = (),
        *,
        product_id: ProductId,
    ) -> Variant:
        """Save a variant, then clear the featured flag on its siblings.

        Companion writes run one after another, and only once the
        primary write has committed. A failed companion write does not
        roll the primary back.
        Siblings still featured in the snapshot after the primary commits
        are cleared as well, even if the instructions predate them.

        Args:
            key: Variant being saved (a draft key for creates).
            operation: Create or update.
            payload: Validated variant request.
            instructions: Companion instructions from ``validate_variant``.
            product_id: Owning product.

        Returns:
            The canonical primary variant.

        Raises:
            ConcurrentMutationError: The variant already has a mutation in flight.
            TransientServiceError: The primary write failed transiently.
            RejectedByServiceError: The primary write was rejected.
            PartialReconciliationError: The primary committed but at least
                one sibling kept its featured flag.
        """
        committed = await self.submit(key, operation, payload, parent=product_id)
        instructions = self._reconcile_instructions(
            product_id, committed, instructions  # type: ignore[arg-type]
        )

        failures: list[tuple[VariantId, MutationError]] = []
        for instruction in instructions:
            try:
                await self._apply_instruction(product_id, instruction)
            except MutationError as e:
                failures.append((instruction.variant_id, e))

        if failures:
            failed_id, cause = failures[0]
            logger.error(
                "Featured flag not cleared on sibling variants",
                product_id=str(product_id),
                variant_id=str(committed.id),  # type: ignore[union-attr]
                failed_variant_ids=[str(v) for v, _ in failures],
            )
            error = PartialReconciliationError(str(key), str(failed_id), committed, cause)
            error.details["failed_variant_ids"] = [str(v) for v, _ in failures]
            raise error

        return committed  # type: ignore[return-value]

    def _reconcile_instructions(
        self,
        product_id: ProductId,
        committed: Variant,
        instructions: Iterable[ClearFeaturedInstruction],
    ) -> list[ClearFeaturedInstruction]:
        """Add siblings that became featured after the form was validated."""
        planned = list(instructions)
        if not committed.is_featured:
            return planned

        covered = {i.variant_id for i in planned} | {committed.id}
        stale = [
            ClearFeaturedInstruction(v.id)
            for v in self._snapshot.current.variants_of(product_id)
            if v.is_featured and v.id not in covered
        ]
        if stale:
            logger.info(
                "Clearing siblings featured since validation",
                product_id=str(product_id),
                variant_ids=[str(i.variant_id) for i in stale],
            )
        return planned + stale

    async def _apply_instruction(
        self, product_id: ProductId, instruction: ClearFeaturedInstruction
    ) -> None:
        sibling_key = EntityKey.of(instruction.variant_id)
        sibling = self._snapshot.current.variant(instruction.variant_id)
        if sibling is None:
            try:
                sibling = await self._service.get_variant(product_id, instruction.variant_id)
            except CatalogServiceError as e:
                raise classify_service_error(str(sibling_key), e) from e

        changes = {name: False for name in instruction.fields}
        await self.submit(
            sibling_key,
            MutationKind.UPDATE,
            VariantRequest.from_variant(sibling, **changes),
            parent=product_id,
        )

    def validate_variant_form(
        self, form: VariantForm, product_id: ProductId
    ) -> "ValidationResult[VariantRequest]":
        """Validate a variant form against the loaded siblings.

        Uses the coordinator's SKU scope and, for global scope, every
        variant in the snapshot.
        """
        snapshot = self._snapshot.current
        return validate_variant(
            form,
            snapshot.variants_of(product_id),
            sku_scope=self._sku_scope,
            catalog=snapshot.variants.values(),
        )

    # ========================================================================
    # Loads
    # ========================================================================

    async def load_categories(self, include_disabled: bool | None = None) -> ResourceState:
        """Fetch the category hierarchy and swap it into the snapshot.

        Args:
            include_disabled: Whether disabled categories are requested.
                Defaults to the configured setting.

        Returns:
            Loaded with the category tree, or Failed.
        """
        if include_disabled is None:
            include_disabled = settings.include_disabled_by_default
        resource = categories_resource()
        self._publish(Loading(resource))
        try:
            listing = await self._service.list_categories(include_disabled)
        except CatalogServiceError as e:
            return self._fail(resource, e)

        snapshot = self._snapshot.current.with_categories(listing.categories, listing.subcategories)
        self._snapshot.swap(snapshot)
        logger.info("Loaded categories", count=len(listing.categories))

        tree: list[CategoryNode] = build_category_tree(
            listing.categories, listing.subcategories, include_disabled
        )
        state = Loaded(resource, tree)
        self._publish(state)
        return state

    async def load_variants(self, product_id: ProductId) -> ResourceState:
        """Fetch the variants of a product and swap them into the snapshot."""
        resource = variants_resource(product_id)
        self._publish(Loading(resource))
        try:
            variants = await self._service.list_variants(product_id)
        except CatalogServiceError as e:
            return self._fail(resource, e)

        self._snapshot.swap(self._snapshot.current.with_variants(product_id, variants))
        logger.info("Loaded variants", product_id=str(product_id), count=len(variants))

        state = Loaded(resource, sort_for_display(variants))
        self._publish(state)
        return state

    async def load_product(self, product_id: ProductId) -> ResourceState:
        """Fetch one product and swap it into the snapshot."""
        resource = product_resource(product_id)
        self._publish(Loading(resource))
        try:
            product: Product = await self._service.get_product(product_id)
        except CatalogServiceError as e:
            return self._fail(resource, e)

        self._snapshot.swap(self._snapshot.current.with_entity(product))
        state = Loaded(resource, product)
        self._publish(state)
        return state

    def _fail(self, resource: str, error: CatalogServiceError) -> Failed:
        classified = classify_service_error(resource, error)
        logger.warning(
            "Resource load failed",
            resource=resource,
            status_code=error.status_code,
            error=error.message,
        )
        state = Failed(resource, classified)
        self._publish(state)
        return state

    # ========================================================================
    # Warnings
    # ========================================================================

    def delete_warning(self, category_id: CategoryId) -> CategoryDeleteWarning | None:
        """Warning to show before deleting a category.

        Deletion is never blocked; how the server treats the members is
        its own contract.
        """
        snapshot = self._snapshot.current
        category = snapshot.category(category_id)
        if category is None:
            return None
        return category_delete_warning(category, snapshot.subcategories_of(category_id))
