"""Application services for the catalog admin core.

This module exports the mutation coordinator and the state it owns:
- CatalogService: protocol of the remote catalog API
- SnapshotHolder / CatalogSnapshot: single-writer session state
- MutationCoordinator: validated writes and reconciliation
- ResourceState: Loading / Loaded / Failed per fetched list
"""

from storeadmin.application.catalog_service import (
    CatalogService,
    CatalogServiceError,
    CategoryListing,
)
from storeadmin.application.mutation_coordinator import (
    MutationCoordinator,
    classify_service_error,
)
from storeadmin.application.resource_state import (
    Failed,
    Loaded,
    Loading,
    ResourceState,
)
from storeadmin.application.snapshot import (
    CatalogSnapshot,
    SnapshotHolder,
    entity_key_for,
)

__all__ = [
    "CatalogService",
    "CatalogServiceError",
    "CategoryListing",
    "MutationCoordinator",
    "classify_service_error",
    "Failed",
    "Loaded",
    "Loading",
    "ResourceState",
    "CatalogSnapshot",
    "SnapshotHolder",
    "entity_key_for",
]
