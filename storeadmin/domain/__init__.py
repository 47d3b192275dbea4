"""Domain layer - Catalog entities, value objects, request shapes, state machines.

This module exports the core catalog building blocks:

- **Entities**: Category, SubCategory, Product, Variant as the server returns them
- **Value Objects**: Price and typed identifiers
- **Forms / Requests**: raw operator input and normalized payloads
- **State Machines**: the per-entity mutation lifecycle
- **Exceptions**: domain-specific errors

Example usage:
    from storeadmin.domain import Category, CategoryId

    category = Category(id=CategoryId("7"), name="  Electronics ")
    print(category.name)  # "Electronics"
"""

# Base classes
from storeadmin.domain.base import ValueObject

# Entities
from storeadmin.domain.entities import (
    DEFAULT_CATEGORY_ICON,
    DEFAULT_SUBCATEGORY_ICON,
    Category,
    Product,
    SubCategory,
    Variant,
)

# Exceptions
from storeadmin.domain.exceptions import (
    CatalogError,
    ConcurrentMutationError,
    DomainError,
    FormValidationError,
    InvalidPriceError,
    InvalidStateTransitionError,
    MutationError,
    PartialReconciliationError,
    RejectedByServiceError,
    TransientServiceError,
    UnknownParentCategoryError,
)

# Forms and requests
from storeadmin.domain.requests import (
    CategoryForm,
    CategoryRequest,
    ProductForm,
    ProductRequest,
    VariantForm,
    VariantRequest,
)

# State Machines
from storeadmin.domain.state_machines import (
    MutationKind,
    MutationStatus,
    validate_mutation_transition,
)

# Value Objects
from storeadmin.domain.value_objects import (
    CategoryId,
    EntityKey,
    EntityKind,
    Price,
    ProductId,
    SubCategoryId,
    VariantId,
)

__all__ = [
    # Base classes
    "ValueObject",
    # Entities
    "DEFAULT_CATEGORY_ICON",
    "DEFAULT_SUBCATEGORY_ICON",
    "Category",
    "Product",
    "SubCategory",
    "Variant",
    # Value Objects
    "CategoryId",
    "EntityKey",
    "EntityKind",
    "Price",
    "ProductId",
    "SubCategoryId",
    "VariantId",
    # Forms and requests
    "CategoryForm",
    "CategoryRequest",
    "ProductForm",
    "ProductRequest",
    "VariantForm",
    "VariantRequest",
    # State Machines
    "MutationKind",
    "MutationStatus",
    "validate_mutation_transition",
    # Exceptions
    "DomainError",
    "InvalidStateTransitionError",
    "CatalogError",
    "InvalidPriceError",
    "UnknownParentCategoryError",
    "FormValidationError",
    "MutationError",
    "ConcurrentMutationError",
    "TransientServiceError",
    "RejectedByServiceError",
    "PartialReconciliationError",
]
