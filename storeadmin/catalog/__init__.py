"""Catalog rules - validation engine and hierarchy resolver.

Both halves are pure: they never suspend and never talk to the
Catalog Service.
"""

from storeadmin.catalog.hierarchy import (
    CategoryDeleteWarning,
    CategoryNode,
    VisibleSubCategory,
    build_category_tree,
    category_delete_warning,
    filter_enabled,
    resolve_effective_price,
    resolve_effective_stock,
    resolve_effective_visibility,
    resolve_featured_variant,
    sort_for_display,
)
from storeadmin.catalog.validation import (
    Accepted,
    ClearFeaturedInstruction,
    Rejected,
    SkuScope,
    ValidationError,
    ValidationErrorCode,
    ValidationResult,
    require_valid,
    validate_category,
    validate_product,
    validate_subcategory,
    validate_variant,
)

__all__ = [
    # Validation
    "Accepted",
    "ClearFeaturedInstruction",
    "Rejected",
    "SkuScope",
    "ValidationError",
    "ValidationErrorCode",
    "ValidationResult",
    "require_valid",
    "validate_category",
    "validate_product",
    "validate_subcategory",
    "validate_variant",
    # Hierarchy
    "CategoryDeleteWarning",
    "CategoryNode",
    "VisibleSubCategory",
    "build_category_tree",
    "category_delete_warning",
    "filter_enabled",
    "resolve_effective_price",
    "resolve_effective_stock",
    "resolve_effective_visibility",
    "resolve_featured_variant",
    "sort_for_display",
]
