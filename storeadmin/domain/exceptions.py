"""Domain exceptions.

All domain-level errors raised by the catalog core. Field-level
validation problems are *returned* by the validation engine as
``ValidationError`` values; the exceptions here cover programming
errors, mutation lifecycle violations and Catalog Service failures
after classification.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid mutation status transition is attempted."""

    def __init__(
        self,
        entity_key: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_key: Key of the entity whose mutation changed state.
            current_state: Current mutation status.
            target_state: Attempted target status.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition mutation for {entity_key} "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_key": entity_key,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Catalog Model Errors
# ============================================================================


class CatalogError(DomainError):
    """Base class for catalog model errors."""

    pass


class InvalidPriceError(CatalogError):
    """Raised when a price is not a positive amount."""

    def __init__(self, amount: object) -> None:
        """Initialize invalid price error.

        Args:
            amount: The rejected amount.
        """
        super().__init__(
            f"Price must be a positive amount: {amount}",
            details={"amount": str(amount)},
        )


class UnknownParentCategoryError(CatalogError):
    """Raised when a sub-category references a category that is not loaded."""

    def __init__(self, category_id: str) -> None:
        """Initialize unknown parent error.

        Args:
            category_id: The parent category identifier that was not found.
        """
        super().__init__(
            f"Parent category {category_id} does not exist",
            details={"category_id": category_id},
        )


class FormValidationError(CatalogError):
    """Raised when a caller requires a form to be valid and it is not.

    Wraps the field-scoped validation errors so the presentation
    layer can still bind each one to its input.
    """

    def __init__(self, errors: tuple[Any, ...]) -> None:
        """Initialize form validation error.

        Args:
            errors: Validation errors, one per offending field.
        """
        fields = [error.field for error in errors]
        super().__init__(
            f"Form has invalid fields: {', '.join(fields)}",
            details={"fields": fields},
        )
        self.errors = errors


# ============================================================================
# Mutation Errors
# ============================================================================


class MutationError(DomainError):
    """Base class for errors raised while submitting a mutation."""

    def __init__(
        self,
        entity_key: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details={"entity_key": entity_key, **(details or {})})
        self.entity_key = entity_key


class ConcurrentMutationError(MutationError):
    """Raised when a mutation is submitted while another one for the same
    entity is still in flight."""

    def __init__(self, entity_key: str) -> None:
        """Initialize concurrent mutation error.

        Args:
            entity_key: Key of the entity that already has a mutation in flight.
        """
        super().__init__(
            entity_key,
            f"A mutation for {entity_key} is already being submitted",
        )


class TransientServiceError(MutationError):
    """Raised when the Catalog Service could not be reached or failed with 5xx.

    Safe to retry manually; the coordinator never retries on its own.
    """

    def __init__(
        self, entity_key: str, message: str, status_code: int | None = None
    ) -> None:
        """Initialize transient service error.

        Args:
            entity_key: Key of the entity being mutated.
            message: Error message from the transport or server.
            status_code: HTTP status code, or None for network failures.
        """
        super().__init__(entity_key, message, details={"status_code": status_code})
        self.status_code = status_code


class RejectedByServiceError(MutationError):
    """Raised when the Catalog Service rejected a mutation with 4xx.

    The server message is surfaced verbatim.
    """

    def __init__(self, entity_key: str, message: str, status_code: int) -> None:
        """Initialize rejected-by-service error.

        Args:
            entity_key: Key of the entity being mutated.
            message: Server message, unmodified.
            status_code: HTTP status code.
        """
        super().__init__(entity_key, message, details={"status_code": status_code})
        self.status_code = status_code


class PartialReconciliationError(MutationError):
    """Raised when the primary variant mutation committed but clearing the
    featured flag on a sibling failed.

    The primary mutation is not rolled back. ``committed`` holds the
    canonical entity returned for the primary mutation so the caller can
    still show it.
    """

    def __init__(
        self,
        entity_key: str,
        failed_variant_id: str,
        committed: Any,
        cause: MutationError,
    ) -> None:
        """Initialize partial reconciliation error.

        Args:
            entity_key: Key of the primary variant mutation.
            failed_variant_id: Sibling variant whose featured flag was not cleared.
            committed: Canonical value of the committed primary mutation.
            cause: Classified error of the failed companion mutation.
        """
        super().__init__(
            entity_key,
            f"Variant saved, but could not clear featured flag on variant "
            f"{failed_variant_id}: {cause.message}",
            details={"failed_variant_id": failed_variant_id},
        )
        self.failed_variant_id = failed_variant_id
        self.committed = committed
        self.cause = cause
