"""State machines for catalog mutations.

Deterministic state machine for the lifecycle of a single in-flight
mutation, keyed by entity. The mutation coordinator drives it; the
presentation layer only observes it.
"""

from enum import Enum

from storeadmin.domain.exceptions import InvalidStateTransitionError


class MutationKind(str, Enum):
    """Kind of write sent to the Catalog Service."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# ============================================================================
# Mutation State Machine
# ============================================================================


class MutationStatus(str, Enum):
    """Mutation lifecycle states for one entity.

    State diagram:
        IDLE
          │
          │ submit
          ▼
        SUBMITTING ───────────────┐
          │                       │
          │ server accepted       │ validation / network / server failure
          ▼                       ▼
        COMMITTED               REJECTED
          │                       │
          └──── next user action ─┴──► IDLE
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    REJECTED = "rejected"

    def can_transition_to(self, target: "MutationStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _MUTATION_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["MutationStatus"]:
        """Get list of valid target states, in declaration order.

        Returns:
            List of states that can be transitioned to.
        """
        allowed = _MUTATION_TRANSITIONS.get(self, set())
        return [status for status in MutationStatus if status in allowed]

    def is_terminal(self) -> bool:
        """Check if the mutation has finished, one way or the other.

        Returns:
            True for COMMITTED and REJECTED.
        """
        return self in {MutationStatus.COMMITTED, MutationStatus.REJECTED}

    def is_in_flight(self) -> bool:
        """Check if a request is currently outstanding.

        Returns:
            True while SUBMITTING.
        """
        return self == MutationStatus.SUBMITTING


# Mutation state transitions (defined outside enum to avoid Enum restrictions)
_MUTATION_TRANSITIONS: dict[MutationStatus, set[MutationStatus]] = {
    MutationStatus.IDLE: {MutationStatus.SUBMITTING},
    MutationStatus.SUBMITTING: {MutationStatus.COMMITTED, MutationStatus.REJECTED},
    MutationStatus.COMMITTED: {MutationStatus.IDLE},  # reset on next user action
    MutationStatus.REJECTED: {MutationStatus.IDLE},  # reset on next user action
}


def validate_mutation_transition(
    entity_key: str,
    current_status: MutationStatus,
    target_status: MutationStatus,
) -> None:
    """Validate and raise if a mutation status transition is invalid.

    Args:
        entity_key: Entity key for the error message.
        current_status: Current mutation status.
        target_status: Target mutation status.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise InvalidStateTransitionError(
            entity_key=entity_key,
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
        )
