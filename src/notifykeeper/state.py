"""
Per-resource lifecycle states.

State Machine:
    ABSENT -> CREATING
    CREATING -> ACTIVE | ABSENT
    ACTIVE -> RENEWING | CREATING | DELETED
    RENEWING -> ACTIVE | RECREATING | DELETED
    RECREATING -> ACTIVE | ABSENT
    DELETED -> CREATING | ABSENT

ACTIVE -> CREATING covers ensure_subscription finding the tracked
subscription stale on the remote side. The state is informational: the
lifecycle manager logs an invalid transition instead of failing the
operation that caused it.
"""

from enum import Enum


class ResourceState(Enum):
    """States of a watched resource's subscription."""

    ABSENT = "absent"
    """No subscription is tracked for the resource."""

    CREATING = "creating"
    """A remote create is in flight."""

    ACTIVE = "active"
    """A valid subscription is tracked."""

    RENEWING = "renewing"
    """The sweep is extending the subscription's expiration."""

    RECREATING = "recreating"
    """The remote service lost the subscription; a replacement is being created."""

    DELETED = "deleted"
    """The subscription was deleted because it was stale or superseded."""


VALID_TRANSITIONS: dict[ResourceState, set[ResourceState]] = {
    ResourceState.ABSENT: {ResourceState.CREATING},
    ResourceState.CREATING: {
        ResourceState.ACTIVE,
        ResourceState.ABSENT,
    },
    ResourceState.ACTIVE: {
        ResourceState.RENEWING,
        ResourceState.CREATING,
        ResourceState.DELETED,
    },
    ResourceState.RENEWING: {
        ResourceState.ACTIVE,
        ResourceState.RECREATING,
        ResourceState.DELETED,
    },
    ResourceState.RECREATING: {
        ResourceState.ACTIVE,
        ResourceState.ABSENT,
    },
    ResourceState.DELETED: {
        ResourceState.CREATING,
        ResourceState.ABSENT,
    },
}


def is_valid_transition(
    from_state: ResourceState,
    to_state: ResourceState,
) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_state in VALID_TRANSITIONS.get(from_state, set())


__all__ = ["ResourceState", "VALID_TRANSITIONS", "is_valid_transition"]
