"""
In-memory registry of tracked subscriptions.

The SubscriptionRegistry is owned by the lifecycle manager and keyed by
the remote subscription id. It holds at most one entry per resource:
upserting a subscription for a resource that is already tracked under a
different id supersedes the old entry.

Locking discipline:
- Mutations (upsert, remove, clear) hold the registry's asyncio.Lock.
- Readers that iterate use snapshot(), which returns a copy, so a renewal
  sweep never observes a mutation made by a concurrent onboarding call.
- Serializing read-modify-write sequences for one resource is the
  lifecycle manager's job (per-resource locks), not the registry's.

Example:
    >>> registry = SubscriptionRegistry()
    >>> await registry.upsert(subscription)
    >>> registry.find_by_resource("/teams/T1/channels")
    >>> for entry in registry.snapshot():
    ...     ...
"""

import asyncio
import logging
from collections.abc import Iterator

from notifykeeper.models import Subscription

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """
    Registry mapping subscription id to subscription record.

    Handles:
    - Insert-or-replace keyed by id
    - Lookup by id and by resource
    - Removal by id
    - Point-in-time snapshots for iteration
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = asyncio.Lock()

    async def upsert(self, subscription: Subscription) -> Subscription | None:
        """
        Insert or replace a subscription keyed by its id.

        Any other entry tracked for the same resource is discarded.

        Args:
            subscription: The subscription to track

        Returns:
            The superseded entry for the same resource (different id), or None
        """
        async with self._lock:
            superseded = None
            for sub_id, existing in list(self._subscriptions.items()):
                if sub_id != subscription.id and existing.resource == subscription.resource:
                    superseded = self._subscriptions.pop(sub_id)
                    logger.info(
                        "Subscription superseded",
                        extra={
                            "resource": subscription.resource,
                            "old_subscription_id": sub_id,
                            "subscription_id": subscription.id,
                        },
                    )

            self._subscriptions[subscription.id] = subscription

            logger.debug(
                "Subscription tracked",
                extra={
                    "subscription_id": subscription.id,
                    "resource": subscription.resource,
                    "expiration": subscription.expiration_date_time.isoformat(),
                },
            )
            return superseded

    async def remove(self, subscription_id: str) -> Subscription | None:
        """
        Stop tracking a subscription.

        Args:
            subscription_id: The id to remove

        Returns:
            The removed Subscription, or None if not found
        """
        async with self._lock:
            removed = self._subscriptions.pop(subscription_id, None)
            if removed:
                logger.debug(
                    "Subscription untracked",
                    extra={"subscription_id": subscription_id, "resource": removed.resource},
                )
            return removed

    async def clear(self) -> None:
        async with self._lock:
            self._subscriptions.clear()

    def get(self, subscription_id: str) -> Subscription | None:
        """Get a subscription by id."""
        return self._subscriptions.get(subscription_id)

    def find_by_resource(self, resource: str) -> Subscription | None:
        """
        Get the subscription currently tracked for a resource.

        Args:
            resource: Resource path

        Returns:
            The tracked Subscription, or None
        """
        for subscription in self._subscriptions.values():
            if subscription.resource == resource:
                return subscription
        return None

    def snapshot(self) -> list[Subscription]:
        """Point-in-time copy of all tracked subscriptions."""
        return list(self._subscriptions.values())

    @property
    def ids(self) -> list[str]:
        """Ids of all tracked subscriptions."""
        return list(self._subscriptions.keys())

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._subscriptions

    def __iter__(self) -> Iterator[Subscription]:
        """Iterate over a snapshot of tracked subscriptions."""
        return iter(self.snapshot())


__all__ = ["SubscriptionRegistry"]
