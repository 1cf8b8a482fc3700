"""
In-memory notification service client.

Useful for testing and local development. Not a real service: nothing
is delivered, and all subscriptions are lost when the process terminates.
"""

from __future__ import annotations

import asyncio
import itertools
from collections import defaultdict, deque
from collections.abc import Sequence
from datetime import datetime

from notifykeeper.exceptions import SubscriptionNotFoundError
from notifykeeper.models import Subscription, SubscriptionRequest, as_utc

OPERATIONS = ("list", "create", "update", "delete")


class InMemoryNotificationServiceClient:
    """
    In-memory implementation of NotificationServiceClient.

    Assigns sequential ids (``S1``, ``S2``, ...) and never reuses one, even
    after a delete. Every call is recorded so tests can assert on the exact
    remote traffic.

    Features:
        - seed() to pre-populate remote subscriptions
        - drop() to simulate the service losing a subscription
        - fail_next() to inject failures into the next call(s) of an operation
        - latency to widen interleavings between concurrent callers

    Example:
        >>> client = InMemoryNotificationServiceClient()
        >>> client.fail_next("create", NotificationServiceError("throttled", status=429))
        >>> await client.create(request)  # raises NotificationServiceError
        >>> (await client.create(request)).id
        'S1'

    Attributes:
        calls: Log of (operation, argument) tuples in call order
    """

    def __init__(self, id_prefix: str = "S", latency: float = 0.0) -> None:
        """
        Initialize an empty client.

        Args:
            id_prefix: Prefix for generated subscription ids
            latency: Seconds each call sleeps before acting
        """
        self.id_prefix = id_prefix
        self.latency = latency
        self.calls: list[tuple[str, str | None]] = []
        self._subscriptions: dict[str, Subscription] = {}
        self._issued: set[str] = set()
        self._counter = itertools.count(1)
        self._failures: dict[str, deque[Exception]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    # -- Test controls ----------------------------------------------------

    def seed(self, subscription: Subscription) -> None:
        """Register a subscription as if it already existed remotely."""
        self._subscriptions[subscription.id] = subscription
        self._issued.add(subscription.id)

    def drop(self, subscription_id: str) -> Subscription | None:
        """Forget a subscription without a delete call."""
        return self._subscriptions.pop(subscription_id, None)

    def fail_next(self, operation: str, error: Exception, times: int = 1) -> None:
        """
        Make the next ``times`` calls of ``operation`` raise ``error``.

        Raises:
            ValueError: If operation is not one of list/create/update/delete
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation {operation!r}, expected one of {OPERATIONS}")
        for _ in range(times):
            self._failures[operation].append(error)

    def get(self, subscription_id: str) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions.values())

    def call_count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    # -- NotificationServiceClient ----------------------------------------

    async def list(self) -> Sequence[Subscription]:
        await self._enter("list", None)
        return list(self._subscriptions.values())

    async def create(self, request: SubscriptionRequest) -> Subscription:
        await self._enter("create", request.resource)
        async with self._lock:
            subscription_id = self._next_id()
            subscription = Subscription(id=subscription_id, **request.model_dump())
            self._subscriptions[subscription_id] = subscription
            return subscription

    async def update(self, subscription_id: str, expiration: datetime) -> Subscription:
        await self._enter("update", subscription_id)
        async with self._lock:
            existing = self._subscriptions.get(subscription_id)
            if existing is None:
                raise SubscriptionNotFoundError(subscription_id)
            updated = existing.with_expiration(as_utc(expiration))
            self._subscriptions[subscription_id] = updated
            return updated

    async def delete(self, subscription_id: str) -> None:
        await self._enter("delete", subscription_id)
        async with self._lock:
            if self._subscriptions.pop(subscription_id, None) is None:
                raise SubscriptionNotFoundError(subscription_id)

    # -- Internals ----------------------------------------------------------

    async def _enter(self, operation: str, argument: str | None) -> None:
        self.calls.append((operation, argument))
        await asyncio.sleep(self.latency)
        failures = self._failures.get(operation)
        if failures:
            raise failures.popleft()

    def _next_id(self) -> str:
        while True:
            candidate = f"{self.id_prefix}{next(self._counter)}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate


__all__ = ["InMemoryNotificationServiceClient"]
