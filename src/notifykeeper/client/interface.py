"""
Contract for the remote notification service.

The lifecycle manager only needs list/create/update/delete against the
service's subscriptions collection. Transport, authentication and timeouts
belong to the implementation.

Error contract:
- update raises SubscriptionNotFoundError when the service has lost the
  subscription, and NotificationServiceError for anything else.
- create, list and delete raise NotificationServiceError on failure.
- delete failures are never propagated past the lifecycle manager.

Example:
    >>> class GraphClient:
    ...     async def list(self) -> Sequence[Subscription]: ...
    ...     async def create(self, request: SubscriptionRequest) -> Subscription: ...
    ...     async def update(self, subscription_id: str, expiration: datetime) -> Subscription: ...
    ...     async def delete(self, subscription_id: str) -> None: ...
    >>> isinstance(GraphClient(), NotificationServiceClient)
    True
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from notifykeeper.models import Subscription, SubscriptionRequest


@runtime_checkable
class NotificationServiceClient(Protocol):
    """Protocol for clients of a change notification service."""

    async def list(self) -> Sequence[Subscription]:
        """
        List all subscriptions registered by this application.

        Raises:
            NotificationServiceError: If the listing fails
        """
        ...

    async def create(self, request: SubscriptionRequest) -> Subscription:
        """
        Create a subscription.

        Args:
            request: Fields of the subscription to create

        Returns:
            The registered subscription, with its service-assigned id

        Raises:
            NotificationServiceError: If the service rejects the request
        """
        ...

    async def update(self, subscription_id: str, expiration: datetime) -> Subscription:
        """
        Extend a subscription's expiration.

        Args:
            subscription_id: Remote subscription id
            expiration: New absolute expiration time

        Returns:
            The updated subscription

        Raises:
            SubscriptionNotFoundError: If the service no longer has the subscription
            NotificationServiceError: For any other failure
        """
        ...

    async def delete(self, subscription_id: str) -> None:
        """
        Delete a subscription.

        Raises:
            NotificationServiceError: If the deletion fails
        """
        ...


__all__ = ["NotificationServiceClient"]
