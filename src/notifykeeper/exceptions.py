"""
Exceptions for the notifykeeper package.

All exceptions inherit from NotifyKeeperError for easy catching.
Remote failures are split by kind so call sites can handle a lost
subscription differently from any other service error.
"""

from enum import Enum


class NotifyKeeperError(Exception):
    """Base exception for notifykeeper."""

    pass


class ConfigurationError(NotifyKeeperError, ValueError):
    """Raised when lifecycle configuration is invalid."""

    pass


class InvalidResourceError(NotifyKeeperError, ValueError):
    """Raised when a resource path or team id is empty or malformed."""

    def __init__(self, resource: str | None, reason: str = "resource must not be empty") -> None:
        self.resource = resource
        super().__init__(f"Invalid resource {resource!r}: {reason}")


class ServiceErrorKind(Enum):
    """
    Kinds of notification service failures.

    Attributes:
        NOT_FOUND: The remote service no longer knows the subscription
        OTHER: Any other failure (throttling, server error, auth, ...)
    """

    NOT_FOUND = "not_found"
    OTHER = "other"


class NotificationServiceError(NotifyKeeperError):
    """
    Raised by a notification service client when a remote call fails.

    Attributes:
        kind: Failure kind
        status: HTTP-like status code, if the transport reported one
        message: Error message from the service
        subscription_id: Subscription the call targeted, if any
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        subscription_id: str | None = None,
        kind: ServiceErrorKind = ServiceErrorKind.OTHER,
    ) -> None:
        self.kind = kind
        self.status = status
        self.message = message
        self.subscription_id = subscription_id
        status_info = f" (status {status})" if status is not None else ""
        super().__init__(f"{message}{status_info}")


class SubscriptionNotFoundError(NotificationServiceError):
    """Raised when the remote service has lost a subscription."""

    def __init__(self, subscription_id: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Subscription not found: {subscription_id}",
            status=404,
            subscription_id=subscription_id,
            kind=ServiceErrorKind.NOT_FOUND,
        )


__all__ = [
    "NotifyKeeperError",
    "ConfigurationError",
    "InvalidResourceError",
    "ServiceErrorKind",
    "NotificationServiceError",
    "SubscriptionNotFoundError",
]
