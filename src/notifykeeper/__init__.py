"""
notifykeeper - Keep change notification subscriptions alive.

This library provides:
- A lifecycle manager that creates, renews and recreates webhook-style
  subscriptions against a remote notification service
- An in-memory registry of tracked subscriptions
- A background scheduler running renewal sweeps on a fixed cadence
- OpenTelemetry metrics and tracing for every lifecycle operation
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("notifykeeper")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from notifykeeper.client import InMemoryNotificationServiceClient, NotificationServiceClient
from notifykeeper.config import LifecycleConfig, NotificationSettings
from notifykeeper.exceptions import (
    ConfigurationError,
    InvalidResourceError,
    NotificationServiceError,
    NotifyKeeperError,
    ServiceErrorKind,
    SubscriptionNotFoundError,
)
from notifykeeper.lifecycle import (
    SubscriptionLifecycleManager,
    SubscriptionStatus,
    SweepResult,
)
from notifykeeper.metrics import LifecycleMetrics, MetricSnapshot
from notifykeeper.models import (
    ChangeType,
    Subscription,
    SubscriptionRequest,
    channel_resource,
)
from notifykeeper.registry import SubscriptionRegistry
from notifykeeper.retry import CreationRetryQueue, PendingCreation, RetryConfig
from notifykeeper.scheduler import SubscriptionScheduler
from notifykeeper.state import ResourceState

__all__ = [
    "__version__",
    # Client
    "NotificationServiceClient",
    "InMemoryNotificationServiceClient",
    # Configuration
    "LifecycleConfig",
    "NotificationSettings",
    # Exceptions
    "NotifyKeeperError",
    "ConfigurationError",
    "InvalidResourceError",
    "NotificationServiceError",
    "ServiceErrorKind",
    "SubscriptionNotFoundError",
    # Lifecycle
    "SubscriptionLifecycleManager",
    "SubscriptionStatus",
    "SweepResult",
    "ResourceState",
    # Metrics
    "LifecycleMetrics",
    "MetricSnapshot",
    # Models
    "ChangeType",
    "Subscription",
    "SubscriptionRequest",
    "channel_resource",
    # Registry
    "SubscriptionRegistry",
    # Retry
    "CreationRetryQueue",
    "PendingCreation",
    "RetryConfig",
    # Scheduler
    "SubscriptionScheduler",
]
