"""
Standard span and metric attributes for notifykeeper.

Example:
    >>> with tracer.span(
    ...     "notifykeeper.lifecycle.renew",
    ...     {ATTR_SUBSCRIPTION_ID: subscription.id, ATTR_RESOURCE: subscription.resource},
    ... ):
    ...     pass
"""

# =============================================================================
# Subscription Attributes
# =============================================================================

ATTR_SUBSCRIPTION_ID = "notifykeeper.subscription.id"
"""Remote subscription id (string)."""

ATTR_RESOURCE = "notifykeeper.resource"
"""Watched resource path, e.g. '/teams/T1/channels' (string)."""

ATTR_NOTIFICATION_URL = "notifykeeper.notification_url"
"""Receiver endpoint of the subscription (string)."""

ATTR_EXPIRATION = "notifykeeper.subscription.expiration"
"""Expiration time as ISO-8601 string."""

ATTR_OUTCOME = "notifykeeper.outcome"
"""Outcome of a lifecycle operation: 'reused', 'created', 'renewed', 'recreated', 'failed'."""

# =============================================================================
# Sweep Attributes
# =============================================================================

ATTR_SWEEP_SIZE = "notifykeeper.sweep.size"
"""Number of subscriptions in the sweep snapshot (integer)."""

ATTR_SWEEP_RENEWED = "notifykeeper.sweep.renewed"
"""Subscriptions renewed during a sweep (integer)."""

ATTR_SWEEP_FAILED = "notifykeeper.sweep.failed"
"""Subscriptions whose renewal failed during a sweep (integer)."""

# =============================================================================
# Error Attributes
# =============================================================================

ATTR_ERROR_TYPE = "error.type"
"""Exception class name."""

ATTR_ERROR_KIND = "notifykeeper.error.kind"
"""Service error kind: 'not_found' or 'other'."""

ATTR_ERROR_STATUS = "notifykeeper.error.status"
"""Status code reported by the notification service (integer)."""


__all__ = [
    "ATTR_SUBSCRIPTION_ID",
    "ATTR_RESOURCE",
    "ATTR_NOTIFICATION_URL",
    "ATTR_EXPIRATION",
    "ATTR_OUTCOME",
    "ATTR_SWEEP_SIZE",
    "ATTR_SWEEP_RENEWED",
    "ATTR_SWEEP_FAILED",
    "ATTR_ERROR_TYPE",
    "ATTR_ERROR_KIND",
    "ATTR_ERROR_STATUS",
]
