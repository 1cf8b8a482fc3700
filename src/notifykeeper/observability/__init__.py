"""
Observability utilities for notifykeeper.

This module provides composition-based tracing and the standard attribute
names shared by spans and metrics.

Example:
    >>> from notifykeeper.observability import create_tracer
    >>>
    >>> class MyComponent:
    ...     def __init__(self, enable_tracing: bool = True):
    ...         self._tracer = create_tracer(__name__, enable_tracing)
"""

from notifykeeper.observability.attributes import (
    ATTR_ERROR_KIND,
    ATTR_ERROR_STATUS,
    ATTR_ERROR_TYPE,
    ATTR_EXPIRATION,
    ATTR_NOTIFICATION_URL,
    ATTR_OUTCOME,
    ATTR_RESOURCE,
    ATTR_SUBSCRIPTION_ID,
    ATTR_SWEEP_FAILED,
    ATTR_SWEEP_RENEWED,
    ATTR_SWEEP_SIZE,
)
from notifykeeper.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes
    "ATTR_ERROR_KIND",
    "ATTR_ERROR_STATUS",
    "ATTR_ERROR_TYPE",
    "ATTR_EXPIRATION",
    "ATTR_NOTIFICATION_URL",
    "ATTR_OUTCOME",
    "ATTR_RESOURCE",
    "ATTR_SUBSCRIPTION_ID",
    "ATTR_SWEEP_FAILED",
    "ATTR_SWEEP_RENEWED",
    "ATTR_SWEEP_SIZE",
]
