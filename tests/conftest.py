"""
Shared pytest fixtures for the notifykeeper tests.

This module provides:
- A controllable clock (clock)
- In-memory notification service client (client)
- Registry and lifecycle manager wired to both (registry, manager)
- Subscription factory (make_subscription)
- OpenTelemetry metrics fixtures (metric_reader, meter_provider)
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import timedelta
from typing import Any

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from notifykeeper.client import InMemoryNotificationServiceClient
from notifykeeper.config import LifecycleConfig
from notifykeeper.lifecycle import SubscriptionLifecycleManager
from notifykeeper.metrics import LifecycleMetrics
from notifykeeper.models import Subscription
from notifykeeper.observability import NullTracer
from notifykeeper.registry import SubscriptionRegistry
from tests.fixtures import RESOURCE, TARGET_URL, FakeClock

# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock frozen at START_TIME until advanced."""
    return FakeClock()


@pytest.fixture
def client() -> InMemoryNotificationServiceClient:
    """Provide an empty in-memory notification service."""
    return InMemoryNotificationServiceClient()


@pytest.fixture
def registry() -> SubscriptionRegistry:
    return SubscriptionRegistry()


@pytest.fixture
def config() -> LifecycleConfig:
    """Default 60 minute validity, 15 minute cadence."""
    return LifecycleConfig()


@pytest.fixture
def metrics() -> LifecycleMetrics:
    return LifecycleMetrics(enable_metrics=False)


@pytest.fixture
def manager(
    client: InMemoryNotificationServiceClient,
    registry: SubscriptionRegistry,
    config: LifecycleConfig,
    metrics: LifecycleMetrics,
    clock: FakeClock,
) -> SubscriptionLifecycleManager:
    """Provide a lifecycle manager wired to the in-memory client."""
    return SubscriptionLifecycleManager(
        client,
        registry,
        config,
        notification_url=TARGET_URL,
        client_state="secret-state",
        metrics=metrics,
        tracer=NullTracer(),
        clock=clock,
    )


@pytest.fixture
def make_subscription(clock: FakeClock) -> Callable[..., Subscription]:
    """
    Factory fixture for subscriptions with sensible defaults.

    Example:
        def test_something(make_subscription):
            sub = make_subscription(id="S9", minutes_left=-5)
    """

    def _make(
        id: str = "S1",
        resource: str = RESOURCE,
        notification_url: str = TARGET_URL,
        minutes_left: float = 60,
        **overrides: Any,
    ) -> Subscription:
        return Subscription(
            id=id,
            resource=resource,
            notification_url=notification_url,
            client_state="secret-state",
            expiration_date_time=clock() + timedelta(minutes=minutes_left),
            **overrides,
        )

    return _make


# =============================================================================
# OpenTelemetry metrics fixtures
# =============================================================================


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    """Provide an InMemoryMetricReader for inspecting collected metrics."""
    return InMemoryMetricReader()


@pytest.fixture
def meter_provider(metric_reader: InMemoryMetricReader) -> Generator[MeterProvider, None, None]:
    """
    Provide a MeterProvider that exports to metric_reader.

    The provider is passed explicitly to LifecycleMetrics instead of being
    installed globally, so tests do not leak providers into each other.
    """
    provider = MeterProvider(metric_readers=[metric_reader])
    yield provider
    provider.shutdown()
