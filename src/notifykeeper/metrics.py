"""
OpenTelemetry metrics for subscription lifecycle management.

Metrics Exposed:
    - notifykeeper.subscriptions.created (Counter): Remote subscriptions created
    - notifykeeper.subscriptions.reused (Counter): Existing remote subscriptions adopted
    - notifykeeper.subscriptions.renewed (Counter): Successful renewals
    - notifykeeper.subscriptions.renewal_failures (Counter): Failed renewals, by error kind
    - notifykeeper.subscriptions.recreated (Counter): Lost subscriptions recreated
    - notifykeeper.subscriptions.deleted (Counter): Stale subscriptions deleted
    - notifykeeper.subscriptions.lapsed (Counter): Tracked subscriptions found expired
    - notifykeeper.subscriptions.creation_failures (Counter): Failed creations
    - notifykeeper.sweep.duration (Histogram): Renewal sweep duration in seconds
    - notifykeeper.subscriptions.tracked (Gauge): Subscriptions in the registry
    - notifykeeper.subscription.consecutive_renewal_failures (Gauge): Per subscription
    - notifykeeper.subscription.seconds_to_expiry (Gauge): Per subscription

The two per-subscription gauges are how a subscription drifting towards
expiry through repeated renewal failures becomes visible. Alerting on them
is left to the metrics backend.

Example:
    >>> metrics = LifecycleMetrics()
    >>> metrics.record_created("/teams/T1/channels")
    >>> metrics.record_renewal_failed("/teams/T1/channels", "other")
    >>> metrics.get_snapshot().renewal_failures
    1
"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics
from opentelemetry.metrics import CallbackOptions, Meter, MeterProvider, NoOpMeter, Observation

if TYPE_CHECKING:
    from notifykeeper.lifecycle import SubscriptionStatus

METER_NAME = "notifykeeper"
METER_VERSION = "1.0.0"

StatusSource = Callable[[], "Iterable[SubscriptionStatus]"]


@dataclass
class MetricSnapshot:
    """
    Snapshot of metric values recorded by a LifecycleMetrics instance.

    Useful for testing and debugging to see what values
    would be reported to OpenTelemetry.
    """

    created: int = 0
    reused: int = 0
    renewed: int = 0
    renewal_failures: int = 0
    recreated: int = 0
    deleted: int = 0
    lapsed: int = 0
    creation_failures: int = 0
    sweeps: int = 0
    total_sweep_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "created": self.created,
            "reused": self.reused,
            "renewed": self.renewed,
            "renewal_failures": self.renewal_failures,
            "recreated": self.recreated,
            "deleted": self.deleted,
            "lapsed": self.lapsed,
            "creation_failures": self.creation_failures,
            "sweeps": self.sweeps,
            "total_sweep_seconds": self.total_sweep_seconds,
        }


@dataclass
class LifecycleMetrics:
    """
    Container for lifecycle metric instruments.

    All methods are safe to call with metrics disabled; instruments then
    come from OpenTelemetry's NoOpMeter.

    Attributes:
        enable_metrics: Whether metrics are recorded (default True)
        meter_provider: Provider to create the meter from. Defaults to the
            globally configured provider.
    """

    enable_metrics: bool = True
    meter_provider: MeterProvider | None = None

    _meter: Meter = field(init=False, repr=False)
    _snapshot: MetricSnapshot = field(default_factory=MetricSnapshot, init=False, repr=False)
    _status_source: StatusSource | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize metric instruments."""
        provider: Any = None
        if not self.enable_metrics:
            self._meter = NoOpMeter(METER_NAME, version=METER_VERSION)
        else:
            provider = (
                self.meter_provider
                if self.meter_provider is not None
                else metrics.get_meter_provider()
            )
            self._meter = provider.get_meter(METER_NAME, version=METER_VERSION)

        self._created = self._meter.create_counter(
            name="notifykeeper.subscriptions.created",
            unit="subscriptions",
            description="Remote subscriptions created",
        )
        self._reused = self._meter.create_counter(
            name="notifykeeper.subscriptions.reused",
            unit="subscriptions",
            description="Existing remote subscriptions adopted instead of created",
        )
        self._renewed = self._meter.create_counter(
            name="notifykeeper.subscriptions.renewed",
            unit="subscriptions",
            description="Successful subscription renewals",
        )
        self._renewal_failures = self._meter.create_counter(
            name="notifykeeper.subscriptions.renewal_failures",
            unit="subscriptions",
            description="Failed subscription renewals",
        )
        self._recreated = self._meter.create_counter(
            name="notifykeeper.subscriptions.recreated",
            unit="subscriptions",
            description="Subscriptions recreated after the service lost them",
        )
        self._deleted = self._meter.create_counter(
            name="notifykeeper.subscriptions.deleted",
            unit="subscriptions",
            description="Stale subscriptions deleted",
        )
        self._lapsed = self._meter.create_counter(
            name="notifykeeper.subscriptions.lapsed",
            unit="subscriptions",
            description="Tracked subscriptions found already expired",
        )
        self._creation_failures = self._meter.create_counter(
            name="notifykeeper.subscriptions.creation_failures",
            unit="subscriptions",
            description="Failed subscription creations",
        )
        self._sweep_duration = self._meter.create_histogram(
            name="notifykeeper.sweep.duration",
            unit="s",
            description="Renewal sweep duration in seconds",
        )

        if provider is not None:
            _gauge_group(provider, self._meter).add(self)

    def bind_status_source(self, source: StatusSource) -> None:
        """Set the callable the per-subscription gauges read from."""
        self._status_source = source

    # -- Statuses --------------------------------------------------------------

    def _statuses(self) -> list[SubscriptionStatus]:
        if self._status_source is None:
            return []
        return list(self._status_source())

    # -- Recording -----------------------------------------------------------

    def record_created(self, resource: str) -> None:
        self._created.add(1, {"resource": resource})
        self._snapshot.created += 1

    def record_reused(self, resource: str) -> None:
        self._reused.add(1, {"resource": resource})
        self._snapshot.reused += 1

    def record_renewed(self, resource: str) -> None:
        self._renewed.add(1, {"resource": resource})
        self._snapshot.renewed += 1

    def record_renewal_failed(self, resource: str, error_kind: str) -> None:
        """
        Record a failed renewal.

        Args:
            resource: Resource path of the subscription
            error_kind: "not_found", "other" or "unexpected"
        """
        self._renewal_failures.add(1, {"resource": resource, "error.kind": error_kind})
        self._snapshot.renewal_failures += 1

    def record_recreated(self, resource: str) -> None:
        self._recreated.add(1, {"resource": resource})
        self._snapshot.recreated += 1

    def record_deleted(self, resource: str, reason: str) -> None:
        self._deleted.add(1, {"resource": resource, "reason": reason})
        self._snapshot.deleted += 1

    def record_lapsed(self, resource: str) -> None:
        self._lapsed.add(1, {"resource": resource})
        self._snapshot.lapsed += 1

    def record_creation_failed(self, resource: str, error_type: str) -> None:
        self._creation_failures.add(1, {"resource": resource, "error.type": error_type})
        self._snapshot.creation_failures += 1

    def record_sweep(self, duration_seconds: float, size: int) -> None:
        self._sweep_duration.record(duration_seconds, {"sweep.size": size})
        self._snapshot.sweeps += 1
        self._snapshot.total_sweep_seconds += duration_seconds

    def get_snapshot(self) -> MetricSnapshot:
        """Copy of the values recorded so far."""
        return MetricSnapshot(**self._snapshot.to_dict())

    @property
    def metrics_enabled(self) -> bool:
        return self.enable_metrics


class _GaugeGroup:
    """
    Observable gauges shared by every LifecycleMetrics on one meter provider.

    OpenTelemetry keeps the first instrument registered under a name and
    drops later callbacks, so the gauges are created once per provider and
    report the statuses of all live members.
    """

    def __init__(self, meter: Meter) -> None:
        self._members: list[weakref.ref[LifecycleMetrics]] = []

        meter.create_observable_gauge(
            name="notifykeeper.subscriptions.tracked",
            callbacks=[self._observe_tracked],
            unit="subscriptions",
            description="Subscriptions currently tracked",
        )
        meter.create_observable_gauge(
            name="notifykeeper.subscription.consecutive_renewal_failures",
            callbacks=[self._observe_failures],
            unit="1",
            description="Consecutive failed renewals per subscription",
        )
        meter.create_observable_gauge(
            name="notifykeeper.subscription.seconds_to_expiry",
            callbacks=[self._observe_expiry],
            unit="s",
            description="Seconds until the subscription expires",
        )

    def add(self, member: LifecycleMetrics) -> None:
        self._members.append(weakref.ref(member))

    def _statuses(self) -> list[SubscriptionStatus]:
        self._members = [ref for ref in self._members if ref() is not None]
        statuses: list[SubscriptionStatus] = []
        for ref in self._members:
            member = ref()
            if member is not None:
                statuses.extend(member._statuses())
        return statuses

    def _observe_tracked(self, options: CallbackOptions) -> Iterator[Observation]:
        yield Observation(value=len(self._statuses()))

    def _observe_failures(self, options: CallbackOptions) -> Iterator[Observation]:
        for status in self._statuses():
            yield Observation(
                value=status.consecutive_failures,
                attributes={"subscription.id": status.subscription_id, "resource": status.resource},
            )

    def _observe_expiry(self, options: CallbackOptions) -> Iterator[Observation]:
        for status in self._statuses():
            yield Observation(
                value=status.seconds_to_expiry,
                attributes={"subscription.id": status.subscription_id, "resource": status.resource},
            )


# Gauge groups keyed by the meter provider they were registered on
_gauge_groups: weakref.WeakKeyDictionary[Any, _GaugeGroup] = weakref.WeakKeyDictionary()


def _gauge_group(provider: Any, meter: Meter) -> _GaugeGroup:
    group = _gauge_groups.get(provider)
    if group is None:
        group = _GaugeGroup(meter)
        _gauge_groups[provider] = group
    return group


__all__ = [
    "METER_NAME",
    "LifecycleMetrics",
    "MetricSnapshot",
]
