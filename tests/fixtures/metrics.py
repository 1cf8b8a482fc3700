"""Helpers for reading OpenTelemetry metrics collected in tests."""

from typing import Any

from opentelemetry.sdk.metrics.export import InMemoryMetricReader


def collect_metrics(reader: InMemoryMetricReader) -> dict[str, list[Any]]:
    """Collect data points from a reader, keyed by metric name."""
    data = reader.get_metrics_data()
    points: dict[str, list[Any]] = {}
    if data is None:
        return points
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points.setdefault(metric.name, []).extend(metric.data.data_points)
    return points


def total(points: list[Any]) -> float:
    """Sum the values of counter data points."""
    return sum(point.value for point in points)
