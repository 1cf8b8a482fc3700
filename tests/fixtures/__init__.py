"""
Shared test helpers for the notifykeeper tests.

Usage:
    from tests.fixtures import (
        RESOURCE,
        TARGET_URL,
        FakeClock,
        collect_metrics,
    )
"""

from tests.fixtures.clock import RESOURCE, START_TIME, TARGET_URL, FakeClock
from tests.fixtures.metrics import collect_metrics, total

__all__ = [
    "RESOURCE",
    "START_TIME",
    "TARGET_URL",
    "FakeClock",
    "collect_metrics",
    "total",
]
