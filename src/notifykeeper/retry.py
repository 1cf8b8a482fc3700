"""
Backoff for failed subscription creations.

Without the queue, a failed subscription creation is only retried when
ensure_subscription is invoked again from outside. With
``LifecycleConfig.retry_failed_creations`` enabled the lifecycle manager
records each failure here and re-attempts creation during later sweeps,
once the per-resource backoff has elapsed.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from notifykeeper.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """
    Backoff settings for creation retries.

    The n-th retry (0-based) waits ``initial_delay * exponential_base**n``
    seconds, capped at ``max_delay``, then shifted by up to ``jitter`` of
    itself in either direction.

    Attributes:
        max_retries: Failed attempts tolerated before giving up (0 disables retries)
        initial_delay: Seconds before the first retry
        max_delay: Ceiling on the delay, in seconds
        exponential_base: Growth factor between consecutive delays
        jitter: Relative random spread applied to each delay (0-1)
    """

    max_retries: int = 5
    initial_delay: float = 30.0
    max_delay: float = 900.0
    exponential_base: float = 2.0
    jitter: float = 0.1

    def __post_init__(self) -> None:
        problems = []
        if self.max_retries < 0:
            problems.append(f"max_retries cannot be negative ({self.max_retries})")
        if self.initial_delay <= 0:
            problems.append(f"initial_delay must be above zero ({self.initial_delay})")
        elif self.max_delay < self.initial_delay:
            problems.append(
                f"max_delay {self.max_delay} is below initial_delay {self.initial_delay}"
            )
        if self.exponential_base <= 1.0:
            problems.append(f"exponential_base must exceed 1.0 ({self.exponential_base})")
        if not 0.0 <= self.jitter <= 1.0:
            problems.append(f"jitter must lie in [0, 1] ({self.jitter})")
        if problems:
            raise ConfigurationError("Invalid retry settings: " + "; ".join(problems))


def calculate_backoff(attempt: int, config: RetryConfig) -> float:
    """
    Seconds to wait before retry number ``attempt`` (0-based).

    Example:
        >>> calculate_backoff(3, RetryConfig(initial_delay=1.0, max_delay=60.0, jitter=0.0))
        8.0
    """
    base = min(config.initial_delay * config.exponential_base**attempt, config.max_delay)
    spread = base * config.jitter
    return max(0.0, base + random.uniform(-spread, spread))  # nosec B311


@dataclass
class PendingCreation:
    """
    A subscription creation waiting to be retried.

    Attributes:
        resource: Resource path to subscribe to
        notification_url: Receiver endpoint for the subscription
        failures: Consecutive failed attempts so far
        next_attempt_at: Earliest time of the next attempt
        last_error: String representation of the last error
    """

    resource: str
    notification_url: str
    failures: int
    next_attempt_at: datetime
    last_error: str | None = None

    def is_due(self, now: datetime) -> bool:
        return now >= self.next_attempt_at

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "resource": self.resource,
            "notification_url": self.notification_url,
            "failures": self.failures,
            "next_attempt_at": self.next_attempt_at.isoformat(),
            "last_error": self.last_error,
        }


class CreationRetryQueue:
    """
    Tracks failed creations per resource and when to retry them.

    Not thread-safe; the lifecycle manager only touches it while holding
    the resource's lock.

    Example:
        >>> queue = CreationRetryQueue(RetryConfig(max_retries=3))
        >>> pending = queue.record_failure("/teams/T1/channels", url, now, "boom")
        >>> [p.resource for p in queue.due(later)]
        ['/teams/T1/channels']
    """

    def __init__(self, config: RetryConfig | None = None) -> None:
        self.config = config if config is not None else RetryConfig()
        self._pending: dict[str, PendingCreation] = {}

    def record_failure(
        self,
        resource: str,
        notification_url: str,
        now: datetime,
        error: str | None = None,
    ) -> PendingCreation | None:
        """
        Record a failed creation and schedule the next attempt.

        Returns:
            The pending entry, or None once max_retries is exhausted
            (the resource is then dropped from the queue).
        """
        previous = self._pending.get(resource)
        failures = (previous.failures if previous else 0) + 1

        if failures > self.config.max_retries:
            self._pending.pop(resource, None)
            logger.error(
                "Giving up on subscription creation",
                extra={
                    "resource": resource,
                    "failures": failures,
                    "error": error,
                },
            )
            return None

        delay = calculate_backoff(failures - 1, self.config)
        pending = PendingCreation(
            resource=resource,
            notification_url=notification_url,
            failures=failures,
            next_attempt_at=now + timedelta(seconds=delay),
            last_error=error,
        )
        self._pending[resource] = pending

        logger.warning(
            "Subscription creation queued for retry",
            extra={
                "resource": resource,
                "failures": failures,
                "delay_seconds": delay,
            },
        )
        return pending

    def record_success(self, resource: str) -> None:
        """Forget any pending retry for the resource."""
        self._pending.pop(resource, None)

    def due(self, now: datetime) -> list[PendingCreation]:
        """Pending creations whose backoff has elapsed."""
        return [p for p in self._pending.values() if p.is_due(now)]

    def get(self, resource: str) -> PendingCreation | None:
        return self._pending.get(resource)

    def pending(self) -> list[PendingCreation]:
        return list(self._pending.values())

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, resource: object) -> bool:
        return resource in self._pending


__all__ = [
    "CreationRetryQueue",
    "PendingCreation",
    "RetryConfig",
    "calculate_backoff",
]
