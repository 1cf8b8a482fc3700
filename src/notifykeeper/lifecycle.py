"""
Subscription lifecycle management.

The SubscriptionLifecycleManager keeps one live subscription per watched
resource:
- ensure_subscription adopts a valid remote subscription or creates one,
  deleting remote entries that point at a stale receiver URL or have
  already expired
- renew_all extends every tracked subscription and recreates the ones the
  remote service has lost

Every remote failure is caught, logged and counted. Nothing raised by the
notification service escapes a sweep or an onboarding call; the only
exceptions callers see are InvalidResourceError for an empty resource and
ConfigurationError when no receiver URL is known.

Example:
    >>> manager = SubscriptionLifecycleManager(
    ...     client=client,
    ...     notification_url="https://host/api/notifications",
    ...     client_state="secret",
    ... )
    >>> subscription = await manager.ensure_subscription("/teams/T1/channels")
    >>> result = await manager.renew_all()
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from notifykeeper.config import LifecycleConfig
from notifykeeper.exceptions import (
    ConfigurationError,
    InvalidResourceError,
    NotificationServiceError,
    SubscriptionNotFoundError,
)
from notifykeeper.metrics import LifecycleMetrics
from notifykeeper.models import Subscription, SubscriptionRequest, channel_resource
from notifykeeper.observability import (
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
    Tracer,
    create_tracer,
)
from notifykeeper.registry import SubscriptionRegistry
from notifykeeper.retry import CreationRetryQueue, PendingCreation
from notifykeeper.state import ResourceState, is_valid_transition

if TYPE_CHECKING:
    from notifykeeper.client import NotificationServiceClient
    from notifykeeper.config import NotificationSettings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SubscriptionStatus:
    """
    Status snapshot of one tracked subscription.

    Attributes:
        subscription_id: Remote subscription id
        resource: Watched resource path
        notification_url: Receiver endpoint
        state: Lifecycle state of the resource
        expiration: Current expiration time
        seconds_to_expiry: Seconds until expiration (negative once expired)
        consecutive_failures: Renewals failed in a row since the last success
        last_error: Message of the most recent renewal failure
        at_risk: True when renewals are failing and the subscription
            expires before the next sweep
    """

    subscription_id: str
    resource: str
    notification_url: str
    state: ResourceState
    expiration: datetime
    seconds_to_expiry: float
    consecutive_failures: int = 0
    last_error: str | None = None
    at_risk: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subscription_id": self.subscription_id,
            "resource": self.resource,
            "notification_url": self.notification_url,
            "state": self.state.value,
            "expiration": self.expiration.isoformat(),
            "seconds_to_expiry": self.seconds_to_expiry,
            "consecutive_failures": self.consecutive_failures,
            "last_error": self.last_error,
            "at_risk": self.at_risk,
        }


@dataclass
class SweepResult:
    """
    Outcome of one renewal sweep.

    Attributes:
        renewed: Ids of subscriptions whose expiration was extended
        recreated: (old id, new id) pairs for lost subscriptions replaced
        failed: Ids whose renewal failed and were kept for the next sweep
        lost: Resources that could not be recreated and are now absent
        lapsed: Ids found already expired at sweep time
        retried: Resources created from the retry queue
        duration_seconds: Wall time of the sweep
    """

    renewed: list[str] = field(default_factory=list)
    recreated: list[tuple[str, str]] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    lost: list[str] = field(default_factory=list)
    lapsed: list[str] = field(default_factory=list)
    retried: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def processed(self) -> int:
        """Number of registry entries the sweep acted on."""
        return len(self.renewed) + len(self.recreated) + len(self.failed) + len(self.lost)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "renewed": list(self.renewed),
            "recreated": [list(pair) for pair in self.recreated],
            "failed": list(self.failed),
            "lost": list(self.lost),
            "lapsed": list(self.lapsed),
            "retried": list(self.retried),
            "duration_seconds": self.duration_seconds,
        }


class SubscriptionLifecycleManager:
    """
    Creates, renews and recreates change notification subscriptions.

    Concurrency:
        Read-modify-write sequences for one resource run under that
        resource's asyncio.Lock, so concurrent ensure_subscription calls
        and a running sweep never create duplicate subscriptions for the
        same resource. Sweeps themselves are serialized, and process
        entries one at a time to avoid bursting the remote service.

    Example:
        >>> manager = SubscriptionLifecycleManager.from_settings(client, settings)
        >>> await manager.ensure_team_channels("T1")
        >>> for status in manager.statuses():
        ...     print(status.subscription_id, status.seconds_to_expiry)
    """

    def __init__(
        self,
        client: "NotificationServiceClient",
        registry: SubscriptionRegistry | None = None,
        config: LifecycleConfig | None = None,
        *,
        notification_url: str | None = None,
        client_state: str | None = None,
        encryption_certificate: str | None = None,
        encryption_certificate_id: str | None = None,
        metrics: LifecycleMetrics | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
        enable_metrics: bool = True,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the lifecycle manager.

        Args:
            client: Notification service client
            registry: Registry to track subscriptions in. A new one is
                created if not provided.
            config: Lifecycle configuration (defaults to LifecycleConfig())
            notification_url: Default receiver endpoint for ensure_subscription
            client_state: Secret included in every created subscription
            encryption_certificate: Certificate passed through on create
            encryption_certificate_id: Certificate id passed through on create
            metrics: Optional custom LifecycleMetrics instance
            tracer: Optional custom Tracer instance. If not provided, one is
                   created based on enable_tracing setting.
            enable_tracing: Whether to enable OpenTelemetry tracing.
                          Ignored if tracer is explicitly provided.
            enable_metrics: Whether to record OpenTelemetry metrics.
                          Ignored if metrics is explicitly provided.
            clock: Callable returning the current UTC time
        """
        self._tracer = tracer if tracer is not None else create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled

        self.client = client
        self.registry = registry if registry is not None else SubscriptionRegistry()
        self.config = config if config is not None else LifecycleConfig()
        self.notification_url = notification_url
        self.client_state = client_state
        self.encryption_certificate = encryption_certificate
        self.encryption_certificate_id = encryption_certificate_id
        self.metrics = (
            metrics if metrics is not None else LifecycleMetrics(enable_metrics=enable_metrics)
        )
        self._clock = clock or _utc_now

        self._locks: dict[str, asyncio.Lock] = {}
        self._sweep_lock = asyncio.Lock()
        self._states: dict[str, ResourceState] = {}
        self._failures: dict[str, int] = {}
        self._last_errors: dict[str, str] = {}
        self._retry_queue = CreationRetryQueue(self.config.get_retry_config())

        self.metrics.bind_status_source(self.statuses)

    @classmethod
    def from_settings(
        cls,
        client: "NotificationServiceClient",
        settings: "NotificationSettings",
        **kwargs: Any,
    ) -> "SubscriptionLifecycleManager":
        """
        Build a manager from environment-driven settings.

        Keyword arguments are forwarded to the constructor and take
        precedence over values derived from settings.
        """
        kwargs.setdefault("config", settings.to_lifecycle_config())
        kwargs.setdefault("notification_url", settings.notification_url)
        kwargs.setdefault("client_state", settings.client_state)
        kwargs.setdefault("encryption_certificate", settings.encryption_certificate)
        kwargs.setdefault("encryption_certificate_id", settings.encryption_certificate_id)
        return cls(client, **kwargs)

    # -- Onboarding ----------------------------------------------------------

    async def ensure_subscription(
        self,
        resource: str,
        target_url: str | None = None,
    ) -> Subscription | None:
        """
        Make sure a valid subscription exists and is tracked for a resource.

        The remote listing is authoritative: one remote subscription for the
        resource is reused when it targets ``target_url`` and has not
        expired. Every other remote subscription for the resource is
        deleted, and a new one is created only when none was reusable.

        Args:
            resource: Resource path to watch
            target_url: Receiver endpoint; defaults to notification_url

        Returns:
            The tracked subscription, or None if listing or creation failed.
            A failed creation is not retried automatically unless
            ``LifecycleConfig.retry_failed_creations`` is enabled.

        Raises:
            InvalidResourceError: If resource is empty (no remote call is made)
            ConfigurationError: If no target_url is given and the manager
                has no default notification_url
        """
        self._validate_resource(resource)
        target = target_url or self.notification_url
        if not target:
            raise ConfigurationError(
                "No notification URL: pass target_url or configure notification_url."
            )

        async with self._resource_lock(resource):
            return await self._ensure_locked(resource, target)

    async def ensure_team_channels(self, team_id: str) -> Subscription | None:
        """
        Watch a team's channel collection.

        Raises:
            InvalidResourceError: If team_id is empty
        """
        return await self.ensure_subscription(channel_resource(team_id))

    async def _ensure_locked(self, resource: str, target: str) -> Subscription | None:
        with self._tracer.span(
            "notifykeeper.lifecycle.ensure_subscription",
            {ATTR_RESOURCE: resource, ATTR_NOTIFICATION_URL: target},
        ) as span:
            if self.get_state(resource) in (ResourceState.ABSENT, ResourceState.DELETED):
                self._set_state(resource, ResourceState.CREATING)

            try:
                remote = await self.client.list()
            except NotificationServiceError as e:
                logger.error(
                    "Failed to list existing subscriptions",
                    extra={"resource": resource, "status": e.status, "error": str(e)},
                    exc_info=True,
                )
                self._creation_failed(resource, target, e)
                return None
            except Exception as e:
                logger.error(
                    "Unexpected error listing existing subscriptions",
                    extra={"resource": resource, "error": str(e)},
                    exc_info=True,
                )
                self._creation_failed(resource, target, e)
                return None

            matches = [s for s in remote if s.resource == resource]
            existing = self._pick_reusable(resource, matches, target)

            for candidate in matches:
                if existing is not None and candidate.id == existing.id:
                    continue
                reason = self._stale_reason(candidate, target) or "duplicate"
                logger.warning(
                    "Discarding existing subscription",
                    extra={
                        "resource": resource,
                        "subscription_id": candidate.id,
                        "reason": reason,
                        "notification_url": candidate.notification_url,
                        "expiration": candidate.expiration_date_time.isoformat(),
                    },
                )
                await self._delete_best_effort(candidate, reason)
                await self._forget(candidate.id)

            if existing is None and matches and self.get_state(resource) == ResourceState.ACTIVE:
                self._set_state(resource, ResourceState.DELETED)
                self._set_state(resource, ResourceState.CREATING)

            if existing is None:
                subscription = await self._create(resource, target)
                if subscription is None:
                    if span:
                        span.set_attribute(ATTR_OUTCOME, "failed")
                    return None
                outcome = "created"
            else:
                subscription = existing
                outcome = "reused"
                self.metrics.record_reused(resource)
                logger.info(
                    "Reusing existing subscription",
                    extra={
                        "resource": resource,
                        "subscription_id": subscription.id,
                        "expiration": subscription.expiration_date_time.isoformat(),
                    },
                )

            superseded = await self.registry.upsert(subscription)
            if superseded is not None:
                self._clear_failures(superseded.id)
            self._retry_queue.record_success(resource)
            self._set_state(resource, ResourceState.ACTIVE)

            if span:
                span.set_attribute(ATTR_SUBSCRIPTION_ID, subscription.id)
                span.set_attribute(ATTR_OUTCOME, outcome)

            return subscription

    # -- Renewal -------------------------------------------------------------

    async def renew_all(self) -> SweepResult:
        """
        Renew every tracked subscription.

        Iterates a registry snapshot sequentially. Per entry:
        - already expired: deleted (best effort) and recreated
        - renewed: expiration extended to now + expiration period
        - lost remotely (not found): recreated under a new id, old id dropped
        - any other failure: logged, entry kept for the next sweep

        A failure on one entry never aborts the sweep, and nothing raised
        by the notification service propagates to the caller.

        Returns:
            SweepResult describing what happened
        """
        async with self._sweep_lock:
            result = SweepResult()
            started = time.perf_counter()
            snapshot = self.registry.snapshot()

            with self._tracer.span(
                "notifykeeper.lifecycle.renew_all",
                {ATTR_SWEEP_SIZE: len(snapshot)},
            ) as span:
                logger.info(
                    "Renewal sweep started",
                    extra={"subscription_count": len(snapshot)},
                )

                for entry in snapshot:
                    try:
                        async with self._resource_lock(entry.resource):
                            await self._renew_locked(entry, result)
                    except Exception as e:
                        result.failed.append(entry.id)
                        logger.error(
                            "Unexpected error renewing subscription",
                            extra={
                                "subscription_id": entry.id,
                                "resource": entry.resource,
                                "error": str(e),
                            },
                            exc_info=True,
                        )

                if self.config.retry_failed_creations:
                    await self._retry_pending_creations(result)

                result.duration_seconds = time.perf_counter() - started
                self.metrics.record_sweep(result.duration_seconds, len(snapshot))

                if span:
                    span.set_attribute(ATTR_SWEEP_RENEWED, len(result.renewed))
                    span.set_attribute(ATTR_SWEEP_FAILED, len(result.failed))

            log = logger.warning if result.failed or result.lost else logger.info
            log(
                "Renewal sweep completed",
                extra={
                    "renewed": len(result.renewed),
                    "recreated": len(result.recreated),
                    "failed": len(result.failed),
                    "lost": len(result.lost),
                    "lapsed": len(result.lapsed),
                    "retried": len(result.retried),
                    "duration_seconds": result.duration_seconds,
                },
            )
            return result

    async def _renew_locked(self, entry: Subscription, result: SweepResult) -> None:
        # The snapshot may be stale: the entry could have been replaced or
        # dropped by an ensure_subscription call since.
        current = self.registry.get(entry.id)
        if current is None:
            logger.debug(
                "Skipping subscription no longer tracked",
                extra={"subscription_id": entry.id, "resource": entry.resource},
            )
            return

        resource = current.resource
        now = self._clock()

        with self._tracer.span(
            "notifykeeper.lifecycle.renew",
            {ATTR_SUBSCRIPTION_ID: current.id, ATTR_RESOURCE: resource},
        ) as span:
            self._set_state(resource, ResourceState.RENEWING)

            if current.is_expired(now):
                logger.warning(
                    "Tracked subscription already expired, recreating",
                    extra={
                        "subscription_id": current.id,
                        "resource": resource,
                        "expiration": current.expiration_date_time.isoformat(),
                        "consecutive_failures": self._failures.get(current.id, 0),
                    },
                )
                result.lapsed.append(current.id)
                self.metrics.record_lapsed(resource)
                await self._delete_best_effort(current, "expired")
                await self._recreate(current, result)
                return

            requested = now + self.config.expiration_period
            try:
                updated = await self.client.update(current.id, requested)
            except SubscriptionNotFoundError:
                logger.warning(
                    "Subscription not found by the service, recreating",
                    extra={"subscription_id": current.id, "resource": resource},
                )
                self.metrics.record_renewal_failed(resource, "not_found")
                if span:
                    span.set_attribute(ATTR_ERROR_KIND, "not_found")
                await self._recreate(current, result)
                return
            except NotificationServiceError as e:
                self._renewal_failed(current, e, "other", now, result)
                if span:
                    span.set_attribute(ATTR_ERROR_KIND, "other")
                    if e.status is not None:
                        span.set_attribute(ATTR_ERROR_STATUS, e.status)
                return
            except Exception as e:
                self._renewal_failed(current, e, "unexpected", now, result)
                if span:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                return

            renewed = current.with_expiration(updated.expiration_date_time)
            await self.registry.upsert(renewed)
            self._clear_failures(current.id)
            self._set_state(resource, ResourceState.ACTIVE)
            self.metrics.record_renewed(resource)
            result.renewed.append(current.id)
            if span:
                span.set_attribute(ATTR_EXPIRATION, renewed.expiration_date_time.isoformat())

            logger.info(
                "Renewed subscription",
                extra={
                    "subscription_id": current.id,
                    "resource": resource,
                    "expiration": renewed.expiration_date_time.isoformat(),
                },
            )

    def _renewal_failed(
        self,
        current: Subscription,
        error: Exception,
        kind: str,
        now: datetime,
        result: SweepResult,
    ) -> None:
        failures = self._failures.get(current.id, 0) + 1
        self._failures[current.id] = failures
        self._last_errors[current.id] = str(error)
        self._set_state(current.resource, ResourceState.ACTIVE)
        self.metrics.record_renewal_failed(current.resource, kind)
        result.failed.append(current.id)

        logger.error(
            "Failed to renew subscription",
            extra={
                "subscription_id": current.id,
                "resource": current.resource,
                "status": getattr(error, "status", None),
                "consecutive_failures": failures,
                "error": str(error),
            },
            exc_info=True,
        )

        if current.expires_within(self.config.renew_interval, now):
            logger.warning(
                "Subscription will expire before the next sweep",
                extra={
                    "subscription_id": current.id,
                    "resource": current.resource,
                    "expiration": current.expiration_date_time.isoformat(),
                    "consecutive_failures": failures,
                },
            )

    async def _recreate(self, old: Subscription, result: SweepResult) -> None:
        resource = old.resource
        self._set_state(resource, ResourceState.RECREATING)

        replacement = await self._create(resource, old.notification_url)
        if replacement is None:
            await self._forget(old.id)
            result.lost.append(resource)
            logger.error(
                "Failed to recreate lost subscription, resource is no longer watched",
                extra={"subscription_id": old.id, "resource": resource},
            )
            return

        await self._forget(old.id)
        await self.registry.upsert(replacement)
        self._set_state(resource, ResourceState.ACTIVE)
        self.metrics.record_recreated(resource)
        result.recreated.append((old.id, replacement.id))

        logger.info(
            "Recreated subscription",
            extra={
                "old_subscription_id": old.id,
                "subscription_id": replacement.id,
                "resource": resource,
            },
        )

    async def _retry_pending_creations(self, result: SweepResult) -> None:
        due: list[PendingCreation] = self._retry_queue.due(self._clock())
        for pending in due:
            try:
                async with self._resource_lock(pending.resource):
                    await self._retry_locked(pending, result)
            except Exception as e:
                logger.error(
                    "Unexpected error retrying subscription creation",
                    extra={
                        "resource": pending.resource,
                        "failures": pending.failures,
                        "error": str(e),
                    },
                    exc_info=True,
                )

    async def _retry_locked(self, pending: PendingCreation, result: SweepResult) -> None:
        if self.registry.find_by_resource(pending.resource) is not None:
            self._retry_queue.record_success(pending.resource)
            return
        logger.info(
            "Retrying subscription creation",
            extra={"resource": pending.resource, "failures": pending.failures},
        )
        subscription = await self._ensure_locked(pending.resource, pending.notification_url)
        if subscription is not None:
            result.retried.append(pending.resource)

    # -- Remote call helpers ---------------------------------------------------

    async def _create(self, resource: str, target: str) -> Subscription | None:
        request = self._build_request(resource, target)
        try:
            subscription = await self.client.create(request)
        except NotificationServiceError as e:
            logger.error(
                "Failed to create subscription",
                extra={"resource": resource, "status": e.status, "error": str(e)},
                exc_info=True,
            )
            self._creation_failed(resource, target, e)
            return None
        except Exception as e:
            logger.error(
                "Unexpected error creating subscription",
                extra={"resource": resource, "error": str(e)},
                exc_info=True,
            )
            self._creation_failed(resource, target, e)
            return None

        self.metrics.record_created(resource)
        logger.info(
            "Created subscription",
            extra={
                "resource": resource,
                "subscription_id": subscription.id,
                "expiration": subscription.expiration_date_time.isoformat(),
            },
        )
        return subscription

    async def _delete_best_effort(self, subscription: Subscription, reason: str) -> None:
        try:
            await self.client.delete(subscription.id)
        except SubscriptionNotFoundError:
            logger.debug(
                "Subscription already gone on delete",
                extra={"subscription_id": subscription.id, "resource": subscription.resource},
            )
            return
        except NotificationServiceError as e:
            logger.warning(
                "Failed to delete subscription",
                extra={
                    "subscription_id": subscription.id,
                    "resource": subscription.resource,
                    "status": e.status,
                    "error": str(e),
                },
            )
            return
        except Exception as e:
            logger.error(
                "Unexpected error deleting subscription",
                extra={
                    "subscription_id": subscription.id,
                    "resource": subscription.resource,
                    "error": str(e),
                },
                exc_info=True,
            )
            return

        self.metrics.record_deleted(subscription.resource, reason)
        logger.info(
            "Deleted subscription",
            extra={
                "subscription_id": subscription.id,
                "resource": subscription.resource,
                "reason": reason,
            },
        )

    def _build_request(self, resource: str, target: str) -> SubscriptionRequest:
        return SubscriptionRequest(
            resource=resource,
            notification_url=target,
            client_state=self.client_state,
            expiration_date_time=self._clock() + self.config.expiration_period,
            encryption_certificate=self.encryption_certificate,
            encryption_certificate_id=self.encryption_certificate_id,
            include_resource_data=self.config.include_resource_data,
            change_type=self.config.change_type,
        )

    def _creation_failed(self, resource: str, target: str, error: Exception) -> None:
        self.metrics.record_creation_failed(resource, type(error).__name__)
        if self.get_state(resource) in (ResourceState.CREATING, ResourceState.RECREATING):
            self._set_state(resource, ResourceState.ABSENT)
        if self.config.retry_failed_creations:
            self._retry_queue.record_failure(resource, target, self._clock(), str(error))

    # -- State -----------------------------------------------------------------

    def _pick_reusable(
        self,
        resource: str,
        matches: list[Subscription],
        target: str,
    ) -> Subscription | None:
        # The tracked entry wins, then the one expiring last.
        reusable = [s for s in matches if self._stale_reason(s, target) is None]
        if not reusable:
            return None
        tracked = self.registry.find_by_resource(resource)
        if tracked is not None:
            for subscription in reusable:
                if subscription.id == tracked.id:
                    return subscription
        return max(reusable, key=lambda s: s.expiration_date_time)

    def _stale_reason(self, subscription: Subscription, target: str) -> str | None:
        if subscription.notification_url != target:
            return "stale_url"
        if subscription.is_expired(self._clock()):
            return "expired"
        return None

    async def _forget(self, subscription_id: str) -> None:
        await self.registry.remove(subscription_id)
        self._clear_failures(subscription_id)

    def _clear_failures(self, subscription_id: str) -> None:
        self._failures.pop(subscription_id, None)
        self._last_errors.pop(subscription_id, None)

    def _resource_lock(self, resource: str) -> asyncio.Lock:
        lock = self._locks.get(resource)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[resource] = lock
        return lock

    def _set_state(self, resource: str, state: ResourceState) -> None:
        current = self.get_state(resource)
        if current == state:
            return
        if not is_valid_transition(current, state):
            logger.warning(
                "Unexpected lifecycle transition",
                extra={
                    "resource": resource,
                    "from_state": current.value,
                    "to_state": state.value,
                },
            )
        self._states[resource] = state
        logger.debug(
            "Lifecycle transition",
            extra={"resource": resource, "from_state": current.value, "to_state": state.value},
        )

    @staticmethod
    def _validate_resource(resource: str) -> None:
        if not isinstance(resource, str) or not resource.strip():
            raise InvalidResourceError(resource)

    def get_state(self, resource: str) -> ResourceState:
        """Lifecycle state of a resource (ABSENT if never seen)."""
        return self._states.get(resource, ResourceState.ABSENT)

    def get_subscription(self, resource: str) -> Subscription | None:
        """The subscription currently tracked for a resource."""
        return self.registry.find_by_resource(resource)

    def statuses(self) -> list[SubscriptionStatus]:
        """Status snapshots of all tracked subscriptions."""
        now = self._clock()
        statuses = []
        for subscription in self.registry.snapshot():
            failures = self._failures.get(subscription.id, 0)
            statuses.append(
                SubscriptionStatus(
                    subscription_id=subscription.id,
                    resource=subscription.resource,
                    notification_url=subscription.notification_url,
                    state=self.get_state(subscription.resource),
                    expiration=subscription.expiration_date_time,
                    seconds_to_expiry=subscription.seconds_to_expiry(now),
                    consecutive_failures=failures,
                    last_error=self._last_errors.get(subscription.id),
                    at_risk=failures > 0
                    and subscription.expires_within(self.config.renew_interval, now),
                )
            )
        return statuses

    @property
    def pending_creations(self) -> list[PendingCreation]:
        """Creations queued for retry (empty unless retries are enabled)."""
        return self._retry_queue.pending()


__all__ = [
    "SubscriptionLifecycleManager",
    "SubscriptionStatus",
    "SweepResult",
]
