"""
Background scheduler for subscription renewal sweeps.

The SubscriptionScheduler owns one long-running asyncio task that:
1. Onboards the configured resources (ensure_subscription for each) and
   runs a first sweep
2. Waits renew_interval, then runs lifecycle.renew_all(), forever

Shutdown is only observed at the wait point: a sweep that has started
runs to completion, and no remote call is cancelled midway.

Example:
    >>> scheduler = SubscriptionScheduler(manager, resources=["/teams/T1/channels"])
    >>> scheduler.start()
    >>> ...
    >>> await scheduler.stop()

Daemon-style operation with signal handling:
    >>> async with SubscriptionScheduler(manager) as scheduler:
    ...     await scheduler.run_until_shutdown()
"""

import asyncio
import contextlib
import logging
import signal
from collections.abc import Iterable
from typing import Any

from notifykeeper.exceptions import ConfigurationError, InvalidResourceError
from notifykeeper.lifecycle import SubscriptionLifecycleManager, SweepResult

logger = logging.getLogger(__name__)


class SubscriptionScheduler:
    """
    Runs renewal sweeps on a fixed cadence.

    Attributes:
        lifecycle: The lifecycle manager sweeps are delegated to
        resources: Resources onboarded when the scheduler starts
        renew_interval: Seconds between sweeps
    """

    def __init__(
        self,
        lifecycle: SubscriptionLifecycleManager,
        resources: Iterable[str] = (),
        renew_interval: float | None = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            lifecycle: Lifecycle manager to drive
            resources: Resource paths to ensure on startup
            renew_interval: Seconds between sweeps. Defaults to the lifecycle
                config's renew_interval_seconds.

        Raises:
            ConfigurationError: If renew_interval is not positive or is not
                shorter than the subscription validity
        """
        self.lifecycle = lifecycle
        self.resources = list(resources)
        self.renew_interval = (
            renew_interval
            if renew_interval is not None
            else lifecycle.config.renew_interval_seconds
        )
        if self.renew_interval <= 0:
            raise ConfigurationError(f"renew_interval must be positive, got {self.renew_interval}.")
        validity = lifecycle.config.expiration_period_seconds
        if self.renew_interval >= validity:
            raise ConfigurationError(
                f"renew_interval ({self.renew_interval}) must be shorter than the "
                f"subscription validity ({validity}) or subscriptions lapse between sweeps."
            )

        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._shutdown_event = asyncio.Event()
        self._signal_handlers_registered = False
        self._sweep_count = 0
        self._last_result: SweepResult | None = None

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """
        Start the background loop.

        Must be called from within a running event loop. Calling start on
        a running scheduler does nothing.
        """
        if self.is_running:
            logger.warning("Scheduler already running")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name="subscription-renewal-loop")
        logger.info(
            "Subscription scheduler started",
            extra={
                "renew_interval_seconds": self.renew_interval,
                "resource_count": len(self.resources),
            },
        )

    async def stop(self) -> None:
        """
        Stop the background loop.

        Waits for an in-flight sweep to finish before returning.
        """
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None
        logger.info(
            "Subscription scheduler stopped",
            extra={"sweep_count": self._sweep_count},
        )

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def sweep_count(self) -> int:
        """Sweeps completed since construction."""
        return self._sweep_count

    @property
    def last_result(self) -> SweepResult | None:
        return self._last_result

    async def run_once(self) -> SweepResult:
        """Run one sweep immediately, outside the timer."""
        result = await self.lifecycle.renew_all()
        self._sweep_count += 1
        self._last_result = result
        return result

    async def initialize(self) -> None:
        """
        Onboard the configured resources and run a first sweep.

        A resource that fails to onboard is logged and skipped.
        """
        logger.info(
            "Initializing subscriptions",
            extra={"resources": self.resources},
        )
        for resource in self.resources:
            try:
                await self.lifecycle.ensure_subscription(resource)
            except InvalidResourceError as e:
                logger.error(
                    "Skipping invalid resource",
                    extra={"resource": resource, "error": str(e)},
                )
        await self.run_once()
        logger.info("Subscriptions initialized")

    async def _run(self) -> None:
        try:
            await self.initialize()
        except Exception as e:
            logger.error(
                "Subscription initialization failed",
                extra={"error": str(e)},
                exc_info=True,
            )

        while not self._stop_event.is_set():
            if await self._wait_for_stop(self.renew_interval):
                break

            logger.info("Renewal started", extra={"sweep": self._sweep_count + 1})
            try:
                await self.run_once()
            except Exception as e:
                logger.error(
                    "Renewal sweep crashed",
                    extra={"error": str(e)},
                    exc_info=True,
                )

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Wait up to timeout seconds; True if stop was requested."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True

    # -- Daemon mode -------------------------------------------------------------

    def register_signals(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """
        Register SIGTERM/SIGINT handlers that request shutdown.

        Args:
            loop: Event loop to register handlers on. Defaults to the
                  running event loop.
        """
        if self._signal_handlers_registered:
            logger.warning("Signal handlers already registered")
            return

        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                # Windows event loops lack add_signal_handler
                logger.warning(
                    "Signal handling not supported on this platform",
                    extra={"signal": sig.name},
                )
        self._signal_handlers_registered = True

    def unregister_signals(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if not self._signal_handlers_registered:
            return

        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            with contextlib.suppress(NotImplementedError, ValueError):
                loop.remove_signal_handler(sig)
        self._signal_handlers_registered = False

    def request_shutdown(self) -> None:
        """Ask run_until_shutdown to stop the scheduler and return."""
        if not self._shutdown_event.is_set():
            logger.info("Shutdown requested")
            self._shutdown_event.set()

    async def run_until_shutdown(self) -> None:
        """
        Run the scheduler until SIGTERM/SIGINT or request_shutdown().

        Starts the loop if it is not already running, and always stops it
        and removes the signal handlers before returning.
        """
        self.register_signals()
        try:
            if not self.is_running:
                self.start()
            logger.info("Scheduler running, waiting for shutdown signal")
            await self._shutdown_event.wait()
        finally:
            await self.stop()
            self.unregister_signals()

    async def __aenter__(self) -> "SubscriptionScheduler":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()


__all__ = ["SubscriptionScheduler"]
