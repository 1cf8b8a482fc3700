"""
Unit tests for SubscriptionScheduler.

These tests use real timers with short intervals.
"""

import asyncio
from collections.abc import Callable

import pytest

from notifykeeper import ConfigurationError, SubscriptionLifecycleManager, SubscriptionScheduler
from notifykeeper.client import InMemoryNotificationServiceClient
from tests.fixtures import RESOURCE, TARGET_URL

SHORT_INTERVAL = 0.02


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll predicate until it returns True or timeout elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


class TestConstruction:
    def test_defaults_to_config_cadence(self, manager):
        scheduler = SubscriptionScheduler(manager)

        assert scheduler.renew_interval == 900
        assert scheduler.resources == []
        assert scheduler.is_running is False

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, manager, interval):
        with pytest.raises(ValueError):
            SubscriptionScheduler(manager, renew_interval=interval)

    @pytest.mark.parametrize("interval", [3600, 7200])
    def test_rejects_interval_not_shorter_than_validity(self, manager, interval):
        with pytest.raises(ConfigurationError, match="shorter than"):
            SubscriptionScheduler(manager, renew_interval=interval)

    def test_accepts_interval_just_below_validity(self, manager):
        scheduler = SubscriptionScheduler(manager, renew_interval=3599)

        assert scheduler.renew_interval == 3599


class TestOneShot:
    @pytest.mark.asyncio
    async def test_run_once(self, manager):
        await manager.ensure_subscription(RESOURCE)
        scheduler = SubscriptionScheduler(manager)

        result = await scheduler.run_once()

        assert result.renewed == ["S1"]
        assert scheduler.sweep_count == 1
        assert scheduler.last_result is result

    @pytest.mark.asyncio
    async def test_initialize_onboards_resources_then_sweeps(self, manager, client, registry):
        scheduler = SubscriptionScheduler(manager, resources=[RESOURCE, "/teams/T2/channels"])

        await scheduler.initialize()

        assert len(registry) == 2
        assert client.call_count("create") == 2
        assert client.call_count("update") == 2
        assert scheduler.sweep_count == 1

    @pytest.mark.asyncio
    async def test_initialize_skips_invalid_resources(self, manager, registry):
        scheduler = SubscriptionScheduler(manager, resources=["", RESOURCE])

        await scheduler.initialize()

        assert registry.find_by_resource(RESOURCE) is not None
        assert len(registry) == 1


@pytest.mark.slow
class TestBackgroundLoop:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, manager):
        scheduler = SubscriptionScheduler(
            manager, resources=[RESOURCE], renew_interval=SHORT_INTERVAL
        )

        scheduler.start()
        assert scheduler.is_running
        await wait_until(lambda: scheduler.sweep_count >= 3)
        await scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_loop(self, manager, client):
        scheduler = SubscriptionScheduler(manager, resources=[RESOURCE], renew_interval=60)

        scheduler.start()
        scheduler.start()
        await wait_until(lambda: scheduler.sweep_count >= 1)
        await scheduler.stop()

        assert client.call_count("create") == 1

    @pytest.mark.asyncio
    async def test_stop_interrupts_the_wait(self, manager):
        scheduler = SubscriptionScheduler(manager, renew_interval=60)
        scheduler.start()
        await wait_until(lambda: scheduler.sweep_count >= 1)

        await asyncio.wait_for(scheduler.stop(), timeout=1.0)

        assert scheduler.sweep_count == 1

    @pytest.mark.asyncio
    async def test_stop_lets_in_flight_sweep_finish(self, registry, clock):
        client = InMemoryNotificationServiceClient(latency=0.03)
        manager = SubscriptionLifecycleManager(
            client,
            registry,
            notification_url=TARGET_URL,
            enable_metrics=False,
            enable_tracing=False,
            clock=clock,
        )
        scheduler = SubscriptionScheduler(
            manager, resources=[RESOURCE], renew_interval=SHORT_INTERVAL
        )
        scheduler.start()
        await wait_until(lambda: client.call_count("update") >= 2)

        await scheduler.stop()

        # One update per sweep: a cancelled sweep would leave an extra call
        assert client.call_count("update") == scheduler.sweep_count
        assert scheduler.last_result.renewed == ["S1"]

    @pytest.mark.asyncio
    async def test_loop_survives_remote_failures(self, manager, client):
        client.fail_next("list", RuntimeError("network down"))
        scheduler = SubscriptionScheduler(
            manager, resources=[RESOURCE], renew_interval=SHORT_INTERVAL
        )

        scheduler.start()
        await wait_until(lambda: scheduler.sweep_count >= 2)
        await scheduler.stop()

        assert client.call_count("create") == 0

    @pytest.mark.asyncio
    async def test_restart_after_stop(self, manager):
        scheduler = SubscriptionScheduler(manager, renew_interval=SHORT_INTERVAL)

        scheduler.start()
        await wait_until(lambda: scheduler.sweep_count >= 1)
        await scheduler.stop()
        scheduler.start()
        await wait_until(lambda: scheduler.sweep_count >= 3)
        await scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_async_context_manager(self, manager):
        async with SubscriptionScheduler(manager, renew_interval=SHORT_INTERVAL) as scheduler:
            assert scheduler.is_running
            await wait_until(lambda: scheduler.sweep_count >= 2)

        assert scheduler.is_running is False


@pytest.mark.slow
class TestDaemonMode:
    @pytest.mark.asyncio
    async def test_run_until_shutdown_returns_after_request(self, manager):
        scheduler = SubscriptionScheduler(manager, renew_interval=SHORT_INTERVAL)

        task = asyncio.create_task(scheduler.run_until_shutdown())
        await wait_until(lambda: scheduler.sweep_count >= 1)
        scheduler.request_shutdown()
        await asyncio.wait_for(task, timeout=1.0)

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_request_shutdown_is_idempotent(self, manager):
        scheduler = SubscriptionScheduler(manager, renew_interval=SHORT_INTERVAL)

        scheduler.request_shutdown()
        scheduler.request_shutdown()

        await asyncio.wait_for(scheduler.run_until_shutdown(), timeout=1.0)
        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_signal_handlers_removed_on_exit(self, manager):
        scheduler = SubscriptionScheduler(manager, renew_interval=SHORT_INTERVAL)
        scheduler.request_shutdown()

        await scheduler.run_until_shutdown()

        assert scheduler._signal_handlers_registered is False
