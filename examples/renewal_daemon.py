"""
Renewal Daemon Example

Runs the renewal loop the way a hosting process would:
- Settings come from NOTIFYKEEPER_* environment variables
- Watched resources are onboarded at startup
- Sweeps run on a fixed cadence until SIGTERM/SIGINT

Run with:
    NOTIFYKEEPER_BASE_URL=https://bot.example.com \\
    NOTIFYKEEPER_WATCHED_RESOURCES='["/teams/T1/channels"]' \\
    python examples/renewal_daemon.py

A real deployment passes its own NotificationServiceClient implementation
instead of the in-memory one.
"""

import asyncio
import logging

from notifykeeper import (
    InMemoryNotificationServiceClient,
    NotificationSettings,
    SubscriptionLifecycleManager,
    SubscriptionScheduler,
)

logger = logging.getLogger("renewal_daemon")


async def main() -> None:
    settings = NotificationSettings()
    manager = SubscriptionLifecycleManager.from_settings(
        InMemoryNotificationServiceClient(),
        settings,
    )
    scheduler = SubscriptionScheduler(manager, resources=settings.watched_resources)

    logger.info(
        "Starting renewal daemon",
        extra={"notification_url": settings.notification_url},
    )
    await scheduler.run_until_shutdown()

    if scheduler.last_result is not None:
        logger.info("Last sweep", extra=scheduler.last_result.to_dict())


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    asyncio.run(main())
