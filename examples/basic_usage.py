"""
Basic Usage Example

This example walks one watched resource through its whole life:
- Creating a subscription for a team's channel collection
- Replacing it when the receiver URL changes
- Renewing it in a sweep
- Recreating it after the notification service loses it

Run with: python examples/basic_usage.py
"""

import asyncio
import logging

from notifykeeper import (
    InMemoryNotificationServiceClient,
    NotificationServiceError,
    SubscriptionLifecycleManager,
)


async def main() -> None:
    print("=" * 60)
    print("notifykeeper basic usage")
    print("=" * 60)

    # The in-memory client stands in for the remote notification service
    client = InMemoryNotificationServiceClient()
    manager = SubscriptionLifecycleManager(
        client,
        notification_url="https://bot.example.com/api/notifications",
        client_state="ClientState",
        enable_tracing=False,
    )

    print("\n1. Watch a team's channels:")
    subscription = await manager.ensure_team_channels("T1")
    print(f"   Created {subscription.id} for {subscription.resource}")
    print(f"   Expires at {subscription.expiration_date_time.isoformat()}")

    print("\n2. Receiver moved to a new host:")
    subscription = await manager.ensure_subscription(
        subscription.resource,
        "https://bot-v2.example.com/api/notifications",
    )
    print(f"   Stale subscription deleted, now tracking {subscription.id}")

    print("\n3. Renewal sweep:")
    result = await manager.renew_all()
    print(f"   Renewed: {result.renewed}")

    print("\n4. Service throttles a renewal:")
    client.fail_next("update", NotificationServiceError("throttled", status=429))
    result = await manager.renew_all()
    (status,) = manager.statuses()
    print(f"   Failed: {result.failed}, consecutive failures: {status.consecutive_failures}")

    print("\n5. Service lost the subscription:")
    client.drop(subscription.id)
    result = await manager.renew_all()
    for old_id, new_id in result.recreated:
        print(f"   {old_id} recreated as {new_id}")

    print("\n6. Final state:")
    for status in manager.statuses():
        print(f"   {status.subscription_id}: {status.resource} ({status.state.value})")
        print(f"   Seconds to expiry: {status.seconds_to_expiry:.0f}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(main())
