"""
Notification service clients.

This module provides:
- NotificationServiceClient: Protocol consumed by the lifecycle manager
- InMemoryNotificationServiceClient: In-memory implementation for tests
  and local development
"""

from notifykeeper.client.in_memory import InMemoryNotificationServiceClient
from notifykeeper.client.interface import NotificationServiceClient

__all__ = [
    "InMemoryNotificationServiceClient",
    "NotificationServiceClient",
]
