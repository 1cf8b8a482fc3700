"""
Data model for change notification subscriptions.

Subscriptions mirror the JSON shape used by Graph-style notification
services: attribute names are snake_case in Python and camelCase on the
wire, so ``Subscription.model_validate(payload)`` accepts a service
response directly and ``model_dump(by_alias=True)`` produces a request body.

Example:
    >>> request = SubscriptionRequest(
    ...     resource=channel_resource("T1"),
    ...     notification_url="https://host/api/notifications",
    ...     expiration_date_time=datetime.now(UTC) + timedelta(minutes=60),
    ... )
    >>> request.model_dump(by_alias=True)["notificationUrl"]
    'https://host/api/notifications'
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from notifykeeper.exceptions import InvalidResourceError


class ChangeType(str, Enum):
    """Change kinds a subscription can be notified about."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


DEFAULT_CHANGE_TYPES: tuple[ChangeType, ...] = (
    ChangeType.CREATED,
    ChangeType.DELETED,
    ChangeType.UPDATED,
)


def format_change_types(change_types: Iterable[ChangeType | str]) -> str:
    """
    Join change types into the comma separated form the service expects.

    Order is preserved and duplicates are dropped.

    Example:
        >>> format_change_types([ChangeType.CREATED, ChangeType.DELETED])
        'created,deleted'
    """
    seen: list[str] = []
    for change_type in change_types:
        value = ChangeType(change_type).value
        if value not in seen:
            seen.append(value)
    return ",".join(seen)


def parse_change_types(value: str) -> frozenset[ChangeType]:
    """Parse a comma separated change type string."""
    return frozenset(ChangeType(part.strip()) for part in value.split(",") if part.strip())


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware timestamp; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def channel_resource(team_id: str) -> str:
    """
    Build the channel collection resource path for a team.

    Raises:
        InvalidResourceError: If team_id is empty
    """
    if not team_id or not team_id.strip():
        raise InvalidResourceError(team_id, "team id must not be empty")
    return f"/teams/{team_id.strip()}/channels"


class SubscriptionRequest(BaseModel):
    """
    Fields sent to the service to create a subscription.

    Certificate fields are opaque and passed through unmodified.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    resource: str = Field(..., min_length=1, description="Watched resource path")
    notification_url: str = Field(..., min_length=1, description="Receiver endpoint")
    client_state: str | None = Field(
        default=None,
        description="Shared secret echoed back in every notification",
    )
    expiration_date_time: datetime = Field(..., description="Requested expiry (UTC)")
    encryption_certificate: str | None = None
    encryption_certificate_id: str | None = None
    include_resource_data: bool = True
    change_type: str = Field(default=format_change_types(DEFAULT_CHANGE_TYPES))

    @field_validator("expiration_date_time")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def change_types(self) -> frozenset[ChangeType]:
        """Change types as a set of enum members."""
        return parse_change_types(self.change_type)


class Subscription(SubscriptionRequest):
    """
    A subscription as registered with the remote service.

    Instances are immutable; renewals produce a copy via
    ``with_expiration`` and are upserted back into the registry.

    Attributes:
        id: Opaque identifier assigned by the remote service
    """

    id: str = Field(..., min_length=1, description="Remote subscription id")

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the expiration time is at or before ``now``."""
        return self.expiration_date_time <= (now or datetime.now(UTC))

    def expires_within(self, window: timedelta, now: datetime | None = None) -> bool:
        """Whether the subscription expires within ``window`` from ``now``."""
        return self.expiration_date_time <= (now or datetime.now(UTC)) + window

    def seconds_to_expiry(self, now: datetime | None = None) -> float:
        """Seconds until expiry; negative once expired."""
        return (self.expiration_date_time - (now or datetime.now(UTC))).total_seconds()

    def with_expiration(self, expiration: datetime) -> Subscription:
        """Return a copy with a new expiration time."""
        return self.model_copy(update={"expiration_date_time": as_utc(expiration)})


__all__ = [
    "ChangeType",
    "DEFAULT_CHANGE_TYPES",
    "Subscription",
    "SubscriptionRequest",
    "as_utc",
    "channel_resource",
    "format_change_types",
    "parse_change_types",
]
