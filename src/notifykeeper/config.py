"""
Configuration for subscription lifecycle management.

This module provides:
- LifecycleConfig: Timing and construction settings for the lifecycle manager
- NotificationSettings: Environment-driven deployment settings (receiver URL,
  client state, encryption certificate, resources to watch at startup)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from notifykeeper.exceptions import ConfigurationError
from notifykeeper.models import DEFAULT_CHANGE_TYPES, ChangeType, format_change_types

if TYPE_CHECKING:
    from notifykeeper.retry import RetryConfig


# Validity window requested for every subscription
DEFAULT_EXPIRATION_SECONDS = 60 * 60.0

# Sweep cadence; must stay well inside the validity window
DEFAULT_RENEW_INTERVAL_SECONDS = 15 * 60.0


@dataclass(frozen=True)
class LifecycleConfig:
    """
    Configuration for the subscription lifecycle manager and scheduler.

    Attributes:
        expiration_period_seconds: Lifetime requested on create and renew
        renew_interval_seconds: Seconds between renewal sweeps. Must be
            strictly shorter than expiration_period_seconds so a failed
            renewal can be retried before the subscription lapses.
        change_types: Change kinds requested for new subscriptions
        include_resource_data: Whether notifications carry resource payloads
        retry_failed_creations: Queue failed creations for retry with
            backoff at the next sweeps. Off by default: a failed creation is
            only retried when ensure_subscription is called again.
        creation_max_retries: Attempts before a queued creation is dropped
        creation_initial_retry_delay: Backoff before the first retry
        creation_max_retry_delay: Backoff ceiling
        retry_exponential_base: Backoff growth factor
        retry_jitter: Fraction of the delay added as random jitter (0-1)

    Example:
        >>> config = LifecycleConfig(
        ...     expiration_period_seconds=3600,
        ...     renew_interval_seconds=900,
        ... )
    """

    expiration_period_seconds: float = DEFAULT_EXPIRATION_SECONDS
    renew_interval_seconds: float = DEFAULT_RENEW_INTERVAL_SECONDS

    change_types: tuple[ChangeType, ...] = DEFAULT_CHANGE_TYPES
    include_resource_data: bool = True

    # Creation retry queue
    retry_failed_creations: bool = False
    creation_max_retries: int = 5
    creation_initial_retry_delay: float = 30.0
    creation_max_retry_delay: float = 900.0
    retry_exponential_base: float = 2.0
    retry_jitter: float = 0.1

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.expiration_period_seconds <= 0:
            raise ConfigurationError(
                f"expiration_period_seconds must be positive, got {self.expiration_period_seconds}."
            )

        if self.renew_interval_seconds <= 0:
            raise ConfigurationError(
                f"renew_interval_seconds must be positive, got {self.renew_interval_seconds}."
            )

        if self.renew_interval_seconds >= self.expiration_period_seconds:
            raise ConfigurationError(
                f"renew_interval_seconds ({self.renew_interval_seconds}) must be shorter than "
                f"expiration_period_seconds ({self.expiration_period_seconds}). "
                "Use a cadence like 900 (15 minutes) against a 3600 second validity window."
            )

        if not self.change_types:
            raise ConfigurationError("change_types must not be empty.")

        if self.creation_max_retries < 0:
            raise ConfigurationError(
                f"creation_max_retries must be >= 0, got {self.creation_max_retries}."
            )

        if self.creation_initial_retry_delay <= 0:
            raise ConfigurationError(
                f"creation_initial_retry_delay must be positive, "
                f"got {self.creation_initial_retry_delay}."
            )

        if self.creation_max_retry_delay < self.creation_initial_retry_delay:
            raise ConfigurationError(
                f"creation_max_retry_delay ({self.creation_max_retry_delay}) must be >= "
                f"creation_initial_retry_delay ({self.creation_initial_retry_delay})."
            )

        if self.retry_exponential_base <= 1.0:
            raise ConfigurationError(
                f"retry_exponential_base must be > 1.0, got {self.retry_exponential_base}."
            )

        if not 0.0 <= self.retry_jitter <= 1.0:
            raise ConfigurationError(
                f"retry_jitter must be between 0.0 and 1.0, got {self.retry_jitter}."
            )

    @property
    def expiration_period(self) -> timedelta:
        return timedelta(seconds=self.expiration_period_seconds)

    @property
    def renew_interval(self) -> timedelta:
        return timedelta(seconds=self.renew_interval_seconds)

    @property
    def change_type(self) -> str:
        """Change types in wire form, e.g. ``created,deleted,updated``."""
        return format_change_types(self.change_types)

    def get_retry_config(self) -> RetryConfig:
        """
        Get the creation retry configuration.

        Returns:
            RetryConfig instance with settings from this config
        """
        from notifykeeper.retry import RetryConfig

        return RetryConfig(
            max_retries=self.creation_max_retries,
            initial_delay=self.creation_initial_retry_delay,
            max_delay=self.creation_max_retry_delay,
            exponential_base=self.retry_exponential_base,
            jitter=self.retry_jitter,
        )


class NotificationSettings(BaseSettings):
    """
    Deployment settings read from the environment.

    Variables use the ``NOTIFYKEEPER_`` prefix, e.g. ``NOTIFYKEEPER_BASE_URL``.
    ``NOTIFYKEEPER_WATCHED_RESOURCES`` is a JSON list of resource paths.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFYKEEPER_",
        env_file=".env",
        extra="ignore",
    )

    base_url: str = Field(..., description="Public base URL of the receiver host")
    notification_path: str = Field(default="/api/notifications")
    client_state: str | None = Field(
        default=None,
        description="Secret the receiver uses to authenticate notifications",
    )
    encryption_certificate: str | None = Field(
        default=None,
        description="Base64 encoded public certificate for resource data encryption",
    )
    encryption_certificate_id: str | None = None
    watched_resources: list[str] = Field(default_factory=list)

    expiration_minutes: float = Field(default=DEFAULT_EXPIRATION_SECONDS / 60, gt=0)
    renew_interval_minutes: float = Field(default=DEFAULT_RENEW_INTERVAL_SECONDS / 60, gt=0)
    retry_failed_creations: bool = False

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("notification_path")
    @classmethod
    def validate_notification_path(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @property
    def notification_url(self) -> str:
        """Receiver endpoint registered with every subscription."""
        return f"{self.base_url}{self.notification_path}"

    def to_lifecycle_config(self) -> LifecycleConfig:
        return LifecycleConfig(
            expiration_period_seconds=self.expiration_minutes * 60,
            renew_interval_seconds=self.renew_interval_minutes * 60,
            retry_failed_creations=self.retry_failed_creations,
        )


__all__ = [
    "DEFAULT_EXPIRATION_SECONDS",
    "DEFAULT_RENEW_INTERVAL_SECONDS",
    "LifecycleConfig",
    "NotificationSettings",
]
