"""
Unit tests for the notifykeeper exception hierarchy.
"""

import pytest

from notifykeeper.exceptions import (
    ConfigurationError,
    InvalidResourceError,
    NotificationServiceError,
    NotifyKeeperError,
    ServiceErrorKind,
    SubscriptionNotFoundError,
)


class TestNotificationServiceError:
    def test_defaults_to_other_kind(self):
        error = NotificationServiceError("throttled", status=429, subscription_id="S1")

        assert error.kind == ServiceErrorKind.OTHER
        assert error.status == 429
        assert error.subscription_id == "S1"
        assert error.message == "throttled"
        assert str(error) == "throttled (status 429)"

    def test_message_without_status(self):
        assert str(NotificationServiceError("boom")) == "boom"


class TestSubscriptionNotFoundError:
    def test_attributes(self):
        error = SubscriptionNotFoundError("S2")

        assert error.kind == ServiceErrorKind.NOT_FOUND
        assert error.status == 404
        assert error.subscription_id == "S2"
        assert "S2" in str(error)

    def test_is_a_notification_service_error(self):
        with pytest.raises(NotificationServiceError):
            raise SubscriptionNotFoundError("S2")


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            InvalidResourceError(""),
            NotificationServiceError("boom"),
            SubscriptionNotFoundError("S1"),
        ],
    )
    def test_all_inherit_from_base(self, error):
        assert isinstance(error, NotifyKeeperError)

    def test_invalid_resource_error_message(self):
        error = InvalidResourceError("  ")

        assert error.resource == "  "
        assert "resource must not be empty" in str(error)
        assert isinstance(error, ValueError)
