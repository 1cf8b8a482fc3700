"""
Unit tests for the subscription data model.

Tests cover:
- Wire aliases (camelCase) for requests and service responses
- Timezone normalization of expiration timestamps
- Expiry helpers on Subscription
- Change type formatting and the channel resource helper
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from notifykeeper.exceptions import InvalidResourceError
from notifykeeper.models import (
    ChangeType,
    Subscription,
    SubscriptionRequest,
    channel_resource,
    format_change_types,
    parse_change_types,
)
from tests.fixtures import RESOURCE, START_TIME, TARGET_URL


class TestSubscriptionRequest:
    def test_defaults(self):
        request = SubscriptionRequest(
            resource=RESOURCE,
            notification_url=TARGET_URL,
            expiration_date_time=START_TIME,
        )

        assert request.client_state is None
        assert request.include_resource_data is True
        assert request.change_type == "created,deleted,updated"
        assert request.change_types == frozenset(ChangeType)

    def test_dumps_camel_case_aliases(self):
        request = SubscriptionRequest(
            resource=RESOURCE,
            notification_url=TARGET_URL,
            client_state="ClientState",
            expiration_date_time=START_TIME,
            encryption_certificate="CERT",
            encryption_certificate_id="cert-1",
        )

        body = request.model_dump(by_alias=True, mode="json")

        assert body["notificationUrl"] == TARGET_URL
        assert body["clientState"] == "ClientState"
        assert body["changeType"] == "created,deleted,updated"
        assert body["includeResourceData"] is True
        assert body["encryptionCertificateId"] == "cert-1"
        assert body["expirationDateTime"].startswith("2026-01-05T09:00:00")

    def test_naive_expiration_is_taken_as_utc(self):
        request = SubscriptionRequest(
            resource=RESOURCE,
            notification_url=TARGET_URL,
            expiration_date_time=datetime(2026, 1, 5, 9, 0),
        )

        assert request.expiration_date_time == START_TIME

    def test_empty_resource_rejected(self):
        with pytest.raises(ValidationError):
            SubscriptionRequest(
                resource="",
                notification_url=TARGET_URL,
                expiration_date_time=START_TIME,
            )

    def test_is_frozen(self):
        request = SubscriptionRequest(
            resource=RESOURCE,
            notification_url=TARGET_URL,
            expiration_date_time=START_TIME,
        )

        with pytest.raises(ValidationError):
            request.resource = "/teams/T2/channels"


class TestSubscription:
    def test_validates_service_payload(self):
        payload = {
            "id": "S1",
            "resource": RESOURCE,
            "notificationUrl": TARGET_URL,
            "clientState": "ClientState",
            "expirationDateTime": "2026-01-05T10:00:00Z",
            "changeType": "created,deleted,updated",
            "includeResourceData": True,
        }

        subscription = Subscription.model_validate(payload)

        assert subscription.id == "S1"
        assert subscription.expiration_date_time == START_TIME + timedelta(hours=1)

    def test_is_expired(self, make_subscription):
        assert make_subscription(minutes_left=-1).is_expired(START_TIME)
        assert make_subscription(minutes_left=0).is_expired(START_TIME)
        assert not make_subscription(minutes_left=1).is_expired(START_TIME)

    def test_expires_within(self, make_subscription):
        subscription = make_subscription(minutes_left=10)

        assert subscription.expires_within(timedelta(minutes=15), START_TIME)
        assert not subscription.expires_within(timedelta(minutes=5), START_TIME)

    def test_seconds_to_expiry(self, make_subscription):
        assert make_subscription(minutes_left=2).seconds_to_expiry(START_TIME) == 120
        assert make_subscription(minutes_left=-1).seconds_to_expiry(START_TIME) == -60

    def test_with_expiration_returns_copy(self, make_subscription):
        subscription = make_subscription(id="S1")
        later = START_TIME + timedelta(hours=3)

        renewed = subscription.with_expiration(later)

        assert renewed.expiration_date_time == later
        assert renewed.id == "S1"
        assert subscription.expiration_date_time != later

    def test_with_expiration_normalizes_naive(self, make_subscription):
        renewed = make_subscription().with_expiration(datetime(2026, 1, 5, 12, 0))

        assert renewed.expiration_date_time.tzinfo is UTC


class TestChangeTypes:
    def test_format_preserves_order_and_dedupes(self):
        assert (
            format_change_types([ChangeType.UPDATED, "created", ChangeType.UPDATED])
            == "updated,created"
        )

    def test_format_rejects_unknown(self):
        with pytest.raises(ValueError):
            format_change_types(["moved"])

    def test_parse(self):
        assert parse_change_types("created, deleted") == {
            ChangeType.CREATED,
            ChangeType.DELETED,
        }


class TestChannelResource:
    def test_builds_path(self):
        assert channel_resource("T1") == "/teams/T1/channels"

    def test_strips_whitespace(self):
        assert channel_resource("  T1 ") == "/teams/T1/channels"

    @pytest.mark.parametrize("team_id", ["", "  "])
    def test_empty_team_id_rejected(self, team_id):
        with pytest.raises(InvalidResourceError, match="team id must not be empty"):
            channel_resource(team_id)
