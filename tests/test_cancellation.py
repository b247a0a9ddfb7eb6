"""
Tests for services.cancellation_service: attendee gate, lead-time window, ownership.
"""

import asyncio
from datetime import timedelta

import pytest

from eventhub_api.app.core.errors import (
    HasAttendeesError,
    NotEventCreatorError,
    NotFoundError,
    TooCloseToDateError,
)
from eventhub_api.app.services.cancellation_service import CancellationService
from tests.conftest import NOW, make_event, make_user


@pytest.fixture
def service(store):
    return CancellationService(store, lead_days=7, require_creator=True)


def cancel(service, event, principal, now=NOW):
    return asyncio.run(service.cancel(event["id"], principal, now=now))


class TestLeadTimeWindow:
    def test_exactly_lead_days_away_is_too_close(self, store, service):
        creator = make_user(store, "alice")
        event = make_event(store, creator, days_ahead=7)
        with pytest.raises(TooCloseToDateError) as excinfo:
            cancel(service, event, creator)
        assert excinfo.value.message == "Cannot cancel event within 7 days"

    def test_one_day_past_window_succeeds(self, store, service):
        creator = make_user(store, "alice")
        event = make_event(store, creator, days_ahead=8)
        cancel(service, event, creator)
        assert store.find_by_id("events", event["id"]) is None
        assert store.find_by_id("events", event["id"], include_deleted=True)["is_deleted"] == 1

    def test_past_event_cannot_be_cancelled(self, store, service):
        creator = make_user(store, "alice")
        event = make_event(store, creator, days_ahead=-1)
        with pytest.raises(TooCloseToDateError):
            cancel(service, event, creator)

    def test_window_is_configurable(self, store):
        creator = make_user(store, "alice")
        event = make_event(store, creator, days_ahead=3)
        service = CancellationService(store, lead_days=2)
        cancel(service, event, creator)
        assert store.find_by_id("events", event["id"]) is None

    def test_days_until_is_fractional(self, service):
        assert service.days_until(NOW + timedelta(hours=36), NOW) == 1.5


class TestAttendeeGate:
    @pytest.mark.parametrize("days_ahead", [1, 8, 365])
    def test_event_with_attendees_is_never_cancelled(self, store, service, days_ahead):
        creator = make_user(store, "alice")
        bob = make_user(store, "bob")
        event = make_event(store, creator, days_ahead=days_ahead)
        store.add_attendee_if_available(event["id"], bob["id"])

        with pytest.raises(HasAttendeesError):
            cancel(service, event, creator)
        assert store.find_by_id("events", event["id"]) is not None


class TestLifecycle:
    def test_second_cancel_is_not_found(self, store, service):
        creator = make_user(store, "alice")
        event = make_event(store, creator, days_ahead=10)
        cancel(service, event, creator)
        with pytest.raises(NotFoundError):
            cancel(service, event, creator)

    def test_unknown_event(self, store, service):
        creator = make_user(store, "alice")
        with pytest.raises(NotFoundError):
            cancel(service, {"id": 404}, creator)


class TestOwnership:
    def test_only_creator_may_cancel(self, store, service):
        creator = make_user(store, "alice")
        mallory = make_user(store, "mallory")
        event = make_event(store, creator, days_ahead=10)
        with pytest.raises(NotEventCreatorError) as excinfo:
            cancel(service, event, mallory)
        assert excinfo.value.status_code == 403
        assert store.find_by_id("events", event["id"]) is not None

    def test_ownership_check_can_be_disabled(self, store):
        creator = make_user(store, "alice")
        other = make_user(store, "other")
        event = make_event(store, creator, days_ahead=10)
        service = CancellationService(store, lead_days=7, require_creator=False)
        cancel(service, event, other)
        assert store.find_by_id("events", event["id"]) is None
