import typing as t
from decimal import Decimal

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import EventFlowUser
from events.models import Event, EventAnalytics, Registration, Ticket

pytestmark = pytest.mark.django_db


def _check_in(client: Client, event: Event, code: str) -> t.Any:
    return client.post(
        reverse("api:check_in", kwargs={"event_id": event.pk}),
        data=orjson.dumps({"qr_code": code}),
        content_type="application/json",
    )


class TestCheckIn:
    def test_check_in_by_qr_code(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        # Act
        response = _check_in(organizer_client, event, confirmed_registration.qr_code)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Alex Attendee checked in!"
        assert data["registration"]["attendee_email"] == "attendee@example.com"
        assert data["registration"]["ticket_name"] == "Community"
        confirmed_registration.refresh_from_db()
        assert confirmed_registration.checked_in is True

    def test_check_in_by_email(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        response = _check_in(organizer_client, event, "attendee@example.com")

        assert response.status_code == 200
        assert response.json()["registration"]["id"] == str(confirmed_registration.id)

    def test_second_scan_returns_conflict_with_original_time(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        _check_in(organizer_client, event, confirmed_registration.qr_code)
        confirmed_registration.refresh_from_db()

        response = _check_in(organizer_client, event, confirmed_registration.qr_code)

        assert response.status_code == 409
        data = response.json()
        assert data["code"] == "ALREADY_CHECKED_IN"
        assert data["detail"] == "Already checked in"
        assert data["registration_id"] == str(confirmed_registration.id)
        assert data["checked_in_at"] == confirmed_registration.checked_in_at.isoformat()  # type: ignore[union-attr]

    def test_unknown_code(self, organizer_client: Client, event: Event) -> None:
        response = _check_in(organizer_client, event, "bogus")

        assert response.status_code == 404
        assert response.json() == {
            "detail": "Invalid QR code: no registration found for this event",
            "code": "NOT_FOUND",
        }

    def test_pending_registration(
        self, organizer_client: Client, event: Event, paid_ticket: Ticket, attendee: EventFlowUser
    ) -> None:
        registration = Registration.objects.create(event=event, user=attendee, ticket=paid_ticket)

        response = _check_in(organizer_client, event, registration.qr_code)

        assert response.status_code == 400
        assert response.json()["code"] == "NOT_CONFIRMED"

    def test_cancelled_registration(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        Registration.objects.filter(pk=confirmed_registration.pk).update(status=Registration.Status.CANCELLED)

        response = _check_in(organizer_client, event, confirmed_registration.qr_code)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID"

    def test_non_organizer_is_forbidden(
        self, attendee_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        response = _check_in(attendee_client, event, confirmed_registration.qr_code)

        assert response.status_code == 403
        confirmed_registration.refresh_from_db()
        assert confirmed_registration.checked_in is False


class TestAttendees:
    def test_list_attendees_with_stats(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        response = organizer_client.get(reverse("api:list_attendees", kwargs={"event_id": event.pk}))

        assert response.status_code == 200
        data = response.json()
        assert data["stats"] == {"total": 1, "confirmed": 1, "pending": 0, "cancelled": 0, "checked_in": 0}
        assert data["registrations"][0]["attendee_name"] == "Alex Attendee"

    def test_filter_by_status(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        response = organizer_client.get(
            reverse("api:list_attendees", kwargs={"event_id": event.pk}), {"status": "PENDING"}
        )

        assert response.json()["registrations"] == []

    @pytest.mark.parametrize(
        "action,expected_status,expected_checked_in",
        [("cancel", Registration.Status.CANCELLED, False), ("checkin", Registration.Status.CONFIRMED, True)],
    )
    def test_update_attendee(
        self,
        organizer_client: Client,
        event: Event,
        confirmed_registration: Registration,
        action: str,
        expected_status: str,
        expected_checked_in: bool,
    ) -> None:
        response = organizer_client.patch(
            reverse("api:update_attendee", kwargs={"event_id": event.pk}),
            data=orjson.dumps({"registration_id": str(confirmed_registration.id), "action": action}),
            content_type="application/json",
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        confirmed_registration.refresh_from_db()
        assert confirmed_registration.status == expected_status
        assert confirmed_registration.checked_in is expected_checked_in

    def test_confirm_pending_commits_inventory(
        self, organizer_client: Client, event: Event, paid_ticket: Ticket, attendee: EventFlowUser
    ) -> None:
        registration = Registration.objects.create(event=event, user=attendee, ticket=paid_ticket, quantity=3)

        response = organizer_client.patch(
            reverse("api:update_attendee", kwargs={"event_id": event.pk}),
            data=orjson.dumps({"registration_id": str(registration.id), "action": "confirm"}),
            content_type="application/json",
        )

        assert response.status_code == 200
        paid_ticket.refresh_from_db()
        assert paid_ticket.sold == 3

    def test_invalid_transition(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        response = organizer_client.patch(
            reverse("api:update_attendee", kwargs={"event_id": event.pk}),
            data=orjson.dumps({"registration_id": str(confirmed_registration.id), "action": "confirm"}),
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json() == {
            "detail": "Cannot confirm a registration that is confirmed",
            "code": "INVALID_TRANSITION",
        }

    def test_unknown_action_is_rejected(
        self, organizer_client: Client, event: Event, confirmed_registration: Registration
    ) -> None:
        response = organizer_client.patch(
            reverse("api:update_attendee", kwargs={"event_id": event.pk}),
            data=orjson.dumps({"registration_id": str(confirmed_registration.id), "action": "refund"}),
            content_type="application/json",
        )

        assert response.status_code == 422

    def test_non_organizer_is_forbidden(self, attendee_client: Client, event: Event) -> None:
        response = attendee_client.get(reverse("api:list_attendees", kwargs={"event_id": event.pk}))

        assert response.status_code == 403


def test_event_analytics(organizer_client: Client, event: Event, confirmed_registration: Registration) -> None:
    EventAnalytics.objects.filter(event=event).update(page_views=4, total_revenue=Decimal("12.50"))

    response = organizer_client.get(reverse("api:event_analytics", kwargs={"event_id": event.pk}))

    assert response.status_code == 200
    overview = response.json()["overview"]
    assert overview["total_registrations"] == 1
    assert overview["confirmed_registrations"] == 1
    assert overview["page_views"] == 4
    assert overview["conversion_rate"] == 25.0
    assert Decimal(str(overview["total_revenue"])) == Decimal("12.50")


def test_event_analytics_forbidden_for_others(attendee_client: Client, event: Event) -> None:
    response = attendee_client.get(reverse("api:event_analytics", kwargs={"event_id": event.pk}))

    assert response.status_code == 403


def test_dashboard(organizer_client: Client, event: Event, confirmed_registration: Registration) -> None:
    response = organizer_client.get(reverse("api:dashboard"))

    assert response.status_code == 200
    data = response.json()
    assert data["total_events"] == 1
    assert data["total_registrations"] == 1
    assert [e["slug"] for e in data["upcoming_events"]] == ["spring-gala"]
