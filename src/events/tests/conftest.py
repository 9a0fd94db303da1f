import typing as t
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from accounts.models import EventFlowUser
from common.context import RequestContext
from events.domain import CheckoutSession, EventRecord, EventStatus, PaymentEvent, RegistrationRecord, TicketRecord
from events.exceptions import PaymentGatewayError
from events.models import Event, EventAnalytics, Registration, Ticket
from events.stores import DjangoRegistrationStore, InMemoryRegistrationStore
from notifications.models import Notification


class FakeGateway:
    """Payment gateway double that records every session it creates."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sessions: list[dict[str, t.Any]] = []

    def create_checkout_session(self, **kwargs: t.Any) -> CheckoutSession:
        if self.fail:
            raise PaymentGatewayError("Payment provider error: card network unavailable")
        session_id = f"cs_test_{uuid.uuid4().hex[:12]}"
        self.sessions.append({"id": session_id, **kwargs})
        return CheckoutSession(id=session_id, url=f"https://checkout.stripe.test/pay/{session_id}")

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        raise NotImplementedError


def completed_event(
    session_id: str,
    *,
    event_id: uuid.UUID,
    ticket_id: uuid.UUID,
    user_id: uuid.UUID | None,
    quantity: int = 1,
    amount_total: int | None = None,
) -> PaymentEvent:
    return PaymentEvent(
        type="checkout.session.completed",
        session_id=session_id,
        metadata={
            "eventId": str(event_id),
            "ticketId": str(ticket_id),
            "userId": str(user_id) if user_id else "",
            "quantity": str(quantity),
        },
        amount_total=amount_total,
        event_id=f"evt_{uuid.uuid4().hex[:12]}",
    )


class World(t.Protocol):
    """Seeds a registration store and reads back what the core wrote to it."""

    store: t.Any

    def user(self, email: str | None = None, name: str = "") -> RequestContext: ...

    def event(
        self, *, capacity: int | None = None, status: str = EventStatus.PUBLISHED, title: str = "Launch Party"
    ) -> EventRecord: ...

    def ticket(
        self, event: EventRecord, *, price: str = "0", quantity: int | None = None, sold: int = 0
    ) -> TicketRecord: ...

    def sold(self, ticket_id: uuid.UUID) -> int: ...

    def set_status(self, registration_id: uuid.UUID, status: str) -> None: ...

    def registration_count(self, event_id: uuid.UUID) -> int: ...

    def notifications(self, user_id: uuid.UUID | None) -> list[tuple[str, str, str]]: ...

    def revenue(self, event_id: uuid.UUID) -> Decimal: ...

    def registration(self, registration_id: uuid.UUID) -> RegistrationRecord: ...


class MemoryWorld:
    def __init__(self) -> None:
        self.store = InMemoryRegistrationStore()
        self._organizer_id = self.store.add_user(email="organizer@example.com", name="Olga Organizer")

    def user(self, email: str | None = None, name: str = "") -> RequestContext:
        email = email or f"{uuid.uuid4().hex[:8]}@user.test"
        user_id = self.store.add_user(email=email, name=name)
        return RequestContext(user_id=user_id, email=email, name=name)

    def event(
        self, *, capacity: int | None = None, status: str = EventStatus.PUBLISHED, title: str = "Launch Party"
    ) -> EventRecord:
        return self.store.add_event(organizer_id=self._organizer_id, title=title, status=status, capacity=capacity)

    def ticket(
        self, event: EventRecord, *, price: str = "0", quantity: int | None = None, sold: int = 0
    ) -> TicketRecord:
        return self.store.add_ticket(event_id=event.id, price=Decimal(price), quantity=quantity, sold=sold)

    def sold(self, ticket_id: uuid.UUID) -> int:
        ticket = self.store.tickets.get(ticket_id)
        assert ticket is not None
        return ticket.sold

    def set_status(self, registration_id: uuid.UUID, status: str) -> None:
        self.store.state.registrations[registration_id].status = status

    def registration_count(self, event_id: uuid.UUID) -> int:
        return sum(1 for r in self.store.state.registrations.values() if r.event_id == event_id)

    def notifications(self, user_id: uuid.UUID | None) -> list[tuple[str, str, str]]:
        assert user_id is not None
        return [(n.title, n.message, n.link) for n in self.store.notifications_for(user_id)]

    def revenue(self, event_id: uuid.UUID) -> Decimal:
        analytics = self.store.analytics_for(event_id)
        return analytics.total_revenue if analytics else Decimal("0")

    def registration(self, registration_id: uuid.UUID) -> RegistrationRecord:
        registration = self.store.registrations.get(registration_id)
        assert registration is not None
        return registration


class DjangoWorld:
    def __init__(self) -> None:
        self.store = DjangoRegistrationStore()
        self._organizer = EventFlowUser.objects.create_user_with_email(
            email="organizer@example.com", password="pass", name="Olga Organizer"
        )

    def user(self, email: str | None = None, name: str = "") -> RequestContext:
        email = email or f"{uuid.uuid4().hex[:8]}@user.test"
        user = EventFlowUser.objects.create_user_with_email(email=email, password="pass", name=name)
        return RequestContext(user_id=user.id, email=user.email, name=user.name)

    def event(
        self, *, capacity: int | None = None, status: str = EventStatus.PUBLISHED, title: str = "Launch Party"
    ) -> EventRecord:
        start = timezone.now() + timedelta(days=7)
        event = Event.objects.create(
            title=title,
            slug=f"launch-{uuid.uuid4().hex[:8]}",
            start_date=start,
            end_date=start + timedelta(hours=3),
            capacity=capacity,
            status=status,
            organizer=self._organizer,
        )
        return event.to_record()

    def ticket(
        self, event: EventRecord, *, price: str = "0", quantity: int | None = None, sold: int = 0
    ) -> TicketRecord:
        ticket = Ticket.objects.create(
            event_id=event.id, name="General Admission", price=Decimal(price), quantity=quantity, sold=sold
        )
        return ticket.to_record()

    def sold(self, ticket_id: uuid.UUID) -> int:
        return Ticket.objects.get(pk=ticket_id).sold

    def set_status(self, registration_id: uuid.UUID, status: str) -> None:
        Registration.objects.filter(pk=registration_id).update(status=status)

    def registration_count(self, event_id: uuid.UUID) -> int:
        return Registration.objects.filter(event_id=event_id).count()

    def notifications(self, user_id: uuid.UUID | None) -> list[tuple[str, str, str]]:
        return list(Notification.objects.filter(user_id=user_id).values_list("title", "message", "link"))

    def revenue(self, event_id: uuid.UUID) -> Decimal:
        analytics = EventAnalytics.objects.filter(event_id=event_id).first()
        return analytics.total_revenue if analytics else Decimal("0")

    def registration(self, registration_id: uuid.UUID) -> RegistrationRecord:
        registration = self.store.registrations.get(registration_id)
        assert registration is not None
        return registration


@pytest.fixture(params=["memory", "django"])
def world(request: pytest.FixtureRequest) -> World:
    """Run the test once against each store implementation."""
    if request.param == "django":
        request.getfixturevalue("db")
        return DjangoWorld()
    return MemoryWorld()


@pytest.fixture
def memory_world() -> MemoryWorld:
    return MemoryWorld()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


# ORM fixtures for endpoint tests


@pytest.fixture
def event(organizer: EventFlowUser, next_week: datetime) -> Event:
    event = Event.objects.create(
        title="Spring Gala",
        slug="spring-gala",
        description="An evening of music.",
        start_date=next_week,
        end_date=next_week + timedelta(hours=4),
        status=Event.Status.PUBLISHED,
        organizer=organizer,
    )
    EventAnalytics.objects.create(event=event)
    return event


@pytest.fixture
def free_ticket(event: Event) -> Ticket:
    return Ticket.objects.create(event=event, name="Community", price=Decimal("0"))


@pytest.fixture
def paid_ticket(event: Event) -> Ticket:
    return Ticket.objects.create(event=event, name="VIP", price=Decimal("25.00"), quantity=5)


@pytest.fixture
def confirmed_registration(event: Event, free_ticket: Ticket, attendee: EventFlowUser) -> Registration:
    return Registration.objects.create(
        event=event, user=attendee, ticket=free_ticket, status=Registration.Status.CONFIRMED
    )
