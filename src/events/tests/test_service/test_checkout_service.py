import threading
import typing as t
from decimal import Decimal

import pytest

from common.context import RequestContext
from events.domain import RegistrationStatus
from events.exceptions import (
    AuthenticationRequiredError,
    PaymentGatewayError,
    RegistrationRejectedError,
    RejectionReason,
)
from events.service.checkout_service import CheckoutService, list_user_registrations, to_minor_units
from events.tests.conftest import FakeGateway, MemoryWorld, World

ServiceFactory = t.Callable[[World], CheckoutService]


@pytest.fixture
def service_for(gateway: FakeGateway) -> ServiceFactory:
    def build(world: World) -> CheckoutService:
        return CheckoutService(world.store, gateway, frontend_base_url="https://app.test/", currency="usd")

    return build


class TestFreeCheckout:
    def test_confirms_and_commits_inventory(
        self, world: World, service_for: ServiceFactory, gateway: FakeGateway
    ) -> None:
        # Arrange
        ctx = world.user(name="Ada")
        event = world.event(title="Community Meetup")
        ticket = world.ticket(event, quantity=10)

        # Act
        result = service_for(world).register(ctx, event.id, ticket.id)

        # Assert
        assert result.checkout_url is None
        assert result.registration.status == RegistrationStatus.CONFIRMED
        assert result.registration.qr_code
        assert world.sold(ticket.id) == 1
        assert gateway.sessions == []
        assert world.notifications(ctx.user_id) == [
            ("Registration Confirmed", "You're registered for Community Meetup!", f"/events/{event.slug}")
        ]

    def test_commits_requested_quantity(self, world: World, service_for: ServiceFactory) -> None:
        event = world.event()
        ticket = world.ticket(event, quantity=5)

        service_for(world).register(world.user(), event.id, ticket.id, 3)

        assert world.sold(ticket.id) == 3
        assert world.registration_count(event.id) == 1

    def test_sold_out_writes_nothing(self, world: World, service_for: ServiceFactory) -> None:
        event = world.event()
        ticket = world.ticket(event, quantity=1, sold=1)
        ctx = world.user()

        with pytest.raises(RegistrationRejectedError) as exc_info:
            service_for(world).register(ctx, event.id, ticket.id)

        assert exc_info.value.reason == RejectionReason.SOLD_OUT
        assert world.sold(ticket.id) == 1
        assert world.registration_count(event.id) == 0
        assert world.notifications(ctx.user_id) == []

    def test_at_capacity(self, world: World, service_for: ServiceFactory) -> None:
        event = world.event(capacity=1)
        ticket = world.ticket(event)
        service = service_for(world)
        service.register(world.user(), event.id, ticket.id)

        with pytest.raises(RegistrationRejectedError) as exc_info:
            service.register(world.user(), event.id, ticket.id)

        assert exc_info.value.reason == RejectionReason.AT_CAPACITY
        assert world.sold(ticket.id) == 1

    def test_duplicate(self, world: World, service_for: ServiceFactory) -> None:
        ctx = world.user()
        event = world.event()
        ticket = world.ticket(event)
        service = service_for(world)
        service.register(ctx, event.id, ticket.id)

        with pytest.raises(RegistrationRejectedError) as exc_info:
            service.register(ctx, event.id, ticket.id)

        assert exc_info.value.reason == RejectionReason.DUPLICATE
        assert world.registration_count(event.id) == 1
        assert world.sold(ticket.id) == 1

    def test_can_register_again_after_cancellation(self, world: World, service_for: ServiceFactory) -> None:
        ctx = world.user()
        event = world.event()
        ticket = world.ticket(event)
        service = service_for(world)
        first = service.register(ctx, event.id, ticket.id)
        world.set_status(first.registration.id, RegistrationStatus.CANCELLED)

        second = service.register(ctx, event.id, ticket.id)

        assert second.registration.id != first.registration.id
        assert second.registration.status == RegistrationStatus.CONFIRMED

    def test_anonymous_caller_is_refused(self, world: World, service_for: ServiceFactory) -> None:
        event = world.event()
        ticket = world.ticket(event)

        with pytest.raises(AuthenticationRequiredError):
            service_for(world).register(RequestContext.anonymous(), event.id, ticket.id)


class TestPaidCheckout:
    def test_creates_pending_registration_and_session(
        self, world: World, service_for: ServiceFactory, gateway: FakeGateway
    ) -> None:
        # Arrange
        ctx = world.user(email="payer@example.com")
        event = world.event(title="Jazz Night")
        ticket = world.ticket(event, price="19.99", quantity=10)

        # Act
        result = service_for(world).register(ctx, event.id, ticket.id, 2)

        # Assert
        assert result.registration.status == RegistrationStatus.PENDING
        [session] = gateway.sessions
        assert result.checkout_url == f"https://checkout.stripe.test/pay/{session['id']}"
        assert result.registration.stripe_payment_id == session["id"]
        assert session["unit_amount"] == 1999
        assert session["quantity"] == 2
        assert session["currency"] == "usd"
        assert session["product_name"] == "Jazz Night - General Admission"
        assert session["customer_email"] == "payer@example.com"
        assert session["metadata"] == {
            "eventId": str(event.id),
            "ticketId": str(ticket.id),
            "userId": str(ctx.user_id),
            "quantity": "2",
        }
        assert session["success_url"] == f"https://app.test/events/{event.slug}?registration=success"
        assert session["cancel_url"] == f"https://app.test/events/{event.slug}?registration=cancelled"
        # inventory is committed by the payment webhook
        assert world.sold(ticket.id) == 0
        assert world.notifications(ctx.user_id) == []

    def test_gateway_failure_writes_nothing(self, world: World) -> None:
        ctx = world.user()
        event = world.event()
        ticket = world.ticket(event, price="10.00")
        service = CheckoutService(world.store, FakeGateway(fail=True), frontend_base_url="https://app.test")

        with pytest.raises(PaymentGatewayError):
            service.register(ctx, event.id, ticket.id)

        assert world.registration_count(event.id) == 0
        assert world.sold(ticket.id) == 0

    def test_pending_registration_blocks_a_second_checkout(self, world: World, service_for: ServiceFactory) -> None:
        ctx = world.user()
        event = world.event()
        ticket = world.ticket(event, price="5.00")
        service = service_for(world)
        service.register(ctx, event.id, ticket.id)

        with pytest.raises(RegistrationRejectedError) as exc_info:
            service.register(ctx, event.id, ticket.id)

        assert exc_info.value.reason == RejectionReason.DUPLICATE


@pytest.mark.parametrize(
    "price,expected",
    [
        (Decimal("0.01"), 1),
        (Decimal("10"), 1000),
        (Decimal("19.99"), 1999),
        (Decimal("0.005"), 1),
        (Decimal("2.675"), 268),
    ],
)
def test_to_minor_units_rounds_half_up(price: Decimal, expected: int) -> None:
    assert to_minor_units(price) == expected


def test_list_user_registrations_newest_first(world: World, service_for: ServiceFactory) -> None:
    ctx = world.user()
    service = service_for(world)
    first_event, second_event = world.event(title="First"), world.event(title="Second")
    service.register(ctx, first_event.id, world.ticket(first_event).id)
    service.register(ctx, second_event.id, world.ticket(second_event).id)

    registrations = list_user_registrations(world.store, ctx)

    assert [r.event_title for r in registrations] == ["Second", "First"]
    assert all(r.ticket_name == "General Admission" for r in registrations)


def test_list_user_registrations_requires_identity(world: World) -> None:
    with pytest.raises(AuthenticationRequiredError):
        list_user_registrations(world.store, RequestContext.anonymous())


def test_concurrent_free_registrations_never_oversell(memory_world: MemoryWorld, gateway: FakeGateway) -> None:
    """N attendees race for N-1 free tickets; exactly one loses with SOLD_OUT."""
    attendees = 8
    event = memory_world.event()
    ticket = memory_world.ticket(event, quantity=attendees - 1)
    contexts = [memory_world.user() for _ in range(attendees)]
    service = CheckoutService(memory_world.store, gateway, frontend_base_url="https://app.test")
    barrier = threading.Barrier(attendees)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def attempt(ctx: RequestContext) -> None:
        barrier.wait()
        try:
            service.register(ctx, event.id, ticket.id)
            outcome = "ok"
        except RegistrationRejectedError as e:
            outcome = e.reason.value
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=attempt, args=(ctx,)) for ctx in contexts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["SOLD_OUT"] + ["ok"] * (attendees - 1)
    assert memory_world.sold(ticket.id) == attendees - 1
    assert memory_world.registration_count(event.id) == attendees - 1
