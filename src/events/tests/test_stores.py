import pytest

from events.domain import RegistrationStatus
from events.exceptions import RegistrationRejectedError, RejectionReason
from events.tests.conftest import MemoryWorld, World


def test_atomic_rolls_back_on_error(memory_world: MemoryWorld) -> None:
    event = memory_world.event()
    ticket = memory_world.ticket(event, quantity=5)
    store = memory_world.store

    with pytest.raises(RuntimeError), store.atomic():
        store.tickets.increment_sold(ticket.id, 2)
        with store.atomic():
            store.analytics.increment_page_views(event.id)
        raise RuntimeError("abort")

    assert memory_world.sold(ticket.id) == 0
    assert store.analytics_for(event.id) is None


def test_create_refuses_second_active_registration(world: World) -> None:
    ctx = world.user()
    assert ctx.user_id is not None
    event = world.event()
    ticket = world.ticket(event)
    world.store.registrations.create(
        event_id=event.id, user_id=ctx.user_id, ticket_id=ticket.id, status=RegistrationStatus.PENDING
    )

    with pytest.raises(RegistrationRejectedError) as exc_info:
        world.store.registrations.create(
            event_id=event.id, user_id=ctx.user_id, ticket_id=ticket.id, status=RegistrationStatus.CONFIRMED
        )

    assert exc_info.value.reason == RejectionReason.DUPLICATE
    assert world.registration_count(event.id) == 1


def test_qr_codes_are_unique_and_scoped_to_the_event(world: World) -> None:
    event, other_event = world.event(), world.event(title="Other")
    ticket = world.ticket(event)
    codes = {
        world.store.registrations.create(
            event_id=event.id, user_id=world.user().user_id, ticket_id=ticket.id, status=RegistrationStatus.CONFIRMED
        ).qr_code
        for _ in range(5)
    }

    assert len(codes) == 5
    code = next(iter(codes))
    assert world.store.registrations.find_by_qr_code(event.id, code) is not None
    assert world.store.registrations.find_by_qr_code(other_event.id, code) is None


def test_transition_by_payment_id_only_moves_matching_status(world: World) -> None:
    event = world.event()
    ticket = world.ticket(event, price="10.00")
    pending = world.store.registrations.create(
        event_id=event.id,
        user_id=world.user().user_id,
        ticket_id=ticket.id,
        status=RegistrationStatus.PENDING,
        stripe_payment_id="cs_test_shared",
    )

    moved = world.store.registrations.transition_by_payment_id(
        "cs_test_shared", from_status=RegistrationStatus.PENDING, to_status=RegistrationStatus.CONFIRMED
    )
    moved_again = world.store.registrations.transition_by_payment_id(
        "cs_test_shared", from_status=RegistrationStatus.PENDING, to_status=RegistrationStatus.CANCELLED
    )

    assert (moved, moved_again) == (1, 0)
    assert world.registration(pending.id).status == RegistrationStatus.CONFIRMED
