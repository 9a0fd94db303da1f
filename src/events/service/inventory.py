"""Ticket inventory checks and commits.

`sold` only ever moves through `commit_sold`, which relies on a single conditional
update so that concurrent commits can never push a tier past its quantity.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog

from common.context import RequestContext
from events.domain import EventRecord, TicketRecord
from events.exceptions import (
    AuthenticationRequiredError,
    EventNotAvailableError,
    RegistrationRejectedError,
    RejectionReason,
    TicketNotFoundError,
)
from events.protocols import RegistrationStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    """A reservation that passed every availability check."""

    event: EventRecord
    ticket: TicketRecord
    quantity: int


def reserve(
    store: RegistrationStore,
    ctx: RequestContext,
    event_id: UUID,
    ticket_id: UUID,
    quantity: int = 1,
    *,
    lock: bool = False,
) -> Reservation:
    """Check whether `quantity` units of a ticket can be registered by the caller.

    Checks run in a fixed order and the first failure wins: event availability, ticket
    ownership, tier quantity (SOLD_OUT), event capacity (AT_CAPACITY) and finally an existing
    active registration (DUPLICATE). Nothing is mutated.

    With `lock`, the event and ticket rows are locked for the rest of the caller's transaction.

    Raises:
        AuthenticationRequiredError: If the context carries no identity.
        EventNotAvailableError: If the event is missing or not published.
        TicketNotFoundError: If the ticket is missing or belongs to another event.
        RegistrationRejectedError: With the reason of the first failed check.
    """
    if not ctx.is_authenticated or ctx.user_id is None:
        raise AuthenticationRequiredError()
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    event = store.events.get(event_id, for_update=lock)
    if event is None or not event.is_published:
        raise EventNotAvailableError(event_id)

    ticket = store.tickets.get(ticket_id, for_update=lock)
    if ticket is None or ticket.event_id != event.id:
        raise TicketNotFoundError(ticket_id)

    if ticket.quantity is not None and ticket.sold + quantity > ticket.quantity:
        raise _reject(RejectionReason.SOLD_OUT, event_id, ticket_id)

    if event.capacity is not None and store.registrations.count_active(event.id) + quantity > event.capacity:
        raise _reject(RejectionReason.AT_CAPACITY, event_id, ticket_id)

    if store.registrations.has_active(event.id, ctx.user_id):
        raise _reject(RejectionReason.DUPLICATE, event_id, ticket_id)

    return Reservation(event=event, ticket=ticket, quantity=quantity)


def commit_sold(store: RegistrationStore, ticket_id: UUID, quantity: int) -> None:
    """Move `quantity` units of a tier into `sold`.

    Raises:
        RegistrationRejectedError: SOLD_OUT if the tier cannot absorb the units.
    """
    if not store.tickets.increment_sold(ticket_id, quantity):
        logger.info("ticket_commit_refused", ticket_id=str(ticket_id), quantity=quantity)
        raise RegistrationRejectedError(RejectionReason.SOLD_OUT)


def _reject(reason: RejectionReason, event_id: UUID, ticket_id: UUID) -> RegistrationRejectedError:
    logger.info("registration_rejected", reason=reason.value, event_id=str(event_id), ticket_id=str(ticket_id))
    return RegistrationRejectedError(reason)
