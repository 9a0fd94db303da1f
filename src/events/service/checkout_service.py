"""Registration checkout: free tickets confirm immediately, paid tickets go through hosted checkout."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog
from django.conf import settings

from common.context import RequestContext
from events.domain import RegistrationRecord, RegistrationStatus
from events.exceptions import AuthenticationRequiredError
from events.protocols import PaymentGateway, RegistrationStore
from events.service import inventory

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    registration: RegistrationRecord
    checkout_url: str | None = None


def to_minor_units(price: Decimal) -> int:
    """Convert a decimal price to cents, rounding half up."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CheckoutService:
    def __init__(
        self,
        store: RegistrationStore,
        gateway: PaymentGateway,
        *,
        frontend_base_url: str | None = None,
        currency: str | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.frontend_base_url = (frontend_base_url or settings.FRONTEND_BASE_URL).rstrip("/")
        self.currency = currency or settings.DEFAULT_CURRENCY

    def register(self, ctx: RequestContext, event_id: UUID, ticket_id: UUID, quantity: int = 1) -> CheckoutResult:
        """Register the caller for an event.

        Free tickets are committed and confirmed in one transaction. Paid tickets get a
        checkout session first and a PENDING registration only once the session exists;
        inventory is committed later by the payment webhook.

        Raises:
            AuthenticationRequiredError: If the context carries no identity.
            EventNotAvailableError, TicketNotFoundError, RegistrationRejectedError: From the inventory checks.
            PaymentGatewayError: If the checkout session cannot be created. Nothing is written.
        """
        reservation = inventory.reserve(self.store, ctx, event_id, ticket_id, quantity)
        if reservation.ticket.is_free:
            return self._free_checkout(ctx, event_id, ticket_id, quantity)
        return self._paid_checkout(ctx, reservation)

    def _free_checkout(self, ctx: RequestContext, event_id: UUID, ticket_id: UUID, quantity: int) -> CheckoutResult:
        assert ctx.user_id is not None
        with self.store.atomic():
            reservation = inventory.reserve(self.store, ctx, event_id, ticket_id, quantity, lock=True)
            inventory.commit_sold(self.store, ticket_id, quantity)
            registration = self.store.registrations.create(
                event_id=event_id,
                user_id=ctx.user_id,
                ticket_id=ticket_id,
                status=RegistrationStatus.CONFIRMED,
                quantity=quantity,
            )
            self.store.notifications.create(
                user_id=ctx.user_id,
                title="Registration Confirmed",
                message=f"You're registered for {reservation.event.title}!",
                link=f"/events/{reservation.event.slug}",
            )
        logger.info(
            "registration_confirmed_free",
            registration_id=str(registration.id),
            event_id=str(event_id),
            ticket_id=str(ticket_id),
            quantity=quantity,
        )
        return CheckoutResult(registration=registration)

    def _paid_checkout(self, ctx: RequestContext, reservation: inventory.Reservation) -> CheckoutResult:
        assert ctx.user_id is not None
        event, ticket = reservation.event, reservation.ticket
        event_url = f"{self.frontend_base_url}/events/{event.slug}"
        session = self.gateway.create_checkout_session(
            unit_amount=to_minor_units(ticket.price),
            quantity=reservation.quantity,
            currency=self.currency,
            product_name=f"{event.title} - {ticket.name}",
            product_description=ticket.description or None,
            metadata={
                "eventId": str(event.id),
                "ticketId": str(ticket.id),
                "userId": str(ctx.user_id),
                "quantity": str(reservation.quantity),
            },
            customer_email=ctx.email or None,
            success_url=f"{event_url}?registration=success",
            cancel_url=f"{event_url}?registration=cancelled",
        )
        # the external session has no rollback, so the row is written only once it exists
        registration = self.store.registrations.create(
            event_id=event.id,
            user_id=ctx.user_id,
            ticket_id=ticket.id,
            status=RegistrationStatus.PENDING,
            stripe_payment_id=session.id,
            quantity=reservation.quantity,
        )
        logger.info(
            "registration_pending_payment",
            registration_id=str(registration.id),
            event_id=str(event.id),
            ticket_id=str(ticket.id),
            session_id=session.id,
            quantity=reservation.quantity,
        )
        return CheckoutResult(registration=registration, checkout_url=session.url)


def list_user_registrations(store: RegistrationStore, ctx: RequestContext) -> list[RegistrationRecord]:
    """The caller's registrations, newest first."""
    if ctx.user_id is None:
        raise AuthenticationRequiredError()
    return store.registrations.list_for_user(ctx.user_id)
