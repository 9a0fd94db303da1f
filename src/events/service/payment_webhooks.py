"""Reconciliation of payment processor webhooks with pending registrations."""

from decimal import Decimal
from uuid import UUID

import structlog

from events.domain import PaymentEvent, RegistrationStatus
from events.protocols import RegistrationStore

logger = structlog.get_logger(__name__)


class PaymentWebhookReconciler:
    """Routes verified payment events to the matching handler.

    Every handler is idempotent: transitions only apply to PENDING registrations,
    so a re-delivered event changes nothing.
    """

    def __init__(self, store: RegistrationStore) -> None:
        self.store = store

    def reconcile(self, event: PaymentEvent) -> None:
        handler = getattr(self, f"handle_{event.type.replace('.', '_')}", self.handle_unknown_event)
        handler(event)

    def handle_unknown_event(self, event: PaymentEvent) -> None:
        logger.info("payment_webhook_unhandled_event", event_type=event.type, event_id=event.event_id)

    def handle_checkout_session_completed(self, event: PaymentEvent) -> None:
        """Confirm the session's registrations and commit their inventory.

        Inventory, revenue and the notification are only touched when at least one
        registration actually moved from PENDING to CONFIRMED.
        """
        metadata = event.metadata
        session_id = event.session_id
        if not session_id or not metadata.get("eventId") or not metadata.get("ticketId"):
            logger.warning("payment_webhook_missing_metadata", session_id=session_id, event_id=event.event_id)
            return

        try:
            event_id = UUID(metadata["eventId"])
            ticket_id = UUID(metadata["ticketId"])
            user_id = UUID(metadata["userId"]) if metadata.get("userId") else None
            quantity = int(metadata.get("quantity") or 1)
        except ValueError:
            logger.warning("payment_webhook_malformed_metadata", session_id=session_id, event_id=event.event_id)
            return

        with self.store.atomic():
            confirmed = self.store.registrations.transition_by_payment_id(
                session_id,
                from_status=RegistrationStatus.PENDING,
                to_status=RegistrationStatus.CONFIRMED,
            )
            if not confirmed:
                logger.warning("payment_webhook_no_pending_registrations", session_id=session_id)
                return

            if not self.store.tickets.increment_sold(ticket_id, quantity):
                logger.warning(
                    "payment_confirmed_over_ticket_quantity",
                    session_id=session_id,
                    ticket_id=str(ticket_id),
                    quantity=quantity,
                )

            if event.amount_total is not None:
                self.store.analytics.add_revenue(event_id, Decimal(event.amount_total) / 100)

            registered_event = self.store.events.get(event_id)
            if user_id is not None and registered_event is not None:
                self.store.notifications.create(
                    user_id=user_id,
                    title="Payment Confirmed",
                    message=f"Your registration for {registered_event.title} is confirmed!",
                    link=f"/events/{registered_event.slug}",
                )

        logger.info(
            "payment_webhook_registrations_confirmed",
            session_id=session_id,
            event_id=str(event_id),
            ticket_id=str(ticket_id),
            confirmed=confirmed,
            quantity=quantity,
            amount_total=event.amount_total,
        )

    def handle_checkout_session_expired(self, event: PaymentEvent) -> None:
        """Cancel the session's pending registrations. Inventory was never committed for them."""
        if not event.session_id:
            logger.warning("payment_webhook_missing_session", event_id=event.event_id)
            return
        cancelled = self.store.registrations.transition_by_payment_id(
            event.session_id,
            from_status=RegistrationStatus.PENDING,
            to_status=RegistrationStatus.CANCELLED,
        )
        logger.info("payment_webhook_session_expired", session_id=event.session_id, cancelled=cancelled)
