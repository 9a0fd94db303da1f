"""Protocol definitions for the collaborators of the registration core.

The inventory, checkout, webhook and check-in services depend only on these
interfaces. `events.stores.django_store` implements them over the ORM,
`events.stores.memory` keeps everything in process for tests and tooling, and
`events.service.stripe_service.StripeGateway` talks to the payment processor.
"""

from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from events.domain import CheckoutSession, EventRecord, PaymentEvent, RegistrationRecord, TicketRecord


class EventRepository(Protocol):
    def get(self, event_id: UUID, *, for_update: bool = False) -> EventRecord | None:
        """Return the event, optionally locking its row until the transaction ends."""
        ...


class TicketRepository(Protocol):
    def get(self, ticket_id: UUID, *, for_update: bool = False) -> TicketRecord | None:
        """Return the ticket tier, optionally locking its row until the transaction ends."""
        ...

    def increment_sold(self, ticket_id: UUID, quantity: int) -> bool:
        """Add `quantity` to `sold` in a single conditional update.

        The update only applies while `sold + quantity <= quantity` or the tier is unlimited.
        Returns whether a row was updated.
        """
        ...


class RegistrationRepository(Protocol):
    def get(self, registration_id: UUID) -> RegistrationRecord | None:
        """Return the registration by id."""
        ...

    def create(
        self,
        *,
        event_id: UUID,
        user_id: UUID,
        ticket_id: UUID | None,
        status: str,
        stripe_payment_id: str | None = None,
        quantity: int = 1,
    ) -> RegistrationRecord:
        """Persist a new registration with a freshly issued QR code.

        Raises:
            RegistrationRejectedError: DUPLICATE if the user already holds an active registration.
        """
        ...

    def count_active(self, event_id: UUID) -> int:
        """Count PENDING and CONFIRMED registrations of the event."""
        ...

    def has_active(self, event_id: UUID, user_id: UUID) -> bool:
        """Whether the user holds a non-cancelled registration for the event."""
        ...

    def find_by_qr_code(self, event_id: UUID, qr_code: str) -> RegistrationRecord | None:
        """Exact match on the check-in token within the event."""
        ...

    def find_by_email(self, event_id: UUID, email: str) -> RegistrationRecord | None:
        """Registration of the user with this e-mail, preferring a non-cancelled one."""
        ...

    def list_for_user(self, user_id: UUID) -> list[RegistrationRecord]:
        """All registrations of a user, newest first."""
        ...

    def transition_by_payment_id(self, payment_id: str, *, from_status: str, to_status: str) -> int:
        """Bulk status update of registrations tied to a checkout session. Returns affected rows."""
        ...

    def transition(self, registration_id: UUID, *, from_status: str, to_status: str) -> int:
        """Conditional status update of a single registration. Returns affected rows."""
        ...

    def mark_checked_in(self, registration_id: UUID, at: datetime) -> int:
        """Set checked_in/checked_in_at where CONFIRMED and not yet checked in. Returns affected rows."""
        ...


class AnalyticsRepository(Protocol):
    def add_revenue(self, event_id: UUID, amount: Decimal) -> None:
        """Accumulate confirmed revenue, creating the analytics row when missing."""
        ...

    def increment_page_views(self, event_id: UUID) -> None:
        """Count one public page view."""
        ...


class NotificationRepository(Protocol):
    def create(self, *, user_id: UUID, title: str, message: str, link: str = "") -> None:
        """Record an in-app notification."""
        ...


class RegistrationStore(Protocol):
    """Unit of work over every repository the registration core touches."""

    events: EventRepository
    tickets: TicketRepository
    registrations: RegistrationRepository
    analytics: AnalyticsRepository
    notifications: NotificationRepository

    def atomic(self) -> AbstractContextManager[None]:
        """Run the enclosed block as a single transaction."""
        ...


class PaymentGateway(Protocol):
    def create_checkout_session(
        self,
        *,
        unit_amount: int,
        quantity: int,
        currency: str,
        product_name: str,
        product_description: str | None,
        metadata: dict[str, str],
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """Create a hosted checkout session.

        Raises:
            PaymentGatewayError: If the processor rejects or fails the request.
        """
        ...

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        """Verify a webhook signature and parse the payload.

        Raises:
            WebhookSignatureError: If the payload is malformed or the signature does not match.
        """
        ...
