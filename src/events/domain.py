"""Storage-agnostic records used by the registration core.

Stores translate their rows into these records, so the inventory, checkout, webhook and
check-in services can run unchanged against the Django ORM or the in-memory store.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.db import models


class EventStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PUBLISHED = "PUBLISHED", "Published"
    CANCELLED = "CANCELLED", "Cancelled"
    COMPLETED = "COMPLETED", "Completed"


class RegistrationStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    CANCELLED = "CANCELLED", "Cancelled"


ACTIVE_REGISTRATION_STATUSES = (RegistrationStatus.PENDING, RegistrationStatus.CONFIRMED)


def generate_qr_code() -> str:
    """Opaque, URL-safe check-in token."""
    return secrets.token_urlsafe(24)


@dataclass
class EventRecord:
    id: UUID
    slug: str
    title: str
    status: str
    capacity: int | None
    organizer_id: UUID

    @property
    def is_published(self) -> bool:
        return self.status == EventStatus.PUBLISHED


@dataclass
class TicketRecord:
    id: UUID
    event_id: UUID
    name: str
    price: Decimal
    quantity: int | None
    sold: int
    description: str = ""

    @property
    def is_free(self) -> bool:
        return self.price == 0


@dataclass
class RegistrationRecord:
    id: UUID
    event_id: UUID
    user_id: UUID
    ticket_id: UUID | None
    status: str
    qr_code: str
    created_at: datetime
    quantity: int = 1
    checked_in: bool = False
    checked_in_at: datetime | None = None
    stripe_payment_id: str | None = None
    attendee_name: str = ""
    attendee_email: str = ""
    ticket_name: str | None = None
    event_title: str = ""
    event_slug: str = ""

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_REGISTRATION_STATUSES

    @property
    def attendee_label(self) -> str:
        return self.attendee_name or self.attendee_email


@dataclass(frozen=True)
class CheckoutSession:
    """What the payment processor hands back for a created checkout session."""

    id: str
    url: str


@dataclass(frozen=True)
class PaymentEvent:
    """A verified, processor-neutral webhook notification."""

    type: str
    session_id: str | None
    metadata: dict[str, str]
    amount_total: int | None = None
    event_id: str | None = None
