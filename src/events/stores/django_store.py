"""ORM-backed implementation of the registration store."""

import typing as t
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Case, F, IntegerField, Q, Value, When
from django.utils import timezone

from events.domain import EventRecord, RegistrationRecord, RegistrationStatus, TicketRecord
from events.exceptions import RegistrationRejectedError, RejectionReason
from events.models import Event, EventAnalytics, Registration, Ticket
from notifications.models import Notification

logger = structlog.get_logger(__name__)


class DjangoEventRepository:
    def get(self, event_id: UUID, *, for_update: bool = False) -> EventRecord | None:
        qs = Event.objects.select_related(None)
        if for_update:
            qs = qs.select_for_update()
        event = qs.filter(pk=event_id).first()
        return event.to_record() if event else None


class DjangoTicketRepository:
    def get(self, ticket_id: UUID, *, for_update: bool = False) -> TicketRecord | None:
        qs = Ticket.objects.all()
        if for_update:
            qs = qs.select_for_update()
        ticket = qs.filter(pk=ticket_id).first()
        return ticket.to_record() if ticket else None

    def increment_sold(self, ticket_id: UUID, quantity: int) -> bool:
        updated = (
            Ticket.objects.filter(pk=ticket_id)
            .filter(Q(quantity__isnull=True) | Q(sold__lte=F("quantity") - quantity))
            .update(sold=F("sold") + quantity, updated_at=timezone.now())
        )
        return updated > 0


class DjangoRegistrationRepository:
    def _queryset(self) -> t.Any:
        return Registration.objects.with_related()

    def get(self, registration_id: UUID) -> RegistrationRecord | None:
        registration = self._queryset().filter(pk=registration_id).first()
        return registration.to_record() if registration else None

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
        try:
            with transaction.atomic():
                registration = Registration.objects.create(
                    event_id=event_id,
                    user_id=user_id,
                    ticket_id=ticket_id,
                    status=status,
                    stripe_payment_id=stripe_payment_id,
                    quantity=quantity,
                )
        except (IntegrityError, DjangoValidationError):
            # the partial unique constraint is the last line against concurrent duplicates
            if self.has_active(event_id, user_id):
                logger.info("registration_duplicate_rejected_by_constraint", event_id=str(event_id))
                raise RegistrationRejectedError(RejectionReason.DUPLICATE)
            raise
        return t.cast(RegistrationRecord, self.get(registration.pk))

    def count_active(self, event_id: UUID) -> int:
        return t.cast(int, Registration.objects.filter(event_id=event_id).active().count())

    def has_active(self, event_id: UUID, user_id: UUID) -> bool:
        return t.cast(bool, Registration.objects.filter(event_id=event_id, user_id=user_id).active().exists())

    def find_by_qr_code(self, event_id: UUID, qr_code: str) -> RegistrationRecord | None:
        registration = self._queryset().filter(event_id=event_id, qr_code=qr_code).first()
        return registration.to_record() if registration else None

    def find_by_email(self, event_id: UUID, email: str) -> RegistrationRecord | None:
        registration = (
            self._queryset()
            .filter(event_id=event_id, user__email__iexact=email)
            .order_by(
                Case(
                    When(status=RegistrationStatus.CANCELLED, then=Value(1)),
                    default=Value(0),
                    output_field=IntegerField(),
                ),
                "-created_at",
            )
            .first()
        )
        return registration.to_record() if registration else None

    def list_for_user(self, user_id: UUID) -> list[RegistrationRecord]:
        return [registration.to_record() for registration in self._queryset().filter(user_id=user_id)]

    def transition_by_payment_id(self, payment_id: str, *, from_status: str, to_status: str) -> int:
        return t.cast(
            int,
            Registration.objects.filter(stripe_payment_id=payment_id, status=from_status).update(
                status=to_status, updated_at=timezone.now()
            ),
        )

    def transition(self, registration_id: UUID, *, from_status: str, to_status: str) -> int:
        return t.cast(
            int,
            Registration.objects.filter(pk=registration_id, status=from_status).update(
                status=to_status, updated_at=timezone.now()
            ),
        )

    def mark_checked_in(self, registration_id: UUID, at: datetime) -> int:
        return t.cast(
            int,
            Registration.objects.filter(
                pk=registration_id, status=RegistrationStatus.CONFIRMED, checked_in=False
            ).update(checked_in=True, checked_in_at=at, updated_at=at),
        )


class DjangoAnalyticsRepository:
    def add_revenue(self, event_id: UUID, amount: Decimal) -> None:
        EventAnalytics.objects.get_or_create(event_id=event_id)
        EventAnalytics.objects.filter(event_id=event_id).update(
            total_revenue=F("total_revenue") + amount, updated_at=timezone.now()
        )

    def increment_page_views(self, event_id: UUID) -> None:
        EventAnalytics.objects.get_or_create(event_id=event_id)
        EventAnalytics.objects.filter(event_id=event_id).update(
            page_views=F("page_views") + 1, updated_at=timezone.now()
        )


class DjangoNotificationRepository:
    def create(self, *, user_id: UUID, title: str, message: str, link: str = "") -> None:
        Notification.objects.create(user_id=user_id, title=title, message=message, link=link)


class DjangoRegistrationStore:
    """Registration store over the default database.

    Row locks come from `select_for_update`, which is a no-op on SQLite where
    the whole database is locked by the writing transaction instead.
    """

    def __init__(self) -> None:
        self.events = DjangoEventRepository()
        self.tickets = DjangoTicketRepository()
        self.registrations = DjangoRegistrationRepository()
        self.analytics = DjangoAnalyticsRepository()
        self.notifications = DjangoNotificationRepository()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with transaction.atomic():
            yield
