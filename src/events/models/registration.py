import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel
from events.domain import ACTIVE_REGISTRATION_STATUSES, RegistrationRecord, RegistrationStatus, generate_qr_code

from .event import Event
from .ticket import Ticket


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def active(self) -> t.Self:
        return self.filter(status__in=ACTIVE_REGISTRATION_STATUSES)

    def with_related(self) -> t.Self:
        return self.select_related("user", "ticket", "event")


class Registration(TimeStampedModel):
    """A user's claim on a seat at an event.

    At most one non-cancelled registration exists per (event, user).
    """

    Status = RegistrationStatus

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="registrations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations")
    ticket = models.ForeignKey(
        Ticket, on_delete=models.PROTECT, null=True, blank=True, related_name="registrations"
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    status = models.CharField(
        max_length=20, choices=RegistrationStatus.choices, default=RegistrationStatus.PENDING, db_index=True
    )
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    qr_code = models.CharField(max_length=64, unique=True, default=generate_qr_code, editable=False)
    stripe_payment_id = models.CharField(max_length=255, null=True, blank=True, db_index=True)

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=~Q(status=RegistrationStatus.CANCELLED),
                name="unique_active_registration_per_user",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.event_id} ({self.status})"

    def to_record(self) -> RegistrationRecord:
        user = self.user
        return RegistrationRecord(
            id=self.id,
            event_id=self.event_id,
            user_id=self.user_id,
            ticket_id=self.ticket_id,
            status=self.status,
            qr_code=self.qr_code,
            created_at=self.created_at,
            quantity=self.quantity,
            checked_in=self.checked_in,
            checked_in_at=self.checked_in_at,
            stripe_payment_id=self.stripe_payment_id,
            attendee_name=user.name,
            attendee_email=user.email,
            ticket_name=self.ticket.name if self.ticket_id else None,
            event_title=self.event.title,
            event_slug=self.event.slug,
        )
