from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel
from events.domain import TicketRecord

from .event import Event


class Ticket(TimeStampedModel):
    """A priced ticket tier of an event.

    `sold` only counts committed units: free registrations and confirmed payments.
    """

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    quantity = models.PositiveIntegerField(null=True, blank=True)
    sold = models.PositiveIntegerField(default=0)
    sales_start = models.DateTimeField(null=True, blank=True)
    sales_end = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["price", "name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__isnull=True) | Q(sold__lte=models.F("quantity")),
                name="ticket_sold_within_quantity",
            ),
            models.CheckConstraint(condition=Q(price__gte=0), name="ticket_price_non_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.event_id}: {self.name}"

    @property
    def remaining(self) -> int | None:
        if self.quantity is None:
            return None
        return max(self.quantity - self.sold, 0)

    def to_record(self) -> TicketRecord:
        return TicketRecord(
            id=self.id,
            event_id=self.event_id,
            name=self.name,
            price=self.price,
            quantity=self.quantity,
            sold=self.sold,
            description=self.description,
        )
