from decimal import Decimal

from django.db import models

from common.models import TimeStampedModel

from .event import Event


class EventAnalytics(TimeStampedModel):
    event = models.OneToOneField(Event, on_delete=models.CASCADE, related_name="analytics")
    page_views = models.PositiveIntegerField(default=0)
    total_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    class Meta:
        verbose_name_plural = "event analytics"

    def __str__(self) -> str:
        return f"Analytics for {self.event_id}"
