import typing as t

from django.conf import settings
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel
from events.domain import EventRecord, EventStatus

from .category import Category

if t.TYPE_CHECKING:
    from accounts.models import EventFlowUser


class EventQuerySet(models.QuerySet["Event"]):
    def published(self) -> t.Self:
        return self.filter(status=EventStatus.PUBLISHED)

    def for_organizer(self, user: "EventFlowUser") -> t.Self:
        return self.filter(organizer=user)

    def search(self, q: str) -> t.Self:
        return self.filter(Q(title__icontains=q) | Q(description__icontains=q))


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        return EventQuerySet(self.model, using=self._db).select_related("category")

    def published(self) -> EventQuerySet:
        return self.get_queryset().published()

    def for_organizer(self, user: "EventFlowUser") -> EventQuerySet:
        return self.get_queryset().for_organizer(user)


class Event(TimeStampedModel):
    Status = EventStatus

    slug = models.SlugField(max_length=255, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="events"
    )
    cover_image = models.URLField(blank=True, default="")
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField()
    timezone = models.CharField(max_length=64, default="UTC")
    is_virtual = models.BooleanField(default=False)
    location = models.CharField(max_length=255, blank=True, default="")
    meeting_url = models.URLField(blank=True, default="")
    capacity = models.PositiveIntegerField(null=True, blank=True)
    is_recurring = models.BooleanField(default=False)
    recurring_rule = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(max_length=20, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)
    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")

    objects = EventManager()

    class Meta:
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(condition=Q(end_date__gte=models.F("start_date")), name="event_ends_after_start"),
        ]

    def __str__(self) -> str:
        return self.title

    def to_record(self) -> EventRecord:
        return EventRecord(
            id=self.id,
            slug=self.slug,
            title=self.title,
            status=self.status,
            capacity=self.capacity,
            organizer_id=self.organizer_id,
        )
