import secrets
import typing as t

import structlog
from django.db import transaction
from django.db.models import Count, QuerySet
from django.utils.text import slugify

from accounts.models import EventFlowUser
from events.domain import EventStatus
from events.exceptions import EventHasRegistrationsError
from events.models import Event, EventAnalytics, Registration, Ticket
from events.protocols import RegistrationStore
from events.schema import EventCreateSchema, EventUpdateSchema

from . import update_db_instance

logger = structlog.get_logger(__name__)


def generate_unique_slug(title: str) -> str:
    """Slugify the title, appending a short random suffix if the slug is taken."""
    base = slugify(title)[:240] or "event"
    slug = base
    while Event.objects.filter(slug=slug).exists():
        slug = f"{base}-{secrets.token_hex(3)}"
    return slug


def event_queryset() -> QuerySet[Event]:
    return (
        Event.objects.select_related("category", "organizer")
        .prefetch_related("tickets")
        .annotate(registration_count=Count("registrations", distinct=True))
    )


@transaction.atomic
def create_event(organizer: EventFlowUser, payload: EventCreateSchema) -> Event:
    """Create an event with its ticket tiers and an empty analytics row."""
    data = payload.model_dump(exclude={"tickets", "cover_image", "meeting_url"})
    event = Event.objects.create(
        **data,
        cover_image=str(payload.cover_image) if payload.cover_image else "",
        meeting_url=str(payload.meeting_url) if payload.meeting_url else "",
        slug=generate_unique_slug(payload.title),
        organizer=organizer,
    )
    for ticket in payload.tickets:
        Ticket.objects.create(event=event, **ticket.model_dump())
    EventAnalytics.objects.create(event=event)
    logger.info(
        "event_created",
        event_id=str(event.id),
        organizer_id=str(organizer.id),
        status=event.status,
        ticket_count=len(payload.tickets),
    )
    return event_queryset().get(pk=event.pk)


def update_event(event: Event, payload: EventUpdateSchema) -> Event:
    extra: dict[str, t.Any] = {}
    fields_set = payload.model_fields_set
    if "cover_image" in fields_set:
        extra["cover_image"] = str(payload.cover_image) if payload.cover_image else ""
    if "meeting_url" in fields_set:
        extra["meeting_url"] = str(payload.meeting_url) if payload.meeting_url else ""
    update_db_instance(event, payload, exclude={"cover_image", "meeting_url"}, **extra)
    logger.info("event_updated", event_id=str(event.id), fields=sorted(fields_set))
    return event_queryset().get(pk=event.pk)


@transaction.atomic
def delete_event(event: Event) -> None:
    """Delete an event that nobody registered for.

    Raises:
        EventHasRegistrationsError: If any registration, even a cancelled one, exists.
    """
    if Registration.objects.filter(event=event).exists():
        raise EventHasRegistrationsError()
    event_id = event.id
    event.delete()
    logger.info("event_deleted", event_id=str(event_id))


def get_public_event(store: RegistrationStore, slug: str) -> Event | None:
    """Look up a non-draft event by slug and count the page view.

    The page-view increment is best-effort and never fails the lookup.
    """
    event = event_queryset().exclude(status=EventStatus.DRAFT).filter(slug=slug).first()
    if event is None:
        return None
    try:
        store.analytics.increment_page_views(event.id)
    except Exception:
        logger.warning("page_view_increment_failed", event_id=str(event.id), exc_info=True)
    return event
