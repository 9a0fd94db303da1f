import typing as t
from uuid import UUID

from django.db.models import Q, QuerySet
from django.http import Http404
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import EventFlowJWTAuth
from common.controllers import UserAwareController
from common.schema import ResponseSuccess
from common.throttling import WriteThrottle
from events import filters, models, schema
from events.domain import EventStatus
from events.service import event_service
from events.stores import get_registration_store

from .permissions import IsEventOrganizer


@api_controller("/events", auth=EventFlowJWTAuth(), tags=["Events"])
class EventController(UserAwareController):
    def get_queryset(self) -> QuerySet[models.Event]:
        """The organizer's own events."""
        return event_service.event_queryset().filter(organizer=self.user())

    def get_one(self, event_id: UUID) -> models.Event:
        return t.cast(
            models.Event, self.get_object_or_exception(event_service.event_queryset(), pk=event_id)
        )

    @route.post(
        "",
        url_name="create_event",
        response={201: schema.EventDetailSchema},
        throttle=WriteThrottle(),
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event together with its ticket tiers."""
        return 201, event_service.create_event(self.user(), payload)

    @route.get("", url_name="list_events", response=PaginatedResponseSchema[schema.EventInListSchema])
    @paginate(PageNumberPaginationExtra, page_size=10)
    def list_events(
        self,
        params: filters.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Event]:
        """List your events, newest first, filtered by status, category or a text search."""
        return params.filter(self.get_queryset()).order_by("-created_at")

    @route.get("/public/{slug}", url_name="public_event", response=schema.EventDetailSchema, auth=None)
    def get_public_event(self, slug: str) -> models.Event:
        """Public event page. Draft events are not visible."""
        event = event_service.get_public_event(get_registration_store(), slug)
        if event is None:
            raise Http404("Event not found")
        return event

    @route.get("/{uuid:event_id}", url_name="get_event", response=schema.EventDetailSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Event details. Drafts are only visible to their organizer."""
        user = self.user()
        qs = event_service.event_queryset().filter(Q(organizer=user) | ~Q(status=EventStatus.DRAFT))
        return t.cast(models.Event, self.get_object_or_exception(qs, pk=event_id))

    @route.patch(
        "/{uuid:event_id}",
        url_name="update_event",
        response=schema.EventDetailSchema,
        permissions=[IsEventOrganizer()],
        throttle=WriteThrottle(),
    )
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> models.Event:
        """Update an event you organize."""
        return event_service.update_event(self.get_one(event_id), payload)

    @route.delete(
        "/{uuid:event_id}",
        url_name="delete_event",
        response=ResponseSuccess,
        permissions=[IsEventOrganizer()],
        throttle=WriteThrottle(),
    )
    def delete_event(self, event_id: UUID) -> ResponseSuccess:
        """Delete an event you organize.

        Events with registrations cannot be deleted; cancel them instead.
        """
        event_service.delete_event(self.get_one(event_id))
        return ResponseSuccess()
