import typing as t
from uuid import UUID

from ninja import Query
from ninja_extra import api_controller, route

from common.authentication import EventFlowJWTAuth
from common.controllers import UserAwareController
from common.schema import ResponseSuccess
from common.throttling import WriteThrottle
from events import filters, models, schema
from events.service import analytics_service, checkin_service, registration_state
from events.stores import get_registration_store

from .permissions import IsEventOrganizer


@api_controller(
    "/events/{uuid:event_id}",
    auth=EventFlowJWTAuth(),
    permissions=[IsEventOrganizer()],
    tags=["Event Admin"],
)
class EventAdminController(UserAwareController):
    """Door and attendee management for the event's organizer."""

    def get_one(self, event_id: UUID) -> models.Event:
        """Load the event, enforcing organizer permission."""
        return t.cast(
            models.Event, self.get_object_or_exception(models.Event.objects.prefetch_related("tickets"), pk=event_id)
        )

    @route.post("/checkin", url_name="check_in", response=schema.CheckInResponseSchema, throttle=WriteThrottle())
    def check_in(self, event_id: UUID, payload: schema.CheckInSchema) -> schema.CheckInResponseSchema:
        """Check an attendee in by QR code, or by e-mail address when no scanner is at hand."""
        event = self.get_one(event_id)
        registration = checkin_service.check_in(
            get_registration_store(), self.request_context(), event.id, payload.qr_code
        )
        return schema.CheckInResponseSchema(
            message=f"{registration.attendee_label} checked in!",
            registration=schema.AttendeeSchema.model_validate(registration),
        )

    @route.get("/attendees", url_name="list_attendees", response=schema.AttendeeListSchema)
    def list_attendees(
        self,
        event_id: UUID,
        params: filters.AttendeeFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> dict[str, object]:
        """Registrations of the event with per-status counts."""
        return analytics_service.attendee_list(self.get_one(event_id), params)

    @route.patch("/attendees", url_name="update_attendee", response=ResponseSuccess, throttle=WriteThrottle())
    def update_attendee(self, event_id: UUID, payload: schema.AttendeeActionSchema) -> ResponseSuccess:
        """Confirm, cancel or check in a registration by hand."""
        event = self.get_one(event_id)
        registration_state.apply_action(
            get_registration_store(), self.request_context(), event.id, payload.registration_id, payload.action
        )
        return ResponseSuccess()

    @route.get("/analytics", url_name="event_analytics", response=schema.EventAnalyticsSchema)
    def analytics(self, event_id: UUID) -> dict[str, object]:
        """Overview, ticket breakdown and daily trends."""
        return analytics_service.event_analytics(self.get_one(event_id))
