from uuid import UUID

from django.db.models import Q
from ninja import Field, FilterSchema

from events.domain import EventStatus, RegistrationStatus


class EventFilterSchema(FilterSchema):
    status: EventStatus | None = None
    category_id: UUID | None = Field(None, q="category_id")  # type: ignore[call-overload]
    search: str | None = None

    def filter_search(self, search: str | None) -> Q:
        if not search:
            return Q()
        return Q(title__icontains=search) | Q(description__icontains=search)


class AttendeeFilterSchema(FilterSchema):
    status: RegistrationStatus | None = None
    checked_in: bool | None = None
    search: str | None = None

    def filter_search(self, search: str | None) -> Q:
        """Match the attendee's name or e-mail."""
        if not search:
            return Q()
        return Q(user__name__icontains=search) | Q(user__email__icontains=search)
