"""Event, category and ticket tier schemas."""

import typing as t
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, HttpUrl, model_validator

from common.schema import OneToTwoFiftyFiveString, StrippedString
from events import models
from events.domain import EventStatus


class CategorySchema(ModelSchema):
    class Meta:
        model = models.Category
        fields = ["id", "name", "slug"]


class OrganizerSchema(Schema):
    id: UUID
    name: str
    email: str
    avatar: str


class TicketSchema(ModelSchema):
    remaining: int | None

    class Meta:
        model = models.Ticket
        fields = ["id", "name", "description", "price", "quantity", "sold", "sales_start", "sales_end"]


class TicketCreateSchema(Schema):
    name: OneToTwoFiftyFiveString
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    quantity: int | None = Field(None, gt=0)
    description: StrippedString = ""
    sales_start: AwareDatetime | None = None
    sales_end: AwareDatetime | None = None


class _EventTimesMixin(Schema):
    @model_validator(mode="after")
    def validate_dates(self) -> t.Self:
        start = getattr(self, "start_date", None)
        end = getattr(self, "end_date", None)
        if start and end and end < start:
            raise ValueError("End date must not be before the start date.")
        return self


class EventCreateSchema(_EventTimesMixin):
    title: str = Field(..., min_length=3, max_length=255)
    description: StrippedString = ""
    category_id: UUID | None = None
    cover_image: HttpUrl | None = None
    start_date: AwareDatetime
    end_date: AwareDatetime
    timezone: str = "UTC"
    location: StrippedString = ""
    is_virtual: bool = False
    meeting_url: HttpUrl | None = None
    capacity: int | None = Field(None, gt=0)
    is_recurring: bool = False
    recurring_rule: StrippedString = ""
    status: t.Literal["DRAFT", "PUBLISHED"] = "DRAFT"
    tickets: list[TicketCreateSchema] = Field(default_factory=list)


class EventUpdateSchema(_EventTimesMixin):
    title: str | None = Field(None, min_length=3, max_length=255)
    description: StrippedString | None = None
    category_id: UUID | None = None
    cover_image: HttpUrl | None = None
    start_date: AwareDatetime | None = None
    end_date: AwareDatetime | None = None
    timezone: str | None = None
    location: StrippedString | None = None
    is_virtual: bool | None = None
    meeting_url: HttpUrl | None = None
    capacity: int | None = Field(None, gt=0)
    status: EventStatus | None = None


class EventBaseSchema(Schema):
    id: UUID
    slug: str
    title: str
    category: CategorySchema | None = None
    cover_image: str
    start_date: AwareDatetime
    end_date: AwareDatetime
    timezone: str
    location: str
    is_virtual: bool
    capacity: int | None = None
    status: EventStatus
    tickets: list[TicketSchema]
    registration_count: int = 0
    created_at: AwareDatetime | None = None

    @staticmethod
    def resolve_tickets(obj: models.Event) -> list[models.Ticket]:
        return list(obj.tickets.all())

    @staticmethod
    def resolve_registration_count(obj: models.Event) -> int:
        annotated = getattr(obj, "registration_count", None)
        return annotated if annotated is not None else obj.registrations.count()


class EventInListSchema(EventBaseSchema):
    pass


class EventDetailSchema(EventBaseSchema):
    organizer: OrganizerSchema
    description: str
    meeting_url: str
    is_recurring: bool
    recurring_rule: str
    updated_at: datetime | None = None
