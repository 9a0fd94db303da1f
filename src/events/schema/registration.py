"""Registration, check-in and attendee schemas.

Responses are built from `events.domain.RegistrationRecord`, not from model instances,
so they look the same whichever store produced them.
"""

from datetime import datetime
from uuid import UUID

from ninja import Schema
from pydantic import Field

from common.schema import StrippedString
from events.domain import RegistrationStatus
from events.service.registration_state import RegistrationAction


class RegistrationCreateSchema(Schema):
    event_id: UUID
    ticket_id: UUID
    quantity: int = Field(1, ge=1)


class RegistrationSchema(Schema):
    id: UUID
    event_id: UUID
    user_id: UUID
    ticket_id: UUID | None
    quantity: int
    status: RegistrationStatus
    qr_code: str
    checked_in: bool
    checked_in_at: datetime | None
    stripe_payment_id: str | None
    created_at: datetime


class RegistrationResultSchema(Schema):
    registration: RegistrationSchema
    checkout_url: str | None = None


class UserRegistrationSchema(RegistrationSchema):
    event_title: str
    event_slug: str
    ticket_name: str | None


class CheckInSchema(Schema):
    qr_code: StrippedString = Field(..., min_length=1)


class AttendeeSchema(RegistrationSchema):
    attendee_name: str
    attendee_email: str
    ticket_name: str | None


class CheckInResponseSchema(Schema):
    success: bool = True
    message: str
    registration: AttendeeSchema


class AttendeeActionSchema(Schema):
    registration_id: UUID
    action: RegistrationAction


class AttendeeStatsSchema(Schema):
    total: int
    confirmed: int
    pending: int
    cancelled: int
    checked_in: int


class AttendeeListSchema(Schema):
    registrations: list[AttendeeSchema]
    stats: AttendeeStatsSchema
