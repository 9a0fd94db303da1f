"""Events schema package.

Schemas are grouped by the resource they describe and re-exported here.
"""

from .analytics import (
    DashboardSchema,
    EventAnalyticsSchema,
    OverviewSchema,
    RegistrationTrendPoint,
    RevenueTrendPoint,
    TicketBreakdownSchema,
)
from .event import (
    CategorySchema,
    EventCreateSchema,
    EventDetailSchema,
    EventInListSchema,
    EventUpdateSchema,
    OrganizerSchema,
    TicketCreateSchema,
    TicketSchema,
)
from .registration import (
    AttendeeActionSchema,
    AttendeeListSchema,
    AttendeeSchema,
    AttendeeStatsSchema,
    CheckInResponseSchema,
    CheckInSchema,
    RegistrationCreateSchema,
    RegistrationResultSchema,
    RegistrationSchema,
    UserRegistrationSchema,
)

__all__ = [
    # Events
    "CategorySchema",
    "EventCreateSchema",
    "EventDetailSchema",
    "EventInListSchema",
    "EventUpdateSchema",
    "OrganizerSchema",
    "TicketCreateSchema",
    "TicketSchema",
    # Registrations
    "AttendeeActionSchema",
    "AttendeeListSchema",
    "AttendeeSchema",
    "AttendeeStatsSchema",
    "CheckInResponseSchema",
    "CheckInSchema",
    "RegistrationCreateSchema",
    "RegistrationResultSchema",
    "RegistrationSchema",
    "UserRegistrationSchema",
    # Analytics
    "DashboardSchema",
    "EventAnalyticsSchema",
    "OverviewSchema",
    "RegistrationTrendPoint",
    "RevenueTrendPoint",
    "TicketBreakdownSchema",
]
