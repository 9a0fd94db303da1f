from datetime import date
from decimal import Decimal

from ninja import Schema

from .event import EventInListSchema


class OverviewSchema(Schema):
    total_registrations: int
    confirmed_registrations: int
    checked_in: int
    total_revenue: Decimal
    capacity: int | None
    page_views: int
    conversion_rate: float
    check_in_rate: float


class TicketBreakdownSchema(Schema):
    name: str
    price: Decimal
    sold: int
    total: int | None
    revenue: Decimal


class RegistrationTrendPoint(Schema):
    date: date
    count: int


class RevenueTrendPoint(Schema):
    date: date
    amount: Decimal


class EventAnalyticsSchema(Schema):
    overview: OverviewSchema
    ticket_breakdown: list[TicketBreakdownSchema]
    registration_trend: list[RegistrationTrendPoint]
    revenue_trend: list[RevenueTrendPoint]


class DashboardSchema(Schema):
    total_events: int
    total_registrations: int
    total_revenue: Decimal
    upcoming_events: list[EventInListSchema]
