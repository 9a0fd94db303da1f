"""Organizer reporting: per-event analytics, attendee lists and the dashboard."""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from accounts.models import EventFlowUser
from events.domain import RegistrationRecord, RegistrationStatus
from events.filters import AttendeeFilterSchema
from events.models import Event, EventAnalytics, Registration

from .event_service import event_queryset


def _percentage(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def event_analytics(event: Event) -> dict[str, object]:
    """Overview, ticket breakdown and daily trends for one event.

    Trend revenue is derived from confirmed registrations at their ticket's price; the
    overview reports the revenue accumulated from confirmed payments.
    """
    analytics, _ = EventAnalytics.objects.get_or_create(event=event)
    registrations = list(Registration.objects.filter(event=event).select_related("ticket").order_by("created_at"))
    confirmed = [r for r in registrations if r.status == RegistrationStatus.CONFIRMED]
    checked_in = sum(1 for r in registrations if r.checked_in)

    registrations_by_day: dict[date, int] = defaultdict(int)
    for registration in registrations:
        registrations_by_day[registration.created_at.date()] += 1

    revenue_by_day: dict[date, Decimal] = defaultdict(Decimal)
    for registration in confirmed:
        price = registration.ticket.price if registration.ticket else Decimal("0")
        revenue_by_day[registration.created_at.date()] += price

    return {
        "overview": {
            "total_registrations": len(registrations),
            "confirmed_registrations": len(confirmed),
            "checked_in": checked_in,
            "total_revenue": analytics.total_revenue,
            "capacity": event.capacity,
            "page_views": analytics.page_views,
            "conversion_rate": _percentage(len(confirmed), analytics.page_views),
            "check_in_rate": _percentage(checked_in, len(confirmed)),
        },
        "ticket_breakdown": [
            {
                "name": ticket.name,
                "price": ticket.price,
                "sold": ticket.sold,
                "total": ticket.quantity,
                "revenue": ticket.price * ticket.sold,
            }
            for ticket in event.tickets.all()
        ],
        "registration_trend": [{"date": day, "count": count} for day, count in sorted(registrations_by_day.items())],
        "revenue_trend": [{"date": day, "amount": amount} for day, amount in sorted(revenue_by_day.items())],
    }


def attendee_list(event: Event, filters: AttendeeFilterSchema) -> dict[str, object]:
    """Filtered registrations of an event, plus counts over all of its registrations."""
    registrations: QuerySet[Registration] = filters.filter(
        Registration.objects.with_related().filter(event=event)
    ).order_by("-created_at")
    stats = Registration.objects.filter(event=event).aggregate(
        confirmed=Count("id", filter=Q(status=RegistrationStatus.CONFIRMED)),
        pending=Count("id", filter=Q(status=RegistrationStatus.PENDING)),
        cancelled=Count("id", filter=Q(status=RegistrationStatus.CANCELLED)),
        checked_in=Count("id", filter=Q(checked_in=True)),
    )
    records: list[RegistrationRecord] = [r.to_record() for r in registrations]
    return {"registrations": records, "stats": {"total": len(records), **stats}}


def dashboard(user: EventFlowUser) -> dict[str, object]:
    """Totals across the organizer's events and the next five published ones."""
    events = Event.objects.for_organizer(user)
    upcoming = (
        event_queryset()
        .filter(organizer=user, status=Event.Status.PUBLISHED, start_date__gte=timezone.now())
        .order_by("start_date")[:5]
    )
    revenue = EventAnalytics.objects.filter(event__organizer=user).aggregate(total=Sum("total_revenue"))["total"]
    return {
        "total_events": events.count(),
        "total_registrations": Registration.objects.filter(
            event__organizer=user, status=RegistrationStatus.CONFIRMED
        ).count(),
        "total_revenue": revenue or Decimal("0"),
        "upcoming_events": list(upcoming),
    }
