from .analytics import EventAnalytics
from .category import Category
from .event import Event
from .registration import Registration
from .ticket import Ticket

__all__ = [
    "Category",
    "Event",
    "EventAnalytics",
    "Registration",
    "Ticket",
]
