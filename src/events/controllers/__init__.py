from .dashboard import DashboardController
from .event_admin import EventAdminController
from .events import EventController
from .payment_webhook import PaymentWebhookController
from .registrations import RegistrationController

# Order matters: routes of earlier controllers are matched first.
EVENTS_CONTROLLERS: list[type] = [
    RegistrationController,
    PaymentWebhookController,
    EventController,
    EventAdminController,
    DashboardController,
]

__all__ = [
    "DashboardController",
    "EventAdminController",
    "EventController",
    "PaymentWebhookController",
    "RegistrationController",
    "EVENTS_CONTROLLERS",
]
