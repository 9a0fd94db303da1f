from datetime import datetime
from enum import StrEnum
from uuid import UUID


class RejectionReason(StrEnum):
    SOLD_OUT = "SOLD_OUT"
    AT_CAPACITY = "AT_CAPACITY"
    DUPLICATE = "DUPLICATE"


class CheckInResult(StrEnum):
    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"
    INVALID = "INVALID"
    NOT_CONFIRMED = "NOT_CONFIRMED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"


class EventFlowError(Exception):
    """Base class for errors raised by the registration core.

    `status_code` and `code` are read by the API exception handler.
    """

    status_code = 400
    code = "ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationRequiredError(EventFlowError):
    """Raised when a core operation is called without an identity."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class EventNotAvailableError(EventFlowError):
    """Raised when an event does not exist or does not accept registrations."""

    status_code = 404
    code = "EVENT_NOT_AVAILABLE"

    def __init__(self, event_id: UUID) -> None:
        super().__init__("Event not found or not available")
        self.event_id = event_id


class TicketNotFoundError(EventFlowError):
    """Raised when a ticket tier is missing or belongs to another event."""

    status_code = 404
    code = "TICKET_NOT_FOUND"

    def __init__(self, ticket_id: UUID) -> None:
        super().__init__("Ticket not found")
        self.ticket_id = ticket_id


class RegistrationNotFoundError(EventFlowError):
    """Raised when a registration does not exist within the event."""

    status_code = 404
    code = "REGISTRATION_NOT_FOUND"

    def __init__(self, registration_id: UUID) -> None:
        super().__init__("Registration not found")
        self.registration_id = registration_id


class RegistrationRejectedError(EventFlowError):
    """Raised when the inventory refuses a reservation."""

    MESSAGES = {
        RejectionReason.SOLD_OUT: "Not enough tickets available",
        RejectionReason.AT_CAPACITY: "Event is at capacity",
        RejectionReason.DUPLICATE: "Already registered for this event",
    }

    def __init__(self, reason: RejectionReason) -> None:
        super().__init__(self.MESSAGES[reason])
        self.reason = reason
        self.code = reason.value
        self.status_code = 409 if reason == RejectionReason.DUPLICATE else 400


class CheckInError(EventFlowError):
    """Raised when a presented code cannot be checked in."""

    STATUS_CODES = {
        CheckInResult.NOT_FOUND: 404,
        CheckInResult.INVALID: 400,
        CheckInResult.NOT_CONFIRMED: 400,
        CheckInResult.ALREADY_CHECKED_IN: 409,
    }

    def __init__(
        self,
        result: CheckInResult,
        message: str,
        *,
        registration_id: UUID | None = None,
        checked_in_at: datetime | None = None,
    ) -> None:
        super().__init__(message)
        self.result = result
        self.code = result.value
        self.status_code = self.STATUS_CODES[result]
        self.registration_id = registration_id
        self.checked_in_at = checked_in_at


class InvalidTransitionError(EventFlowError):
    """Raised when an organizer action is not valid for the registration's current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, action: str, status: str, *, checked_in: bool = False) -> None:
        if checked_in:
            message = f"Cannot {action}: registration is already checked in"
            self.status_code = 409
        else:
            message = f"Cannot {action} a registration that is {status.lower()}"
        super().__init__(message)
        self.action = action
        self.status = status


class PaymentGatewayError(EventFlowError):
    """Raised when the payment processor fails to create a checkout session."""

    status_code = 500
    code = "PAYMENT_PROVIDER_ERROR"


class WebhookSignatureError(EventFlowError):
    """Raised when a webhook payload cannot be verified."""

    code = "INVALID_SIGNATURE"

    def __init__(self) -> None:
        super().__init__("Invalid signature")


class EventHasRegistrationsError(EventFlowError):
    """Raised when deleting an event that still has registrations."""

    status_code = 409
    code = "EVENT_HAS_REGISTRATIONS"

    def __init__(self) -> None:
        super().__init__("Event has registrations and cannot be deleted; cancel it instead")
