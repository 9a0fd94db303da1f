import typing as t
from uuid import UUID

import structlog
from django.utils import timezone

from common.context import RequestContext
from events.domain import RegistrationRecord, RegistrationStatus
from events.exceptions import CheckInError, CheckInResult
from events.protocols import RegistrationStore

logger = structlog.get_logger(__name__)


def find_registration(store: RegistrationStore, event_id: UUID, code: str) -> RegistrationRecord | None:
    """Resolve a presented code to a registration of the event.

    Codes are matched exactly against issued QR codes. Codes that look like an e-mail
    address fall back to the attendee's registration, for door staff without a scanner.
    """
    registration = store.registrations.find_by_qr_code(event_id, code)
    if registration is None and "@" in code:
        registration = store.registrations.find_by_email(event_id, code.strip())
    return registration


def check_in(store: RegistrationStore, ctx: RequestContext, event_id: UUID, code: str) -> RegistrationRecord:
    """Check an attendee in at the door.

    Raises:
        CheckInError: NOT_FOUND, INVALID (cancelled), NOT_CONFIRMED (pending) or
            ALREADY_CHECKED_IN carrying the original timestamp.
    """
    registration = find_registration(store, event_id, code)
    if registration is None:
        _refuse(CheckInResult.NOT_FOUND, "Invalid QR code: no registration found for this event", event_id)

    if registration.status == RegistrationStatus.CANCELLED:
        _refuse(CheckInResult.INVALID, "This registration has been cancelled", event_id, registration)
    if registration.status == RegistrationStatus.PENDING:
        _refuse(
            CheckInResult.NOT_CONFIRMED,
            "Registration is not confirmed (payment may be pending)",
            event_id,
            registration,
        )
    if registration.checked_in:
        _refuse(CheckInResult.ALREADY_CHECKED_IN, "Already checked in", event_id, registration)

    if not store.registrations.mark_checked_in(registration.id, timezone.now()):
        # another scanner won the race
        current = store.registrations.get(registration.id)
        assert current is not None
        _refuse(CheckInResult.ALREADY_CHECKED_IN, "Already checked in", event_id, current)

    checked_in = store.registrations.get(registration.id)
    assert checked_in is not None
    logger.info(
        "attendee_checked_in",
        event_id=str(event_id),
        registration_id=str(registration.id),
        checked_in_by=str(ctx.user_id),
    )
    return checked_in


def _refuse(
    result: CheckInResult,
    message: str,
    event_id: UUID,
    registration: RegistrationRecord | None = None,
) -> t.NoReturn:
    logger.info(
        "check_in_refused",
        result=result.value,
        event_id=str(event_id),
        registration_id=str(registration.id) if registration else None,
    )
    raise CheckInError(
        result,
        message,
        registration_id=registration.id if registration else None,
        checked_in_at=registration.checked_in_at if registration else None,
    )
