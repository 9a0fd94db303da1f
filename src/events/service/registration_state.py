"""Organizer-driven transitions of a registration.

    PENDING --confirm--> CONFIRMED --checkin--> CONFIRMED (checked in)
    PENDING --cancel---> CANCELLED
    CONFIRMED --cancel-> CANCELLED

CANCELLED is terminal and check-in is recorded once.
"""

from enum import StrEnum
from uuid import UUID

import structlog
from django.utils import timezone

from common.context import RequestContext
from events.domain import RegistrationRecord, RegistrationStatus
from events.exceptions import InvalidTransitionError, RegistrationNotFoundError
from events.protocols import RegistrationStore
from events.service import inventory

logger = structlog.get_logger(__name__)


class RegistrationAction(StrEnum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    CHECKIN = "checkin"


TRANSITIONS: dict[tuple[str, RegistrationAction], str] = {
    (RegistrationStatus.PENDING, RegistrationAction.CONFIRM): RegistrationStatus.CONFIRMED,
    (RegistrationStatus.PENDING, RegistrationAction.CANCEL): RegistrationStatus.CANCELLED,
    (RegistrationStatus.CONFIRMED, RegistrationAction.CANCEL): RegistrationStatus.CANCELLED,
    (RegistrationStatus.CONFIRMED, RegistrationAction.CHECKIN): RegistrationStatus.CONFIRMED,
}


def is_allowed(registration: RegistrationRecord, action: RegistrationAction) -> bool:
    if action == RegistrationAction.CHECKIN and registration.checked_in:
        return False
    return (registration.status, action) in TRANSITIONS


def _blocked_by_check_in(registration: RegistrationRecord, action: RegistrationAction) -> bool:
    return action == RegistrationAction.CHECKIN and registration.checked_in


def apply_action(
    store: RegistrationStore,
    ctx: RequestContext,
    event_id: UUID,
    registration_id: UUID,
    action: RegistrationAction,
) -> RegistrationRecord:
    """Apply an organizer action to a registration of the event.

    Confirming commits every seat the registration holds in the same transaction.
    Every update is conditional on the status read, so a concurrent change surfaces
    as an `InvalidTransitionError` instead of a lost update.

    Raises:
        RegistrationNotFoundError: If the registration does not belong to the event.
        InvalidTransitionError: If the action is not valid for the current state.
        RegistrationRejectedError: SOLD_OUT when confirming against an exhausted tier.
    """
    with store.atomic():
        registration = store.registrations.get(registration_id)
        if registration is None or registration.event_id != event_id:
            raise RegistrationNotFoundError(registration_id)
        if not is_allowed(registration, action):
            raise InvalidTransitionError(
                action.value, registration.status, checked_in=_blocked_by_check_in(registration, action)
            )

        target = TRANSITIONS[(registration.status, action)]
        if action == RegistrationAction.CHECKIN:
            changed = store.registrations.mark_checked_in(registration.id, timezone.now())
        else:
            changed = store.registrations.transition(registration.id, from_status=registration.status, to_status=target)
            if changed and action == RegistrationAction.CONFIRM and registration.ticket_id is not None:
                inventory.commit_sold(store, registration.ticket_id, registration.quantity)
        if not changed:
            current = store.registrations.get(registration_id)
            assert current is not None
            raise InvalidTransitionError(
                action.value, current.status, checked_in=_blocked_by_check_in(current, action)
            )

        updated = store.registrations.get(registration_id)
        assert updated is not None

    logger.info(
        "registration_transitioned",
        registration_id=str(registration_id),
        event_id=str(event_id),
        action=action.value,
        from_status=registration.status,
        to_status=updated.status,
        actor_id=str(ctx.user_id),
    )
    return updated
