import structlog
from django.db import transaction
from ninja.errors import HttpError

from accounts import schema
from accounts.models import EventFlowUser

logger = structlog.get_logger(__name__)


@transaction.atomic
def register_user(payload: schema.RegisterUserSchema) -> EventFlowUser:
    """Register a new user.

    Raises:
        HttpError: 409 if the e-mail address is already in use.
    """
    logger.info("user_registration_started")
    if EventFlowUser.objects.filter(email__iexact=payload.email).exists():
        logger.warning("user_registration_duplicate")
        raise HttpError(409, "Email already in use")
    user = EventFlowUser.objects.create_user_with_email(
        email=payload.email,
        password=payload.password,
        name=payload.name,
    )
    logger.info("user_registration_completed", user_id=str(user.id))
    return user
