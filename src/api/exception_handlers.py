"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import CheckInError, EventFlowError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Log an unhandled exception and answer with a bare 500."""
    logger.exception(
        "internal_server_error",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
    )
    data = {"detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Turn model validation failures into a 400 with field errors."""
    logger.warning("validation_error", path=request.path, exc_info=True)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(t.cast(ValidationError, exc).messages)}
    return Response(status=400, data={"errors": error_dict})


def handle_eventflow_error(request: HttpRequest, exc: EventFlowError | t.Type[EventFlowError]) -> Response:
    """Map a registration-core error to its status code and machine-readable code."""
    error = t.cast(EventFlowError, exc)
    data: dict[str, t.Any] = {"detail": error.message, "code": error.code}
    if isinstance(error, CheckInError):
        if error.registration_id is not None:
            data["registration_id"] = str(error.registration_id)
        if error.checked_in_at is not None:
            data["checked_in_at"] = error.checked_in_at.isoformat()
    log = logger.error if error.status_code >= 500 else logger.info
    log("request_failed", path=request.path, status_code=error.status_code, code=error.code)
    return Response(status=error.status_code, data=data)


SENSITIVE_KEYS = {"password", "token", "authorization", "stripe-signature", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
