import typing as t

import structlog
from django.http import HttpRequest
from ninja_jwt.authentication import JWTAuth


class EventFlowJWTAuth(JWTAuth):
    """JWT authentication that binds the authenticated user to the logging context.

    Every log line emitted while handling the request carries `user_id`, so webhook-free
    flows (registrations, check-in, organizer actions) can be traced per user.

    Usage:
        @api_controller("/registrations", auth=EventFlowJWTAuth())
        class RegistrationController(UserAwareController): ...
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and bind the user id to structlog's context vars.

        Raises:
            AuthenticationFailed: If authentication fails
            InvalidToken: If the token is invalid
        """
        user = super().authenticate(request, token)
        if user is not None:
            structlog.contextvars.bind_contextvars(user_id=str(user.id))
        return user
