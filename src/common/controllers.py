import typing as t

from ninja_extra import ControllerBase

from accounts.models import EventFlowUser
from common.context import RequestContext


class UserAwareController(ControllerBase):
    def user(self) -> EventFlowUser:
        """Get the user for this request."""
        return t.cast(EventFlowUser, self.context.request.user)  # type: ignore[union-attr]

    def request_context(self) -> RequestContext:
        """Build the explicit identity context handed to service calls."""
        return RequestContext.from_request(self.context.request)  # type: ignore[union-attr, arg-type]
