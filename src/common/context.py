"""Explicit per-request identity passed into the registration core.

Core services never read `request.user`; the API layer builds a `RequestContext`
from the authenticated request and hands it down.
"""

import typing as t
from dataclasses import dataclass
from uuid import UUID

if t.TYPE_CHECKING:
    from django.http import HttpRequest


@dataclass(frozen=True)
class RequestContext:
    user_id: UUID | None = None
    email: str = ""
    name: str = ""

    @property
    def is_authenticated(self) -> bool:
        """Whether an identity was supplied by the boundary layer."""
        return self.user_id is not None

    @property
    def display_name(self) -> str:
        """Name to use in messages, falling back to the e-mail address."""
        return self.name or self.email

    @classmethod
    def anonymous(cls) -> "RequestContext":
        """A context without identity."""
        return cls()

    @classmethod
    def from_request(cls, request: "HttpRequest") -> "RequestContext":
        """Build the context from an authenticated Django request."""
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return cls.anonymous()
        return cls(user_id=user.id, email=user.email, name=getattr(user, "name", ""))
