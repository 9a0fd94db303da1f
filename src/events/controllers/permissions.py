from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from events import models


class IsEventOrganizer(BasePermission):
    """Only the organizer of an event may manage it."""

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Must implement abstract method; only has_object_permission decides."""
        return True

    def has_object_permission(self, request: HttpRequest, controller: ControllerBase, obj: models.Event) -> bool:
        return bool(obj.organizer_id == request.user.id)
