"""API controller for in-app notifications."""

from ninja_extra import api_controller, route

from common.authentication import EventFlowJWTAuth
from common.controllers import UserAwareController
from common.schema import ResponseSuccess
from common.throttling import UserDefaultThrottle, WriteThrottle
from notifications.schema import NotificationListSchema, NotificationUpdateSchema
from notifications.service import notification_service


@api_controller(
    "/notifications",
    tags=["Notifications"],
    auth=EventFlowJWTAuth(),
    throttle=UserDefaultThrottle(),
)
class NotificationController(UserAwareController):
    @route.get("", url_name="list_notifications", response=NotificationListSchema)
    def list_notifications(self) -> dict[str, object]:
        """Your latest notifications and the unread count."""
        return notification_service.latest_notifications(self.user())

    @route.patch("", url_name="update_notifications", response=ResponseSuccess, throttle=WriteThrottle())
    def update_notifications(self, payload: NotificationUpdateSchema) -> ResponseSuccess:
        """Mark one notification, or all of them, as read."""
        if payload.mark_all_read:
            notification_service.mark_all_read(self.user())
        elif payload.id is not None:
            notification_service.mark_read(self.user(), payload.id)
        return ResponseSuccess()
