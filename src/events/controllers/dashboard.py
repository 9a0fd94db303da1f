from ninja_extra import api_controller, route

from common.authentication import EventFlowJWTAuth
from common.controllers import UserAwareController
from events import schema
from events.service import analytics_service


@api_controller("/dashboard", auth=EventFlowJWTAuth(), tags=["Dashboard"])
class DashboardController(UserAwareController):
    @route.get("", url_name="dashboard", response=schema.DashboardSchema)
    def dashboard(self) -> dict[str, object]:
        """Totals across your events and the next five published ones."""
        return analytics_service.dashboard(self.user())
