from ninja_extra import api_controller, route

from common.authentication import EventFlowJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import schema
from events.domain import RegistrationRecord
from events.service import checkout_service
from events.service.checkout_service import CheckoutService
from events.service.stripe_service import get_payment_gateway
from events.stores import get_registration_store


@api_controller("/registrations", auth=EventFlowJWTAuth(), tags=["Registrations"], throttle=UserDefaultThrottle())
class RegistrationController(UserAwareController):
    @route.post(
        "",
        url_name="create_registration",
        response={201: schema.RegistrationResultSchema},
        throttle=WriteThrottle(),
    )
    def create_registration(
        self, payload: schema.RegistrationCreateSchema
    ) -> tuple[int, checkout_service.CheckoutResult]:
        """Register for an event.

        Free tickets are confirmed right away. Paid tickets return a PENDING registration and
        the `checkout_url` to complete payment; the registration is confirmed by the payment webhook.
        """
        service = CheckoutService(get_registration_store(), get_payment_gateway())
        result = service.register(self.request_context(), payload.event_id, payload.ticket_id, payload.quantity)
        return 201, result

    @route.get("", url_name="list_registrations", response=list[schema.UserRegistrationSchema])
    def list_registrations(self) -> list[RegistrationRecord]:
        """Your registrations, newest first."""
        return checkout_service.list_user_registrations(get_registration_store(), self.request_context())
