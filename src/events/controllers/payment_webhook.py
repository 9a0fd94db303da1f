import structlog
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja_extra import ControllerBase, api_controller, route

from common.throttling import WebhookThrottle
from events.exceptions import WebhookSignatureError
from events.service.payment_webhooks import PaymentWebhookReconciler
from events.service.stripe_service import get_payment_gateway
from events.stores import get_registration_store

logger = structlog.get_logger(__name__)


@api_controller("/webhooks", auth=None, tags=["Webhooks"], throttle=WebhookThrottle())
class PaymentWebhookController(ControllerBase):
    @route.post("/payment", url_name="payment_webhook", response={200: dict[str, bool]})
    def handle_payment_webhook(self, request: HttpRequest) -> tuple[int, dict[str, bool]]:
        """Receive payment processor webhooks.

        The raw body is verified against the `Stripe-Signature` header before anything is processed.
        """
        signature = request.META.get("HTTP_STRIPE_SIGNATURE")
        if not signature:
            logger.warning("payment_webhook_signature_missing")
            raise HttpError(400, "No signature")
        try:
            event = get_payment_gateway().construct_event(request.body, signature)
        except WebhookSignatureError as e:
            raise HttpError(400, "Invalid signature") from e

        PaymentWebhookReconciler(get_registration_store()).reconcile(event)
        return 200, {"received": True}
