import typing as t

import orjson
import stripe
import structlog
from django.conf import settings
from stripe.checkout import Session

from events.domain import CheckoutSession, PaymentEvent
from events.exceptions import PaymentGatewayError, WebhookSignatureError

logger = structlog.get_logger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY


class StripeGateway:
    """Payment gateway backed by Stripe Checkout."""

    def __init__(self, webhook_secret: str | None = None, tolerance: int | None = None) -> None:
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        self.tolerance = tolerance or settings.STRIPE_WEBHOOK_TOLERANCE

    def create_checkout_session(
        self,
        *,
        unit_amount: int,
        quantity: int,
        currency: str,
        product_name: str,
        product_description: str | None,
        metadata: dict[str, str],
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """Create a Stripe Checkout Session with a single line item.

        Raises:
            PaymentGatewayError: If the Stripe API call fails.
        """
        product_data: dict[str, t.Any] = {"name": product_name}
        if product_description:
            product_data["description"] = product_description
        session_data: dict[str, t.Any] = dict(  # noqa: C408
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": currency.lower(),
                        "product_data": product_data,
                        "unit_amount": unit_amount,
                    },
                    "quantity": quantity,
                }
            ],
            metadata=metadata,
            success_url=success_url,
            cancel_url=cancel_url,
        )
        if customer_email:
            session_data["customer_email"] = customer_email

        try:
            session = Session.create(**session_data)
        except stripe.StripeError as e:
            logger.error("stripe_checkout_session_failed", error=str(e), metadata=metadata)
            raise PaymentGatewayError(f"Payment provider error: {e.user_message or 'checkout unavailable'}") from e

        logger.info("stripe_checkout_session_created", session_id=session.id, amount=unit_amount * quantity)
        return CheckoutSession(id=session.id, url=t.cast(str, session.url))

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        """Verify the `Stripe-Signature` header and parse the webhook payload.

        Raises:
            WebhookSignatureError: If the signature does not match or the payload is not valid JSON.
        """
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret, tolerance=self.tolerance)
            data = orjson.loads(payload)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("stripe_webhook_signature_invalid", error=str(e))
            raise WebhookSignatureError() from e

        session = (data.get("data") or {}).get("object") or {}
        return PaymentEvent(
            type=data.get("type", ""),
            session_id=session.get("id"),
            metadata={k: str(v) for k, v in (session.get("metadata") or {}).items()},
            amount_total=session.get("amount_total"),
            event_id=data.get("id"),
        )


def get_payment_gateway() -> StripeGateway:
    return StripeGateway()
