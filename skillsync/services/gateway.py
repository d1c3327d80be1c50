import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import stripe

from skillsync.config import settings

logger = logging.getLogger(__name__)


class WebhookVerificationError(Exception):
    """Signature missing or invalid, or the signed payload is not JSON."""


class PaymentGatewayError(Exception):
    """The gateway refused or failed an outbound call."""


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


class PaymentGateway:
    def __init__(self, api_key: str, webhook_secret: str, currency: str = "usd"):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.currency = currency.lower()

    def create_checkout_session(
        self,
        *,
        purchase_id: str,
        title: str,
        amount: float,
        success_url: str,
        cancel_url: str,
    ) -> Dict[str, Any]:
        """
        Open a hosted checkout for one course.

        The purchase id rides along as client_reference_id and as metadata on
        both the session and its payment intent, so every success or failure
        event can be traced back to the purchase.
        """
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                line_items=[{
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {"name": title},
                        "unit_amount": to_minor_units(amount),
                    },
                    "quantity": 1,
                }],
                client_reference_id=purchase_id,
                metadata={"purchaseId": purchase_id},
                payment_intent_data={"metadata": {"purchaseId": purchase_id}},
            )
        except stripe.StripeError as exc:
            logger.error("Checkout session creation failed for %s: %s", purchase_id, exc)
            raise PaymentGatewayError(str(exc)) from exc

        return {"id": session.id, "url": session.url}

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not signature:
            raise WebhookVerificationError("Missing signature header")

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                self.webhook_secret,
                tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except UnicodeDecodeError as exc:
            raise WebhookVerificationError("Payload is not valid UTF-8") from exc
        except stripe.SignatureVerificationError as exc:
            raise WebhookVerificationError(str(exc)) from exc

        try:
            event = json.loads(body)
        except ValueError as exc:
            raise WebhookVerificationError("Invalid payload") from exc

        if not isinstance(event, dict):
            raise WebhookVerificationError("Invalid payload")

        return event


@lru_cache
def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway(
        api_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        currency=settings.currency,
    )
