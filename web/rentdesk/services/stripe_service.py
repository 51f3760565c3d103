"""Card payments through Stripe PaymentIntents."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import stripe

from ..core import ExternalServiceError, ValidationError, PaymentError, get_settings

logger = logging.getLogger(__name__)


def to_cents(amount: Decimal | float) -> int:
    return int(round(Decimal(str(amount)) * 100))


class StripeService:
    """Thin async wrapper over the blocking Stripe SDK."""

    def __init__(self):
        settings = get_settings()
        self.currency = settings.STRIPE_CURRENCY
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET
        if settings.STRIPE_SECRET_KEY:
            stripe.api_key = settings.STRIPE_SECRET_KEY

    async def create_payment_intent(
        self,
        amount: Optional[Decimal | float],
        currency: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a card-only intent and return its id and client secret."""
        if amount is None:
            raise ValidationError("Amount is required", field="amount")
        if Decimal(str(amount)) <= 0:
            raise ValidationError("Amount must be greater than zero", field="amount")

        intent_params = {
            "amount": to_cents(amount),
            "currency": (currency or self.currency).lower(),
            "payment_method_types": ["card"],
            "metadata": {k: str(v) for k, v in (metadata or {}).items()},
        }
        try:
            intent = await asyncio.to_thread(stripe.PaymentIntent.create, **intent_params)
        except stripe.StripeError as exc:
            logger.error("Stripe intent creation failed: %s", exc)
            raise ExternalServiceError("stripe", str(exc)) from exc
        return {"id": intent["id"], "client_secret": intent["client_secret"]}

    async def retrieve_payment_intent(self, intent_id: str):
        try:
            return await asyncio.to_thread(stripe.PaymentIntent.retrieve, intent_id)
        except stripe.StripeError as exc:
            logger.error("Stripe intent %s lookup failed: %s", intent_id, exc)
            raise ExternalServiceError("stripe", str(exc)) from exc

    async def verify_payment(
        self,
        intent_id: str,
        expected_amount: Decimal | float,
        expected_metadata: Optional[Dict[str, Any]] = None,
    ):
        """Return the intent when it succeeded for exactly *expected_amount*.

        Every key of *expected_metadata* must match the metadata the intent
        was created with, which ties the intent to one payment or invoice.
        """
        intent = await self.retrieve_payment_intent(intent_id)
        if intent["status"] != "succeeded":
            raise PaymentError("Payment has not succeeded", "payment_not_succeeded", intent_id)
        if int(intent["amount"]) != to_cents(expected_amount):
            raise PaymentError("Payment amount does not match", "payment_amount_mismatch", intent_id)
        metadata = intent.get("metadata") or {}
        for key, value in (expected_metadata or {}).items():
            if str(metadata.get(key)) != str(value):
                raise PaymentError("Payment intent belongs to another charge", "payment_intent_mismatch", intent_id)
        return intent

    def construct_event(self, payload: bytes, sig_header: Optional[str]):
        """Verify a webhook payload against ``STRIPE_WEBHOOK_SECRET``."""
        if not self.webhook_secret:
            raise ExternalServiceError("stripe", "webhook secret is not configured")
        try:
            return stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise ValidationError("Invalid webhook signature", field="Stripe-Signature") from exc
