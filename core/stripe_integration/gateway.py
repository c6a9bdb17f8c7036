"""
Stripe Gateway
==============

The only module that talks to Stripe. It wraps the two provider operations
the storefront needs:

- create a hosted Checkout Session (outbound API call)
- verify a webhook delivery against the endpoint's signing secret

The gateway is constructed with its key and secret instead of reading the
module-level ``stripe.api_key``, so several gateways (or a fake one in
tests) can coexist in one process.

Author: Storefront Development Team
Date: 2025-09-03
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import stripe

from core.exceptions import InvalidSignature, PaymentProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostedSession:
    """Reference to a created Checkout Session: its id and redirect URL."""

    id: str
    url: str


class StripeGateway:
    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        api_version: Optional[str] = None,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.api_version = api_version
        self.tolerance = tolerance

    def create_checkout_session(
        self,
        *,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
        locale: Optional[str] = None,
    ) -> HostedSession:
        """
        Create a one-off payment Checkout Session.

        Raises:
            PaymentProviderError: Stripe rejected the request or was unreachable
        """
        params: Dict[str, Any] = dict(
            mode="payment",
            payment_method_types=["card"],
            line_items=line_items,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            billing_address_collection="required",
        )
        if locale:
            params["locale"] = locale

        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                stripe_version=self.api_version,
                **params,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed: %s", exc)
            raise PaymentProviderError(
                getattr(exc, "user_message", None) or "Could not create the checkout session",
                details={"provider_code": getattr(exc, "code", None)} if getattr(exc, "code", None) else None,
            ) from exc

        logger.info("Stripe checkout session created: %s", session.id)
        return HostedSession(id=session.id, url=session.url)

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify the ``Stripe-Signature`` header over the raw body and decode it.

        Returns:
            The event as a plain dict (``{"id", "type", "data": {"object": ...}}``)

        Raises:
            InvalidSignature: header missing, signature mismatch, stale
                timestamp, no secret configured, or a body that is not UTF-8 JSON
        """
        if not signature:
            logger.error("Stripe webhook rejected: signature header missing")
            raise InvalidSignature("Signature missing")
        if not self.webhook_secret:
            logger.error("Stripe webhook rejected: STRIPE_WEBHOOK_SECRET is not configured")
            raise InvalidSignature()

        try:
            body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        except UnicodeDecodeError as exc:
            logger.error("Stripe webhook body is not valid UTF-8")
            raise InvalidSignature("Invalid payload") from exc

        try:
            stripe.WebhookSignature.verify_header(body, signature, self.webhook_secret, self.tolerance)
        except stripe.SignatureVerificationError as exc:
            logger.error("Stripe webhook signature verification failed: %s", exc)
            raise InvalidSignature() from exc

        try:
            event = json.loads(body)
        except ValueError as exc:
            logger.error("Stripe webhook body is not valid JSON")
            raise InvalidSignature("Invalid payload") from exc
        if not isinstance(event, dict):
            raise InvalidSignature("Invalid payload")
        return event
