"""
Settlement Processor
====================

Handles Stripe webhook deliveries and turns a paid Checkout Session into PAID
orders and entitlements.

Stripe delivers at least once and possibly out of order, so every delivery
goes through the same gates:

1. Signature verification over the raw body (mandatory).
2. Only ``checkout.session.completed`` is processed; other events are acknowledged.
3. Sessions whose ``payment_status`` is not ``paid`` are acknowledged without effect.
4. A session that already has a processed-webhook marker is acknowledged as
   already processed.
5. ``userId``/``orderIds`` metadata is mandatory (InvalidMetadata).
6. Orders are loaded by checkout session id (OrdersNotFound when none match).
7. Each order is settled in its own savepoint: PAID, then the entitlement is
   created or extended. A failing order is logged and skipped.
8. The marker is written even if some orders failed, so retries of this
   session stop; failed orders need manual follow-up.

Steps 6-8 share one transaction. A concurrent duplicate delivery loses on the
marker's primary key and its whole settlement is rolled back.

Author: Storefront Development Team
Date: 2025-09-03
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidMetadata, OrdersNotFound
from storefront.purchases.ledger import WebhookLedger
from storefront.purchases.models import Order
from storefront.purchases.store import EntitlementStore, OrderStore

from .gateway import StripeGateway
from .metadata import CheckoutMetadata

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
DEFAULT_ACCESS_DURATION_DAYS = 365


@dataclass(frozen=True)
class SettlementResult:
    processed: bool = False
    already_processed: bool = False
    orders_processed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"received": True}
        if self.already_processed:
            body["alreadyProcessed"] = True
        if self.processed:
            body["processed"] = True
            body["ordersProcessed"] = self.orders_processed or 0
        return body


class SettlementProcessor:
    def __init__(
        self,
        gateway: StripeGateway,
        *,
        orders: Optional[OrderStore] = None,
        entitlements: Optional[EntitlementStore] = None,
        ledger: Optional[WebhookLedger] = None,
        clock: Callable[[], datetime] = timezone.now,
        default_duration_days: int = DEFAULT_ACCESS_DURATION_DAYS,
    ) -> None:
        self.gateway = gateway
        self.orders = orders or OrderStore()
        self.entitlements = entitlements or EntitlementStore()
        self.ledger = ledger or WebhookLedger()
        self.clock = clock
        self.default_duration_days = default_duration_days

    def handle(self, payload: bytes, signature: Optional[str]) -> SettlementResult:
        """
        Process one webhook delivery.

        Raises:
            InvalidSignature: the delivery is not authentic; nothing is written
            InvalidMetadata: the paid session carries no usable metadata
            OrdersNotFound: no order references the session
            DuplicateSettlement: a concurrent delivery settled the session first
        """
        event = self.gateway.verify_event(payload, signature)
        event_type = event.get("type")
        logger.info("[webhook] %s (event_id=%s)", event_type, event.get("id"))

        if event_type != CHECKOUT_COMPLETED:
            logger.info("Ignoring webhook event %s", event_type)
            return SettlementResult()

        session = (event.get("data") or {}).get("object") or {}
        session_id = session.get("id")
        payment_status = session.get("payment_status")
        if not session_id:
            raise InvalidMetadata("Checkout session id missing")

        if payment_status != "paid":
            logger.info("Checkout session %s not paid yet (%s)", session_id, payment_status)
            return SettlementResult()

        if self.ledger.is_processed(session_id):
            logger.info("Checkout session %s already processed", session_id)
            return SettlementResult(already_processed=True)

        metadata = CheckoutMetadata.from_stripe(session.get("metadata"))
        return self._settle(session_id, session.get("payment_intent"), metadata, event_type)

    def _settle(
        self,
        session_id: str,
        payment_intent_id: Optional[str],
        metadata: CheckoutMetadata,
        event_type: str,
    ) -> SettlementResult:
        with transaction.atomic():
            orders = self.orders.for_session(session_id)
            if not orders:
                logger.error("No orders found for checkout session %s", session_id)
                raise OrdersNotFound(details={"sessionId": session_id})

            if len(orders) != len(metadata.order_ids):
                logger.warning(
                    "Order count mismatch for session %s: expected %s, found %s",
                    session_id,
                    len(metadata.order_ids),
                    len(orders),
                )

            now = self.clock()
            processed = 0
            for order in orders:
                if str(order.user_id) != metadata.user_id:
                    logger.warning(
                        "Order %s belongs to user %s but session %s names user %s",
                        order.pk,
                        order.user_id,
                        session_id,
                        metadata.user_id,
                    )
                try:
                    with transaction.atomic():
                        if self._settle_order(order, payment_intent_id, now):
                            processed += 1
                except Exception:
                    logger.exception("Failed to settle order %s of session %s", order.pk, session_id)

            self.ledger.mark_processed(session_id, event_type)

        logger.info(
            "Checkout session %s settled: %s/%s orders processed",
            session_id,
            processed,
            len(orders),
        )
        return SettlementResult(processed=True, orders_processed=processed)

    def _settle_order(self, order: Order, payment_intent_id: Optional[str], now: datetime) -> bool:
        if order.is_paid:
            logger.warning("Order %s is already PAID, skipping", order.pk)
            return False

        product = self.orders.product_for(order)
        if product is None:
            logger.error("Product %s of order %s not found, skipping", order.product_id, order.pk)
            return False

        duration = product.access_duration or self.default_duration_days
        self.orders.mark_paid(
            order,
            payment_intent_id=payment_intent_id or "",
            purchase_date=now,
            expiry_date=now + timedelta(days=duration),
        )
        self.entitlements.grant_or_extend(order=order, duration_days=duration, now=now)
        logger.info("Order %s settled as PAID", order.pk)
        return True
