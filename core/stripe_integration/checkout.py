"""
Checkout Orchestrator
=====================

Turns a cart (a list of product ids) into PENDING orders and a hosted Stripe
Checkout Session.

Flow
----
1. Reject an empty cart.
2. Keep only existing, active products.
3. Refuse products the user already has valid access to (AlreadyOwned).
4. Delete the user's stale PENDING orders for these products.
5. Price every product against the active discount.
6. Create one PENDING order per product at its discounted amount.
7. Create the Checkout Session with one line item per product; the session
   metadata carries the user id and the created order ids.
8. Store the session id on every created order.

Steps 4-8 run in one transaction: if Stripe refuses the session, the cleanup
and the new orders roll back together.

Author: Storefront Development Team
Date: 2025-09-03
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from core.exceptions import AlreadyOwned, CheckoutValidationError, NoValidProducts
from storefront.catalog.models import Product
from storefront.catalog.pricing import DiscountInfo, PricingService
from storefront.purchases.store import EntitlementStore, OrderStore

from .gateway import StripeGateway
from .metadata import CheckoutMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    session_id: str
    url: str
    order_ids: List[int] = field(default_factory=list)
    total_original: int = 0
    total_final: int = 0
    has_discount: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "url": self.url,
            "orderIds": self.order_ids,
            "totalFinal": self.total_final,
            "hasDiscount": self.has_discount,
        }


class CheckoutOrchestrator:
    def __init__(
        self,
        gateway: StripeGateway,
        *,
        pricing: Optional[PricingService] = None,
        orders: Optional[OrderStore] = None,
        entitlements: Optional[EntitlementStore] = None,
        clock: Callable[[], datetime] = timezone.now,
        currency: str = "brl",
        locale: Optional[str] = None,
        success_url: str = "",
        cancel_url: str = "",
    ) -> None:
        self.gateway = gateway
        self.pricing = pricing or PricingService()
        self.orders = orders or OrderStore()
        self.entitlements = entitlements or EntitlementStore()
        self.clock = clock
        self.currency = currency
        self.locale = locale
        self.success_url = success_url
        self.cancel_url = cancel_url

    def create_checkout(self, user_id, product_ids: Optional[Iterable]) -> CheckoutResult:
        """
        Create PENDING orders and a hosted checkout session for ``product_ids``.

        Raises:
            CheckoutValidationError: missing user, empty or malformed product ids
            NoValidProducts: none of the ids is an active product
            AlreadyOwned: the user has valid access to a requested product
            PaymentProviderError: Stripe refused the session
        """
        requested_ids = self._normalize_ids(product_ids)
        if user_id is None:
            raise CheckoutValidationError()

        products = self._resolve_products(requested_ids)
        self._ensure_not_owned(user_id, requested_ids)

        with transaction.atomic():
            removed = self.orders.delete_stale_pending(user_id, requested_ids)
            if removed:
                logger.info("Removed %s stale pending order(s) of user %s", removed, user_id)

            quotes = self.pricing.quote(products)

            order_ids: List[int] = []
            for product in products:
                quote = quotes[product.pk]
                order = self.orders.create_pending(user_id, product, quote.final_price)
                order_ids.append(order.pk)
                if quote.has_discount:
                    logger.info(
                        "Order %s created: %s %s -> %s (-%s%%)",
                        order.pk,
                        product.name,
                        quote.original_price,
                        quote.final_price,
                        quote.discount_percentage,
                    )
                else:
                    logger.info("Order %s created: %s %s", order.pk, product.name, quote.final_price)

            total_original = sum(quotes[p.pk].original_price for p in products)
            total_final = sum(quotes[p.pk].final_price for p in products)
            metadata = CheckoutMetadata(
                user_id=str(user_id),
                order_ids=order_ids,
                total_original=total_original,
                total_final=total_final,
                has_discount=total_original - total_final > 0,
            )

            session = self.gateway.create_checkout_session(
                line_items=[self._line_item(product, quotes[product.pk]) for product in products],
                metadata=metadata.to_stripe(),
                success_url=self.success_url,
                cancel_url=self.cancel_url,
                locale=self.locale,
            )
            self.orders.attach_session(order_ids, session.id)

        logger.info(
            "Checkout %s ready for user %s: orders=%s original=%s final=%s",
            session.id,
            user_id,
            order_ids,
            total_original,
            total_final,
        )
        return CheckoutResult(
            session_id=session.id,
            url=session.url,
            order_ids=order_ids,
            total_original=total_original,
            total_final=total_final,
            has_discount=metadata.has_discount,
        )

    # ---------- helpers ----------

    @staticmethod
    def _normalize_ids(product_ids) -> List[int]:
        if not product_ids or isinstance(product_ids, (str, bytes)):
            raise CheckoutValidationError("productIds must be a non-empty list")
        try:
            ids = [int(product_id) for product_id in product_ids]
        except (TypeError, ValueError) as exc:
            raise CheckoutValidationError("productIds must contain product ids") from exc
        # Duplicates collapse to a single order per product.
        return list(dict.fromkeys(ids))

    @staticmethod
    def _resolve_products(product_ids: List[int]) -> List[Product]:
        found = {p.pk: p for p in Product.objects.filter(pk__in=product_ids, is_active=True)}
        products = [found[pid] for pid in product_ids if pid in found]
        if not products:
            raise NoValidProducts()
        return products

    def _ensure_not_owned(self, user_id, product_ids: List[int]) -> None:
        owned = self.entitlements.owned_valid(user_id, product_ids, self.clock())
        if owned:
            names = [asset.product.name for asset in owned]
            logger.warning("User %s tried to buy owned product(s): %s", user_id, ", ".join(names))
            raise AlreadyOwned(names)

    def _line_item(self, product: Product, quote: DiscountInfo) -> Dict[str, Any]:
        product_metadata = {
            "productId": str(product.pk),
            "originalPrice": str(quote.original_price),
        }
        if quote.has_discount:
            product_metadata["discountApplied"] = "true"
            product_metadata["discountPercentage"] = str(quote.discount_percentage)

        product_data: Dict[str, Any] = {"name": product.name, "metadata": product_metadata}
        if product.short_description:
            product_data["description"] = product.short_description
        if product.image:
            product_data["images"] = [product.image]

        return {
            "price_data": {
                "currency": self.currency,
                "product_data": product_data,
                "unit_amount": quote.final_price,
            },
            "quantity": 1,
        }
