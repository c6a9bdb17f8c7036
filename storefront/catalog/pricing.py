"""
Pricing Service

Applies the single active ``Discount`` to product prices. All amounts are
integer minor currency units and discounts always round in the customer's
disfavour by at most one unit: the discount amount is floored.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, Optional

from django.db import transaction

from .models import Discount, DiscountType, Product

logger = logging.getLogger(__name__)


def calculate_discounted_price(original_price: int, discount_percentage: int) -> int:
    """
    Final price after a percentage discount.

    Percentages outside ``(0, 100]`` leave the price untouched.

    >>> calculate_discounted_price(5000, 20)
    4000
    >>> calculate_discounted_price(999, 15)
    850
    """
    if discount_percentage <= 0 or discount_percentage > 100:
        return original_price
    discount_amount = (original_price * discount_percentage) // 100
    return original_price - discount_amount


@dataclass(frozen=True)
class DiscountInfo:
    has_discount: bool
    discount_percentage: int
    original_price: int
    final_price: int
    discount_id: Optional[int] = None

    @classmethod
    def undiscounted(cls, price: int) -> "DiscountInfo":
        return cls(has_discount=False, discount_percentage=0, original_price=price, final_price=price)

    def to_dict(self) -> dict:
        return asdict(self)


class PricingService:
    """Reads and manages the active discount and quotes product prices."""

    def active_discount(self) -> Optional[Discount]:
        return Discount.objects.filter(is_active=True).order_by("-created_at", "-id").first()

    def quote_one(self, product: Product, discount: Optional[Discount] = None) -> DiscountInfo:
        if discount is None or not discount.applies_to(product):
            return DiscountInfo.undiscounted(product.price)
        return DiscountInfo(
            has_discount=True,
            discount_percentage=discount.percentage,
            original_price=product.price,
            final_price=calculate_discounted_price(product.price, discount.percentage),
            discount_id=discount.pk,
        )

    def quote(self, products: Iterable[Product]) -> Dict[int, DiscountInfo]:
        """Price every product against the discount active right now."""
        discount = self.active_discount()
        return {product.pk: self.quote_one(product, discount) for product in products}

    def set_active_discount(self, *, type: str, percentage: int, category: str = "") -> Discount:
        """Deactivate all previous discounts and activate a new one."""
        with transaction.atomic():
            Discount.objects.filter(is_active=True).update(is_active=False)
            discount = Discount.objects.create(
                type=type,
                percentage=percentage,
                category=category if type == DiscountType.CATEGORY else "",
                is_active=True,
            )
        logger.info("Discount %s activated: %s", discount.pk, discount)
        return discount

    def clear(self) -> int:
        cleared = Discount.objects.filter(is_active=True).update(is_active=False)
        logger.info("Deactivated %s discount(s)", cleared)
        return cleared
