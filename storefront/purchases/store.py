"""
Entitlement and Order Stores

Thin data-access layer over ``UserAsset`` and ``Order``. The access evaluator,
the checkout orchestrator and the settlement processor receive these stores
through their constructors instead of querying the ORM themselves, so tests
can hand them a store that fails on purpose.

Concurrency:
- ``grant_or_extend`` must run inside ``transaction.atomic()``. It locks the
  active row with ``select_for_update`` before extending, and falls back to
  extending when a concurrent create wins the unique-active constraint.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from django.db import IntegrityError, transaction

from storefront.catalog.models import Product
from .models import Order, OrderStatus, UserAsset

logger = logging.getLogger(__name__)


class EntitlementStore:
    """Persistent (user, product) → ``UserAsset`` mapping."""

    def find(self, user_id, product_id) -> Optional[UserAsset]:
        """
        Entitlement record deciding access for (user, product).

        An active record wins over deactivated history; among records of the
        same state the most recent one is returned.
        """
        return (
            UserAsset.objects.filter(user_id=user_id, product_id=product_id)
            .order_by("-is_active", "-created_at", "-id")
            .first()
        )

    def find_active(self, user_id, product_id, *, for_update: bool = False) -> Optional[UserAsset]:
        queryset = UserAsset.objects.filter(user_id=user_id, product_id=product_id, is_active=True)
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.first()

    def owned_valid(self, user_id, product_ids: Iterable, moment: datetime) -> List[UserAsset]:
        """Active, unexpired entitlements the user holds among ``product_ids``."""
        return list(
            UserAsset.objects.select_related("product").filter(
                user_id=user_id,
                product_id__in=list(product_ids),
                is_active=True,
                expiry_date__gt=moment,
            )
        )

    def for_user(self, user_id) -> List[UserAsset]:
        return list(
            UserAsset.objects.select_related("product", "order")
            .filter(user_id=user_id)
            .order_by("-purchase_date")
        )

    def grant_or_extend(
        self,
        *,
        order: Order,
        duration_days: int,
        now: datetime,
    ) -> Tuple[UserAsset, bool]:
        """
        Create the entitlement for the order's (user, product) or extend the
        active one in place.

        Returns:
            (asset, created)
        """
        existing = self.find_active(order.user_id, order.product_id, for_update=True)
        if existing is not None:
            return self._extend(existing, duration_days, now), False

        try:
            with transaction.atomic():
                asset = UserAsset.objects.create(
                    user_id=order.user_id,
                    product_id=order.product_id,
                    order=order,
                    purchase_date=now,
                    expiry_date=now + timedelta(days=duration_days),
                    is_active=True,
                )
        except IntegrityError:
            # A concurrent settlement created the active row first.
            existing = self.find_active(order.user_id, order.product_id, for_update=True)
            if existing is None:
                raise
            logger.warning(
                "Concurrent grant for user %s product %s, extending asset %s instead",
                order.user_id,
                order.product_id,
                existing.pk,
            )
            return self._extend(existing, duration_days, now), False

        logger.info(
            "Entitlement %s created: user %s product %s until %s",
            asset.pk,
            asset.user_id,
            asset.product_id,
            asset.expiry_date.isoformat(),
        )
        return asset, True

    def _extend(self, asset: UserAsset, duration_days: int, now: datetime) -> UserAsset:
        """
        Push ``expiry_date`` forward by ``duration_days``.

        A still-valid record stacks on its current expiry (``expiry + D``).
        A record that is active but already lapsed restarts from ``now``
        (``now + D``) instead of ``expiry + D``, so a renewal never yields an
        entitlement that is expired on arrival. Only ``expiry_date`` changes;
        the row keeps the order that first granted it.
        """
        base = max(asset.expiry_date, now)
        asset.expiry_date = base + timedelta(days=duration_days)
        asset.save(update_fields=["expiry_date"])
        logger.info(
            "Entitlement %s extended: user %s product %s until %s",
            asset.pk,
            asset.user_id,
            asset.product_id,
            asset.expiry_date.isoformat(),
        )
        return asset


class OrderStore:
    """Order persistence used by checkout (create) and settlement (settle)."""

    def delete_stale_pending(self, user_id, product_ids: Iterable) -> int:
        deleted, _ = Order.objects.filter(
            user_id=user_id,
            product_id__in=list(product_ids),
            status=OrderStatus.PENDING,
        ).delete()
        return deleted

    def create_pending(self, user_id, product: Product, amount: int) -> Order:
        return Order.objects.create(
            user_id=user_id,
            product=product,
            amount=amount,
            status=OrderStatus.PENDING,
        )

    def attach_session(self, order_ids: Iterable, session_id: str) -> int:
        return Order.objects.filter(pk__in=list(order_ids)).update(checkout_session_id=session_id)

    def for_session(self, session_id: str) -> List[Order]:
        return list(Order.objects.filter(checkout_session_id=session_id).order_by("id"))

    def product_for(self, order: Order) -> Optional[Product]:
        return Product.objects.filter(pk=order.product_id).first()

    def mark_paid(
        self,
        order: Order,
        *,
        payment_intent_id: str,
        purchase_date: datetime,
        expiry_date: datetime,
    ) -> Order:
        order.status = OrderStatus.PAID
        order.stripe_payment_intent_id = payment_intent_id or ""
        order.purchase_date = purchase_date
        order.expiry_date = expiry_date
        order.save(
            update_fields=[
                "status",
                "stripe_payment_intent_id",
                "purchase_date",
                "expiry_date",
                "updated_at",
            ]
        )
        return order
