"""
Storefront Purchase Models

Models:
- Order: One product purchase attempt, PENDING until the payment webhook settles it
- UserAsset: The entitlement granting a user time-bounded access to a product
- ProcessedWebhook: Idempotency ledger of settled checkout sessions

Integrity rules enforced by the database:
- At most one *active* UserAsset per (user, product)
- A checkout session id appears at most once in ProcessedWebhook

Author: Storefront Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from storefront.catalog.models import Product

__all__ = ["Order", "OrderStatus", "UserAsset", "ProcessedWebhook"]


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    PAID = "PAID", _("Paid")
    CANCELLED = "CANCELLED", _("Cancelled")


class Order(models.Model):
    """
    Purchase of a single product at its discounted amount.

    Lifecycle:
        created PENDING by checkout → PAID once by the settlement webhook.
        Stale PENDING orders for the same (user, product) are deleted when a
        new checkout starts. A PAID order never changes status again.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="orders")
    amount = models.PositiveIntegerField(help_text=_("Charged amount in minor units, after discount"))
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, default="")
    checkout_session_id = models.CharField(max_length=255, blank=True, default="", db_index=True)
    purchase_date = models.DateTimeField(null=True, blank=True)
    expiry_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at"]
        db_table = "storefront_order"
        indexes = [models.Index(fields=["user", "status"], name="order_user_status_idx")]

    def __str__(self) -> str:
        return f"Order {self.pk} ({self.status})"

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID


class UserAsset(models.Model):
    """
    Entitlement of a user to a product.

    A repeat purchase while an entitlement is active extends ``expiry_date``
    in place instead of creating a second row. Rows are never deleted by the
    purchase flow; administrators deactivate them.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assets",
    )
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="assets")
    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name="assets",
        help_text=_("The order that granted this access"),
    )
    purchase_date = models.DateTimeField()
    expiry_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("User Asset")
        verbose_name_plural = _("User Assets")
        ordering = ["-created_at"]
        db_table = "storefront_user_asset"
        indexes = [models.Index(fields=["user", "product"], name="asset_user_product_idx")]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "product"],
                condition=Q(is_active=True),
                name="unique_active_asset_per_user_product",
            )
        ]

    def __str__(self) -> str:
        return f"{self.user_id} → {self.product_id} until {self.expiry_date:%Y-%m-%d}"

    def is_valid_at(self, moment) -> bool:
        return self.is_active and self.expiry_date > moment

    @property
    def has_valid_access(self) -> bool:
        return self.is_valid_at(timezone.now())


class ProcessedWebhook(models.Model):
    """Idempotency marker, keyed by the provider's checkout session id."""

    id = models.CharField(primary_key=True, max_length=255)
    event_type = models.CharField(max_length=100)
    processed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Processed Webhook")
        verbose_name_plural = _("Processed Webhooks")
        ordering = ["-processed_at"]
        db_table = "storefront_processed_webhook"

    def __str__(self) -> str:
        return f"{self.event_type} {self.id}"
