from django.utils import timezone
from rest_framework import serializers

from storefront.catalog.serializers import ProductSummarySerializer
from .models import Order, UserAsset


class OwnedProductSerializer(serializers.ModelSerializer):
    """
    An entitlement of the session user with the flags the account page shows.
    """

    product = ProductSummarySerializer(read_only=True)
    amount = serializers.IntegerField(source="order.amount", read_only=True)
    hasValidAccess = serializers.SerializerMethodField()
    isExpired = serializers.SerializerMethodField()

    class Meta:
        model = UserAsset
        fields = [
            "id",
            "product",
            "order",
            "amount",
            "purchase_date",
            "expiry_date",
            "is_active",
            "hasValidAccess",
            "isExpired",
        ]

    def _now(self):
        return self.context.get("now") or timezone.now()

    def get_hasValidAccess(self, obj) -> bool:
        return obj.is_valid_at(self._now())

    def get_isExpired(self, obj) -> bool:
        return obj.expiry_date <= self._now()


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "product",
            "amount",
            "status",
            "stripe_payment_intent_id",
            "checkout_session_id",
            "purchase_date",
            "expiry_date",
            "created_at",
            "updated_at",
        ]
