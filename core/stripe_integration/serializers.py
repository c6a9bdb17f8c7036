from rest_framework import serializers


class CheckoutRequestSerializer(serializers.Serializer):
    """Body of ``POST stripe/checkout-session/``: ``{"productIds": [...], "userId"?}``."""

    productIds = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
    userId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
