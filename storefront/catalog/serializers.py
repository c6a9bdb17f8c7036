from rest_framework import serializers

from .models import Discount, DiscountType, Product, ProductMaterial, ProductModule


class ProductMaterialSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductMaterial
        fields = [
            "id",
            "module",
            "type",
            "title",
            "description",
            "video_url",
            "video_source",
            "file_url",
            "file_name",
            "file_size",
            "thumbnail",
            "duration",
            "order",
        ]


class ProductModuleSerializer(serializers.ModelSerializer):
    """Module with its ordered materials, only served behind product access."""

    materials = ProductMaterialSerializer(many=True, read_only=True)

    class Meta:
        model = ProductModule
        fields = ["id", "product", "title", "description", "order", "materials"]


class ProductSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "slug", "name", "short_description", "price", "type", "category", "image", "access_duration"]


class DiscountSerializer(serializers.ModelSerializer):
    """
    Validates a new store discount.

    Request Body Example (JSON):
    {
        "type": "category",
        "percentage": 20,
        "category": "Marketing"
    }
    """

    percentage = serializers.IntegerField(min_value=0, max_value=100)

    class Meta:
        model = Discount
        fields = ["id", "type", "percentage", "category", "is_active", "created_at"]
        read_only_fields = ["id", "is_active", "created_at"]

    def validate(self, attrs):
        if attrs.get("type") == DiscountType.CATEGORY and not attrs.get("category"):
            raise serializers.ValidationError({"category": "A category discount needs a category."})
        return attrs
