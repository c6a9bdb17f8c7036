"""
Storefront Catalog Views

Protected content endpoints. Every one of them is gated by ``HasProductAccess``,
which resolves modules and materials to their owning product and requires a
``valid`` verdict for the session user.

Views:
- ProductAccessView: Access verdict of the session user for a product
- ProductModulesView: Modules with materials of a purchased product
- ModuleMaterialsView: Materials of one module
- MaterialDetailView: A single material
- DiscountView / ActiveDiscountView: Store discount management

Author: Storefront Development Team
Version: 1.0.0
"""

import logging

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from storefront.access.evaluator import AccessEvaluator
from storefront.access.permissions import HasProductAccess, IsAdminRole, IsSessionAuthenticated
from .models import ProductMaterial, ProductModule
from .pricing import PricingService
from .serializers import DiscountSerializer, ProductMaterialSerializer, ProductModuleSerializer

logger = logging.getLogger(__name__)


class ProductAccessView(APIView):
    """
    Entitlement status of the session user for a product.

    Response (200):
        {"hasAccess": false, "reason": "expired", "expiryDate": "...", "isActive": true}
    """

    permission_classes = [IsSessionAuthenticated]

    def get(self, request, product_id):
        verdict = AccessEvaluator().evaluate(request.user.id, product_id)
        return Response(verdict.to_dict())


# --- Protected content ---


class ProductModulesView(generics.ListAPIView):
    serializer_class = ProductModuleSerializer
    permission_classes = [HasProductAccess]
    access_resource = "product"
    access_lookup_kwarg = "product_id"
    pagination_class = None

    def get_queryset(self):
        return (
            ProductModule.objects.filter(product_id=self.kwargs["product_id"])
            .prefetch_related("materials")
            .order_by("order", "id")
        )

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        logger.info(
            "Returning %s modules of product %s to user %s",
            len(response.data),
            self.kwargs["product_id"],
            request.user.id,
        )
        return response


class ModuleMaterialsView(generics.ListAPIView):
    serializer_class = ProductMaterialSerializer
    permission_classes = [HasProductAccess]
    access_resource = "module"
    access_lookup_kwarg = "module_id"
    pagination_class = None

    def get_queryset(self):
        return ProductMaterial.objects.filter(module_id=self.kwargs["module_id"]).order_by("order", "id")


class MaterialDetailView(generics.RetrieveAPIView):
    serializer_class = ProductMaterialSerializer
    permission_classes = [HasProductAccess]
    access_resource = "material"
    access_lookup_kwarg = "material_id"

    def get_object(self):
        return get_object_or_404(ProductMaterial, pk=self.kwargs["material_id"])


# --- Discounts ---


class DiscountView(APIView):
    """
    POST   → deactivate every discount and activate the posted one (201)
    DELETE → deactivate the active discount
    """

    permission_classes = [IsAdminRole]

    def post(self, request):
        serializer = DiscountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        discount = PricingService().set_active_discount(**serializer.validated_data)
        return Response(DiscountSerializer(discount).data, status=status.HTTP_201_CREATED)

    def delete(self, request):
        cleared = PricingService().clear()
        return Response({"success": True, "deactivated": cleared})


class ActiveDiscountView(APIView):
    """Public: the active discount, or ``null`` when none is running."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        discount = PricingService().active_discount()
        if discount is None:
            return JsonResponse(None, safe=False)
        return Response(
            {
                "type": discount.type,
                "percentage": discount.percentage,
                "category": discount.category or None,
                "isActive": discount.is_active,
            }
        )
