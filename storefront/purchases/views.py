"""
Storefront Order Views

Views:
- MyOrdersView: Entitlements of the session user (account page)
- AllOrdersView: Every order in the store, administrators only

The user is taken from the session token only. A ``userId`` query parameter
is ignored.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging

from django.utils import timezone
from rest_framework import generics
from rest_framework.response import Response
from rest_framework.views import APIView

from storefront.access.permissions import IsAdminRole, IsSessionAuthenticated
from .models import Order
from .serializers import OrderSerializer, OwnedProductSerializer
from .store import EntitlementStore

logger = logging.getLogger(__name__)


class MyOrdersView(APIView):
    permission_classes = [IsSessionAuthenticated]

    def get(self, request):
        assets = EntitlementStore().for_user(request.user.id)
        logger.info("Found %s products for user %s", len(assets), request.user.id)
        serializer = OwnedProductSerializer(assets, many=True, context={"now": timezone.now()})
        return Response(serializer.data)


class AllOrdersView(generics.ListAPIView):
    queryset = Order.objects.all().order_by("-created_at")
    serializer_class = OrderSerializer
    permission_classes = [IsAdminRole]
    pagination_class = None
