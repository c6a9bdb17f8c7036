"""
Stripe Integration Views (core.stripe_integration)
==================================================

REST API endpoints for paying with Stripe Checkout.

Endpoints
---------

1. CreateCheckoutSessionView
   - URL: /api/payments/stripe/checkout-session/
   - Method: POST
   - Auth: Required (session cookie)
   - Body: {"productIds": [3, 7]}
   - Purpose:
       Creates PENDING orders and a hosted Checkout Session for the cart.
       The buyer is always the session user; a ``userId`` in the body must
       match it or the request is refused.

2. StripeWebhookView
   - URL: /api/payments/stripe/webhook/
   - Method: POST
   - Auth: None (Stripe-Signature header is verified instead)
   - Purpose:
       Settles paid Checkout Sessions: orders become PAID and entitlements
       are granted or extended. Non-2xx answers make Stripe retry.

3. GetStripeConfigView
   - URL: /api/payments/stripe/config/
   - Method: GET
   - Auth: None
   - Purpose:
       Returns the correct publishable key so the frontend can
       initialize Stripe.js safely.

Security
--------
- Card data is handled exclusively by Stripe; the backend only stores
  order references.
- Webhook bodies are never trusted before signature verification.

Author: Storefront Development Team
Date: 2025-09-03
"""

import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import CheckoutValidationError
from storefront.access.guards import AccessDenied
from storefront.access.permissions import IsSessionAuthenticated

from .serializers import CheckoutRequestSerializer
from .services import get_checkout_orchestrator, get_publishable_key, get_settlement_processor

logger = logging.getLogger(__name__)


class CreateCheckoutSessionView(APIView):
    permission_classes = [IsSessionAuthenticated]

    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            raise CheckoutValidationError(details=serializer.errors)

        user_id = request.user.id
        claimed_user_id = serializer.validated_data.get("userId")
        if claimed_user_id not in (None, "") and str(claimed_user_id) != str(user_id):
            logger.warning("User %s attempted checkout on behalf of user %s", user_id, claimed_user_id)
            raise AccessDenied(_("You can only check out for your own account."))

        result = get_checkout_orchestrator().create_checkout(user_id, serializer.validated_data["productIds"])
        return Response(result.to_dict(), status=status.HTTP_200_OK)


class StripeWebhookView(APIView):
    """
    Receives Stripe events. The raw body is handed to the settlement processor
    untouched, since the signature is computed over the exact bytes sent.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        result = get_settlement_processor().handle(
            request.body,
            request.META.get("HTTP_STRIPE_SIGNATURE"),
        )
        return Response(result.to_dict(), status=status.HTTP_200_OK)


class GetStripeConfigView(APIView):
    """
    endpoint so the frontend can initialize Stripe.js
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"publishableKey": get_publishable_key()}, status=200)
