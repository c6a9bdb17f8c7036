"""
Root URL configuration for the storefront backend.

- /admin/: Django admin (catalog maintenance, entitlement deactivation)
- /api/storefront/: authentication, gated content, orders and discounts
- /api/payments/: Stripe checkout creation and webhook settlement
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/storefront/", include("storefront.urls")),
    path("api/payments/", include("core.stripe_integration.urls")),
]
