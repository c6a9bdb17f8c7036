"""
Stripe Integration AppConfig
============================

This module defines the Django application configuration for the local
`core.stripe_integration`. The app owns no models: orders, entitlements and
the processed-webhook ledger live in the `storefront` app, and webhooks are
handled synchronously by `StripeWebhookView` instead of through signals.

Operational notes
-----------------
- `apps.py` is executed on every process start; avoid DB/network calls here.
- Stripe credentials are read from settings per request (see `services.py`),
  never at import time.

Author: Storefront Development Team
Date: 2025-09-03
"""

from django.apps import AppConfig


class StripeIntegrationConfig(AppConfig):
    """
    App configuration for the `core.stripe_integration` package.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "core.stripe_integration"
    label = "stripe_integration"
    verbose_name = "Stripe Integration"
