"""
Core App Configuration - Storefront

This module contains the Django app configuration for the core application.
The core app holds the cross-cutting infrastructure shared by the storefront:

Features:
- Typed business errors and the DRF exception handler (core.exceptions)
- Stripe payment integration: checkout and webhook settlement (core.stripe_integration)

Author: Storefront Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
