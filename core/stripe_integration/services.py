"""
Factories wiring the payment services from Django settings.

Settings are read on every call, never cached at import time, so
``override_settings`` in tests and key rotation at runtime both apply.
"""

from django.conf import settings

from .checkout import CheckoutOrchestrator
from .gateway import StripeGateway
from .settlement import SettlementProcessor


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway(
        api_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        api_version=settings.STRIPE_API_VERSION or None,
    )


def get_checkout_orchestrator(gateway: StripeGateway = None) -> CheckoutOrchestrator:
    frontend = settings.FRONTEND_URL.rstrip("/")
    return CheckoutOrchestrator(
        gateway or get_stripe_gateway(),
        currency=settings.DEFAULT_CURRENCY,
        locale=settings.CHECKOUT_LOCALE,
        success_url=f"{frontend}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{frontend}/cart",
    )


def get_settlement_processor(gateway: StripeGateway = None) -> SettlementProcessor:
    return SettlementProcessor(
        gateway or get_stripe_gateway(),
        default_duration_days=settings.DEFAULT_ACCESS_DURATION_DAYS,
    )


def get_publishable_key() -> str:
    if settings.STRIPE_LIVE_MODE:
        return settings.STRIPE_LIVE_PUBLISHABLE_KEY
    return settings.STRIPE_TEST_PUBLISHABLE_KEY
