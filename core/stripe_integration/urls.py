from django.urls import path

from .views import (
    CreateCheckoutSessionView,
    GetStripeConfigView,
    StripeWebhookView,
)

app_name = "stripe_integration"

urlpatterns = [
    path("stripe/config/", GetStripeConfigView.as_view(), name="stripe-config"),
    path("stripe/checkout-session/", CreateCheckoutSessionView.as_view(), name="stripe-checkout-session"),
    path("stripe/webhook/", StripeWebhookView.as_view(), name="stripe-webhook"),
]
