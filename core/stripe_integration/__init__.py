"""
Stripe Integration Package - Storefront
=============================================================

This package centralizes all Stripe-related logic of the storefront backend:
hosted checkout for digital products and webhook-driven settlement.

Current Scope
--------------------
- Checkout: validates the cart, refuses already-owned products, applies the
  active discount, persists PENDING orders and creates a Checkout Session.
- Settlement: verifies webhook signatures, settles each paid session exactly
  once and grants or extends the buyer's entitlements.
- Config: returns the publishable key for Stripe.js.

Design Rationale
----------------
- No module-level Stripe client: `services.py` builds the gateway and the
  orchestrators from settings, and their constructors accept fakes.
- Idempotency lives in the database (processed-webhook primary key and the
  unique active entitlement constraint), not in process memory.

Structure
---------
- __init__.py     → this file, documentation
- apps.py         → App configuration (`StripeIntegrationConfig`)
- gateway.py      → Stripe API calls and webhook signature verification
- metadata.py     → Typed checkout session metadata
- checkout.py     → Checkout Orchestrator
- settlement.py   → Settlement Processor (webhook handling)
- services.py     → Factories reading settings
- views.py        → API endpoints
- urls.py         → Routes for Stripe endpoints

Author: Storefront Development Team
Date: 2025-09-03
"""
