"""
Storefront Package

Digital-goods storefront with purchase-gated content delivery.

Structure:
- users/: Profiles, session identity and authentication
- catalog/: Products, content modules/materials, discounts and pricing
- purchases/: Orders, entitlements and the webhook idempotency ledger
- access/: Access evaluation, guards and DRF permissions

Author: Storefront Development Team
Version: 1.0.0
"""
