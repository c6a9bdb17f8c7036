"""
Storefront purchases: orders, entitlements and the idempotency ledger.
"""
