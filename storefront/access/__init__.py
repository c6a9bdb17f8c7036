"""
Storefront Access Control

Entitlement-based authorization: the access evaluator, request guards and the
DRF permission classes used by every protected endpoint.
"""
