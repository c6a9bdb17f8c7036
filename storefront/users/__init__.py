"""
Storefront user management: profiles, session identity and authentication views.
"""
