"""
Storefront Application Models Registry

This module serves as the central models registry for the storefront application.
It imports and exposes all models from the logical submodules (users, catalog,
purchases) so they are registered with Django's ORM under the ``storefront`` label.

Architecture:
- users/: Profile and role
- catalog/: Products, modules, materials and discounts
- purchases/: Orders, entitlements and processed webhooks

Author: Storefront Development Team
Version: 1.0.0
"""

# Import all user-related models for registration with Django ORM
from .users.models import *

# Import all catalog models for registration with Django ORM
from .catalog.models import *

# Import all purchase models for registration with Django ORM
from .purchases.models import *
