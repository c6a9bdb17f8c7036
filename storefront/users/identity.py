"""
Session identity carried by the signed session token.

The authenticated user of every request is a ``SessionUser`` built from the
verified JWT claims. Nothing here reads the database: role and display name are
whatever was signed into the token at login time.
"""

from django.db import models
from django.utils.functional import cached_property
from rest_framework_simplejwt.models import TokenUser


class Role(models.TextChoices):
    FREE = "FREE", "Free"
    CUSTOMER = "CUSTOMER", "Customer"
    ADMIN = "ADMIN", "Admin"


class SessionUser(TokenUser):
    """Typed view over the claims ``user_id``, ``email``, ``name`` and ``role``."""

    @cached_property
    def email(self) -> str:
        return self.token.get("email", "")

    @cached_property
    def name(self) -> str:
        return self.token.get("name", "")

    @cached_property
    def role(self) -> str:
        return self.token.get("role", Role.FREE)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def as_payload(self) -> dict:
        return {
            "userId": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
        }

    def __str__(self) -> str:
        return f"SessionUser {self.id} ({self.email})"
