"""
Storefront User Management Models

This module extends Django's built-in User model with the storefront profile,
which carries the user's role, and keeps profiles in sync through Django signals.

Models:
- Profile: Role assignment (FREE / CUSTOMER / ADMIN) for a user

Features:
- Automatic profile creation for new users
- Role lookup used when the session token is issued

Author: Storefront Development Team
Version: 1.0.0
"""

from django.db import models
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.translation import gettext_lazy as _

from .identity import Role

__all__ = ["Profile", "Role"]


class Profile(models.Model):
    """
    Extended user profile model for the storefront.

    Attributes:
        user: One-to-one relationship with Django User model
        role: Access role signed into the session token at login

    The profile is automatically created when a new user is registered.
    Role changes only take effect on the next login, since the session token
    is never re-read from the database.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
        help_text=_("Associated user account"),
    )

    role = models.CharField(
        max_length=16,
        choices=Role.choices,
        default=Role.FREE,
        verbose_name=_("Role"),
        help_text=_("FREE users browse, CUSTOMER users buy, ADMIN users manage the store"),
    )

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")
        db_table = "storefront_profile"

    def __str__(self) -> str:
        return f"{self.user.username} Profile"

    def __repr__(self) -> str:
        return f"<Profile(user={self.user.username}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# --- Signal Handlers for Automatic Profile Management ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    """
    Automatically create a user profile when a new user is created.

    Superusers created through ``createsuperuser`` get the ADMIN role.
    """
    if created:
        role = Role.ADMIN if instance.is_superuser else Role.FREE
        Profile.objects.get_or_create(user=instance, defaults={"role": role})
