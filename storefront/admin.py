"""
Storefront Django Admin Configuration

Admin interface for the catalog, orders and entitlements. The admin is also
where entitlements are deactivated: the purchase flow itself never
deactivates or deletes them.

The admin interface is organized into logical sections:
- User Management: Django users with the storefront role inline
- Catalog: Products, modules, materials and discounts
- Purchases: Orders, entitlements and the processed-webhook ledger (read-only)

Author: Storefront Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

# Import all models from the central models registry
from .models import (
    Discount,
    Order,
    ProcessedWebhook,
    Product,
    ProductMaterial,
    ProductModule,
    Profile,
    UserAsset,
)

logger = logging.getLogger(__name__)


# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = "Storefront Role"
    fk_name = "user"
    fields = ("role",)

    def get_extra(self, request: HttpRequest, obj: Optional[User] = None, **kwargs) -> int:
        """Return 0 extra forms since the profile is created automatically."""
        return 0


class UserAdmin(BaseUserAdmin):
    """
    Django's UserAdmin with the storefront role. A role change is picked up
    at the user's next login, when a new session token is signed.
    """

    inlines = (ProfileInline,)
    list_display = ("username", "email", "first_name", "is_active", "get_role")
    list_select_related = ("profile",)
    list_filter = ("is_active", "profile__role", "date_joined")
    search_fields = ("username", "first_name", "last_name", "email")
    ordering = ("username",)

    @admin.display(description=_("Role"))
    def get_role(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.role
        except Profile.DoesNotExist:
            return None


admin.site.unregister(User)
admin.site.register(User, UserAdmin)


# --- Catalog Administration ---


class ProductModuleInline(admin.TabularInline):
    model = ProductModule
    extra = 0
    fields = ("title", "order")
    ordering = ("order",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "type", "price", "access_duration", "is_active")
    list_filter = ("is_active", "type", "category")
    search_fields = ("name", "slug", "category")
    prepopulated_fields = {"slug": ("name",)}
    inlines = (ProductModuleInline,)


class ProductMaterialInline(admin.StackedInline):
    model = ProductMaterial
    extra = 0
    ordering = ("order",)


@admin.register(ProductModule)
class ProductModuleAdmin(admin.ModelAdmin):
    list_display = ("title", "product", "order")
    list_filter = ("product",)
    search_fields = ("title", "product__name")
    inlines = (ProductMaterialInline,)

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("product")


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ("__str__", "type", "percentage", "category", "is_active", "created_at")
    list_filter = ("is_active", "type")


# --- Purchases Administration ---


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "product", "amount", "status", "purchase_date", "created_at")
    list_filter = ("status",)
    search_fields = ("user__email", "product__name", "checkout_session_id", "stripe_payment_intent_id")
    readonly_fields = ("checkout_session_id", "stripe_payment_intent_id", "created_at", "updated_at")

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("user", "product")


@admin.register(UserAsset)
class UserAssetAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "product", "purchase_date", "expiry_date", "is_active")
    list_filter = ("is_active", "product")
    search_fields = ("user__email", "product__name")
    readonly_fields = ("order", "purchase_date", "created_at")
    actions = ("deactivate_entitlements",)

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("user", "product")

    def has_delete_permission(self, request: HttpRequest, obj: Optional[UserAsset] = None) -> bool:
        return False

    @admin.action(description=_("Deactivate selected entitlements"))
    def deactivate_entitlements(self, request: HttpRequest, queryset: QuerySet) -> None:
        updated = queryset.filter(is_active=True).update(is_active=False)
        logger.info("Admin %s deactivated %s entitlement(s)", request.user.pk, updated)
        self.message_user(request, _("%(count)d entitlement(s) deactivated.") % {"count": updated}, messages.SUCCESS)


@admin.register(ProcessedWebhook)
class ProcessedWebhookAdmin(admin.ModelAdmin):
    list_display = ("id", "event_type", "processed_at")
    search_fields = ("id",)

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Optional[ProcessedWebhook] = None) -> bool:
        return False
