"""
Storefront Catalog Models

The catalog is maintained through the admin and read by the checkout and
access layers; nothing in the purchase flow writes to it.

Models:
- Product: A sellable digital product with its access window
- ProductModule: Ordered content section of a product
- ProductMaterial: Video or downloadable file inside a module
- Discount: Store-wide or per-category percentage discount

Protected content is only ever gated at product level: a material resolves to
its module, the module to its product, and the product's entitlement decides.

Author: Storefront Development Team
Version: 1.0.0
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

__all__ = ["Product", "ProductType", "ProductModule", "ProductMaterial", "MaterialType", "Discount", "DiscountType"]


class ProductType(models.TextChoices):
    COURSE = "course", _("Course")
    TEMPLATES = "templates", _("Templates")
    AI_PROMPTS = "ai_prompts", _("AI Prompts")


class Product(models.Model):
    """
    Sellable digital product.

    Attributes:
        price: Price in minor currency units (R$ 15,00 = 1500)
        category: Free-form category used by category discounts
        is_active: Only active products can be checked out
        access_duration: Days of access granted per purchase
    """

    slug = models.SlugField(max_length=200, unique=True)
    name = models.CharField(max_length=200, verbose_name=_("Name"))
    description = models.TextField(blank=True, default="")
    short_description = models.CharField(max_length=300, blank=True, default="")
    price = models.PositiveIntegerField(verbose_name=_("Price (minor units)"))
    type = models.CharField(max_length=20, choices=ProductType.choices, default=ProductType.COURSE)
    category = models.CharField(max_length=100, db_index=True)
    image = models.URLField(blank=True, default="")
    is_active = models.BooleanField(default=True, verbose_name=_("Active"))
    access_duration = models.PositiveIntegerField(
        default=365,
        verbose_name=_("Access Duration (days)"),
        help_text=_("Number of days of access granted by each purchase"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["name"]
        db_table = "storefront_product"

    def __str__(self) -> str:
        return self.name


class ProductModule(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="modules",
        verbose_name=_("Product"),
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product Module")
        verbose_name_plural = _("Product Modules")
        ordering = ["product", "order", "id"]
        db_table = "storefront_product_module"

    def __str__(self) -> str:
        return f"{self.product.name} - {self.title}"


class MaterialType(models.TextChoices):
    VIDEO = "video", _("Video")
    FILE = "file", _("File")


class ProductMaterial(models.Model):
    module = models.ForeignKey(
        ProductModule,
        on_delete=models.CASCADE,
        related_name="materials",
        verbose_name=_("Module"),
    )
    type = models.CharField(max_length=10, choices=MaterialType.choices)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    video_url = models.URLField(blank=True, default="")
    video_source = models.CharField(
        max_length=20, blank=True, default="", help_text=_("youtube, vimeo or hosted")
    )
    file_url = models.URLField(blank=True, default="")
    file_name = models.CharField(max_length=255, blank=True, default="")
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    thumbnail = models.URLField(blank=True, default="")
    duration = models.PositiveIntegerField(null=True, blank=True, help_text=_("Seconds"))
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product Material")
        verbose_name_plural = _("Product Materials")
        ordering = ["module", "order", "id"]
        db_table = "storefront_product_material"

    def __str__(self) -> str:
        return self.title

    @property
    def product_id(self):
        return self.module.product_id


class DiscountType(models.TextChoices):
    GENERAL = "general", _("General")
    CATEGORY = "category", _("Category")


class Discount(models.Model):
    """
    Percentage discount applied at checkout.

    At most one discount is active at a time; activating a new one
    deactivates the others (see ``PricingService.set_active_discount``).
    """

    type = models.CharField(max_length=10, choices=DiscountType.choices)
    percentage = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    category = models.CharField(max_length=100, blank=True, default="")
    is_active = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Discount")
        verbose_name_plural = _("Discounts")
        ordering = ["-created_at"]
        db_table = "storefront_discount"

    def __str__(self) -> str:
        target = self.category if self.type == DiscountType.CATEGORY else "all products"
        return f"{self.percentage}% off {target}"

    def applies_to(self, product) -> bool:
        return self.type == DiscountType.GENERAL or (
            self.type == DiscountType.CATEGORY and self.category == product.category
        )
