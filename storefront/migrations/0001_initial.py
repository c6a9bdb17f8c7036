import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                ("description", models.TextField(blank=True, default="")),
                ("short_description", models.CharField(blank=True, default="", max_length=300)),
                ("price", models.PositiveIntegerField(verbose_name="Price (minor units)")),
                (
                    "type",
                    models.CharField(
                        choices=[("course", "Course"), ("templates", "Templates"), ("ai_prompts", "AI Prompts")],
                        default="course",
                        max_length=20,
                    ),
                ),
                ("category", models.CharField(db_index=True, max_length=100)),
                ("image", models.URLField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                (
                    "access_duration",
                    models.PositiveIntegerField(
                        default=365,
                        help_text="Number of days of access granted by each purchase",
                        verbose_name="Access Duration (days)",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Product",
                "verbose_name_plural": "Products",
                "db_table": "storefront_product",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Discount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(choices=[("general", "General"), ("category", "Category")], max_length=10),
                ),
                (
                    "percentage",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ]
                    ),
                ),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("is_active", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Discount",
                "verbose_name_plural": "Discounts",
                "db_table": "storefront_discount",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("FREE", "Free"), ("CUSTOMER", "Customer"), ("ADMIN", "Admin")],
                        default="FREE",
                        help_text="FREE users browse, CUSTOMER users buy, ADMIN users manage the store",
                        max_length=16,
                        verbose_name="Role",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        help_text="Associated user account",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "User Profile",
                "verbose_name_plural": "User Profiles",
                "db_table": "storefront_profile",
            },
        ),
        migrations.CreateModel(
            name="ProductModule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="modules",
                        to="storefront.product",
                        verbose_name="Product",
                    ),
                ),
            ],
            options={
                "verbose_name": "Product Module",
                "verbose_name_plural": "Product Modules",
                "db_table": "storefront_product_module",
                "ordering": ["product", "order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ProductMaterial",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("video", "Video"), ("file", "File")], max_length=10)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("video_url", models.URLField(blank=True, default="")),
                (
                    "video_source",
                    models.CharField(blank=True, default="", help_text="youtube, vimeo or hosted", max_length=20),
                ),
                ("file_url", models.URLField(blank=True, default="")),
                ("file_name", models.CharField(blank=True, default="", max_length=255)),
                ("file_size", models.PositiveBigIntegerField(blank=True, null=True)),
                ("thumbnail", models.URLField(blank=True, default="")),
                ("duration", models.PositiveIntegerField(blank=True, help_text="Seconds", null=True)),
                ("order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "module",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="materials",
                        to="storefront.productmodule",
                        verbose_name="Module",
                    ),
                ),
            ],
            options={
                "verbose_name": "Product Material",
                "verbose_name_plural": "Product Materials",
                "db_table": "storefront_product_material",
                "ordering": ["module", "order", "id"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.PositiveIntegerField(help_text="Charged amount in minor units, after discount"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("PAID", "Paid"), ("CANCELLED", "Cancelled")],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("stripe_payment_intent_id", models.CharField(blank=True, default="", max_length=255)),
                ("checkout_session_id", models.CharField(blank=True, db_index=True, default="", max_length=255)),
                ("purchase_date", models.DateTimeField(blank=True, null=True)),
                ("expiry_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="storefront.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "db_table": "storefront_order",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="UserAsset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("purchase_date", models.DateTimeField()),
                ("expiry_date", models.DateTimeField()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        help_text="The order that granted this access",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="storefront.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="storefront.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "User Asset",
                "verbose_name_plural": "User Assets",
                "db_table": "storefront_user_asset",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ProcessedWebhook",
            fields=[
                ("id", models.CharField(max_length=255, primary_key=True, serialize=False)),
                ("event_type", models.CharField(max_length=100)),
                ("processed_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name": "Processed Webhook",
                "verbose_name_plural": "Processed Webhooks",
                "db_table": "storefront_processed_webhook",
                "ordering": ["-processed_at"],
            },
        ),
        migrations.AddIndex(
            model_name="order",
            index=models.Index(fields=["user", "status"], name="order_user_status_idx"),
        ),
        migrations.AddIndex(
            model_name="userasset",
            index=models.Index(fields=["user", "product"], name="asset_user_product_idx"),
        ),
        migrations.AddConstraint(
            model_name="userasset",
            constraint=models.UniqueConstraint(
                condition=models.Q(("is_active", True)),
                fields=("user", "product"),
                name="unique_active_asset_per_user_product",
            ),
        ),
    ]
