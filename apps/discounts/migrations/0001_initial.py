import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DiscountSet",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the discount campaign",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Campaign name shown on receipts", max_length=150, unique=True
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True, help_text="Whether this campaign can currently be applied"
                    ),
                ),
                (
                    "is_default",
                    models.BooleanField(
                        default=False, help_text="Campaign applied automatically at the POS"
                    ),
                ),
                (
                    "is_one_time_per_transaction",
                    models.BooleanField(
                        default=False,
                        help_text="Skip the cart rule when a line or buy-get discount already fired",
                    ),
                ),
                (
                    "default_line_item_value_rule_json",
                    models.JSONField(
                        blank=True,
                        help_text="Default rule tested against each line's value",
                        null=True,
                    ),
                ),
                (
                    "default_line_item_quantity_rule_json",
                    models.JSONField(
                        blank=True,
                        help_text="Default rule tested against each line's quantity",
                        null=True,
                    ),
                ),
                (
                    "global_cart_price_rule_json",
                    models.JSONField(
                        blank=True, help_text="Cart rule tested against the net subtotal", null=True
                    ),
                ),
                (
                    "global_cart_quantity_rule_json",
                    models.JSONField(
                        blank=True,
                        help_text="Cart rule tested against the total quantity",
                        null=True,
                    ),
                ),
                (
                    "buy_get_rules_json",
                    models.JSONField(
                        blank=True, default=list, help_text="Buy-get rules, evaluated in list order"
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, help_text="When this campaign was created"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True, help_text="When this campaign was last updated"
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who created this campaign",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_discount_sets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who last updated this campaign",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="updated_discount_sets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Discount Campaign",
                "verbose_name_plural": "Discount Campaigns",
                "db_table": "discount_sets",
                "ordering": ["-is_default", "name"],
            },
        ),
        migrations.CreateModel(
            name="ProductDiscountConfiguration",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the product configuration",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "product_id",
                    models.CharField(help_text="Catalog identifier of the product", max_length=100),
                ),
                (
                    "product_name_at_configuration",
                    models.CharField(
                        blank=True,
                        help_text="Product name when the configuration was saved",
                        max_length=255,
                    ),
                ),
                (
                    "is_active_for_product_in_campaign",
                    models.BooleanField(
                        default=True, help_text="Whether these rules are used for the product"
                    ),
                ),
                (
                    "line_item_value_rule_json",
                    models.JSONField(
                        blank=True, help_text="Rule tested against the line's value", null=True
                    ),
                ),
                (
                    "line_item_quantity_rule_json",
                    models.JSONField(
                        blank=True, help_text="Rule tested against the line's quantity", null=True
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "discount_set",
                    models.ForeignKey(
                        help_text="Campaign this configuration belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="product_configurations",
                        to="discounts.discountset",
                    ),
                ),
            ],
            options={
                "verbose_name": "Product Discount Configuration",
                "verbose_name_plural": "Product Discount Configurations",
                "db_table": "discount_product_configurations",
                "ordering": ["discount_set", "created_at"],
                "unique_together": {("discount_set", "product_id")},
            },
        ),
        migrations.AddIndex(
            model_name="discountset",
            index=models.Index(
                fields=["is_active", "is_default"], name="discount_set_active_idx"
            ),
        ),
    ]
