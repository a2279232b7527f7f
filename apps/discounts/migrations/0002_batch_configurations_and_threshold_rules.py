import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("discounts", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="discountset",
            name="default_specific_qty_threshold_rule_json",
            field=models.JSONField(
                blank=True,
                help_text="Default quantity threshold rule, discounting the whole line",
                null=True,
            ),
        ),
        migrations.AddField(
            model_name="discountset",
            name="default_specific_unit_price_threshold_rule_json",
            field=models.JSONField(
                blank=True,
                help_text="Default rule tested against each line's unit price",
                null=True,
            ),
        ),
        migrations.AddField(
            model_name="productdiscountconfiguration",
            name="specific_qty_threshold_rule_json",
            field=models.JSONField(
                blank=True,
                help_text="Quantity threshold rule, discounting the whole line",
                null=True,
            ),
        ),
        migrations.AddField(
            model_name="productdiscountconfiguration",
            name="specific_unit_price_threshold_rule_json",
            field=models.JSONField(
                blank=True, help_text="Rule tested against the line's unit price", null=True
            ),
        ),
        migrations.CreateModel(
            name="BatchDiscountConfiguration",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the batch configuration",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "product_batch_id",
                    models.CharField(help_text="Identifier of the stock batch", max_length=100),
                ),
                (
                    "product_id",
                    models.CharField(
                        blank=True,
                        help_text="Catalog identifier of the batch's product",
                        max_length=100,
                    ),
                ),
                (
                    "batch_number_at_configuration",
                    models.CharField(
                        blank=True,
                        help_text="Batch number when the configuration was saved",
                        max_length=100,
                    ),
                ),
                (
                    "is_active_for_batch_in_campaign",
                    models.BooleanField(
                        default=True, help_text="Whether these rules are used for the batch"
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
                        related_name="batch_configurations",
                        to="discounts.discountset",
                    ),
                ),
            ],
            options={
                "verbose_name": "Batch Discount Configuration",
                "verbose_name_plural": "Batch Discount Configurations",
                "db_table": "discount_batch_configurations",
                "ordering": ["discount_set", "created_at"],
                "unique_together": {("discount_set", "product_batch_id")},
            },
        ),
    ]
