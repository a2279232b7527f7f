"""
Discount campaign models.

A ``DiscountSet`` is a named bundle of promotional rules:
- Default line rules applied to every product without an override
- Per-batch overrides (``BatchDiscountConfiguration``)
- Per-product overrides (``ProductDiscountConfiguration``)
- "Buy N get M" rules
- Global cart rules evaluated on the net subtotal

Rules are stored as JSON in the shape consumed by seeding and import tooling
and are parsed into engine value objects by ``DiscountSet.to_campaign``.
"""

import uuid

from django.conf import settings
from django.db import models, transaction

from apps.discounts.engine import Campaign, parse_campaign


class DiscountSet(models.Model):
    """
    Discount campaign.

    Only one campaign can be the default at a time; the POS uses the active
    default campaign when no campaign is chosen explicitly.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the discount campaign",
    )

    name = models.CharField(
        max_length=150,
        unique=True,
        help_text="Campaign name shown on receipts",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this campaign can currently be applied",
    )

    is_default = models.BooleanField(
        default=False,
        help_text="Campaign applied automatically at the POS",
    )

    is_one_time_per_transaction = models.BooleanField(
        default=False,
        help_text="Skip the cart rule when a line or buy-get discount already fired",
    )

    # Rule configuration (camelCase JSON, see SpecificDiscountRuleConfig)
    default_line_item_value_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Default rule tested against each line's value",
    )

    default_line_item_quantity_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Default rule tested against each line's quantity",
    )

    default_specific_qty_threshold_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Default quantity threshold rule, discounting the whole line",
    )

    default_specific_unit_price_threshold_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Default rule tested against each line's unit price",
    )

    global_cart_price_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Cart rule tested against the net subtotal",
    )

    global_cart_quantity_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Cart rule tested against the total quantity",
    )

    buy_get_rules_json = models.JSONField(
        default=list,
        blank=True,
        help_text="Buy-get rules, evaluated in list order",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_discount_sets",
        help_text="User who created this campaign",
    )

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="updated_discount_sets",
        help_text="User who last updated this campaign",
    )

    # Timestamps
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When this campaign was created",
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When this campaign was last updated",
    )

    class Meta:
        db_table = "discount_sets"
        ordering = ["-is_default", "name"]
        verbose_name = "Discount Campaign"
        verbose_name_plural = "Discount Campaigns"
        indexes = [
            models.Index(fields=["is_active", "is_default"], name="discount_set_active_idx"),
        ]

    def __str__(self):
        flags = []
        if self.is_default:
            flags.append("default")
        if not self.is_active:
            flags.append("inactive")
        return f"{self.name} ({', '.join(flags)})" if flags else self.name

    def save(self, *args, **kwargs):
        """Save the campaign, clearing the default flag on every other campaign."""
        with transaction.atomic():
            if self.is_default:
                DiscountSet.objects.filter(is_default=True).exclude(pk=self.pk).update(
                    is_default=False
                )
            super().save(*args, **kwargs)

    @classmethod
    def get_active_default(cls):
        """
        Get the active default campaign.

        Returns:
            DiscountSet instance or None
        """
        return (
            cls.objects.filter(is_active=True, is_default=True)
            .prefetch_related("product_configurations", "batch_configurations")
            .first()
        )

    def to_payload(self):
        """
        Campaign in its persisted JSON form.

        Returns:
            dict: camelCase payload accepted by ``parse_campaign``
        """
        return {
            "name": self.name,
            "isActive": self.is_active,
            "isDefault": self.is_default,
            "isOneTimePerTransaction": self.is_one_time_per_transaction,
            "defaultLineItemValueRuleJson": self.default_line_item_value_rule_json,
            "defaultLineItemQuantityRuleJson": self.default_line_item_quantity_rule_json,
            "defaultSpecificQtyThresholdRuleJson": self.default_specific_qty_threshold_rule_json,
            "defaultSpecificUnitPriceThresholdRuleJson": (
                self.default_specific_unit_price_threshold_rule_json
            ),
            "globalCartPriceRuleJson": self.global_cart_price_rule_json,
            "globalCartQuantityRuleJson": self.global_cart_quantity_rule_json,
            "buyGetRulesJson": self.buy_get_rules_json or [],
            "productConfigurations": [
                configuration.to_payload()
                for configuration in self.product_configurations.all()
            ],
            "batchConfigurations": [
                configuration.to_payload() for configuration in self.batch_configurations.all()
            ],
        }

    def to_campaign(self) -> Campaign:
        """Parse this campaign into the engine's typed representation."""
        return parse_campaign(self.to_payload())


class ProductDiscountConfiguration(models.Model):
    """
    Per-product rules inside a campaign.

    When active, its rules are tried before the campaign default line rules
    for the product.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the product configuration",
    )

    discount_set = models.ForeignKey(
        DiscountSet,
        on_delete=models.CASCADE,
        related_name="product_configurations",
        help_text="Campaign this configuration belongs to",
    )

    product_id = models.CharField(
        max_length=100,
        help_text="Catalog identifier of the product",
    )

    product_name_at_configuration = models.CharField(
        max_length=255,
        blank=True,
        help_text="Product name when the configuration was saved",
    )

    is_active_for_product_in_campaign = models.BooleanField(
        default=True,
        help_text="Whether these rules are used for the product",
    )

    line_item_value_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Rule tested against the line's value",
    )

    line_item_quantity_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Rule tested against the line's quantity",
    )

    specific_qty_threshold_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Quantity threshold rule, discounting the whole line",
    )

    specific_unit_price_threshold_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Rule tested against the line's unit price",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discount_product_configurations"
        ordering = ["discount_set", "created_at"]
        verbose_name = "Product Discount Configuration"
        verbose_name_plural = "Product Discount Configurations"
        unique_together = [["discount_set", "product_id"]]

    def __str__(self):
        label = self.product_name_at_configuration or self.product_id
        return f"{label} in {self.discount_set.name}"

    def to_payload(self):
        return {
            "productId": self.product_id,
            "isActiveForProductInCampaign": self.is_active_for_product_in_campaign,
            "lineItemValueRuleJson": self.line_item_value_rule_json,
            "lineItemQuantityRuleJson": self.line_item_quantity_rule_json,
            "specificQtyThresholdRuleJson": self.specific_qty_threshold_rule_json,
            "specificUnitPriceThresholdRuleJson": self.specific_unit_price_threshold_rule_json,
        }


class BatchDiscountConfiguration(models.Model):
    """
    Per-batch rules inside a campaign.

    Matched on the cart line's batch id; tried before the product's own
    configuration, e.g. to clear out a batch close to expiry.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the batch configuration",
    )

    discount_set = models.ForeignKey(
        DiscountSet,
        on_delete=models.CASCADE,
        related_name="batch_configurations",
        help_text="Campaign this configuration belongs to",
    )

    product_batch_id = models.CharField(
        max_length=100,
        help_text="Identifier of the stock batch",
    )

    product_id = models.CharField(
        max_length=100,
        blank=True,
        help_text="Catalog identifier of the batch's product",
    )

    batch_number_at_configuration = models.CharField(
        max_length=100,
        blank=True,
        help_text="Batch number when the configuration was saved",
    )

    is_active_for_batch_in_campaign = models.BooleanField(
        default=True,
        help_text="Whether these rules are used for the batch",
    )

    line_item_value_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Rule tested against the line's value",
    )

    line_item_quantity_rule_json = models.JSONField(
        null=True,
        blank=True,
        help_text="Rule tested against the line's quantity",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discount_batch_configurations"
        ordering = ["discount_set", "created_at"]
        verbose_name = "Batch Discount Configuration"
        verbose_name_plural = "Batch Discount Configurations"
        unique_together = [["discount_set", "product_batch_id"]]

    def __str__(self):
        label = self.batch_number_at_configuration or self.product_batch_id
        return f"Batch {label} in {self.discount_set.name}"

    def to_payload(self):
        return {
            "productBatchId": self.product_batch_id,
            "productId": self.product_id,
            "isActiveForBatchInCampaign": self.is_active_for_batch_in_campaign,
            "lineItemValueRuleJson": self.line_item_value_rule_json,
            "lineItemQuantityRuleJson": self.line_item_quantity_rule_json,
        }
