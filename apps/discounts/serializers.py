"""
Serializers for the discounts app.

- Campaign (discount set) create/update with schema validation of the
  rule JSON, using the camelCase field names of the persisted format
- Cart input for discount calculation
- Engine result output for the POS and receipts
"""

from django.db import transaction

from rest_framework import serializers

from apps.discounts.engine import DiscountKind

from .models import BatchDiscountConfiguration, DiscountSet, ProductDiscountConfiguration

KIND_CHOICES = [(kind.value, kind.value) for kind in DiscountKind]


class RuleConfigSerializer(serializers.Serializer):
    """
    Serializer for a single value/quantity rule (``SpecificDiscountRuleConfig``).

    Values are kept as JSON numbers so the validated data can be stored in a
    JSONField as-is.
    """

    isEnabled = serializers.BooleanField(default=False)
    name = serializers.CharField(default="Unnamed Rule", allow_blank=True, max_length=150)
    type = serializers.ChoiceField(choices=KIND_CHOICES, default=DiscountKind.PERCENTAGE.value)
    value = serializers.FloatField(min_value=0, default=0)
    conditionMin = serializers.FloatField(min_value=0, required=False, allow_null=True)
    conditionMax = serializers.FloatField(min_value=0, required=False, allow_null=True)
    applyFixedOnce = serializers.BooleanField(default=False)

    def validate(self, attrs):
        """Enabled rules need a name and a consistent condition range."""
        if attrs.get("isEnabled"):
            if not (attrs.get("name") or "").strip():
                raise serializers.ValidationError(
                    {"name": "Rule name is required when rule is enabled."}
                )
            condition_min = attrs.get("conditionMin")
            condition_max = attrs.get("conditionMax")
            if (
                condition_min is not None
                and condition_max is not None
                and condition_max < condition_min
            ):
                raise serializers.ValidationError(
                    {"conditionMax": "Max condition cannot be less than Min condition."}
                )
        return dict(attrs)


class BuyGetRuleSerializer(serializers.Serializer):
    """Serializer for one "buy N get M" rule."""

    buyProductId = serializers.CharField(max_length=100)
    buyQuantity = serializers.FloatField()
    getProductId = serializers.CharField(max_length=100)
    getQuantity = serializers.FloatField()
    discountType = serializers.ChoiceField(
        choices=KIND_CHOICES, default=DiscountKind.PERCENTAGE.value
    )
    discountValue = serializers.FloatField(min_value=0)
    isRepeatable = serializers.BooleanField(default=False)

    def validate_buyQuantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Buy quantity must be greater than 0.")
        return value

    def validate_getQuantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Get quantity must be greater than 0.")
        return value

    def validate(self, attrs):
        return dict(attrs)


class ProductDiscountConfigurationSerializer(serializers.ModelSerializer):
    """Serializer for per-product rules inside a campaign."""

    productId = serializers.CharField(source="product_id", max_length=100)
    productName = serializers.CharField(
        source="product_name_at_configuration",
        max_length=255,
        required=False,
        allow_blank=True,
    )
    isActiveForProductInCampaign = serializers.BooleanField(
        source="is_active_for_product_in_campaign", default=True
    )
    lineItemValueRuleJson = RuleConfigSerializer(
        source="line_item_value_rule_json", required=False, allow_null=True
    )
    lineItemQuantityRuleJson = RuleConfigSerializer(
        source="line_item_quantity_rule_json", required=False, allow_null=True
    )
    specificQtyThresholdRuleJson = RuleConfigSerializer(
        source="specific_qty_threshold_rule_json", required=False, allow_null=True
    )
    specificUnitPriceThresholdRuleJson = RuleConfigSerializer(
        source="specific_unit_price_threshold_rule_json", required=False, allow_null=True
    )

    class Meta:
        model = ProductDiscountConfiguration
        fields = [
            "id",
            "productId",
            "productName",
            "isActiveForProductInCampaign",
            "lineItemValueRuleJson",
            "lineItemQuantityRuleJson",
            "specificQtyThresholdRuleJson",
            "specificUnitPriceThresholdRuleJson",
        ]
        read_only_fields = ["id"]


class BatchDiscountConfigurationSerializer(serializers.ModelSerializer):
    """Serializer for per-batch rules inside a campaign."""

    productBatchId = serializers.CharField(source="product_batch_id", max_length=100)
    productId = serializers.CharField(
        source="product_id", max_length=100, required=False, allow_blank=True
    )
    batchNumber = serializers.CharField(
        source="batch_number_at_configuration",
        max_length=100,
        required=False,
        allow_blank=True,
    )
    isActiveForBatchInCampaign = serializers.BooleanField(
        source="is_active_for_batch_in_campaign", default=True
    )
    lineItemValueRuleJson = RuleConfigSerializer(
        source="line_item_value_rule_json", required=False, allow_null=True
    )
    lineItemQuantityRuleJson = RuleConfigSerializer(
        source="line_item_quantity_rule_json", required=False, allow_null=True
    )

    class Meta:
        model = BatchDiscountConfiguration
        fields = [
            "id",
            "productBatchId",
            "productId",
            "batchNumber",
            "isActiveForBatchInCampaign",
            "lineItemValueRuleJson",
            "lineItemQuantityRuleJson",
        ]
        read_only_fields = ["id"]


class DiscountSetSerializer(serializers.ModelSerializer):
    """
    Serializer for creating and updating discount campaigns.

    Product and batch configurations are replaced wholesale on update when
    supplied.
    """

    isActive = serializers.BooleanField(source="is_active", default=True)
    isDefault = serializers.BooleanField(source="is_default", default=False)
    isOneTimePerTransaction = serializers.BooleanField(
        source="is_one_time_per_transaction", default=False
    )
    defaultLineItemValueRuleJson = RuleConfigSerializer(
        source="default_line_item_value_rule_json", required=False, allow_null=True
    )
    defaultLineItemQuantityRuleJson = RuleConfigSerializer(
        source="default_line_item_quantity_rule_json", required=False, allow_null=True
    )
    defaultSpecificQtyThresholdRuleJson = RuleConfigSerializer(
        source="default_specific_qty_threshold_rule_json", required=False, allow_null=True
    )
    defaultSpecificUnitPriceThresholdRuleJson = RuleConfigSerializer(
        source="default_specific_unit_price_threshold_rule_json", required=False, allow_null=True
    )
    globalCartPriceRuleJson = RuleConfigSerializer(
        source="global_cart_price_rule_json", required=False, allow_null=True
    )
    globalCartQuantityRuleJson = RuleConfigSerializer(
        source="global_cart_quantity_rule_json", required=False, allow_null=True
    )
    buyGetRulesJson = BuyGetRuleSerializer(
        source="buy_get_rules_json", many=True, required=False
    )
    productConfigurations = ProductDiscountConfigurationSerializer(
        source="product_configurations", many=True, required=False
    )
    batchConfigurations = BatchDiscountConfigurationSerializer(
        source="batch_configurations", many=True, required=False
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = DiscountSet
        fields = [
            "id",
            "name",
            "isActive",
            "isDefault",
            "isOneTimePerTransaction",
            "defaultLineItemValueRuleJson",
            "defaultLineItemQuantityRuleJson",
            "defaultSpecificQtyThresholdRuleJson",
            "defaultSpecificUnitPriceThresholdRuleJson",
            "globalCartPriceRuleJson",
            "globalCartQuantityRuleJson",
            "buyGetRulesJson",
            "productConfigurations",
            "batchConfigurations",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def validate_productConfigurations(self, value):
        """Reject two configurations for the same product."""
        seen = set()
        for configuration in value:
            product_id = configuration["product_id"]
            if product_id in seen:
                raise serializers.ValidationError(
                    f"Product {product_id} is configured more than once."
                )
            seen.add(product_id)
        return value

    def validate_batchConfigurations(self, value):
        """Reject two configurations for the same batch."""
        seen = set()
        for configuration in value:
            batch_id = configuration["product_batch_id"]
            if batch_id in seen:
                raise serializers.ValidationError(f"Batch {batch_id} is configured more than once.")
            seen.add(batch_id)
        return value

    def _save_product_configurations(self, discount_set, configurations):
        discount_set.product_configurations.all().delete()
        ProductDiscountConfiguration.objects.bulk_create(
            [
                ProductDiscountConfiguration(discount_set=discount_set, **configuration)
                for configuration in configurations
            ]
        )

    def _save_batch_configurations(self, discount_set, configurations):
        discount_set.batch_configurations.all().delete()
        BatchDiscountConfiguration.objects.bulk_create(
            [
                BatchDiscountConfiguration(discount_set=discount_set, **configuration)
                for configuration in configurations
            ]
        )

    def create(self, validated_data):
        """Create the campaign together with its product and batch configurations."""
        configurations = validated_data.pop("product_configurations", [])
        batch_configurations = validated_data.pop("batch_configurations", [])
        validated_data.setdefault("buy_get_rules_json", [])

        with transaction.atomic():
            discount_set = DiscountSet.objects.create(**validated_data)
            self._save_product_configurations(discount_set, configurations)
            self._save_batch_configurations(discount_set, batch_configurations)

        return discount_set

    def update(self, instance, validated_data):
        """Update campaign fields; replace product or batch configurations if given."""
        configurations = validated_data.pop("product_configurations", None)
        batch_configurations = validated_data.pop("batch_configurations", None)

        with transaction.atomic():
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            instance.save()

            if configurations is not None:
                self._save_product_configurations(instance, configurations)
            if batch_configurations is not None:
                self._save_batch_configurations(instance, batch_configurations)

        return instance


class DiscountSetToggleSerializer(serializers.Serializer):
    """Serializer for activating or deactivating a campaign."""

    isActive = serializers.BooleanField()


class CustomDiscountSerializer(serializers.Serializer):
    """Operator-entered discount on a single line."""

    kind = serializers.ChoiceField(choices=KIND_CHOICES)
    value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class CartLineSerializer(serializers.Serializer):
    """Serializer for one cart line sent by the POS."""

    lineId = serializers.CharField(max_length=100)
    productId = serializers.CharField(max_length=100)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0)
    unitPrice = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    batchId = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True
    )
    customDiscount = CustomDiscountSerializer(required=False, allow_null=True)


class DiscountCalculationSerializer(serializers.Serializer):
    """
    Serializer for a discount calculation request.

    Without ``discountSetId`` the active default campaign is used.
    """

    items = CartLineSerializer(many=True)
    discountSetId = serializers.UUIDField(required=False, allow_null=True)


class AppliedRuleRecordSerializer(serializers.Serializer):
    """Serializer for one applied-rule audit entry."""

    ruleSetName = serializers.CharField(source="rule_set_name")
    sourceRuleName = serializers.CharField(source="source_rule_name")
    ruleType = serializers.CharField(source="rule_type.value")
    productIdAffected = serializers.CharField(source="product_id_affected", allow_null=True)
    totalCalculatedDiscount = serializers.DecimalField(
        source="total_calculated_discount", max_digits=14, decimal_places=2
    )
    appliedOnce = serializers.BooleanField(source="applied_once")


class LineResultSerializer(serializers.Serializer):
    """Serializer for a line's discount outcome."""

    lineId = serializers.CharField(source="line_id")
    productId = serializers.CharField(source="product_id")
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    unitPrice = serializers.DecimalField(source="unit_price", max_digits=14, decimal_places=2)
    lineTotal = serializers.DecimalField(source="line_total", max_digits=14, decimal_places=2)
    totalDiscount = serializers.DecimalField(
        source="total_discount", max_digits=14, decimal_places=2
    )
    netTotal = serializers.DecimalField(source="net_total", max_digits=14, decimal_places=2)
    autoRuleApplied = AppliedRuleRecordSerializer(source="auto_rule_applied", allow_null=True)
    batchId = serializers.CharField(source="batch_id", allow_null=True)
    buyGetRulesApplied = AppliedRuleRecordSerializer(source="buy_get_rules_applied", many=True)


class EngineResultSerializer(serializers.Serializer):
    """Serializer for the full discount calculation result."""

    lineItems = LineResultSerializer(source="line_items", many=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)
    totalItemDiscount = serializers.DecimalField(
        source="total_item_discount", max_digits=14, decimal_places=2
    )
    totalCartDiscount = serializers.DecimalField(
        source="total_cart_discount", max_digits=14, decimal_places=2
    )
    totalDiscount = serializers.DecimalField(
        source="total_discount", max_digits=14, decimal_places=2
    )
    totalPayable = serializers.DecimalField(
        source="total_payable", max_digits=14, decimal_places=2
    )
    appliedRules = serializers.SerializerMethodField()

    def get_appliedRules(self, obj):
        return AppliedRuleRecordSerializer(obj.get_applied_rules_summary(), many=True).data
