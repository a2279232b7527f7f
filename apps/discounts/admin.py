"""
Django admin configuration for discount models.
"""

from django.contrib import admin

from .models import BatchDiscountConfiguration, DiscountSet, ProductDiscountConfiguration


class ProductDiscountConfigurationInline(admin.TabularInline):
    """Inline admin for ProductDiscountConfiguration model."""

    model = ProductDiscountConfiguration
    extra = 0
    fields = [
        "product_id",
        "product_name_at_configuration",
        "is_active_for_product_in_campaign",
        "line_item_value_rule_json",
        "line_item_quantity_rule_json",
        "specific_qty_threshold_rule_json",
        "specific_unit_price_threshold_rule_json",
    ]


class BatchDiscountConfigurationInline(admin.TabularInline):
    """Inline admin for BatchDiscountConfiguration model."""

    model = BatchDiscountConfiguration
    extra = 0
    fields = [
        "product_batch_id",
        "product_id",
        "batch_number_at_configuration",
        "is_active_for_batch_in_campaign",
        "line_item_value_rule_json",
        "line_item_quantity_rule_json",
    ]


@admin.register(DiscountSet)
class DiscountSetAdmin(admin.ModelAdmin):
    """Admin interface for DiscountSet model."""

    list_display = [
        "name",
        "is_active",
        "is_default",
        "is_one_time_per_transaction",
        "updated_by",
        "updated_at",
    ]
    list_filter = ["is_active", "is_default", "is_one_time_per_transaction"]
    search_fields = ["name"]
    readonly_fields = ["id", "created_by", "updated_by", "created_at", "updated_at"]
    inlines = [BatchDiscountConfigurationInline, ProductDiscountConfigurationInline]
    actions = ["activate_campaigns", "deactivate_campaigns"]
    fieldsets = [
        (
            "Basic Information",
            {
                "fields": ["id", "name"],
            },
        ),
        (
            "Status",
            {
                "fields": ["is_active", "is_default", "is_one_time_per_transaction"],
            },
        ),
        (
            "Line Rules",
            {
                "fields": [
                    "default_line_item_value_rule_json",
                    "default_line_item_quantity_rule_json",
                    "default_specific_qty_threshold_rule_json",
                    "default_specific_unit_price_threshold_rule_json",
                ],
            },
        ),
        (
            "Buy-Get Rules",
            {
                "fields": ["buy_get_rules_json"],
            },
        ),
        (
            "Cart Rules",
            {
                "fields": ["global_cart_price_rule_json", "global_cart_quantity_rule_json"],
            },
        ),
        (
            "Audit",
            {
                "fields": ["created_by", "updated_by", "created_at", "updated_at"],
            },
        ),
    ]

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)

    @admin.action(description="Activate selected campaigns")
    def activate_campaigns(self, request, queryset):
        updated = queryset.update(is_active=True, updated_by=request.user)
        self.message_user(request, f"{updated} campaign(s) activated.")

    @admin.action(description="Deactivate selected campaigns")
    def deactivate_campaigns(self, request, queryset):
        updated = queryset.update(is_active=False, updated_by=request.user)
        self.message_user(request, f"{updated} campaign(s) deactivated.")
