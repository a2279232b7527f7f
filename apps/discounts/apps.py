"""
Discounts app configuration.
"""

from django.apps import AppConfig


class DiscountsConfig(AppConfig):
    """Configuration for the discounts app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.discounts"
    verbose_name = "Discount Campaigns"
