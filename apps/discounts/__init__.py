"""
Discounts app for the retail POS.

Promotional campaigns (discount sets), their persistence and validation,
and the API the POS calls for live and checkout discount calculation.
"""

default_app_config = "apps.discounts.apps.DiscountsConfig"
