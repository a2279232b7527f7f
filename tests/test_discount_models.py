"""
Tests for discount models.

Tests the DiscountSet and ProductDiscountConfiguration models including:
- Single default campaign
- Active default lookup
- Conversion to the engine campaign
"""

from decimal import Decimal

from django.db import IntegrityError
from django.test import TestCase

from apps.discounts.engine import DiscountKind, LineItem, process
from apps.discounts.models import (
    BatchDiscountConfiguration,
    DiscountSet,
    ProductDiscountConfiguration,
)


class DiscountSetModelTest(TestCase):
    """Test DiscountSet model functionality."""

    def setUp(self):
        """Set up test data."""
        self.rule = {
            "isEnabled": True,
            "name": "10% off",
            "type": "percentage",
            "value": 10,
            "conditionMin": 1000,
        }

    def test_create_discount_set(self):
        discount_set = DiscountSet.objects.create(name="Summer Sale")

        self.assertTrue(discount_set.is_active)
        self.assertFalse(discount_set.is_default)
        self.assertEqual(discount_set.buy_get_rules_json, [])
        self.assertEqual(str(discount_set), "Summer Sale")

    def test_str_shows_flags(self):
        discount_set = DiscountSet.objects.create(name="Old", is_default=True, is_active=False)

        self.assertEqual(str(discount_set), "Old (default, inactive)")

    def test_only_one_default(self):
        """Saving a default campaign clears the flag on the others."""
        first = DiscountSet.objects.create(name="First", is_default=True)
        second = DiscountSet.objects.create(name="Second", is_default=True)

        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)
        self.assertEqual(DiscountSet.objects.filter(is_default=True).count(), 1)

    def test_get_active_default(self):
        self.assertIsNone(DiscountSet.get_active_default())

        default = DiscountSet.objects.create(name="Default", is_default=True)
        DiscountSet.objects.create(name="Other")
        self.assertEqual(DiscountSet.get_active_default(), default)

        default.is_active = False
        default.save()
        self.assertIsNone(DiscountSet.get_active_default())

    def test_unique_name(self):
        DiscountSet.objects.create(name="Same")

        with self.assertRaises(IntegrityError):
            DiscountSet.objects.create(name="Same")

    def test_to_campaign(self):
        discount_set = DiscountSet.objects.create(
            name="Mega Sale",
            is_one_time_per_transaction=True,
            default_line_item_value_rule_json=self.rule,
            buy_get_rules_json=[
                {
                    "buyProductId": "SOAP",
                    "buyQuantity": 2,
                    "getProductId": "SOAP",
                    "getQuantity": 1,
                    "discountType": "percentage",
                    "discountValue": 100,
                    "isRepeatable": True,
                }
            ],
        )
        ProductDiscountConfiguration.objects.create(
            discount_set=discount_set,
            product_id="PASTE",
            line_item_quantity_rule_json={
                "isEnabled": True,
                "name": "3+ Paste",
                "type": "fixed",
                "value": 5,
                "conditionMin": 3,
            },
        )

        campaign = discount_set.to_campaign()

        self.assertEqual(campaign.name, "Mega Sale")
        self.assertTrue(campaign.is_one_time_per_transaction)
        self.assertEqual(campaign.default_line_rule.kind, DiscountKind.PERCENTAGE)
        self.assertEqual(campaign.default_line_rule.condition_min, Decimal("1000"))
        self.assertTrue(campaign.buy_get_rules[0].is_repeatable)
        override = campaign.active_override_for("PASTE")
        self.assertEqual(override.line_quantity_rule.value, Decimal("5"))
        self.assertIsNone(override.line_value_rule)

    def test_to_payload_round_trips_through_engine(self):
        discount_set = DiscountSet.objects.create(
            name="Payload", global_cart_price_rule_json=self.rule
        )

        payload = discount_set.to_payload()

        self.assertEqual(payload["globalCartPriceRuleJson"], self.rule)
        self.assertEqual(payload["productConfigurations"], [])
        self.assertEqual(payload["batchConfigurations"], [])
        self.assertEqual(discount_set.to_campaign().global_cart_rule.name, "10% off")


class ProductDiscountConfigurationModelTest(TestCase):
    """Test ProductDiscountConfiguration model functionality."""

    def setUp(self):
        self.discount_set = DiscountSet.objects.create(name="Promo")

    def test_unique_product_per_campaign(self):
        ProductDiscountConfiguration.objects.create(
            discount_set=self.discount_set, product_id="SOAP"
        )

        with self.assertRaises(IntegrityError):
            ProductDiscountConfiguration.objects.create(
                discount_set=self.discount_set, product_id="SOAP"
            )

    def test_str(self):
        configuration = ProductDiscountConfiguration.objects.create(
            discount_set=self.discount_set,
            product_id="SOAP",
            product_name_at_configuration="Sunlight Soap",
        )

        self.assertEqual(str(configuration), "Sunlight Soap in Promo")

    def test_inactive_configuration_is_not_applied(self):
        ProductDiscountConfiguration.objects.create(
            discount_set=self.discount_set,
            product_id="SOAP",
            is_active_for_product_in_campaign=False,
            line_item_value_rule_json={
                "isEnabled": True,
                "name": "Half",
                "type": "percentage",
                "value": 50,
            },
        )

        campaign = self.discount_set.to_campaign()

        self.assertIsNone(campaign.active_override_for("SOAP"))
        result = process([LineItem("1", "SOAP", Decimal("1"), Decimal("100"))], campaign)
        self.assertEqual(result.total_discount, Decimal("0.00"))


class BatchDiscountConfigurationModelTest(TestCase):
    """Test BatchDiscountConfiguration model functionality."""

    def setUp(self):
        self.discount_set = DiscountSet.objects.create(name="Clearance")

    def test_unique_batch_per_campaign(self):
        BatchDiscountConfiguration.objects.create(
            discount_set=self.discount_set, product_batch_id="B-1"
        )

        with self.assertRaises(IntegrityError):
            BatchDiscountConfiguration.objects.create(
                discount_set=self.discount_set, product_batch_id="B-1"
            )

    def test_str(self):
        configuration = BatchDiscountConfiguration.objects.create(
            discount_set=self.discount_set,
            product_batch_id="B-1",
            batch_number_at_configuration="LOT-42",
        )

        self.assertEqual(str(configuration), "Batch LOT-42 in Clearance")

    def test_batch_rules_reach_the_engine(self):
        BatchDiscountConfiguration.objects.create(
            discount_set=self.discount_set,
            product_batch_id="B-1",
            product_id="MILK",
            line_item_value_rule_json={
                "isEnabled": True,
                "name": "Expiring",
                "type": "percentage",
                "value": 50,
            },
        )

        campaign = self.discount_set.to_campaign()
        result = process(
            [LineItem("1", "MILK", Decimal("1"), Decimal("100"), batch_id="B-1")], campaign
        )

        self.assertEqual(campaign.active_batch_override_for("B-1").line_value_rule.name, "Expiring")
        self.assertEqual(result.total_discount, Decimal("50.00"))
