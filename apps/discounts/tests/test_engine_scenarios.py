"""
End-to-end discount engine tests.

Covers the reference checkout scenarios and the cart-wide guarantees:
- Buy-get, product override, default and cart rules on realistic carts
- Zero results without an active campaign
- Applied-rules summary order and totals
- Idempotence and safety on bad input
"""

from decimal import Decimal

import pytest

from apps.discounts.engine import (
    BuyGetRule,
    Campaign,
    CustomDiscount,
    DiscountContext,
    DiscountEngine,
    DiscountKind,
    LineItem,
    ProductOverride,
    RuleType,
    ValueRule,
    process,
)


def percent_rule(name, value, **kwargs):
    return ValueRule(name=name, kind=DiscountKind.PERCENTAGE, value=Decimal(value), **kwargs)


def fixed_rule(name, value, **kwargs):
    return ValueRule(name=name, kind=DiscountKind.FIXED, value=Decimal(value), **kwargs)


def line(line_id, product_id, quantity, unit_price, custom_discount=None):
    return LineItem(
        line_id=line_id,
        product_id=product_id,
        quantity=Decimal(str(quantity)),
        unit_price=Decimal(str(unit_price)),
        custom_discount=custom_discount,
    )


class TestReferenceScenarios:
    """Test the reference checkout scenarios."""

    def test_buy_two_get_one_soap(self):
        """Three soaps at 80 with buy 2 get 1 free gives one soap free."""
        campaign = Campaign(
            name="Soap Festival",
            buy_get_rules=(
                BuyGetRule(
                    buy_product_id="SOAP",
                    buy_quantity=Decimal("2"),
                    get_product_id="SOAP",
                    get_quantity=Decimal("1"),
                    discount_kind=DiscountKind.PERCENTAGE,
                    discount_value=Decimal("100"),
                    is_repeatable=True,
                ),
            ),
        )

        result = process([line("1", "SOAP", 3, "80")], campaign)

        soap = result.get_line_item("1")
        assert soap.total_discount == Decimal("80.00")
        assert soap.net_total == Decimal("160.00")
        assert soap.auto_rule_applied is None
        assert len(soap.buy_get_rules_applied) == 1
        assert soap.buy_get_rules_applied[0].source_rule_name == "Buy 2 Get 1"
        assert result.total_item_discount == Decimal("80.00")

    def test_toothpaste_fixed_per_unit_quantity_rule(self):
        """Fixed 5 per unit when buying 3 or more toothpastes."""
        campaign = Campaign(
            name="Dental Week",
            product_overrides={
                "TOOTHPASTE": ProductOverride(
                    product_id="TOOTHPASTE",
                    line_quantity_rule=fixed_rule(
                        "3+ Toothpaste", "5", condition_min=Decimal("3")
                    ),
                )
            },
        )

        result = process([line("1", "TOOTHPASTE", 3, "150")], campaign)

        toothpaste = result.get_line_item("1")
        assert toothpaste.total_discount == Decimal("15.00")
        assert toothpaste.net_total == Decimal("435.00")
        assert toothpaste.auto_rule_applied.rule_type == RuleType.PRODUCT_CONFIG_QUANTITY

    def test_value_rule_boundary_is_inclusive(self):
        """A line worth exactly the minimum qualifies."""
        campaign = Campaign(
            name="Big Spender",
            default_line_rule=percent_rule("10% over 1000", "10", condition_min=Decimal("1000")),
        )

        result = process([line("1", "TV", 1, "1000")], campaign)

        assert result.get_line_item("1").total_discount == Decimal("100.00")
        assert result.applied_rules[0].rule_type == RuleType.CAMPAIGN_DEFAULT_VALUE

    def test_fixed_cart_rule_applied_once(self):
        """Flat 250 off a bill of exactly 5000 is applied once, not per unit."""
        campaign = Campaign(
            name="Bill Buster",
            global_cart_rule=fixed_rule(
                "250 off 5000", "250", condition_min=Decimal("5000"), apply_once=True
            ),
        )

        result = process(
            [line("1", "RICE", 10, "300"), line("2", "OIL", 4, "500")],
            campaign,
        )

        assert result.total_item_discount == Decimal("0.00")
        assert result.total_cart_discount == Decimal("250.00")
        assert result.total_payable == Decimal("4750.00")
        assert result.applied_rules[-1].applied_once is True

    def test_no_campaign_gives_zero_discounts(self):
        """Without a campaign every line is listed with no discount."""
        result = process([line("1", "SOAP", 3, "80"), line("2", "RICE", 1, "300")], None)

        assert result.total_item_discount == Decimal("0.00")
        assert result.total_cart_discount == Decimal("0.00")
        assert result.applied_rules == ()
        assert [item.line_id for item in result.line_items] == ["1", "2"]
        assert all(item.total_discount == 0 for item in result.line_items)
        assert result.total_payable == Decimal("540.00")


class TestDiscountEngine:
    """Test DiscountEngine orchestration."""

    def setup_method(self):
        """Set up a campaign using every rule stage."""
        self.campaign = Campaign(
            name="Mega Sale",
            default_line_rule=percent_rule("5% off", "5", condition_min=Decimal("500")),
            global_cart_rule=percent_rule("2% cart", "2", condition_min=Decimal("1000")),
            buy_get_rules=(
                BuyGetRule(
                    buy_product_id="SHAMPOO",
                    buy_quantity=Decimal("2"),
                    get_product_id="CONDITIONER",
                    get_quantity=Decimal("1"),
                    discount_value=Decimal("100"),
                ),
            ),
        )
        self.items = [
            line("a", "TV", 1, "600"),
            line("b", "SHAMPOO", 2, "200"),
            line("c", "CONDITIONER", 1, "150"),
        ]

    def test_summary_order_is_line_then_buy_get_then_cart(self):
        """Applied rules list line rules, then buy-get rules, then the cart rule."""
        items = self.items + [line("d", "RICE", 1, "200")]

        result = DiscountEngine().process(DiscountContext(items=items, campaign=self.campaign))

        assert [record.rule_type for record in result.get_applied_rules_summary()] == [
            RuleType.CAMPAIGN_DEFAULT_VALUE,
            RuleType.BUY_GET_FREE,
            RuleType.CAMPAIGN_GLOBAL_VALUE,
        ]

    def test_totals(self):
        """Cart rule is computed on the subtotal net of line discounts."""
        result = process(self.items, self.campaign)

        # TV 5% of 600 = 30, conditioner free = 150
        assert result.subtotal == Decimal("1150.00")
        assert result.total_item_discount == Decimal("180.00")
        assert result.net_subtotal == Decimal("970.00")
        # 970 is below the 1000 cart threshold
        assert result.total_cart_discount == Decimal("0.00")
        assert result.total_payable == Decimal("970.00")

    def test_totals_with_cart_rule(self):
        """Item and cart discounts add up to the total discount."""
        items = self.items + [line("d", "RICE", 1, "200")]

        result = process(items, self.campaign)

        assert result.net_subtotal == Decimal("1170.00")
        assert result.total_cart_discount == Decimal("23.40")
        assert result.total_discount == Decimal("203.40")
        assert result.total_payable == Decimal("1146.60")

    def test_inactive_campaign_gives_zero_discounts(self):
        """An inactive campaign behaves like no campaign."""
        campaign = Campaign(
            name="Expired",
            is_active=False,
            default_line_rule=percent_rule("50% off", "50"),
        )

        result = process(self.items, campaign)

        assert result.total_discount == Decimal("0.00")
        assert result.applied_rules == ()
        assert len(result.line_items) == 3

    def test_empty_cart(self):
        """An empty cart yields an empty result."""
        result = process([], self.campaign)

        assert result.line_items == ()
        assert result.total_discount == Decimal("0.00")

    def test_process_is_idempotent(self):
        """The same input always gives the same output."""
        engine = DiscountEngine()
        context = DiscountContext(items=self.items, campaign=self.campaign)

        assert engine.process(context) == engine.process(context)

    def test_get_line_item_unknown_id(self):
        """Unknown line ids return None."""
        result = process(self.items, self.campaign)

        assert result.get_line_item("missing") is None

    def test_custom_discount_counts_as_line_discount_for_one_time_campaign(self):
        """A one-time campaign skips the cart rule when a custom discount fired."""
        campaign = Campaign(
            name="Once Only",
            is_one_time_per_transaction=True,
            global_cart_rule=percent_rule("10% cart", "10"),
        )
        items = [
            line("1", "TV", 1, "1000", CustomDiscount(DiscountKind.PERCENTAGE, Decimal("5"))),
        ]

        result = process(items, campaign)

        assert result.total_item_discount == Decimal("50.00")
        assert result.total_cart_discount == Decimal("0.00")

    def test_calculation_failure_returns_zero_result(self, monkeypatch):
        """Unexpected errors are logged and produce a zero result."""

        def broken_resolve_line(*args, **kwargs):
            raise ValueError("boom")

        monkeypatch.setattr(
            "apps.discounts.engine.engine.resolve_line", broken_resolve_line
        )

        result = process(self.items, self.campaign)

        assert result.total_discount == Decimal("0.00")
        assert result.applied_rules == ()
        assert len(result.line_items) == 3


class TestCartInvariants:
    """Test guarantees that hold for any cart."""

    @pytest.mark.parametrize(
        "quantity,unit_price",
        [
            (1, "0.01"),
            (3, "80"),
            (7, "19.99"),
            ("2.5", "4.40"),
            (0, "100"),
            ("0.005", "1.00"),
            ("0.333", "0.03"),
            ("1.005", "9.99"),
        ],
    )
    def test_discounts_never_exceed_line_totals(self, quantity, unit_price):
        """Discounts are never negative and never exceed what is owed."""
        campaign = Campaign(
            name="Aggressive",
            default_line_rule=fixed_rule("Huge", "1000"),
            global_cart_rule=fixed_rule("Huge cart", "1000", apply_once=True),
            buy_get_rules=(
                BuyGetRule(
                    buy_product_id="X",
                    buy_quantity=Decimal("1"),
                    get_product_id="X",
                    get_quantity=Decimal("1"),
                    discount_value=Decimal("100"),
                    is_repeatable=True,
                ),
            ),
        )

        result = process([line("1", "X", quantity, unit_price)], campaign)

        item = result.line_items[0]
        assert Decimal("0") <= item.total_discount <= item.line_total
        assert item.total_discount <= item.unit_price * item.quantity
        assert result.total_cart_discount >= 0
        assert result.total_payable >= 0

    def test_negative_quantity_and_price_are_clamped(self):
        """Negative inputs are treated as zero."""
        campaign = Campaign(name="Any", default_line_rule=percent_rule("10%", "10"))

        result = process([line("1", "X", -2, "-50")], campaign)

        item = result.line_items[0]
        assert item.quantity == 0
        assert item.unit_price == 0
        assert item.total_discount == Decimal("0.00")

    def test_fractional_quantity_discount_stays_within_exact_line_value(self):
        """A full custom discount on half a cent of goods rounds down, not up."""
        item = line("1", "X", "0.005", "1.00", CustomDiscount(DiscountKind.PERCENTAGE, 100))

        result = process([item], Campaign(name="Any"))

        assert result.line_items[0].line_total == Decimal("0.01")
        assert result.line_items[0].total_discount == Decimal("0.00")
        assert result.total_payable == Decimal("0.01")

    def test_fractional_quantity_full_discount_rounds_down_to_the_cent(self):
        item = line("1", "X", "1.005", "9.99", CustomDiscount(DiscountKind.PERCENTAGE, 100))

        result = process([item], Campaign(name="Any"))

        # 9.99 * 1.005 = 10.03995; half-up would give 10.04
        assert result.line_items[0].line_total == Decimal("10.04")
        assert result.line_items[0].total_discount == Decimal("10.03")
