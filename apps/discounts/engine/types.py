"""
Typed campaign and cart model for the promotional discount engine.

Campaign JSON is parsed into these value objects once (see ``config.py``);
the engine stages only ever read them. Everything here is frozen, so a
campaign can be shared between concurrent calculations.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .money import ZERO, clamp_money, non_negative, percentage_of, round_money


class DiscountKind(str, Enum):
    """How a rule's ``value`` is interpreted."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class RuleType(str, Enum):
    """Source of an applied discount, as shown on receipts and in the POS."""

    BATCH_CONFIG_VALUE = "batch_config_value"
    BATCH_CONFIG_QUANTITY = "batch_config_quantity"
    PRODUCT_CONFIG_VALUE = "product_config_value"
    PRODUCT_CONFIG_QUANTITY = "product_config_quantity"
    PRODUCT_CONFIG_SPECIFIC_QTY = "product_config_specific_qty"
    PRODUCT_CONFIG_UNIT_PRICE = "product_config_unit_price"
    CAMPAIGN_DEFAULT_VALUE = "campaign_default_value"
    CAMPAIGN_DEFAULT_QUANTITY = "campaign_default_quantity"
    CAMPAIGN_DEFAULT_SPECIFIC_QTY = "campaign_default_specific_qty"
    CAMPAIGN_DEFAULT_UNIT_PRICE = "campaign_default_unit_price"
    BUY_GET_FREE = "buy_get_free"
    CAMPAIGN_GLOBAL_VALUE = "campaign_global_value"
    CAMPAIGN_GLOBAL_QUANTITY = "campaign_global_quantity"
    CUSTOM_ITEM_DISCOUNT = "custom_item_discount"


@dataclass(frozen=True)
class EnginePolicy:
    """
    Precedence switches for the line and cart stages.

    Attributes:
        prefer_quantity_rules: When a quantity rule and a value rule both
            qualify at the same level, the quantity rule fires.
        override_replaces_default: The most specific active override (batch,
            then product) shadows every rule below it even when none of its
            own rules qualify. Off by default: a line falls through to the
            next level when nothing at its override level fires.
    """

    prefer_quantity_rules: bool = True
    override_replaces_default: bool = False


DEFAULT_POLICY = EnginePolicy()


@dataclass(frozen=True)
class ValueRule:
    """
    A percentage or fixed discount gated by an inclusive min/max condition.

    The condition is tested against whatever metric the caller supplies
    (line value, line quantity, cart subtotal or cart quantity).
    """

    name: str
    kind: DiscountKind
    value: Decimal
    is_enabled: bool = True
    condition_min: Optional[Decimal] = None
    condition_max: Optional[Decimal] = None
    apply_once: bool = False

    def __post_init__(self):
        object.__setattr__(self, "value", non_negative(self.value))
        if self.condition_min is not None:
            object.__setattr__(self, "condition_min", non_negative(self.condition_min))
        if self.condition_max is not None:
            object.__setattr__(self, "condition_max", non_negative(self.condition_max))

    def qualifies(self, metric) -> bool:
        if not self.is_enabled:
            return False
        if self.condition_min is not None and metric < self.condition_min:
            return False
        if self.condition_max is not None and metric > self.condition_max:
            return False
        return True

    def calculate(self, amount, quantity, unit_price=None):
        """
        Discount produced by this rule, clamped to ``amount``.

        Args:
            amount: Qualifying monetary amount (line total or net subtotal)
            quantity: Units in the line or the cart
            unit_price: Base-unit price; ``None`` for cart-level rules

        Returns:
            Decimal: Rounded discount in ``[0, amount]``
        """
        if self.kind == DiscountKind.PERCENTAGE:
            if self.apply_once or unit_price is None:
                discount = percentage_of(amount, self.value)
            else:
                discount = round_money(percentage_of(unit_price, self.value)) * quantity
        else:
            discount = self.value if self.apply_once else self.value * quantity
        return clamp_money(discount, amount)


@dataclass(frozen=True)
class ProductOverride:
    """
    Per-product rules tried before the campaign default line rules.

    ``specific_qty_rule`` is tested against the line quantity and
    ``unit_price_rule`` against the unit price; both discount the whole line.
    """

    product_id: str
    is_active_in_campaign: bool = True
    line_value_rule: Optional[ValueRule] = None
    line_quantity_rule: Optional[ValueRule] = None
    specific_qty_rule: Optional[ValueRule] = None
    unit_price_rule: Optional[ValueRule] = None


@dataclass(frozen=True)
class BatchOverride:
    """Rules for one stock batch; tried before the product's override."""

    batch_id: str
    is_active_in_campaign: bool = True
    line_value_rule: Optional[ValueRule] = None
    line_quantity_rule: Optional[ValueRule] = None


@dataclass(frozen=True)
class BuyGetRule:
    """Buy ``buy_quantity`` of one product, get ``get_quantity`` of another discounted."""

    buy_product_id: str
    buy_quantity: Decimal
    get_product_id: str
    get_quantity: Decimal
    discount_kind: DiscountKind = DiscountKind.PERCENTAGE
    discount_value: Decimal = 100
    is_repeatable: bool = False

    def __post_init__(self):
        object.__setattr__(self, "buy_quantity", non_negative(self.buy_quantity))
        object.__setattr__(self, "get_quantity", non_negative(self.get_quantity))
        object.__setattr__(self, "discount_value", non_negative(self.discount_value))

    @property
    def source_rule_name(self) -> str:
        return f"Buy {self.buy_quantity.normalize():f} Get {self.get_quantity.normalize():f}"

    def discount_per_unit(self, unit_price):
        if self.discount_kind == DiscountKind.PERCENTAGE:
            return round_money(percentage_of(unit_price, self.discount_value))
        return min(self.discount_value, unit_price)


@dataclass(frozen=True)
class Campaign:
    """
    Engine view of a persisted ``DiscountSet``.

    ``product_overrides`` is keyed by product id and ``batch_overrides`` by
    batch id; both are exposed read-only.
    """

    name: str
    is_active: bool = True
    is_default: bool = False
    is_one_time_per_transaction: bool = False
    default_line_rule: Optional[ValueRule] = None
    default_quantity_rule: Optional[ValueRule] = None
    default_specific_qty_rule: Optional[ValueRule] = None
    default_unit_price_rule: Optional[ValueRule] = None
    global_cart_rule: Optional[ValueRule] = None
    global_cart_quantity_rule: Optional[ValueRule] = None
    buy_get_rules: Tuple[BuyGetRule, ...] = ()
    product_overrides: Mapping[str, ProductOverride] = field(
        default_factory=lambda: MappingProxyType({})
    )
    batch_overrides: Mapping[str, BatchOverride] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        object.__setattr__(self, "buy_get_rules", tuple(self.buy_get_rules))
        object.__setattr__(
            self, "product_overrides", MappingProxyType(dict(self.product_overrides))
        )
        object.__setattr__(self, "batch_overrides", MappingProxyType(dict(self.batch_overrides)))

    def active_override_for(self, product_id: str) -> Optional[ProductOverride]:
        override = self.product_overrides.get(product_id)
        if override is not None and override.is_active_in_campaign:
            return override
        return None

    def active_batch_override_for(self, batch_id: Optional[str]) -> Optional[BatchOverride]:
        if not batch_id:
            return None
        override = self.batch_overrides.get(batch_id)
        if override is not None and override.is_active_in_campaign:
            return override
        return None


@dataclass(frozen=True)
class CustomDiscount:
    """Operator-entered manual discount on a single line."""

    kind: DiscountKind
    value: Decimal

    def __post_init__(self):
        object.__setattr__(self, "value", non_negative(self.value))

    @property
    def is_applicable(self) -> bool:
        return self.value > 0

    def calculate(self, gross_total, quantity):
        # Fixed custom discounts are entered per unit at the till.
        if self.kind == DiscountKind.FIXED:
            discount = self.value * quantity
        else:
            discount = percentage_of(gross_total, self.value)
        return clamp_money(discount, gross_total)


@dataclass(frozen=True)
class LineItem:
    """
    One cart line. Negative or non-numeric quantity/price are clamped to zero.

    ``gross_total`` is the exact ``unit_price * quantity`` and is the ceiling
    for every discount on the line; ``line_total`` is its rounded display form.
    """

    line_id: str
    product_id: str
    quantity: Decimal
    unit_price: Decimal
    custom_discount: Optional[CustomDiscount] = None
    batch_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "line_id", str(self.line_id))
        object.__setattr__(self, "product_id", str(self.product_id))
        object.__setattr__(self, "quantity", non_negative(self.quantity))
        object.__setattr__(self, "unit_price", non_negative(self.unit_price))
        if self.batch_id is not None:
            object.__setattr__(self, "batch_id", str(self.batch_id) or None)

    @property
    def gross_total(self):
        return self.unit_price * self.quantity

    @property
    def line_total(self):
        return round_money(self.gross_total)


@dataclass(frozen=True)
class DiscountContext:
    """Input to ``DiscountEngine.process``."""

    items: Tuple[LineItem, ...] = ()
    campaign: Optional[Campaign] = None

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class AppliedRuleRecord:
    """Audit entry for one fired rule."""

    rule_set_name: str
    source_rule_name: str
    rule_type: RuleType
    total_calculated_discount: Decimal = ZERO
    product_id_affected: Optional[str] = None
    applied_once: bool = False


@dataclass(frozen=True)
class LineResult:
    """Discount outcome for a single cart line."""

    line_id: str
    product_id: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    total_discount: Decimal = ZERO
    auto_rule_applied: Optional[AppliedRuleRecord] = None
    buy_get_rules_applied: Tuple[AppliedRuleRecord, ...] = ()
    batch_id: Optional[str] = None

    @property
    def net_total(self):
        return self.line_total - self.total_discount


@dataclass(frozen=True)
class EngineResult:
    """Per-line totals, cart totals and the ordered applied-rules summary."""

    line_items: Tuple[LineResult, ...] = ()
    total_item_discount: Decimal = ZERO
    total_cart_discount: Decimal = ZERO
    applied_rules: Tuple[AppliedRuleRecord, ...] = ()

    @property
    def subtotal(self):
        return sum((line.line_total for line in self.line_items), ZERO)

    @property
    def net_subtotal(self):
        return self.subtotal - self.total_item_discount

    @property
    def total_discount(self):
        return self.total_item_discount + self.total_cart_discount

    @property
    def total_payable(self):
        return self.subtotal - self.total_discount

    def get_line_item(self, line_id: str) -> Optional[LineResult]:
        for line in self.line_items:
            if line.line_id == line_id:
                return line
        return None

    def get_applied_rules_summary(self):
        """Line rules in input order, then buy-get rules, then the cart rule."""
        return list(self.applied_rules)
