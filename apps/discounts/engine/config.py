"""
Parsing of persisted campaign JSON into engine value objects.

The persisted shape uses camelCase keys (``defaultLineItemValueRuleJson``,
``buyGetRulesJson``, ``productConfigurations``, ``batchConfigurations`` ...).
Anything malformed is dropped here and logged at DEBUG, so a bad promotion
can never block a checkout: the engine simply sees no rule.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .money import to_decimal
from .types import (
    BatchOverride,
    BuyGetRule,
    Campaign,
    CustomDiscount,
    DiscountKind,
    LineItem,
    ProductOverride,
    ValueRule,
)

logger = logging.getLogger(__name__)

KIND_VALUES = {kind.value: kind for kind in DiscountKind}


def _kind(raw: Any) -> Optional[DiscountKind]:
    if isinstance(raw, DiscountKind):
        return raw
    if isinstance(raw, str):
        return KIND_VALUES.get(raw.strip().lower())
    return None


def _optional_bound(payload: Mapping, key: str):
    """Return (ok, value) for an optional numeric condition bound."""
    raw = payload.get(key)
    if raw is None or raw == "":
        return True, None
    value = to_decimal(raw)
    if value is None:
        return False, None
    return True, value


def parse_value_rule(payload: Any) -> Optional[ValueRule]:
    """
    Parse a ``SpecificDiscountRuleConfig`` object.

    Returns None for disabled rules and for rules missing a name, a known
    ``type`` or a non-negative numeric ``value``.
    """
    if not isinstance(payload, Mapping):
        return None

    if not payload.get("isEnabled"):
        return None

    name = payload.get("name")
    kind = _kind(payload.get("type"))
    value = to_decimal(payload.get("value"))
    min_ok, condition_min = _optional_bound(payload, "conditionMin")
    max_ok, condition_max = _optional_bound(payload, "conditionMax")

    if not isinstance(name, str) or not name.strip():
        logger.debug("Skipping rule without a name: %r", payload)
        return None
    if kind is None or value is None or value < 0:
        logger.debug("Skipping rule %r with invalid type/value", name)
        return None
    if not (min_ok and max_ok):
        logger.debug("Skipping rule %r with non-numeric condition", name)
        return None

    return ValueRule(
        name=name.strip(),
        kind=kind,
        value=value,
        is_enabled=True,
        condition_min=condition_min,
        condition_max=condition_max,
        apply_once=bool(payload.get("applyFixedOnce", False)),
    )


def parse_buy_get_rule(payload: Any) -> Optional[BuyGetRule]:
    """Parse one entry of ``buyGetRulesJson``; None when unusable."""
    if not isinstance(payload, Mapping):
        return None

    buy_product_id = payload.get("buyProductId")
    get_product_id = payload.get("getProductId")
    buy_quantity = to_decimal(payload.get("buyQuantity"))
    get_quantity = to_decimal(payload.get("getQuantity"))
    kind = _kind(payload.get("discountType", DiscountKind.PERCENTAGE.value))
    discount_value = to_decimal(payload.get("discountValue"))

    if buy_product_id in (None, "") or get_product_id in (None, ""):
        logger.debug("Skipping buy-get rule without products: %r", payload)
        return None
    if buy_quantity is None or buy_quantity <= 0 or get_quantity is None or get_quantity <= 0:
        logger.debug("Skipping buy-get rule with non-positive quantities: %r", payload)
        return None
    if kind is None or discount_value is None or discount_value < 0:
        logger.debug("Skipping buy-get rule with invalid discount: %r", payload)
        return None

    return BuyGetRule(
        buy_product_id=str(buy_product_id),
        buy_quantity=buy_quantity,
        get_product_id=str(get_product_id),
        get_quantity=get_quantity,
        discount_kind=kind,
        discount_value=discount_value,
        is_repeatable=bool(payload.get("isRepeatable", False)),
    )


def parse_product_override(payload: Any) -> Optional[ProductOverride]:
    if not isinstance(payload, Mapping):
        return None

    product_id = payload.get("productId")
    if product_id in (None, ""):
        logger.debug("Skipping product configuration without productId: %r", payload)
        return None

    return ProductOverride(
        product_id=str(product_id),
        is_active_in_campaign=bool(payload.get("isActiveForProductInCampaign", True)),
        line_value_rule=parse_value_rule(payload.get("lineItemValueRuleJson")),
        line_quantity_rule=parse_value_rule(payload.get("lineItemQuantityRuleJson")),
        specific_qty_rule=parse_value_rule(payload.get("specificQtyThresholdRuleJson")),
        unit_price_rule=parse_value_rule(payload.get("specificUnitPriceThresholdRuleJson")),
    )


def parse_batch_override(payload: Any) -> Optional[BatchOverride]:
    if not isinstance(payload, Mapping):
        return None

    batch_id = payload.get("productBatchId")
    if batch_id in (None, ""):
        logger.debug("Skipping batch configuration without productBatchId: %r", payload)
        return None

    return BatchOverride(
        batch_id=str(batch_id),
        is_active_in_campaign=bool(payload.get("isActiveForBatchInCampaign", True)),
        line_value_rule=parse_value_rule(payload.get("lineItemValueRuleJson")),
        line_quantity_rule=parse_value_rule(payload.get("lineItemQuantityRuleJson")),
    )


def parse_campaign(payload: Any) -> Optional[Campaign]:
    """
    Build a ``Campaign`` from its persisted JSON form.

    Args:
        payload: Dict in the ``DiscountSet`` JSON shape, or None

    Returns:
        Campaign, or None when ``payload`` is not a mapping
    """
    if not isinstance(payload, Mapping):
        return None

    buy_get_rules: List[BuyGetRule] = []
    for entry in payload.get("buyGetRulesJson") or []:
        rule = parse_buy_get_rule(entry)
        if rule is not None:
            buy_get_rules.append(rule)

    overrides: Dict[str, ProductOverride] = {}
    for entry in payload.get("productConfigurations") or []:
        override = parse_product_override(entry)
        # First configuration for a product wins.
        if override is not None and override.product_id not in overrides:
            overrides[override.product_id] = override

    batch_overrides: Dict[str, BatchOverride] = {}
    for entry in payload.get("batchConfigurations") or []:
        override = parse_batch_override(entry)
        if override is not None and override.batch_id not in batch_overrides:
            batch_overrides[override.batch_id] = override

    return Campaign(
        name=str(payload.get("name") or "Unnamed Campaign"),
        is_active=bool(payload.get("isActive", True)),
        is_default=bool(payload.get("isDefault", False)),
        is_one_time_per_transaction=bool(payload.get("isOneTimePerTransaction", False)),
        default_line_rule=parse_value_rule(payload.get("defaultLineItemValueRuleJson")),
        default_quantity_rule=parse_value_rule(payload.get("defaultLineItemQuantityRuleJson")),
        default_specific_qty_rule=parse_value_rule(
            payload.get("defaultSpecificQtyThresholdRuleJson")
        ),
        default_unit_price_rule=parse_value_rule(
            payload.get("defaultSpecificUnitPriceThresholdRuleJson")
        ),
        global_cart_rule=parse_value_rule(payload.get("globalCartPriceRuleJson")),
        global_cart_quantity_rule=parse_value_rule(payload.get("globalCartQuantityRuleJson")),
        buy_get_rules=tuple(buy_get_rules),
        product_overrides=overrides,
        batch_overrides=batch_overrides,
    )


def parse_custom_discount(payload: Any) -> Optional[CustomDiscount]:
    """Accepts ``{"kind"|"type": ..., "value": ...}``."""
    if not isinstance(payload, Mapping):
        return None

    kind = _kind(payload.get("kind", payload.get("type")))
    value = to_decimal(payload.get("value"))
    if kind is None or value is None or value <= 0:
        return None
    return CustomDiscount(kind=kind, value=value)


def parse_line_item(payload: Mapping) -> LineItem:
    """
    Build a ``LineItem`` from the cart-line shape
    ``{lineId, productId, quantity, unitPrice, batchId?, customDiscount?}``.
    """
    return LineItem(
        line_id=payload.get("lineId", ""),
        product_id=payload.get("productId", ""),
        quantity=payload.get("quantity"),
        unit_price=payload.get("unitPrice"),
        custom_discount=parse_custom_discount(payload.get("customDiscount")),
        batch_id=payload.get("batchId") or None,
    )
