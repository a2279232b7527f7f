"""
Line rule resolution: at most one automatic rule per cart line.

Priority, highest first:
1. Operator-entered custom discount on the line
2. Batch override rules for the line's stock batch
3. Product override rules (line quantity, specific quantity threshold,
   line value, unit price threshold)
4. Campaign default rules, in the same order

Quantity-tested rules beat value-tested rules at the same level unless the
policy says otherwise. A level whose rules do not qualify falls through to
the next one, unless the policy lets an active override shadow the levels
below it. Rules never stack within this stage.
"""

import logging
from typing import List, Optional, Tuple

from .types import (
    DEFAULT_POLICY,
    AppliedRuleRecord,
    Campaign,
    EnginePolicy,
    LineItem,
    RuleType,
    ValueRule,
)

logger = logging.getLogger(__name__)

CUSTOM_RULE_SET_NAME = "Custom"
CUSTOM_RULE_NAME = "Custom Item Discount"

Candidate = Tuple[RuleType, Optional[ValueRule], object]


def _ordered(
    quantity: List[Candidate], value: List[Candidate], policy: EnginePolicy
) -> List[Candidate]:
    if policy.prefer_quantity_rules:
        return quantity + value
    return value + quantity


def candidate_levels(
    line: LineItem, campaign: Campaign, policy: EnginePolicy
) -> List[List[Candidate]]:
    """Rule levels for ``line``, most specific first, each in precedence order."""
    gross_total = line.gross_total
    levels: List[List[Candidate]] = []

    batch = campaign.active_batch_override_for(line.batch_id)
    if batch is not None:
        levels.append(
            _ordered(
                [(RuleType.BATCH_CONFIG_QUANTITY, batch.line_quantity_rule, line.quantity)],
                [(RuleType.BATCH_CONFIG_VALUE, batch.line_value_rule, gross_total)],
                policy,
            )
        )

    override = campaign.active_override_for(line.product_id)
    if override is not None:
        levels.append(
            _ordered(
                [
                    (RuleType.PRODUCT_CONFIG_QUANTITY, override.line_quantity_rule, line.quantity),
                    (
                        RuleType.PRODUCT_CONFIG_SPECIFIC_QTY,
                        override.specific_qty_rule,
                        line.quantity,
                    ),
                ],
                [
                    (RuleType.PRODUCT_CONFIG_VALUE, override.line_value_rule, gross_total),
                    (RuleType.PRODUCT_CONFIG_UNIT_PRICE, override.unit_price_rule, line.unit_price),
                ],
                policy,
            )
        )

    levels.append(
        _ordered(
            [
                (RuleType.CAMPAIGN_DEFAULT_QUANTITY, campaign.default_quantity_rule, line.quantity),
                (
                    RuleType.CAMPAIGN_DEFAULT_SPECIFIC_QTY,
                    campaign.default_specific_qty_rule,
                    line.quantity,
                ),
            ],
            [
                (RuleType.CAMPAIGN_DEFAULT_VALUE, campaign.default_line_rule, gross_total),
                (
                    RuleType.CAMPAIGN_DEFAULT_UNIT_PRICE,
                    campaign.default_unit_price_rule,
                    line.unit_price,
                ),
            ],
            policy,
        )
    )

    if policy.override_replaces_default:
        return levels[:1]
    return levels


def candidate_rules(line: LineItem, campaign: Campaign, policy: EnginePolicy) -> List[Candidate]:
    """Rules to try for ``line`` in precedence order, with the metric each is tested on."""
    return [
        candidate for level in candidate_levels(line, campaign, policy) for candidate in level
    ]


def _custom_record(line: LineItem) -> Optional[AppliedRuleRecord]:
    amount = line.custom_discount.calculate(line.gross_total, line.quantity)
    if amount <= 0:
        return None
    return AppliedRuleRecord(
        rule_set_name=CUSTOM_RULE_SET_NAME,
        source_rule_name=CUSTOM_RULE_NAME,
        rule_type=RuleType.CUSTOM_ITEM_DISCOUNT,
        total_calculated_discount=amount,
        product_id_affected=line.product_id,
        applied_once=False,
    )


def resolve_line(
    line: LineItem, campaign: Campaign, policy: EnginePolicy = DEFAULT_POLICY
) -> Optional[AppliedRuleRecord]:
    """
    Pick the single automatic rule for ``line`` and compute its discount.

    Args:
        line: Cart line
        campaign: Active campaign
        policy: Precedence switches

    Returns:
        AppliedRuleRecord for the winning rule, or None if nothing fired
    """
    if line.custom_discount is not None and line.custom_discount.is_applicable:
        return _custom_record(line)

    for rule_type, rule, metric in candidate_rules(line, campaign, policy):
        if rule is None or not rule.qualifies(metric):
            continue

        amount = rule.calculate(line.gross_total, line.quantity, unit_price=line.unit_price)
        if amount <= 0:
            continue

        logger.debug(
            "Line %s: %s rule %r fired for %s", line.line_id, rule_type.value, rule.name, amount
        )
        return AppliedRuleRecord(
            rule_set_name=campaign.name,
            source_rule_name=rule.name,
            rule_type=rule_type,
            total_calculated_discount=amount,
            product_id_affected=line.product_id,
            applied_once=rule.apply_once,
        )

    return None
