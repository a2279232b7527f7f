"""
Cart-level rule evaluation on the net subtotal.
"""

import logging
from typing import Optional

from .money import ZERO
from .types import DEFAULT_POLICY, AppliedRuleRecord, Campaign, EnginePolicy, RuleType

logger = logging.getLogger(__name__)


def apply_cart_rule(
    net_subtotal,
    total_quantity,
    campaign: Optional[Campaign],
    policy: EnginePolicy = DEFAULT_POLICY,
    line_discount_fired: bool = False,
) -> Optional[AppliedRuleRecord]:
    """
    Evaluate the campaign's global cart rules; at most one fires.

    Args:
        net_subtotal: Cart subtotal after line and buy-get discounts
        total_quantity: Units in the cart
        campaign: Active campaign, or None
        policy: Precedence switches
        line_discount_fired: Whether any line or buy-get discount fired;
            one-time-per-transaction campaigns skip the cart rule then

    Returns:
        AppliedRuleRecord tagged ``campaign_global_value`` or
        ``campaign_global_quantity``, or None
    """
    if campaign is None:
        return None

    if campaign.is_one_time_per_transaction and line_discount_fired:
        logger.debug("Campaign %r is one-time per transaction; cart rule skipped", campaign.name)
        return None

    net_subtotal = max(net_subtotal, ZERO)
    candidates = [
        (RuleType.CAMPAIGN_GLOBAL_QUANTITY, campaign.global_cart_quantity_rule, total_quantity),
        (RuleType.CAMPAIGN_GLOBAL_VALUE, campaign.global_cart_rule, net_subtotal),
    ]
    if not policy.prefer_quantity_rules:
        candidates.reverse()

    for rule_type, rule, metric in candidates:
        if rule is None or not rule.qualifies(metric):
            continue

        amount = rule.calculate(net_subtotal, total_quantity)
        if amount <= 0:
            continue

        return AppliedRuleRecord(
            rule_set_name=campaign.name,
            source_rule_name=rule.name,
            rule_type=rule_type,
            total_calculated_discount=amount,
            product_id_affected=None,
            applied_once=rule.apply_once,
        )

    return None
