"""
Buy-get matching across cart lines.

Rewards are computed from the quantities actually purchased, never from
values already discounted by the line stage. A per-line counter of units
not yet rewarded is threaded through the rules so two rules can never give
away the same unit, and cart lines themselves are never modified.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from .money import ZERO, clamp_money
from .types import AppliedRuleRecord, BuyGetRule, LineItem, RuleType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuyGetAllocation:
    """Reward units and discount assigned to one cart line."""

    line_index: int
    line_id: str
    units: Decimal
    amount: Decimal


@dataclass(frozen=True)
class BuyGetApplication:
    """A firing buy-get rule with its audit record and per-line allocations."""

    rule: BuyGetRule
    record: AppliedRuleRecord
    allocations: Tuple[BuyGetAllocation, ...]


def count_repetitions(rule: BuyGetRule, available_buy: Decimal) -> Decimal:
    if rule.buy_quantity <= 0:
        return Decimal("0")
    if rule.is_repeatable:
        return available_buy // rule.buy_quantity
    return Decimal("1") if available_buy >= rule.buy_quantity else Decimal("0")


def same_product_reward(rule: BuyGetRule, repetitions: Decimal, pool: Decimal) -> Decimal:
    """
    Reward units when the buy and get product are the same.

    The paid-for units are reserved out of ``pool`` first, so for ``r``
    repetitions the reward is ``min(r * get, pool - r * buy)``; the best
    ``r`` sits next to ``pool / (buy + get)`` or at ``repetitions``.
    """
    per_bundle = rule.buy_quantity + rule.get_quantity
    pivot = pool // per_bundle
    best = Decimal("0")
    for reps in (pivot, pivot + 1, repetitions):
        reps = min(reps, repetitions)
        if reps <= 0:
            continue
        best = max(best, min(reps * rule.get_quantity, pool - reps * rule.buy_quantity))
    return best


def apply_buy_get(
    lines: Sequence[LineItem],
    buy_get_rules: Sequence[BuyGetRule],
    line_records: Optional[Sequence[Optional[AppliedRuleRecord]]] = None,
    campaign_name: str = "",
) -> List[BuyGetApplication]:
    """
    Evaluate every buy-get rule, in configuration order, against the cart.

    Args:
        lines: Cart lines in input order
        buy_get_rules: Campaign buy-get rules
        line_records: Line stage result per line (aligned with ``lines``),
            used to cap rewards at each line's remaining payable value
        campaign_name: Recorded on each emitted rule record

    Returns:
        One BuyGetApplication per rule that produced a discount
    """
    if line_records is None:
        line_records = [None] * len(lines)

    remaining_units: Dict[int, Decimal] = {index: line.quantity for index, line in enumerate(lines)}
    payable: Dict[int, Decimal] = {}
    for index, line in enumerate(lines):
        record = line_records[index]
        already = record.total_calculated_discount if record is not None else ZERO
        payable[index] = max(line.gross_total - already, ZERO)

    applications: List[BuyGetApplication] = []

    for rule in buy_get_rules:
        available_buy = sum(
            (line.quantity for line in lines if line.product_id == rule.buy_product_id),
            Decimal("0"),
        )
        repetitions = count_repetitions(rule, available_buy)
        if repetitions <= 0:
            continue

        get_indexes = [
            index for index, line in enumerate(lines) if line.product_id == rule.get_product_id
        ]
        pool = sum((remaining_units[index] for index in get_indexes), Decimal("0"))

        if rule.get_product_id == rule.buy_product_id:
            reward_qty = same_product_reward(rule, repetitions, pool)
        else:
            reward_qty = min(repetitions * rule.get_quantity, pool)

        if reward_qty <= 0:
            logger.debug("Buy-get rule %s: no reward units available", rule.source_rule_name)
            continue

        allocations: List[BuyGetAllocation] = []
        to_reward = reward_qty
        for index in get_indexes:
            if to_reward <= 0:
                break
            units = min(remaining_units[index], to_reward)
            if units <= 0:
                continue

            line = lines[index]
            amount = clamp_money(rule.discount_per_unit(line.unit_price) * units, payable[index])
            remaining_units[index] -= units
            to_reward -= units
            if amount <= 0:
                continue

            payable[index] -= amount
            allocations.append(
                BuyGetAllocation(
                    line_index=index, line_id=line.line_id, units=units, amount=amount
                )
            )

        total = sum((allocation.amount for allocation in allocations), ZERO)
        if total <= 0:
            continue

        record = AppliedRuleRecord(
            rule_set_name=campaign_name,
            source_rule_name=rule.source_rule_name,
            rule_type=RuleType.BUY_GET_FREE,
            total_calculated_discount=total,
            product_id_affected=rule.get_product_id,
            applied_once=False,
        )
        applications.append(
            BuyGetApplication(rule=rule, record=record, allocations=tuple(allocations))
        )

    return applications
