"""
Aggregation of stage outputs into an ``EngineResult``.

The applied-rules summary order drives receipt and POS display: line rules
in input line order, then buy-get rules in configuration order, then the
cart rule.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from .buy_get import BuyGetApplication
from .money import ZERO, clamp_money
from .types import AppliedRuleRecord, EngineResult, LineItem, LineResult


def build_line_results(
    lines: Sequence[LineItem],
    line_records: Sequence[Optional[AppliedRuleRecord]],
    buy_get_applications: Sequence[BuyGetApplication],
) -> Tuple[LineResult, ...]:
    """Combine each line's automatic rule with its buy-get allocations."""
    extra: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    applied: Dict[int, List[AppliedRuleRecord]] = defaultdict(list)
    for application in buy_get_applications:
        for allocation in application.allocations:
            extra[allocation.line_index] += allocation.amount
            applied[allocation.line_index].append(application.record)

    results = []
    for index, line in enumerate(lines):
        record = line_records[index]
        auto_amount = record.total_calculated_discount if record is not None else ZERO
        results.append(
            LineResult(
                line_id=line.line_id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
                total_discount=clamp_money(auto_amount + extra[index], line.gross_total),
                auto_rule_applied=record,
                buy_get_rules_applied=tuple(applied[index]),
                batch_id=line.batch_id,
            )
        )
    return tuple(results)


def aggregate(
    line_results: Sequence[LineResult],
    buy_get_applications: Sequence[BuyGetApplication] = (),
    cart_record: Optional[AppliedRuleRecord] = None,
) -> EngineResult:
    """
    Build the final result.

    Args:
        line_results: Output of ``build_line_results``
        buy_get_applications: Firing buy-get rules in configuration order
        cart_record: Cart rule record, if one fired

    Returns:
        EngineResult
    """
    total_item_discount = sum((line.total_discount for line in line_results), ZERO)
    total_cart_discount = cart_record.total_calculated_discount if cart_record else ZERO

    summary: List[AppliedRuleRecord] = [
        line.auto_rule_applied for line in line_results if line.auto_rule_applied is not None
    ]
    summary.extend(application.record for application in buy_get_applications)
    if cart_record is not None:
        summary.append(cart_record)

    return EngineResult(
        line_items=tuple(line_results),
        total_item_discount=total_item_discount,
        total_cart_discount=total_cart_discount,
        applied_rules=tuple(summary),
    )
