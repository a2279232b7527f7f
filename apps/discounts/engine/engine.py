"""
Discount engine entry point.

``process(context) = aggregate(cart_rule(buy_get(resolve_line(items, campaign))))``

The engine is a pure function of the cart and the campaign: it performs no
I/O, keeps no state between calls, and never raises to its caller.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from .buy_get import apply_buy_get
from .cart_rules import apply_cart_rule
from .line_rules import resolve_line
from .result import aggregate, build_line_results
from .types import DEFAULT_POLICY, Campaign, DiscountContext, EnginePolicy, EngineResult, LineItem

logger = logging.getLogger(__name__)


class DiscountEngine:
    """
    Engine for calculating promotional discounts on a cart.

    Handles:
    - Custom, batch-override, product-override and campaign-default line rules
    - Buy-get rewards across lines
    - Global cart rules on the net subtotal
    - The ordered applied-rules summary used by receipts
    """

    def __init__(self, policy: Optional[EnginePolicy] = None):
        """
        Initialize the engine.

        Args:
            policy: Precedence switches (default: quantity rules first,
                unqualified overrides fall through to campaign defaults)
        """
        self.policy = policy or DEFAULT_POLICY

    def process(self, context: DiscountContext) -> EngineResult:
        """
        Calculate every discount for the cart in ``context``.

        Returns a zero-valued result (no summary) when there is no active
        campaign or no items.
        """
        items = tuple(context.items)
        campaign = context.campaign

        if campaign is None or not campaign.is_active or not items:
            return self.empty_result(items)

        try:
            return self._calculate(items, campaign)
        except (ArithmeticError, TypeError, ValueError, AttributeError):
            logger.error(
                "Discount calculation failed for campaign %r", campaign.name, exc_info=True
            )
            return self.empty_result(items)

    def empty_result(self, items) -> EngineResult:
        return aggregate(build_line_results(items, [None] * len(items), ()))

    def _calculate(self, items, campaign: Campaign) -> EngineResult:
        line_records = [resolve_line(line, campaign, self.policy) for line in items]

        applications = apply_buy_get(items, campaign.buy_get_rules, line_records, campaign.name)
        line_results = build_line_results(items, line_records, applications)

        net_subtotal = sum((line.net_total for line in line_results), Decimal("0"))
        total_quantity = sum((line.quantity for line in items), Decimal("0"))
        line_discount_fired = any(line.total_discount > 0 for line in line_results)

        cart_record = apply_cart_rule(
            net_subtotal,
            total_quantity,
            campaign,
            self.policy,
            line_discount_fired=line_discount_fired,
        )

        result = aggregate(line_results, applications, cart_record)
        logger.debug(
            "Campaign %r: item discount %s, cart discount %s, %d rule(s) applied",
            campaign.name,
            result.total_item_discount,
            result.total_cart_discount,
            len(result.applied_rules),
        )
        return result


def process(
    items: Iterable[LineItem],
    campaign: Optional[Campaign],
    policy: Optional[EnginePolicy] = None,
) -> EngineResult:
    """Shortcut for ``DiscountEngine(policy).process(DiscountContext(items, campaign))``."""
    return DiscountEngine(policy).process(DiscountContext(items=tuple(items), campaign=campaign))
