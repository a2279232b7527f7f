"""
Discount services for the POS.

Bridges persisted campaigns and the pure discount engine:
- Campaign lookup (explicit or active default)
- Cart line conversion
- Engine policy from settings
"""

import logging
from typing import Iterable, List, Mapping, Optional

from django.conf import settings

from apps.discounts.engine import (
    DiscountContext,
    DiscountEngine,
    EnginePolicy,
    EngineResult,
    LineItem,
    parse_line_item,
)
from apps.discounts.models import DiscountSet

logger = logging.getLogger(__name__)


def get_engine_policy() -> EnginePolicy:
    """
    Build the engine policy from the ``DISCOUNT_ENGINE`` setting.

    Returns:
        EnginePolicy with defaults for any missing key
    """
    config = getattr(settings, "DISCOUNT_ENGINE", {}) or {}
    return EnginePolicy(
        prefer_quantity_rules=config.get("PREFER_QUANTITY_RULES", True),
        override_replaces_default=config.get("OVERRIDE_REPLACES_DEFAULT", False),
    )


def build_line_items(raw_items: Iterable[Mapping]) -> List[LineItem]:
    """Convert validated cart lines (camelCase dicts) into engine line items."""
    return [parse_line_item(item) for item in raw_items]


class DiscountCalculationService:
    """
    Service for calculating cart discounts against a stored campaign.

    Handles:
    - Resolving the campaign to use
    - Running the discount engine
    - Logging the outcome for audit
    """

    def __init__(self, policy: Optional[EnginePolicy] = None):
        """
        Initialize the service.

        Args:
            policy: Engine policy (default: read from settings)
        """
        self.engine = DiscountEngine(policy or get_engine_policy())

    def get_discount_set(self, discount_set_id=None) -> Optional[DiscountSet]:
        """
        Get the campaign to apply.

        Args:
            discount_set_id: Campaign UUID (optional)

        Returns:
            DiscountSet instance or None when no default campaign exists

        Raises:
            DiscountSet.DoesNotExist: If ``discount_set_id`` is unknown
        """
        if discount_set_id is None:
            return DiscountSet.get_active_default()

        return DiscountSet.objects.prefetch_related(
            "product_configurations", "batch_configurations"
        ).get(id=discount_set_id)

    def calculate(
        self, items: Iterable[LineItem], discount_set: Optional[DiscountSet] = None
    ) -> EngineResult:
        """
        Calculate discounts for a cart.

        Args:
            items: Engine line items
            discount_set: Campaign to apply (None means no promotions)

        Returns:
            EngineResult
        """
        items = tuple(items)
        campaign = discount_set.to_campaign() if discount_set is not None else None

        result = self.engine.process(DiscountContext(items=items, campaign=campaign))

        logger.info(
            "Discounts calculated for %d line(s) with campaign %s: total discount %s",
            len(items),
            discount_set.name if discount_set is not None else "none",
            result.total_discount,
        )
        return result
