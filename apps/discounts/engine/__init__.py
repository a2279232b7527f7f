"""
Promotional discount engine.

Pure Python; no Django imports. Callers build a ``DiscountContext`` (or pass
lines and a ``Campaign`` to ``process``) and get back an ``EngineResult``.
"""

from .buy_get import BuyGetAllocation, BuyGetApplication, apply_buy_get
from .cart_rules import apply_cart_rule
from .config import parse_batch_override, parse_campaign, parse_line_item, parse_value_rule
from .engine import DiscountEngine, process
from .line_rules import resolve_line
from .result import aggregate, build_line_results
from .types import (
    DEFAULT_POLICY,
    AppliedRuleRecord,
    BatchOverride,
    BuyGetRule,
    Campaign,
    CustomDiscount,
    DiscountContext,
    DiscountKind,
    EnginePolicy,
    EngineResult,
    LineItem,
    LineResult,
    ProductOverride,
    RuleType,
    ValueRule,
)

__all__ = [
    "DEFAULT_POLICY",
    "AppliedRuleRecord",
    "BatchOverride",
    "BuyGetAllocation",
    "BuyGetApplication",
    "BuyGetRule",
    "Campaign",
    "CustomDiscount",
    "DiscountContext",
    "DiscountEngine",
    "DiscountKind",
    "EnginePolicy",
    "EngineResult",
    "LineItem",
    "LineResult",
    "ProductOverride",
    "RuleType",
    "ValueRule",
    "aggregate",
    "apply_buy_get",
    "apply_cart_rule",
    "build_line_results",
    "parse_batch_override",
    "parse_campaign",
    "parse_line_item",
    "parse_value_rule",
    "process",
    "resolve_line",
]
