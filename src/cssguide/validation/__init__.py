from cssguide.validation.aggregate import Report, aggregate
from cssguide.validation.base import Checker, Rule
from cssguide.validation.registry import PIPELINE_RULES, RuleRegistry, default_registry
from cssguide.validation.rules import ALL_RULES

__all__ = [
    "ALL_RULES",
    "PIPELINE_RULES",
    "Checker",
    "Report",
    "Rule",
    "RuleRegistry",
    "aggregate",
    "default_registry",
]
