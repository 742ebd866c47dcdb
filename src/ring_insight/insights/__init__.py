"""Recommendation rules and the kernel that runs them."""

from .aggregator import RecommendationAggregator
from .context import SIGNATURE_BUDGETS, RuleContext
from .kernel import DiagnosticKernel
from .models import Category, DiagnosticResult, Priority, Recommendation
from .protocols import Rule
from .rules import get_default_rules

__all__ = [
    "DiagnosticKernel",
    "DiagnosticResult",
    "Recommendation",
    "RecommendationAggregator",
    "Priority",
    "Category",
    "Rule",
    "RuleContext",
    "SIGNATURE_BUDGETS",
    "get_default_rules",
]
