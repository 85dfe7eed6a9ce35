"""Automatic verification of submitted hazard reports."""

from .base import ReportValidationError, VerificationResult, VerificationStrategy
from .engine import HazardVerificationEngine, build_strategy
from .rule_chain import RuleChainStrategy
from .rules import RuleSettings
from .scoring import ScoringStrategy

__all__ = [
    "HazardVerificationEngine",
    "ReportValidationError",
    "RuleChainStrategy",
    "RuleSettings",
    "ScoringStrategy",
    "VerificationResult",
    "VerificationStrategy",
    "build_strategy",
]
