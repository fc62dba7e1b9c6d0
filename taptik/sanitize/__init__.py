# Taptik Sanitization Module
# Sensitive-data detection and redaction for configuration trees

from taptik.sanitize.engine import (
    DetailedFinding,
    SanitizationCache,
    SanitizationEngine,
    SanitizationReport,
    SanitizationResult,
    SecurityLevel,
    SeverityBreakdown,
)
from taptik.sanitize.rules import RULES, Category, SanitizationRule, Severity, classify

__all__ = [
    # Engine
    "SanitizationEngine",
    "SanitizationCache",
    "SanitizationResult",
    "SanitizationReport",
    "SeverityBreakdown",
    "DetailedFinding",
    "SecurityLevel",
    # Rules
    "RULES",
    "Category",
    "Severity",
    "SanitizationRule",
    "classify",
]
