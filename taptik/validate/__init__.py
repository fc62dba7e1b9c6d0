# Taptik Validation Module
# Upload-readiness validation of packages

from taptik.validate.cache import ValidationCache
from taptik.validate.engine import (
    FeatureSupport,
    SizeLimit,
    ValidationEngine,
    ValidationReport,
    ValidationResult,
    estimate_processing_time,
)

__all__ = [
    # Engine
    "ValidationEngine",
    "ValidationResult",
    "ValidationReport",
    "SizeLimit",
    "FeatureSupport",
    "estimate_processing_time",
    # Cache
    "ValidationCache",
]
