# Taptik Conversion Module
# Cross-platform conversion of configuration contexts

from taptik.convert.converters import (
    DEFAULT_CONVERTERS,
    Approximation,
    BaseConverter,
    ClaudeToCursorConverter,
    ClaudeToKiroConverter,
    Confidence,
    ConverterOutput,
    FeatureMapping,
    KiroToClaudeConverter,
)
from taptik.convert.engine import CompatibilityScore, ConversionEngine, ConversionOptions, ConversionResult
from taptik.convert.registry import ConverterNotFound, ConverterRegistry
from taptik.convert.report import ConversionReport

__all__ = [
    # Engine
    "ConversionEngine",
    "ConversionOptions",
    "ConversionResult",
    "CompatibilityScore",
    # Registry
    "ConverterRegistry",
    "ConverterNotFound",
    # Converters
    "BaseConverter",
    "ClaudeToKiroConverter",
    "KiroToClaudeConverter",
    "ClaudeToCursorConverter",
    "DEFAULT_CONVERTERS",
    "ConverterOutput",
    "FeatureMapping",
    "Approximation",
    "Confidence",
    # Report
    "ConversionReport",
]
