"""Taptik - Configuration portability for AI-assisted IDEs.

Sanitizes, converts, describes, packages and validates developer-tool
configuration (settings, agents, commands, MCP servers, steering rules,
instructions) so it can be shared across Claude Code, Kiro and Cursor.
"""

__version__ = "1.0.0"
__author__ = "Equitania Software GmbH"
__email__ = "info@equitania.de"

__all__ = [
    "__version__",
    "Platform",
    "SanitizationEngine",
    "SanitizationResult",
    "MetadataGenerator",
    "CloudMetadata",
    "ConversionEngine",
    "ConversionResult",
    "Packager",
    "TaptikPackage",
    "ValidationEngine",
    "ValidationResult",
    "PortabilityPipeline",
    "PipelineResult",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "Platform":
        from taptik.context import Platform

        return Platform
    if name in ("SanitizationEngine", "SanitizationResult"):
        from taptik import sanitize

        return getattr(sanitize, name)
    if name in ("MetadataGenerator", "CloudMetadata"):
        from taptik import metadata

        return getattr(metadata, name)
    if name in ("ConversionEngine", "ConversionResult"):
        from taptik import convert

        return getattr(convert, name)
    if name in ("Packager", "TaptikPackage"):
        from taptik import package

        return getattr(package, name)
    if name in ("ValidationEngine", "ValidationResult"):
        from taptik import validate

        return getattr(validate, name)
    if name in ("PortabilityPipeline", "PipelineResult"):
        from taptik import pipeline

        return getattr(pipeline, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
