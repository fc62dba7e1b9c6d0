# Taptik Conversion Engine
# Cross-platform conversion with compatibility scoring

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from taptik.context import Platform, as_dict, detect_source_platform, is_empty, platform_section, utc_now_iso
from taptik.convert.converters import Approximation, FeatureMapping
from taptik.convert.registry import ConverterNotFound, ConverterRegistry

logger = logging.getLogger(__name__)

DEFAULT_MIN_COMPATIBILITY_SCORE = 60


@dataclass
class ConversionOptions:
    """Options for a single conversion."""

    validate_compatibility: bool = False
    force: bool = False


@dataclass
class CompatibilityScore:
    """How well a conversion preserves the source features."""

    score: int
    direct: int
    approximated: int
    unsupported: int

    @property
    def total(self) -> int:
        return self.direct + self.approximated + self.unsupported

    @property
    def rating(self) -> str:
        if self.score >= 90:
            return "excellent"
        if self.score >= 70:
            return "good"
        if self.score >= 50:
            return "fair"
        return "poor"

    @property
    def reversible(self) -> bool:
        """No losses and fewer than 30% of features approximated."""
        return self.unsupported == 0 and self.approximated < self.total * 0.3

    @classmethod
    def compute(cls, direct: int, approximated: int, unsupported: int) -> CompatibilityScore:
        """Score is round((direct + 0.7 * approximated) / total * 100), 0 when total is 0."""
        total = direct + approximated + unsupported
        score = round((direct + approximated * 0.7) / total * 100) if total else 0
        return cls(score=score, direct=direct, approximated=approximated, unsupported=unsupported)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "rating": self.rating,
            "direct": self.direct,
            "approximated": self.approximated,
            "unsupported": self.unsupported,
            "total": self.total,
            "reversible": self.reversible,
        }


@dataclass
class ConversionResult:
    """Result of converting a context to a target platform."""

    success: bool
    target: str
    source: str | None = None
    context: dict[str, Any] | None = None
    error: str | None = None
    unsupported_features: list[str] = field(default_factory=list)
    approximations: list[Approximation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    supported_features: list[str] = field(default_factory=list)
    compatibility: CompatibilityScore | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "source": self.source,
            "target": self.target,
            "context": self.context,
            "error": self.error,
            "unsupportedFeatures": list(self.unsupported_features),
            "approximations": [a.to_dict() for a in self.approximations],
            "warnings": list(self.warnings),
            "supportedFeatures": list(self.supported_features),
            "compatibility": self.compatibility.to_dict() if self.compatibility else None,
        }


class ConversionEngine:
    """
    Converts configuration contexts between platforms.

    Converters are looked up by ordered (source, target) pair in the
    registry. Input contexts are never modified.
    """

    def __init__(
        self,
        registry: ConverterRegistry | None = None,
        *,
        min_compatibility_score: int = DEFAULT_MIN_COMPATIBILITY_SCORE,
    ):
        """
        Initialize conversion engine.

        Args:
            registry: Converter registry (defaults to the built-in converters).
            min_compatibility_score: Score below which a validated conversion
                fails unless forced.
        """
        self.registry = registry or ConverterRegistry.with_defaults()
        self.min_compatibility_score = min_compatibility_score

    def convert(
        self,
        context: dict[str, Any],
        target: Platform | str,
        options: ConversionOptions | None = None,
    ) -> ConversionResult:
        """
        Convert a context to a target platform.

        Args:
            context: Configuration context.
            target: Target platform.
            options: Compatibility validation and force flags.

        Returns:
            ConversionResult. Failures are reported on the result, never raised.
        """
        options = options or ConversionOptions()
        target_platform = Platform.parse(target)
        target_name = target_platform.value if target_platform else str(target)
        if target_platform is None:
            return ConversionResult(success=False, target=target_name, error=f"Unsupported target platform: {target}")

        source = detect_source_platform(context)
        if source is None:
            return ConversionResult(
                success=False,
                target=target_name,
                error="Could not determine source platform from context",
            )

        if source == target_platform:
            return ConversionResult(
                success=True,
                source=source.value,
                target=target_name,
                context=copy.deepcopy(context),
                warnings=["Source and target platforms are the same"],
                supported_features=extract_supported_features(platform_section(context, source)),
            )

        converter = self.registry.get(source, target_platform)
        if isinstance(converter, ConverterNotFound):
            logger.debug(converter.message)
            return ConversionResult(success=False, source=source.value, target=target_name, error=converter.message)

        output = converter.convert(platform_section(context, source))
        supported = extract_supported_features(output.data)
        compatibility = CompatibilityScore.compute(
            direct=len(supported),
            approximated=len(output.approximations),
            unsupported=len(output.unsupported_features),
        )

        result = ConversionResult(
            success=True,
            source=source.value,
            target=target_name,
            unsupported_features=list(output.unsupported_features),
            approximations=list(output.approximations),
            warnings=list(output.warnings),
            supported_features=supported,
            compatibility=compatibility,
        )

        if (
            options.validate_compatibility
            and compatibility.score < self.min_compatibility_score
            and not options.force
        ):
            result.success = False
            result.error = (
                f"Context is not compatible with {target_name} "
                f"(compatibility score: {compatibility.score}%). Use force to override"
            )
            result.warnings.append(f"Compatibility score: {compatibility.score}%")
            return result

        result.context = self._build_context(context, source, target_platform, output.data)
        logger.debug(
            "Converted %s -> %s (score %d%%, %d approximations, %d unsupported)",
            source.value,
            target_name,
            compatibility.score,
            len(output.approximations),
            len(output.unsupported_features),
        )
        return result

    def convert_chain(
        self,
        context: dict[str, Any],
        platforms: list[Platform | str],
        options: ConversionOptions | None = None,
    ) -> list[ConversionResult]:
        """
        Convert through a sequence of platforms.

        The first platform is the starting point; each step's output feeds
        the next step. The chain stops at the first failure.

        Returns:
            Results of every step attempted, including the failing one.
        """
        results: list[ConversionResult] = []
        current = context
        for target in platforms[1:]:
            result = self.convert(current, target, options)
            results.append(result)
            if not result.success or result.context is None:
                break
            current = result.context
        return results

    def check_compatibility(self, context: dict[str, Any], target: Platform | str) -> CompatibilityScore | None:
        """Score a conversion without failing on low compatibility."""
        result = self.convert(context, target, ConversionOptions(force=True))
        return result.compatibility

    def is_conversion_available(self, source: Platform | str, target: Platform | str) -> bool:
        src, tgt = Platform.parse(source), Platform.parse(target)
        if src is None or tgt is None:
            return False
        return src == tgt or self.registry.has_converter(src, tgt)

    def available_conversions(self, source: Platform | str) -> list[Platform]:
        src = Platform.parse(source)
        return self.registry.targets_for(src) if src else []

    def feature_mapping(self, source: Platform | str, target: Platform | str) -> FeatureMapping | None:
        src, tgt = Platform.parse(source), Platform.parse(target)
        if src is None or tgt is None:
            return None
        converter = self.registry.get(src, tgt)
        return None if isinstance(converter, ConverterNotFound) else converter.mapping

    def _build_context(
        self,
        context: dict[str, Any],
        source: Platform,
        target: Platform,
        section: dict[str, Any],
    ) -> dict[str, Any]:
        converted = copy.deepcopy({k: v for k, v in context.items() if k != "data"})
        converted["data"] = {target.data_key: section}
        converted["sourceIde"] = target.value
        metadata = dict(as_dict(context.get("metadata")))
        metadata["platforms"] = [target.value]
        metadata["conversion"] = {"source": source.value, "target": target.value, "timestamp": utc_now_iso()}
        converted["metadata"] = metadata
        return converted


def extract_supported_features(section: dict[str, Any]) -> list[str]:
    """Names of the non-empty top-level fields across the scopes of a platform section."""
    features: list[str] = []
    for scope in section.values():
        for key, value in as_dict(scope).items():
            if not is_empty(value) and key not in features:
                features.append(key)
    return features
