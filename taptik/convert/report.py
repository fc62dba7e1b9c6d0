# Taptik Conversion Report
# Human-readable summary of a conversion outcome

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from taptik.context import Platform, as_dict, platform_section
from taptik.convert.converters import Approximation
from taptik.convert.engine import CompatibilityScore, ConversionResult

RECOMMEND_UNSUPPORTED = "Review unsupported features and consider manual migration"
RECOMMEND_APPROXIMATED = "Test approximated features thoroughly after conversion"
RECOMMEND_WARNINGS = "Address warnings before deploying converted context"
RECOMMEND_FAILED = "Conversion failed - check error messages and retry"


def data_loss_severity(unsupported: int) -> str:
    """none (0), low (<=2), medium (<=5), high otherwise."""
    if unsupported == 0:
        return "none"
    if unsupported <= 2:
        return "low"
    if unsupported <= 5:
        return "medium"
    return "high"


@dataclass
class ConversionReport:
    """Feature mapping, compatibility and data-loss summary for one conversion."""

    source: str | None
    target: str
    success: bool
    direct: dict[str, str] = field(default_factory=dict)
    approximated: list[Approximation] = field(default_factory=list)
    unsupported: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    compatibility: CompatibilityScore | None = None
    data_loss: str = "none"
    recommendations: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_result(cls, result: ConversionResult, original: dict[str, Any] | None = None) -> ConversionReport:
        """
        Build a report from a conversion result.

        Args:
            result: Conversion result.
            original: Source context; when given, direct mappings are limited
                to the fields it actually populated.

        Returns:
            ConversionReport
        """
        direct = {feature: feature for feature in result.supported_features}
        source = Platform.parse(result.source) if result.source else None
        if original is not None and source is not None:
            present = {
                key
                for scope in platform_section(original, source).values()
                for key, value in as_dict(scope).items()
                if value
            }
            direct = {feature: feature for feature in result.supported_features if feature in present}

        unsupported = list(result.unsupported_features)
        recommendations = []
        if unsupported:
            recommendations.append(RECOMMEND_UNSUPPORTED)
        if result.approximations:
            recommendations.append(RECOMMEND_APPROXIMATED)
        if result.warnings:
            recommendations.append(RECOMMEND_WARNINGS)
        if not result.success:
            recommendations.append(RECOMMEND_FAILED)

        return cls(
            source=result.source,
            target=result.target,
            success=result.success,
            direct=direct,
            approximated=list(result.approximations),
            unsupported=unsupported,
            warnings=list(result.warnings),
            compatibility=result.compatibility,
            data_loss=data_loss_severity(len(unsupported)),
            recommendations=recommendations,
            error=result.error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "success": self.success,
            "featureMapping": {
                "direct": dict(self.direct),
                "approximated": [a.to_dict() for a in self.approximated],
                "unsupported": list(self.unsupported),
            },
            "compatibility": self.compatibility.to_dict() if self.compatibility else None,
            "dataLoss": self.data_loss,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
            "error": self.error,
        }

    def render_text(self) -> str:
        lines = [
            f"Conversion: {self.source or 'unknown'} -> {self.target}",
            f"Status: {'success' if self.success else 'failed'}",
        ]
        if self.error:
            lines.append(f"Error: {self.error}")
        if self.compatibility:
            lines.append(f"Compatibility: {self.compatibility.score}% ({self.compatibility.rating})")
            lines.append(f"Reversible: {'yes' if self.compatibility.reversible else 'no'}")
        lines.append(f"Data loss: {self.data_loss}")

        if self.direct:
            lines.append("")
            lines.append("Direct mappings:")
            lines.extend(f"  {src} -> {dst}" for src, dst in self.direct.items())
        if self.approximated:
            lines.append("")
            lines.append("Approximations:")
            lines.extend(
                f"  {a.source_feature} -> {a.target_feature} ({a.confidence.value})" for a in self.approximated
            )
        if self.unsupported:
            lines.append("")
            lines.append("Unsupported:")
            lines.extend(f"  {feature}" for feature in self.unsupported)
        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)
        if self.recommendations:
            lines.append("")
            lines.append("Recommendations:")
            lines.extend(f"  - {r}" for r in self.recommendations)
        return "\n".join(lines)

    def render_markdown(self) -> str:
        lines = [
            f"# Conversion Report: {self.source or 'unknown'} → {self.target}",
            "",
            f"**Status:** {'Success' if self.success else 'Failed'}",
        ]
        if self.error:
            lines.append(f"**Error:** {self.error}")
        if self.compatibility:
            lines.append(f"**Compatibility:** {self.compatibility.score}% ({self.compatibility.rating})")
        lines.append(f"**Data loss:** {self.data_loss}")

        if self.direct or self.approximated:
            lines.extend(["", "## Feature Mapping", "", "| Source | Target | Mapping |", "| --- | --- | --- |"])
            lines.extend(f"| {src} | {dst} | direct |" for src, dst in self.direct.items())
            lines.extend(
                f"| {a.source_feature} | {a.target_feature} | {a.confidence.value} |" for a in self.approximated
            )
        if self.unsupported:
            lines.extend(["", "## Unsupported Features", ""])
            lines.extend(f"- {feature}" for feature in self.unsupported)
        if self.warnings:
            lines.extend(["", "## Warnings", ""])
            lines.extend(f"- {w}" for w in self.warnings)
        if self.recommendations:
            lines.extend(["", "## Recommendations", ""])
            lines.extend(f"- {r}" for r in self.recommendations)
        return "\n".join(lines) + "\n"
