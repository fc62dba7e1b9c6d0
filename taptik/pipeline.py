# Taptik Portability Pipeline
# Sanitize, convert, describe, package and validate in one pass

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from taptik.batch import BatchItem, run_batch
from taptik.config.schema import TaptikConfig
from taptik.context import Platform, detect_source_platform
from taptik.convert.engine import ConversionEngine, ConversionOptions, ConversionResult
from taptik.exceptions import PackagingError
from taptik.metadata.generator import MetadataGenerator
from taptik.metadata.models import CloudMetadata
from taptik.package.packager import PackageOptions, Packager, TaptikPackage
from taptik.sanitize.engine import SanitizationCache, SanitizationEngine, SanitizationResult, SecurityLevel
from taptik.validate.cache import ValidationCache
from taptik.validate.engine import ValidationEngine, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Per-run options for the conversion and packaging stages."""

    conversion: ConversionOptions = field(default_factory=ConversionOptions)
    package: PackageOptions = field(default_factory=PackageOptions)


@dataclass
class PipelineResult:
    """Outcome of every stage of one pipeline run."""

    sanitization: SanitizationResult | None = None
    conversion: ConversionResult | None = None
    metadata: CloudMetadata | None = None
    package: TaptikPackage | None = None
    validation: ValidationResult | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if every stage ran and the package validated."""
        return not self.errors and self.validation is not None and self.validation.is_valid

    @property
    def upload_ready(self) -> bool:
        """Check if the package may be uploaded (valid and not blocked)."""
        return (
            self.success
            and self.sanitization is not None
            and self.sanitization.security_level != SecurityLevel.BLOCKED
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "uploadReady": self.upload_ready,
            "errors": list(self.errors),
            "sanitization": self.sanitization.to_dict() if self.sanitization else None,
            "conversion": self.conversion.to_dict() if self.conversion else None,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "package": self.package.to_dict() if self.package else None,
            "validation": self.validation.to_dict() if self.validation else None,
        }


class PortabilityPipeline:
    """
    Runs a configuration context through every stage.

    Order is sanitize, convert (only when the target differs from the
    source), metadata, package, validate. The input context is never
    modified.
    """

    def __init__(
        self,
        sanitizer: SanitizationEngine | None = None,
        converter: ConversionEngine | None = None,
        metadata_generator: MetadataGenerator | None = None,
        packager: Packager | None = None,
        validator: ValidationEngine | None = None,
        *,
        max_workers: int = 4,
    ):
        self.sanitizer = sanitizer or SanitizationEngine()
        self.converter = converter or ConversionEngine()
        self.metadata_generator = metadata_generator or MetadataGenerator()
        self.packager = packager or Packager()
        self.validator = validator or ValidationEngine()
        self.max_workers = max_workers

    @classmethod
    def from_config(cls, config: TaptikConfig) -> PortabilityPipeline:
        """Build a pipeline whose engines follow the loaded configuration."""
        return cls(
            sanitizer=SanitizationEngine(
                SanitizationCache(max_entries=config.cache.sanitization_max_entries),
                cache_key_length=config.cache.sanitization_key_length,
                max_workers=config.batch.max_workers,
            ),
            converter=ConversionEngine(min_compatibility_score=config.conversion.min_compatibility_score),
            validator=ValidationEngine(
                ValidationCache(ttl_seconds=config.cache.validation_ttl_seconds),
                max_size=config.limits.max_package_size,
                premium_max_size=config.limits.premium_max_package_size,
                max_workers=config.batch.max_workers,
            ),
            max_workers=config.batch.max_workers,
        )

    def run(
        self,
        context: dict[str, Any],
        target_platform: Platform | str | None = None,
        is_premium: bool = False,
        options: PipelineOptions | None = None,
    ) -> PipelineResult:
        """
        Run every stage for one context.

        Args:
            context: Configuration context from a collector.
            target_platform: Convert to this platform first when it differs
                from the source.
            is_premium: Validate against the premium size ceiling.
            options: Conversion and packaging options.

        Returns:
            PipelineResult. A conversion failure or PackagingError stops the
            run and is recorded in ``errors``.
        """
        options = options or PipelineOptions()
        result = PipelineResult()

        result.sanitization = self.sanitizer.sanitize(context)
        working = result.sanitization.sanitized_data
        if result.sanitization.is_blocked:
            logger.warning("Context contains critical secrets; package will not be upload-ready")

        if target_platform is not None:
            target = Platform.parse(target_platform)
            source = detect_source_platform(working)
            if target is None or target != source:
                result.conversion = self.converter.convert(working, target_platform, options.conversion)
                if not result.conversion.success or result.conversion.context is None:
                    result.errors.append(result.conversion.error or "Conversion failed")
                    return result
                working = result.conversion.context

        result.metadata = self.metadata_generator.generate(working)

        try:
            result.package = self.packager.package(result.metadata, working, options.package)
        except PackagingError as e:
            logger.warning("Packaging failed: %s", e)
            result.errors.append(str(e))
            return result

        result.validation = self.validator.validate_for_upload(result.package, is_premium)
        return result

    def run_many(
        self,
        contexts: Sequence[dict[str, Any]],
        target_platform: Platform | str | None = None,
        is_premium: bool = False,
        options: PipelineOptions | None = None,
    ) -> list[BatchItem[PipelineResult]]:
        """Run the pipeline for several contexts; one failure never affects the others."""
        return run_batch(
            lambda ctx: self.run(ctx, target_platform, is_premium, options),
            contexts,
            max_workers=self.max_workers,
        )
