# Taptik Validation Engine
# Upload-readiness checks, quality scoring and validation caching

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taptik.batch import BatchItem, run_batch
from taptik.context import Platform, as_dict, as_list, iter_scopes, scope_records
from taptik.metadata.models import PLACEHOLDER_CHECKSUM
from taptik.package.packager import TaptikPackage
from taptik.utils.hashing import canonical_json, json_size
from taptik.validate import rules
from taptik.validate.cache import ValidationCache

logger = logging.getLogger(__name__)


@dataclass
class SizeLimit:
    """Package size against the active ceiling."""

    current: int = 0
    maximum: int = rules.DEFAULT_MAX_SIZE
    within_limit: bool = True
    percentage: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "maximum": self.maximum,
            "withinLimit": self.within_limit,
            "percentage": self.percentage,
        }


@dataclass
class FeatureSupport:
    """Declared features split by whether the platforms know them."""

    ide: str = ""
    supported: list[str] = field(default_factory=list)
    unsupported: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"ide": self.ide, "supported": list(self.supported), "unsupported": list(self.unsupported)}


@dataclass
class ValidationResult:
    """Outcome of validating a package for upload."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cloud_compatible: bool = True
    schema_compliant: bool = True
    size_limit: SizeLimit = field(default_factory=SizeLimit)
    feature_support: FeatureSupport = field(default_factory=FeatureSupport)
    recommendations: list[str] = field(default_factory=list)
    validation_score: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "cloudCompatible": self.cloud_compatible,
            "schemaCompliant": self.schema_compliant,
            "sizeLimit": self.size_limit.to_dict(),
            "featureSupport": self.feature_support.to_dict(),
            "recommendations": list(self.recommendations),
            "validationScore": self.validation_score,
        }


@dataclass
class ValidationReport:
    """Validation result plus processing metrics."""

    result: ValidationResult
    metrics: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result.to_dict(), "metrics": dict(self.metrics)}


class _Check:
    """Mutable state shared by the checks of one validation run."""

    def __init__(self, pkg: dict[str, Any], is_premium: bool, max_size: int):
        self.pkg = pkg
        self.is_premium = is_premium
        self.result = ValidationResult(size_limit=SizeLimit(maximum=max_size))
        self.recommendations: list[str] = []

    @property
    def metadata(self) -> dict[str, Any]:
        return as_dict(self.pkg.get("metadata"))

    @property
    def counts(self) -> dict[str, Any]:
        return as_dict(self.metadata.get("componentCount"))

    @property
    def size(self) -> float:
        return _number(self.pkg.get("size")) or 0

    def error(self, message: str, *, schema: bool = False) -> None:
        self.result.errors.append(message)
        if schema:
            self.result.schema_compliant = False

    def warn(self, message: str) -> None:
        self.result.warnings.append(message)


class ValidationEngine:
    """
    Validates packages for cloud upload.

    Checks run in a fixed order and accumulate errors and warnings; only a
    missing package or an unserializable structure stops the run early.
    Results are cached per (checksum, premium flag).
    """

    def __init__(
        self,
        cache: ValidationCache | None = None,
        *,
        max_size: int = rules.DEFAULT_MAX_SIZE,
        premium_max_size: int = rules.PREMIUM_MAX_SIZE,
        max_workers: int = 4,
    ):
        """
        Initialize validation engine.

        Args:
            cache: Result cache (a fresh 5 minute cache by default).
            max_size: Size ceiling for default-tier users in bytes.
            premium_max_size: Size ceiling for premium users in bytes.
            max_workers: Thread pool size for validate_many.
        """
        self.cache = cache if cache is not None else ValidationCache()
        self.max_size = max_size
        self.premium_max_size = premium_max_size
        self.max_workers = max_workers

    def validate_for_upload(self, pkg: TaptikPackage | dict[str, Any] | None, is_premium: bool = False) -> ValidationResult:
        """
        Validate a package for upload.

        Args:
            pkg: Package instance or its wire-form dict.
            is_premium: Apply the premium size ceiling.

        Returns:
            ValidationResult. Problems are reported on the result, never raised.
        """
        max_size = self.premium_max_size if is_premium else self.max_size
        if pkg is None:
            check = _Check({}, is_premium, max_size)
            check.error(rules.ERR_NULL_PACKAGE)
            return check.result

        data = pkg.to_dict() if isinstance(pkg, TaptikPackage) else pkg
        if not isinstance(data, dict):
            check = _Check({}, is_premium, max_size)
            check.error(rules.ERR_NOT_OBJECT)
            return check.result

        checksum = data.get("checksum")
        cache_key = (checksum, is_premium) if isinstance(checksum, str) and checksum else None
        if cache_key is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Returning cached validation result for checksum %s", checksum[:12])
                return cached

        check = _Check(data, is_premium, max_size)
        if self._check_serializable(check):
            self._check_structure(check)
            self._check_metadata(check)
            self._check_format(check)
            self._check_checksum(check)
            self._check_size(check)
            self._check_storage(check)
            self._check_compression(check)
            self._check_schema(check)
            self._check_cloud_compatibility(check)
            self._check_security(check)
            self._check_component_counts(check)
            self._check_processing_time(check)
            self._check_cross_platform(check)
            self._finalize_recommendations(check)
            check.result.validation_score = self._score(check)

            if cache_key is not None:
                self.cache.put(cache_key, check.result)

        logger.debug(
            "Validated package: %d errors, %d warnings, score %d",
            len(check.result.errors),
            len(check.result.warnings),
            check.result.validation_score,
        )
        return check.result

    def validation_report(self, pkg: TaptikPackage | dict[str, Any], is_premium: bool = False) -> ValidationReport:
        """Validate a package and collect processing metrics."""
        data = pkg.to_dict() if isinstance(pkg, TaptikPackage) else as_dict(pkg)
        checksum = data.get("checksum")
        cache_hit = isinstance(checksum, str) and bool(checksum) and (checksum, is_premium) in self.cache

        started = time.perf_counter()
        result = self.validate_for_upload(pkg, is_premium)
        elapsed_ms = (time.perf_counter() - started) * 1000

        size = _number(data.get("size")) or 0
        counts = as_dict(as_dict(data.get("metadata")).get("componentCount"))
        metrics = {
            "validationTimeMs": round(elapsed_ms, 2),
            "cacheHit": cache_hit,
            "score": result.validation_score,
            "totalSize": size,
            "compressed": data.get("compression") not in (None, "none"),
            "componentCount": sum(_number(counts.get(kind)) or 0 for kind in rules.COMPONENT_THRESHOLDS),
            "estimatedProcessingTimeMs": estimate_processing_time(data),
            "estimatedUploadTimeS": math.ceil(size / 1024 / 100),
            "cloudReady": result.cloud_compatible and result.is_valid,
        }
        return ValidationReport(result=result, metrics=metrics)

    def validate_many(
        self, packages: list[TaptikPackage | dict[str, Any]], is_premium: bool = False
    ) -> list[BatchItem[ValidationResult]]:
        """Validate several packages concurrently; one failure never affects the others."""
        items = run_batch(lambda p: self.validate_for_upload(p, is_premium), packages, max_workers=self.max_workers)
        valid = sum(1 for item in items if item.success and item.result is not None and item.result.is_valid)
        logger.info("Batch validation completed: %d packages, %d valid", len(items), valid)
        return items

    def clear_cache(self) -> None:
        self.cache.clear()

    # Individual checks

    def _check_serializable(self, check: _Check) -> bool:
        try:
            canonical_json(check.pkg)
        except (ValueError, RecursionError):
            check.error(rules.ERR_CIRCULAR)
            return False
        except TypeError:
            check.error(rules.ERR_NOT_JSON)
            return False
        return True

    def _check_structure(self, check: _Check) -> None:
        for section in rules.REQUIRED_SECTIONS:
            if not check.pkg.get(section):
                check.error(rules.missing_field(section), schema=section != "manifest")

    def _check_metadata(self, check: _Check) -> None:
        metadata = check.pkg.get("metadata")
        if not isinstance(metadata, dict):
            return

        for name in rules.REQUIRED_METADATA_FIELDS:
            if name not in metadata:
                check.error(rules.missing_field(f"metadata.{name}"), schema=True)

        if "title" in metadata:
            title = metadata["title"]
            if not isinstance(title, str) or len(title) < 3:
                check.error(rules.ERR_TITLE_LENGTH)
        if isinstance(metadata.get("tags"), list) and not metadata["tags"]:
            check.error(rules.ERR_NO_TAGS)
        if metadata.get("version") == "0.0.0":
            check.error(rules.ERR_ZERO_VERSION)
        if isinstance(metadata.get("targetIdes"), list) and not metadata["targetIdes"]:
            check.error(rules.ERR_NO_TARGETS)
        if not metadata.get("checksum") or metadata.get("checksum") == PLACEHOLDER_CHECKSUM:
            check.error(rules.ERR_EMPTY_CHECKSUM)

        file_size = _number(metadata.get("fileSize"))
        if file_size is not None and file_size < 0:
            check.error(rules.ERR_NEGATIVE_SIZE)

        level = metadata.get("complexityLevel")
        if level and level not in rules.COMPLEXITY_LEVELS:
            check.error(rules.invalid_complexity(level))

        counts = as_dict(metadata.get("componentCount"))
        if any((_number(counts.get(kind)) or 0) < 0 for kind in rules.COMPONENT_THRESHOLDS):
            check.error(rules.ERR_NEGATIVE_COUNTS)

        created_at = metadata.get("createdAt")
        if created_at and not _is_iso_date(created_at):
            check.error(rules.ERR_CREATED_AT)

    def _check_format(self, check: _Check) -> None:
        package_format = check.pkg.get("format")
        if package_format and package_format not in rules.SUPPORTED_FORMATS:
            check.error(rules.unsupported_format(package_format))

    def _check_checksum(self, check: _Check) -> None:
        declared = check.metadata.get("checksum")
        # A missing top-level checksum never matches
        if declared and check.pkg.get("checksum") != declared:
            check.error(rules.ERR_CHECKSUM_MISMATCH)

    def _check_size(self, check: _Check) -> None:
        limit = check.result.size_limit
        limit.current = int(check.size)
        limit.within_limit = check.size <= limit.maximum
        limit.percentage = round(check.size / limit.maximum * 100) if limit.maximum else 0

        if not limit.within_limit:
            check.result.cloud_compatible = False
            check.error(rules.size_exceeded(limit.maximum))
        elif check.size >= limit.maximum * rules.WARNING_THRESHOLD:
            check.warn(rules.size_approaching(limit.percentage))

    def _check_storage(self, check: _Check) -> None:
        if check.size > rules.STORAGE_MAX_SIZE:
            check.result.cloud_compatible = False
            check.error(rules.ERR_STORAGE_LIMIT)
            check.recommendations.append(rules.REC_ENABLE_CHUNKING)

        if "metadata" in check.pkg and json_size(check.pkg["metadata"]) > rules.METADATA_MAX_SIZE:
            check.error(rules.ERR_METADATA_TOO_LARGE)
            check.recommendations.append(rules.REC_REDUCE_SIZE)

    def _check_compression(self, check: _Check) -> None:
        compression = check.pkg.get("compression")
        if compression and compression not in rules.SUPPORTED_COMPRESSIONS:
            check.warn(rules.invalid_compression(compression))
            check.recommendations.append(rules.REC_SUPPORTED_COMPRESSION)

    def _check_schema(self, check: _Check) -> None:
        config = check.pkg.get("sanitizedConfig")
        if not isinstance(config, dict):
            return

        for name in rules.REQUIRED_CONTEXT_FIELDS:
            if name not in config:
                check.error(rules.missing_field(name), schema=True)
        context_meta = config.get("metadata")
        if isinstance(context_meta, dict) and not context_meta.get("timestamp"):
            check.error(rules.missing_field("metadata.timestamp"), schema=True)

        for platform, _, scope in iter_scopes(config):
            for key, label, required in rules.RECORD_SCHEMAS[platform]:
                if key == "mcpServers":
                    records = scope_records(scope, key)
                else:
                    records = [r for r in as_list(scope.get(key)) if isinstance(r, dict)]
                for record in records:
                    for alternatives in required:
                        if not any(record.get(name) for name in alternatives):
                            check.error(rules.invalid_schema(label, alternatives[0]), schema=True)

    def _check_cloud_compatibility(self, check: _Check) -> None:
        metadata = check.metadata
        source = metadata.get("sourceIde")
        targets = as_list(metadata.get("targetIdes"))
        support = check.result.feature_support
        support.ide = source if isinstance(source, str) else ""

        if source and source not in rules.SUPPORTED_IDES:
            check.warn(rules.unknown_ide("source", source))
        for target in targets:
            if target not in rules.SUPPORTED_IDES:
                check.warn(rules.unknown_ide("target", target))

        if source in rules.SUPPORTED_IDES:
            for kind in rules.COMPONENT_THRESHOLDS:
                if (_number(check.counts.get(kind)) or 0) > 0:
                    support.supported.append(kind)

        for feature in _canonical_features(metadata):
            if feature in rules.KNOWN_FEATURES or feature in rules.COMPONENT_THRESHOLDS:
                if feature not in support.supported:
                    support.supported.append(feature)
                continue
            support.unsupported.append(feature)
            for target in targets:
                if target != source:
                    check.warn(rules.unsupported_feature(feature, target))

    def _check_security(self, check: _Check) -> None:
        metadata = check.metadata
        title = metadata.get("title")
        if isinstance(title, str) and rules.UNSAFE_MARKUP.search(title):
            check.warn(rules.unsafe_characters("Title"))

        for tag in as_list(metadata.get("tags")):
            if isinstance(tag, str) and (rules.UNSAFE_MARKUP.search(tag) or rules.PATH_TRAVERSAL.search(tag)):
                check.warn(rules.unsafe_tag(tag))

        description = metadata.get("description")
        if isinstance(description, str) and (
            rules.UNSAFE_MARKUP.search(description) or rules.SQL_KEYWORDS.search(description)
        ):
            check.warn(rules.unsafe_characters("Description"))

    def _check_component_counts(self, check: _Check) -> None:
        counts = check.counts
        if not counts:
            return

        total = 0
        for kind, threshold in rules.COMPONENT_THRESHOLDS.items():
            count = _number(counts.get(kind)) or 0
            if count > threshold:
                check.warn(rules.high_component_count(kind, int(count)))
            total += count

        if total > rules.SPLIT_THRESHOLD:
            check.recommendations.append(rules.REC_SPLIT)
        elif total > rules.OPTIMIZE_THRESHOLD:
            check.recommendations.append(rules.REC_OPTIMIZE_COMPONENTS)

    def _check_processing_time(self, check: _Check) -> None:
        estimate = estimate_processing_time(check.pkg)
        if estimate > rules.EDGE_FUNCTION_TIMEOUT_MS:
            check.warn(rules.edge_timeout(math.ceil(estimate / 1000)))
            check.recommendations.append(rules.REC_OPTIMIZE_FOR_EDGE)

    def _check_cross_platform(self, check: _Check) -> None:
        metadata = check.metadata
        # Features no platform table tracks are reported by the compatibility check
        features = [f for f in _canonical_features(metadata) if f in rules.TRACKED_FEATURES]
        counts = check.counts

        for target in as_list(metadata.get("targetIdes")):
            supported = rules.PLATFORM_FEATURES.get(target, ())
            for feature in features:
                if feature not in supported:
                    check.warn(rules.partially_supported_feature(feature, target))

            if target != Platform.CLAUDE_CODE.value and any(
                (_number(counts.get(kind)) or 0) > 0 for kind in rules.CLAUDE_SPECIFIC_COMPONENTS
            ):
                check.warn(rules.claude_specific_components(target))
                check.recommendations.append(rules.REC_CHECK_FEATURES)

    def _finalize_recommendations(self, check: _Check) -> None:
        result = check.result
        recommendations: list[str] = []
        for error in result.errors:
            recommendations.extend(rec for marker, rec in rules.ERROR_RECOMMENDATIONS if marker in error)
        recommendations.extend(check.recommendations)

        if any("unsafe" in w for w in result.warnings):
            recommendations.append(rules.REC_REVIEW_SECURITY)
        if any("metadata" in e for e in result.errors):
            recommendations.append(rules.REC_UPDATE_METADATA)
        if result.is_valid and result.cloud_compatible and result.schema_compliant:
            recommendations.extend((rules.REC_READY, rules.REC_ALL_PASSED))

        result.recommendations = list(dict.fromkeys(recommendations))

    def _score(self, check: _Check) -> int:
        """100 - 10 per error - 3 per warning, plus optimization bonuses, clamped to 0..100."""
        result = check.result
        score = 100 - 10 * len(result.errors) - 3 * len(result.warnings)
        if check.pkg.get("compression") == "brotli":
            score += 5
        if check.size < rules.DEFAULT_MAX_SIZE * 0.5:
            score += 5
        if result.schema_compliant:
            score += 10
        if result.cloud_compatible:
            score += 10
        return max(0, min(100, score))


def estimate_processing_time(pkg: dict[str, Any]) -> float:
    """
    Estimate server-side processing time of a package in milliseconds.

    1 s base, plus 1 ms per KiB, plus a fixed cost per component and per
    declared feature.
    """
    metadata = as_dict(pkg.get("metadata"))
    counts = as_dict(metadata.get("componentCount"))
    estimate = rules.PROCESSING_BASE_MS + (_number(pkg.get("size")) or 0) / 1024
    for kind, cost in rules.PROCESSING_COSTS.items():
        estimate += (_number(counts.get(kind)) or 0) * cost
    estimate += len(as_list(metadata.get("features"))) * rules.PROCESSING_FEATURE_MS
    return estimate


def _canonical_features(metadata: dict[str, Any]) -> list[str]:
    features = [f for f in as_list(metadata.get("features")) if isinstance(f, str)]
    return list(dict.fromkeys(rules.FEATURE_ALIASES.get(f, f) for f in features))


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _is_iso_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True
