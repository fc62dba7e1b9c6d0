# Taptik Sanitization Engine
# Detects and redacts sensitive values in arbitrary configuration trees

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from taptik.batch import BatchItem, run_batch
from taptik.sanitize.rules import (
    CIRCULAR,
    PRE_COMMIT_RECOMMENDATION,
    RECOMMENDATIONS,
    REDACTED_KEY,
    REVIEW_RECOMMENDATION,
    RULES,
    SAFE_RECOMMENDATION,
    Category,
    SanitizationRule,
    Severity,
    classify,
    classify_key,
    is_redacted,
)

logger = logging.getLogger(__name__)

_CATEGORY_SEVERITY = {rule.category: rule.severity for rule in RULES}


class SecurityLevel(str, Enum):
    """Public summary of a sanitization pass."""

    SAFE = "safe"
    WARNING = "warning"
    BLOCKED = "blocked"


@dataclass
class SeverityBreakdown:
    """Counts of scanned values per severity bucket."""

    safe: int = 0
    low: int = 0
    medium: int = 0
    critical: int = 0

    def increment(self, severity: Severity, count: int = 1) -> None:
        """Add to one bucket."""
        setattr(self, severity.value, getattr(self, severity.value) + count)

    def merge(self, other: SeverityBreakdown) -> None:
        """Add another breakdown into this one."""
        for severity in Severity:
            self.increment(severity, getattr(other, severity.value))

    @property
    def security_level(self) -> SecurityLevel:
        """Derive the public security level."""
        if self.critical > 0:
            return SecurityLevel.BLOCKED
        if self.medium > 0 or self.low > 0:
            return SecurityLevel.WARNING
        return SecurityLevel.SAFE

    def to_dict(self) -> dict[str, int]:
        return {"safe": self.safe, "low": self.low, "medium": self.medium, "critical": self.critical}


@dataclass
class DetailedFinding:
    """Aggregated count of redactions for one category."""

    category: str
    severity: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "severity": self.severity, "count": self.count}


@dataclass
class SanitizationReport:
    """Structured report of a sanitization pass."""

    total_fields: int
    sanitized_fields: int
    safe_fields: int
    timestamp: datetime
    summary: str
    processing_time_ms: float
    detailed_findings: list[DetailedFinding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFields": self.total_fields,
            "sanitizedFields": self.sanitized_fields,
            "safeFields": self.safe_fields,
            "timestamp": self.timestamp.isoformat(),
            "summary": self.summary,
            "processingTimeMs": self.processing_time_ms,
            "detailedFindings": [f.to_dict() for f in self.detailed_findings],
        }


@dataclass
class SanitizationResult:
    """Result of sanitizing one configuration tree."""

    sanitized_data: Any
    security_level: SecurityLevel
    findings: list[str]
    severity_breakdown: SeverityBreakdown
    report: SanitizationReport
    recommendations: list[str]

    @property
    def is_blocked(self) -> bool:
        """Check if critical data was found."""
        return self.security_level == SecurityLevel.BLOCKED

    @property
    def has_findings(self) -> bool:
        """Check if anything was redacted."""
        return bool(self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sanitizedData": self.sanitized_data,
            "securityLevel": self.security_level.value,
            "findings": list(self.findings),
            "severityBreakdown": self.severity_breakdown.to_dict(),
            "report": self.report.to_dict(),
            "recommendations": list(self.recommendations),
        }


@dataclass
class _Tally:
    """Accounting collected while traversing a tree."""

    total_fields: int = 0
    sanitized_fields: int = 0
    breakdown: SeverityBreakdown = field(default_factory=SeverityBreakdown)
    categories: dict[Category, int] = field(default_factory=dict)
    findings: list[str] = field(default_factory=list)

    def record_safe(self) -> None:
        self.total_fields += 1
        self.breakdown.increment(Severity.SAFE)

    def record(self, rule: SanitizationRule) -> None:
        self.total_fields += 1
        self.sanitized_fields += 1
        self.breakdown.increment(rule.severity)
        self.categories[rule.category] = self.categories.get(rule.category, 0) + 1
        if rule.finding not in self.findings:
            self.findings.append(rule.finding)

    def merge(self, other: _Tally) -> None:
        self.total_fields += other.total_fields
        self.sanitized_fields += other.sanitized_fields
        self.breakdown.merge(other.breakdown)
        for category, count in other.categories.items():
            self.categories[category] = self.categories.get(category, 0) + count
        for finding in other.findings:
            if finding not in self.findings:
                self.findings.append(finding)


class SanitizationCache:
    """
    Bounded memo of sanitized substructures.

    Entries are keyed by path, type and serialization. When the entry count
    exceeds the ceiling the whole cache is cleared at once; there is no
    per-entry eviction. Access is guarded by a lock so engines can be
    shared between batch workers.
    """

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self._entries: dict[str, tuple[Any, _Tally]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> tuple[Any, _Tally] | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: Any, tally: _Tally) -> None:
        with self._lock:
            if len(self._entries) >= self.max_entries:
                self._entries.clear()
                logger.debug("Cleared sanitization cache at %d entries", self.max_entries)
            self._entries[key] = (value, tally)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SanitizationEngine:
    """
    Classifies and redacts sensitive values in configuration trees.

    Every string field is tested against the ordered rule table; the first
    matching rule decides the placeholder and the severity. Input trees are
    never modified; a container that contains itself is written out as the
    ``[CIRCULAR]`` placeholder at the point where the cycle closes.
    """

    def __init__(self, cache: SanitizationCache | None = None, *, cache_key_length: int = 100, max_workers: int = 4):
        """
        Initialize sanitization engine.

        Args:
            cache: Optional shared cache (creates a new one if not provided).
            cache_key_length: Serialization prefix length used in cache keys.
                Only values whose serialization fits are memoized.
            max_workers: Thread pool size for batch sanitization.
        """
        self.cache = cache if cache is not None else SanitizationCache()
        self.cache_key_length = cache_key_length
        self.max_workers = max_workers

    def sanitize(self, tree: Any) -> SanitizationResult:
        """
        Sanitize a configuration tree.

        Args:
            tree: JSON-shaped value of any depth.

        Returns:
            SanitizationResult with the redacted copy, findings and report.
        """
        started = time.perf_counter()
        tally = _Tally()
        sanitized = self._sanitize(tree, "", "", tally)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 3)

        security_level = tally.breakdown.security_level
        detailed = [
            DetailedFinding(category=category.value, severity=_CATEGORY_SEVERITY[category].value, count=count)
            for category, count in tally.categories.items()
        ]
        report = SanitizationReport(
            total_fields=tally.total_fields,
            sanitized_fields=tally.sanitized_fields,
            safe_fields=tally.total_fields - tally.sanitized_fields,
            timestamp=datetime.now(timezone.utc),
            summary=f"Sanitized {tally.sanitized_fields} of {tally.total_fields} fields",
            processing_time_ms=elapsed_ms,
            detailed_findings=detailed,
        )

        logger.debug(
            "Sanitization finished in %.3fms: %d/%d fields redacted, level %s",
            elapsed_ms,
            tally.sanitized_fields,
            tally.total_fields,
            security_level.value,
        )

        return SanitizationResult(
            sanitized_data=sanitized,
            security_level=security_level,
            findings=list(tally.findings),
            severity_breakdown=tally.breakdown,
            report=report,
            recommendations=self._recommendations(tally),
        )

    def sanitize_many(self, trees: Sequence[Any]) -> list[BatchItem[SanitizationResult]]:
        """
        Sanitize several trees concurrently.

        Args:
            trees: Input trees.

        Returns:
            One BatchItem per tree, in input order.
        """
        return run_batch(self.sanitize, trees, max_workers=self.max_workers)

    def _sanitize(self, value: Any, key: str, path: str, tally: _Tally, ancestors: set[int] | None = None) -> Any:
        if value is None or value == "":
            return value

        if ancestors is None:
            ancestors = set()
        container = isinstance(value, (dict, list))
        if container and id(value) in ancestors:
            logger.debug("Circular reference at '%s' replaced", path or "<root>")
            return CIRCULAR

        cache_key = self._cache_key(value, path)
        if cache_key is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                cached_value, cached_tally = cached
                tally.merge(cached_tally)
                return copy.deepcopy(cached_value)

        local = _Tally()
        if container:
            ancestors.add(id(value))
        try:
            if isinstance(value, str):
                result = self._sanitize_string(value, key, local)
            elif isinstance(value, dict):
                result = self._sanitize_object(value, path, local, ancestors)
            elif isinstance(value, list):
                result = [
                    self._sanitize(item, key, f"{path}[{index}]", local, ancestors) for index, item in enumerate(value)
                ]
            else:
                local.record_safe()
                result = value
        finally:
            ancestors.discard(id(value))

        if cache_key is not None:
            self.cache.put(cache_key, copy.deepcopy(result), local)
        tally.merge(local)
        return result

    def _sanitize_object(
        self, value: dict[str, Any], path: str, tally: _Tally, ancestors: set[int]
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, child in value.items():
            key = str(key)
            child_path = f"{path}.{key}" if path else key
            new_key = self._sanitize_key(key, result, tally)
            result[new_key] = self._sanitize(child, key, child_path, tally, ancestors)
        return result

    def _sanitize_key(self, key: str, siblings: dict[str, Any], tally: _Tally) -> str:
        if is_redacted(key):
            return key
        rule = classify_key(key)
        if rule is None:
            return key

        tally.record(rule)
        new_key = REDACTED_KEY
        suffix = 2
        while new_key in siblings:
            new_key = f"{REDACTED_KEY}_{suffix}"
            suffix += 1
        return new_key

    def _sanitize_string(self, value: str, key: str, tally: _Tally) -> str:
        if is_redacted(value):
            tally.record_safe()
            return value

        rule = classify(key, value)
        if rule is None:
            tally.record_safe()
            return value

        logger.debug("Field %r matched %s rule", key, rule.category.value)
        tally.record(rule)
        return rule.redact(value)

    def _cache_key(self, value: Any, path: str) -> str | None:
        try:
            serialized = json.dumps(value, sort_keys=True)
        except (TypeError, ValueError):
            return None
        if len(serialized) > self.cache_key_length:
            return None
        return f"{path}|{type(value).__name__}|{serialized[: self.cache_key_length]}"

    def _recommendations(self, tally: _Tally) -> list[str]:
        if not tally.findings:
            return [SAFE_RECOMMENDATION]

        recommendations = [text for category, text in RECOMMENDATIONS.items() if category in tally.categories]
        if tally.breakdown.medium > 2:
            recommendations.append(PRE_COMMIT_RECOMMENDATION)
        if not recommendations:
            recommendations.append(REVIEW_RECOMMENDATION)
        return recommendations

