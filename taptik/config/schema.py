# Taptik Configuration Schema
# Pydantic models for YAML configuration validation

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from taptik.package.packager import Compression, PackageFormat


class LimitsConfig(BaseModel):
    """Package size ceilings used during validation."""

    max_package_size_mb: int = Field(default=10, description="Package size ceiling for default-tier users (MiB)")
    premium_max_package_size_mb: int = Field(default=100, description="Package size ceiling for premium users (MiB)")

    @field_validator("max_package_size_mb", "premium_max_package_size_mb")
    @classmethod
    def positive_size(cls, v: int) -> int:
        """Reject zero and negative ceilings."""
        if v <= 0:
            raise ValueError("size ceiling must be positive")
        return v

    @property
    def max_package_size(self) -> int:
        return self.max_package_size_mb * 1024 * 1024

    @property
    def premium_max_package_size(self) -> int:
        return self.premium_max_package_size_mb * 1024 * 1024


class CacheConfig(BaseModel):
    """Sanitization and validation cache settings."""

    sanitization_max_entries: int = Field(default=1000, description="Entries before the sanitization cache is cleared")
    sanitization_key_length: int = Field(
        default=100, description="Longest serialized value memoized by the sanitization cache"
    )
    validation_ttl_seconds: float = Field(default=300.0, description="Lifetime of cached validation results")

    @field_validator("sanitization_max_entries", "sanitization_key_length")
    @classmethod
    def positive_count(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("validation_ttl_seconds")
    @classmethod
    def non_negative_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError("TTL cannot be negative")
        return v


class ConversionConfig(BaseModel):
    """Cross-platform conversion settings."""

    validate_compatibility: bool = Field(default=False, description="Score conversions and fail below the threshold")
    min_compatibility_score: int = Field(default=60, description="Lowest acceptable compatibility score (0-100)")

    @field_validator("min_compatibility_score")
    @classmethod
    def score_range(cls, v: int) -> int:
        """Keep the threshold within the score range."""
        if not 0 <= v <= 100:
            raise ValueError("score must be between 0 and 100")
        return v


class PackagingConfig(BaseModel):
    """Package assembly settings."""

    compression: Compression = Field(default=Compression.GZIP, description="Compression mode: gzip or none")
    format: PackageFormat = Field(default=PackageFormat.V1, description="Package format tag")
    optimize_size: bool = Field(default=False, description="Drop empty containers and collapse whitespace")

    @field_validator("compression")
    @classmethod
    def supported_compression(cls, v: Compression) -> Compression:
        """Brotli packages can be validated but not produced."""
        if v == Compression.BROTLI:
            raise ValueError("brotli compression is not supported; use gzip or none")
        return v


class BatchConfig(BaseModel):
    """Concurrent batch processing settings."""

    max_workers: int = Field(default=4, description="Thread pool size for batch sanitize and validate")

    @field_validator("max_workers")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_workers must be at least 1")
        return v


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: str | None = Field(default=None, description="Path to log file")

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: str | None) -> str | None:
        """Expand ~ in optional paths."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class TaptikConfig(BaseModel):
    """Root configuration model for Taptik."""

    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="Size limits")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="Cache settings")
    conversion: ConversionConfig = Field(default_factory=ConversionConfig, description="Conversion settings")
    packaging: PackagingConfig = Field(default_factory=PackagingConfig, description="Packaging settings")
    batch: BatchConfig = Field(default_factory=BatchConfig, description="Batch settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
