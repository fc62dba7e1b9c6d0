# Taptik Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from taptik.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from taptik.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    save_config,
    validate_config_file,
)
from taptik.config.schema import (
    BatchConfig,
    CacheConfig,
    ConversionConfig,
    LimitsConfig,
    OutputConfig,
    PackagingConfig,
    TaptikConfig,
)

__all__ = [
    # Schema
    "TaptikConfig",
    "LimitsConfig",
    "CacheConfig",
    "ConversionConfig",
    "PackagingConfig",
    "BatchConfig",
    "OutputConfig",
    # Loader
    "load_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
    "get_default_config",
]
