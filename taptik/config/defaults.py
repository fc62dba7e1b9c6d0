# Taptik Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "limits": {
        "max_package_size_mb": 10,
        "premium_max_package_size_mb": 100,
    },
    "cache": {
        "sanitization_max_entries": 1000,
        "sanitization_key_length": 100,
        "validation_ttl_seconds": 300,
    },
    "conversion": {
        "validate_compatibility": False,
        "min_compatibility_score": 60,
    },
    "packaging": {
        "compression": "gzip",
        "format": "taptik-v1",
        "optimize_size": False,
    },
    "batch": {
        "max_workers": 4,
    },
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": None,
    },
}


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# Taptik - Configuration Portability Configuration
# Version: 1.0
#
# Controls how configuration contexts are sanitized, converted,
# packaged and validated.
#
# Packaging compression:
#   - gzip: Compressed package files (default)
#   - none: Plain JSON package files
#
# Platforms:
#   - claude-code, kiro-ide, cursor-ide

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)


def get_default_config() -> dict[str, Any]:
    """Get an independent copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)
