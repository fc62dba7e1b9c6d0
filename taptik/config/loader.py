# Taptik Configuration Loader
# Locate, read, merge and write the YAML configuration file

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from taptik.config.defaults import generate_default_config, get_default_config
from taptik.config.schema import TaptikConfig
from taptik.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TAPTIK_CONFIG"


def get_config_path() -> Path:
    """Path of the configuration file, honouring ``$TAPTIK_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "taptik" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> TaptikConfig:
    """
    Load and validate the configuration.

    Values from the file are laid over the defaults one section at a time,
    so a file only needs the settings it changes. Without an explicit path
    a missing file simply means "use the defaults".

    Args:
        config_path: Explicit configuration file.

    Returns:
        TaptikConfig built from the file and the defaults.

    Raises:
        FileNotFoundError: If an explicitly given file does not exist.
        ConfigError: If the file is not a YAML mapping.
        ValidationError: If a value is out of range.
    """
    explicit = config_path is not None
    path = config_path if explicit else get_config_path()

    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Configuration file not found: {path}\nRun 'taptik config init' to create one.")
        logger.debug("No configuration file at %s, using defaults", path)
        return TaptikConfig.model_validate(get_default_config())

    data = _read_yaml(path)
    logger.debug("Loaded configuration sections %s from %s", sorted(data), path)
    return TaptikConfig.model_validate(_merge_with_defaults(data))


def save_config(config: TaptikConfig, config_path: Optional[Path] = None) -> Path:
    """
    Write a configuration as YAML, creating parent directories.

    Returns:
        The path written.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    # mode="json" turns the compression and format enums into their tags
    text = yaml.safe_dump(
        config.model_dump(exclude_none=True, mode="json"),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    path.write_text(text, encoding="utf-8")
    return path


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Write the commented default configuration unless a file is already there.

    Returns:
        Tuple of (config_path, was_created).
    """
    path = config_path or get_config_path()
    if path.exists():
        return path, False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_default_config(), encoding="utf-8")
    logger.debug("Created default configuration at %s", path)
    return path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Check a configuration file without merging defaults.

    Besides value errors, top-level sections the schema does not know are
    reported, since they are most likely typos.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    path = config_path or get_config_path()
    if not path.exists():
        return False, [f"Configuration file not found: {path}"]

    try:
        data = _read_yaml(path, allow_empty=False)
    except ConfigError as e:
        return False, [str(e)]

    try:
        TaptikConfig.model_validate(data)
    except ValidationError as e:
        return False, [f"{' -> '.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()]

    errors = [f"Unknown section '{name}'" for name in sorted(set(data) - set(TaptikConfig.model_fields))]
    return not errors, errors


def _read_yaml(path: Path, *, allow_empty: bool = True) -> dict[str, Any]:
    """Parse a configuration file that must hold a mapping (or nothing)."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        if not allow_empty:
            raise ConfigError("Configuration file is empty")
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def _merge_with_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay file sections on the defaults; non-mapping values replace the section."""
    merged = get_default_config()
    for section, values in data.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged
