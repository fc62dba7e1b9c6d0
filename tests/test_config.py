# Taptik Config Tests
# Tests for configuration loading and validation

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from taptik.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from taptik.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    save_config,
    validate_config_file,
)
from taptik.config.schema import PackagingConfig, TaptikConfig
from taptik.exceptions import ConfigError
from taptik.package.packager import Compression, PackageFormat


def write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


class TestTaptikConfig:
    """Tests for TaptikConfig schema."""

    def test_defaults(self):
        """Test that an empty configuration uses the built-in defaults."""
        config = TaptikConfig()
        assert config.limits.max_package_size == 10 * 1024 * 1024
        assert config.limits.premium_max_package_size == 100 * 1024 * 1024
        assert config.cache.validation_ttl_seconds == 300
        assert config.conversion.min_compatibility_score == 60
        assert config.packaging.compression == Compression.GZIP
        assert config.batch.max_workers == 4
        assert config.output.log_file is None

    def test_default_dict_matches_schema(self):
        """Test that DEFAULT_CONFIG validates to the schema defaults."""
        assert TaptikConfig.model_validate(DEFAULT_CONFIG) == TaptikConfig()

    def test_brotli_rejected(self):
        """Test that brotli cannot be configured for packaging."""
        with pytest.raises(ValidationError):
            PackagingConfig(compression="brotli")

    def test_format_tag(self):
        """Test that package formats are parsed from their tags."""
        assert PackagingConfig(format="taptik-v2").format == PackageFormat.V2

    @pytest.mark.parametrize(
        "section,values",
        [
            ("limits", {"max_package_size_mb": 0}),
            ("conversion", {"min_compatibility_score": 101}),
            ("cache", {"validation_ttl_seconds": -1}),
            ("cache", {"sanitization_max_entries": 0}),
            ("batch", {"max_workers": 0}),
        ],
    )
    def test_invalid_values(self, section: str, values: dict):
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            TaptikConfig.model_validate({section: values})

    def test_log_file_expanded(self):
        """Test that ~ is expanded in the log file path."""
        config = TaptikConfig.model_validate({"output": {"log_file": "~/taptik.log"}})
        assert "~" not in config.output.log_file


class TestDefaults:
    """Tests for default configuration helpers."""

    def test_default_copy_is_independent(self):
        """Test that callers cannot mutate the shared defaults."""
        data = get_default_config()
        data["limits"]["max_package_size_mb"] = 1
        assert DEFAULT_CONFIG["limits"]["max_package_size_mb"] == 10

    def test_generated_yaml_loads(self):
        """Test that the generated default file is valid YAML matching the defaults."""
        text = generate_default_config()
        assert text.startswith("# Taptik")
        assert yaml.safe_load(text) == DEFAULT_CONFIG


class TestConfigLoader:
    """Tests for config loading and saving."""

    def test_load_partial_file_merges_defaults(self, temp_dir: Path):
        """Test that missing keys fall back to defaults section by section."""
        path = write_yaml(temp_dir / "config.yaml", {"limits": {"max_package_size_mb": 5}})
        config = load_config(path)
        assert config.limits.max_package_size_mb == 5
        assert config.limits.premium_max_package_size_mb == 100
        assert config.packaging.compression == Compression.GZIP

    def test_load_empty_file(self, temp_dir: Path):
        """Test that an empty file yields the defaults."""
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == TaptikConfig()

    def test_load_missing_explicit_file(self, temp_dir: Path):
        """Test loading a missing explicitly given file."""
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "nonexistent.yaml")

    def test_load_missing_default_file(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """Test that a missing default file yields the defaults."""
        monkeypatch.setenv("TAPTIK_CONFIG", str(temp_dir / "absent.yaml"))
        assert load_config() == TaptikConfig()

    def test_env_override(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """Test that TAPTIK_CONFIG selects the configuration file."""
        path = write_yaml(temp_dir / "custom.yaml", {"batch": {"max_workers": 8}})
        monkeypatch.setenv("TAPTIK_CONFIG", str(path))
        assert get_config_path() == path
        assert load_config().batch.max_workers == 8

    def test_invalid_yaml(self, temp_dir: Path):
        """Test that broken YAML raises ConfigError."""
        path = temp_dir / "config.yaml"
        path.write_text("limits: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, temp_dir: Path):
        """Test that a top-level list raises ConfigError."""
        path = write_yaml(temp_dir / "config.yaml", ["a", "b"])
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_values(self, temp_dir: Path):
        """Test that invalid values raise ValidationError."""
        path = write_yaml(temp_dir / "config.yaml", {"packaging": {"compression": "brotli"}})
        with pytest.raises(ValidationError):
            load_config(path)

    def test_save_and_reload(self, temp_dir: Path):
        """Test saving configuration and loading it back."""
        config = TaptikConfig.model_validate({"conversion": {"min_compatibility_score": 75}})
        path = save_config(config, temp_dir / "nested" / "config.yaml")

        assert path.exists()
        saved = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert saved["packaging"]["compression"] == "gzip"
        assert load_config(path).conversion.min_compatibility_score == 75

    def test_ensure_config_exists(self, temp_dir: Path):
        """Test creating the default file once."""
        path = temp_dir / "sub" / "config.yaml"
        created_path, created = ensure_config_exists(path)
        assert created
        assert created_path == path
        assert path.read_text(encoding="utf-8") == generate_default_config()

        _, created_again = ensure_config_exists(path)
        assert not created_again


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_valid(self, temp_dir: Path):
        """Test validating the default file."""
        path, _ = ensure_config_exists(temp_dir / "config.yaml")
        assert validate_config_file(path) == (True, [])

    def test_missing(self, temp_dir: Path):
        """Test validating a missing file."""
        valid, errors = validate_config_file(temp_dir / "missing.yaml")
        assert not valid
        assert "not found" in errors[0]

    def test_empty(self, temp_dir: Path):
        """Test validating an empty file."""
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert validate_config_file(path) == (False, ["Configuration file is empty"])

    def test_invalid_value_location(self, temp_dir: Path):
        """Test that errors name the offending field."""
        path = write_yaml(temp_dir / "config.yaml", {"batch": {"max_workers": 0}})
        valid, errors = validate_config_file(path)
        assert not valid
        assert errors[0].startswith("batch -> max_workers:")

    def test_unknown_section(self, temp_dir: Path):
        """Test that unknown top-level sections are reported."""
        path = write_yaml(temp_dir / "config.yaml", {"limits": {}, "sync": {}})
        assert validate_config_file(path) == (False, ["Unknown section 'sync'"])
