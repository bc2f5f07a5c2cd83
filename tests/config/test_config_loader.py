"""Tests for termsyntax.config.loader module."""

import logging

import pytest

from termsyntax.config import (
    MemoryConfigStore,
    env_terms,
    load_config_file,
    load_domain,
    load_env,
    parse_config,
)
from termsyntax.syntax import InvalidFieldError, MissingFieldError, ParseOptions

SYNTAX = {"port": ("integer", 1, 65535), "log_level": "log_level", "debug": "boolean"}
DEFAULTS = {"port": 5060, "log_level": "info", "debug": False}


@pytest.fixture
def store():
    return MemoryConfigStore()


class TestParseConfig:
    """Test validation of option terms with defaults."""

    def test_defaults_fill_absent_keys(self):
        """Test that defaults are used only for missing keys."""
        result = parse_config({"port": "5070"}, SYNTAX, DEFAULTS)
        assert result.values == {"port": 5070, "log_level": 7, "debug": False}

    def test_list_terms(self):
        """Test pair lists and bare keys."""
        result = parse_config([("port", 1), "debug"], SYNTAX, DEFAULTS)
        assert result.values == {"port": 1, "debug": True, "log_level": 7}

    def test_path_in_errors(self):
        """Test that the path prefixes reported fields."""
        with pytest.raises(InvalidFieldError) as exc_info:
            parse_config({"port": 0}, SYNTAX, path="sip")
        assert exc_info.value.path == "sip.port"


class TestEnv:
    """Test loading from environment variables."""

    def test_env_terms(self):
        """Test prefix stripping and lowercasing."""
        environ = {"APP_PORT": "80", "APP_": "x", "OTHER": "1", "APP_LOG_LEVEL": "debug"}
        assert env_terms("APP_", environ) == {"port": "80", "log_level": "debug"}
        with pytest.raises(ValueError):
            env_terms("", environ)

    def test_load_env(self, store):
        """Test that accepted values are written unscoped."""
        environ = {"APP_PORT": "80", "APP_COLOR": "red"}
        result = load_env("app", "APP_", DEFAULTS, SYNTAX, store, environ=environ)
        assert store.get("app", "port") == 80
        assert store.get("app", "log_level") == 7
        assert result.unknown == ["color"]

    def test_load_env_failure_stores_nothing(self, store):
        """Test that a validation failure leaves the store untouched."""
        with pytest.raises(InvalidFieldError):
            load_env("app", "APP_", DEFAULTS, SYNTAX, store, environ={"APP_PORT": "0"})
        assert store.items("app") == {}


class TestLoadDomain:
    """Test per-scope overrides."""

    def test_overrides(self, store, caplog):
        """Test that overrides are scoped and unknown keys are ignored."""
        load_env("app", "APP_", DEFAULTS, SYNTAX, store, environ={})
        with caplog.at_level(logging.WARNING, logger="termsyntax"):
            load_domain("app", "example.com", {"port": 6000, "color": "red"}, DEFAULTS, SYNTAX, store)

        assert "Ignoring config keys ['color']" in caplog.text
        assert store.get("app", "port", scope="example.com") == 6000
        assert store.get("app", "port") == 5060
        assert store.get("app", "log_level", scope="example.com") == 7
        assert store.items("app", scope="example.com") == {"port": 6000, "log_level": 7, "debug": False}


class TestLoadConfigFile:
    """Test loading YAML configuration files."""

    def test_whole_file(self, write_yaml):
        """Test a file validated as a whole."""
        path = write_yaml("app.yml", {"port": 80, "extra": 1})
        result = load_config_file(path, SYNTAX)
        assert result.values == {"port": 80}
        assert result.unknown == ["extra"]

    def test_section(self, write_yaml):
        """Test validating a single top-level section with a path."""
        path = write_yaml("app.yml", {"sip": {"port": 80}, "other": {}})
        syntax = {**SYNTAX, "__mandatory": ["port"]}
        result = load_config_file(path, syntax, section="sip", options=ParseOptions(path="sip"))
        assert result.flattened == [("sip.port", 80)]

        with pytest.raises(MissingFieldError, match="sip.port"):
            load_config_file(path, syntax, section="missing", options=ParseOptions(path="sip"))

    def test_errors(self, tmp_path):
        """Test missing files, invalid YAML and scalar documents."""
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "missing.yml", SYNTAX)

        bad = tmp_path / "bad.yml"
        bad.write_text("port: [80")
        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_config_file(bad, SYNTAX)

        scalar = tmp_path / "scalar.yml"
        scalar.write_text("42\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config_file(scalar, SYNTAX)

    def test_empty_file(self, tmp_path):
        """Test that an empty document is an empty mapping."""
        empty = tmp_path / "empty.yml"
        empty.write_text("")
        assert load_config_file(empty, SYNTAX).values == {}
