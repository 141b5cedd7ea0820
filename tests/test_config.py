"""Tests for configuration schema and loader."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from pipethrough import ConfigurationError
from pipethrough.config import (
    ConfigLoader,
    LoggingConfig,
    PipelineSettings,
    PipethroughConfig,
    get_config,
    reload_config,
)


@pytest.fixture
def loader(monkeypatch, tmp_path):
    """Loader isolated from system, user and environment config."""
    for key in list(os.environ):
        if key.startswith("PIPETHROUGH_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path / "home"))

    config_loader = ConfigLoader()
    monkeypatch.setattr(config_loader, "_load_system_config", lambda: None)
    monkeypatch.setattr(config_loader, "_load_user_config", lambda: None)
    return config_loader


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_default_values(self):
        """Test default logging configuration."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"
        assert config.file is None

    def test_case_insensitive_input(self):
        """Test that level and format are normalized."""
        config = LoggingConfig(level="debug", format="SIMPLE")
        assert config.level == "DEBUG"
        assert config.format == "simple"

    def test_rejects_invalid_values(self):
        """Test that unknown levels and formats are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")

        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_rejects_unknown_fields(self):
        """Test that typos in field names are caught."""
        with pytest.raises(ValidationError):
            LoggingConfig(levl="INFO")


class TestPipelineSettings:
    """Tests for PipelineSettings."""

    def test_default_values(self):
        """Test default pipeline settings."""
        settings = PipelineSettings()
        assert settings.method == "handle"
        assert settings.trace is False

    def test_method_is_stripped(self):
        """Test that surrounding whitespace is removed."""
        assert PipelineSettings(method=" process ").method == "process"

    @pytest.mark.parametrize("method", ["", "   ", "not valid", "1handle"])
    def test_rejects_invalid_method(self, method):
        """Test that the method must be a usable attribute name."""
        with pytest.raises(ValidationError):
            PipelineSettings(method=method)


class TestPipethroughConfig:
    """Tests for the root model."""

    def test_defaults(self):
        """Test that every section has defaults."""
        config = PipethroughConfig()
        assert config.logging.level == "INFO"
        assert config.pipeline.method == "handle"

    def test_rejects_unknown_section(self):
        """Test that unknown sections are rejected."""
        with pytest.raises(ValidationError):
            PipethroughConfig(queue={})


class TestConfigLoader:
    """Tests for layered loading."""

    def test_model_defaults_without_files(self, loader):
        """Test that no files and no env yields model defaults."""
        config = loader.load()
        assert config == PipethroughConfig()

    def test_explicit_defaults_file(self, loader, tmp_path):
        """Test loading an explicit defaults file."""
        path = tmp_path / "custom.toml"
        path.write_text('[pipeline]\nmethod = "process"\ntrace = true\n')

        config = loader.load(defaults_path=path)

        assert config.pipeline.method == "process"
        assert config.pipeline.trace is True
        assert config.logging.level == "INFO"

    def test_cwd_defaults_file(self, loader, tmp_path):
        """Test that ./config/defaults.toml is picked up."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "defaults.toml").write_text('[logging]\nlevel = "DEBUG"\n')

        assert loader.load().logging.level == "DEBUG"

    def test_missing_explicit_file(self, loader, tmp_path):
        """Test that a missing explicit file is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            loader.load(defaults_path=tmp_path / "absent.toml")

    def test_malformed_file(self, loader, tmp_path):
        """Test that TOML syntax errors are reported as configuration errors."""
        path = tmp_path / "broken.toml"
        path.write_text("[pipeline\nmethod = ")

        with pytest.raises(ConfigurationError, match="Cannot parse"):
            loader.load(defaults_path=path)

    def test_invalid_values(self, loader, tmp_path):
        """Test that validation errors are wrapped with their details."""
        path = tmp_path / "invalid.toml"
        path.write_text('[logging]\nlevel = "LOUD"\n')

        with pytest.raises(ConfigurationError) as exc_info:
            loader.load(defaults_path=path)

        assert exc_info.value.context["errors"]
        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_user_config_overrides_defaults(self, loader, tmp_path, monkeypatch):
        """Test that later layers are deep merged over earlier ones."""
        path = tmp_path / "defaults.toml"
        path.write_text('[pipeline]\nmethod = "process"\ntrace = true\n')
        monkeypatch.setattr(loader, "_load_user_config", lambda: {"pipeline": {"trace": False}})

        config = loader.load(defaults_path=path)

        assert config.pipeline.method == "process"
        assert config.pipeline.trace is False

    def test_env_overrides(self, loader, monkeypatch):
        """Test PIPETHROUGH_SECTION_KEY overrides with type conversion."""
        monkeypatch.setenv("PIPETHROUGH_PIPELINE_METHOD", "process")
        monkeypatch.setenv("PIPETHROUGH_PIPELINE_TRACE", "yes")
        monkeypatch.setenv("PIPETHROUGH_LOGGING_LEVEL", "warning")

        config = loader.load()

        assert config.pipeline.method == "process"
        assert config.pipeline.trace is True
        assert config.logging.level == "WARNING"

    def test_env_override_into_scalar(self, loader, monkeypatch):
        """Test that an env var nested under a scalar is rejected."""
        monkeypatch.setenv("PIPETHROUGH_PIPELINE_METHOD_NAME", "x")
        monkeypatch.setattr(loader, "_load_user_config", lambda: {"pipeline": {"method": "handle"}})

        with pytest.raises(ConfigurationError, match="non-table"):
            loader.load()

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("true", True),
            ("No", False),
            ("42", 42),
            ("0.5", 0.5),
            ("a, b", ["a", "b"]),
            ("handle", "handle"),
        ],
    )
    def test_convert_env_value(self, loader, raw, expected):
        """Test environment value conversion."""
        assert loader._convert_env_value(raw) == expected

    def test_config_property_caches(self, loader):
        """Test that the config property loads once."""
        first = loader.config
        assert loader.config is first


@pytest.fixture
def global_loader(loader, monkeypatch):
    """Replace the process-wide loader with an isolated one."""
    from pipethrough.config import loader as loader_module

    monkeypatch.setattr(loader_module, "_loader", loader)
    return loader


class TestGlobalConfig:
    """Tests for get_config and reload_config."""

    def test_get_config_loads_lazily_and_caches(self, global_loader):
        """Test that get_config loads once and returns the same instance."""
        assert global_loader._config is None

        first = get_config()

        assert first == PipethroughConfig()
        assert get_config() is first

    def test_reload_config_replaces_cached_instance(self, global_loader, tmp_path):
        """Test that reload_config re-reads sources and updates get_config."""
        first = get_config()
        path = tmp_path / "reload.toml"
        path.write_text('[pipeline]\nmethod = "process"\n')

        reloaded = reload_config(path)

        assert reloaded is not first
        assert reloaded.pipeline.method == "process"
        assert get_config() is reloaded

    def test_failed_load_caches_nothing(self, global_loader, tmp_path):
        """Test that an invalid file leaves the loader empty."""
        path = tmp_path / "invalid.toml"
        path.write_text('[logging]\nlevel = "LOUD"\n')

        with pytest.raises(ConfigurationError):
            reload_config(path)

        assert global_loader._config is None
        assert get_config() == PipethroughConfig()

    def test_failed_reload_keeps_previous_config(self, global_loader, tmp_path):
        """Test that a failed reload does not discard the loaded config."""
        first = get_config()

        with pytest.raises(ConfigurationError):
            reload_config(tmp_path / "absent.toml")

        assert get_config() is first
