"""Unit tests for drone configuration."""

from pathlib import Path

import pytest
from file_drone.config import DroneConfig, default_directory, get_config, reload_config, set_config
from file_drone.models import FilterConfigurationError
from pydantic import ValidationError


class TestDroneConfig:
    """Test cases for DroneConfig."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        """Isolate tests from the host environment and any .env file."""
        monkeypatch.chdir(tmp_path)
        for key in ("XDG_DOCUMENTS_DIR", "FILE_DRONE_DIRECTORY_PATH", "FILE_DRONE_RECURSIVE"):
            monkeypatch.delenv(key, raising=False)

    def test_defaults(self):
        """Test default configuration values."""
        config = DroneConfig()

        assert config.directory_path == Path.home() / "Documents"
        assert config.recursive is False
        assert config.file_name_pattern is None
        assert config.type_pattern is None
        assert config.debounce_seconds == 0.0
        assert config.use_polling is False

    def test_default_directory_from_xdg(self, monkeypatch, tmp_path):
        """Test that XDG_DOCUMENTS_DIR overrides the default directory."""
        monkeypatch.setenv("XDG_DOCUMENTS_DIR", str(tmp_path))

        assert default_directory() == tmp_path
        assert DroneConfig().directory_path == tmp_path

    def test_environment_overrides(self, monkeypatch, tmp_path):
        """Test loading settings from prefixed environment variables."""
        monkeypatch.setenv("FILE_DRONE_DIRECTORY_PATH", str(tmp_path))
        monkeypatch.setenv("FILE_DRONE_RECURSIVE", "true")

        config = DroneConfig()

        assert config.directory_path == tmp_path
        assert config.recursive is True

    def test_invalid_file_name_pattern(self):
        """Test that invalid patterns are rejected at load time."""
        with pytest.raises(FilterConfigurationError) as exc_info:
            DroneConfig(file_name_pattern="[unclosed")

        assert exc_info.value.context["config_key"] == "file_name_pattern"

    def test_invalid_type_pattern(self):
        """Test that invalid type patterns are rejected at load time."""
        with pytest.raises(FilterConfigurationError):
            DroneConfig(type_pattern="(")

    def test_debounce_bounds(self):
        """Test validation of debounce seconds."""
        with pytest.raises(ValidationError):
            DroneConfig(debounce_seconds=-1)

    def test_log_config(self, tmp_path):
        """Test logging configuration dictionary."""
        config = DroneConfig(log_level="DEBUG", log_file=tmp_path / "drone.log")

        log_config = config.get_log_config()

        assert log_config["loggers"]["file_drone"]["level"] == "DEBUG"
        assert log_config["handlers"]["default"]["class"] == "logging.FileHandler"
        assert log_config["handlers"]["default"]["filename"] == str(tmp_path / "drone.log")

    def test_log_config_stream_handler(self):
        """Test logging to a stream when no log file is set."""
        log_config = DroneConfig().get_log_config()

        assert log_config["handlers"]["default"]["class"] == "logging.StreamHandler"
        assert log_config["loggers"]["file_drone"]["level"] == "INFO"


class TestGlobalConfig:
    """Test cases for the global configuration accessors."""

    def test_set_and_get_config(self, tmp_path):
        """Test replacing the global configuration."""
        config = DroneConfig(directory_path=tmp_path)
        set_config(config)

        assert get_config() is config

        reloaded = reload_config()
        assert reloaded is get_config()
        assert reloaded is not config
