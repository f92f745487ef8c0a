"""Configuration management and settings."""

from file_drone.config.settings import DroneConfig, LogLevel, default_directory, get_config, reload_config, set_config

__all__ = ["DroneConfig", "LogLevel", "default_directory", "get_config", "reload_config", "set_config"]
