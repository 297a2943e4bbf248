"""Configuration management module for the talent matching service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    DEFAULT_WEIGHTS,
    AlertsConfig,
    AppConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ScoringWeights,
    Weekday,
)

__all__ = [
    "load_config",
    "parse_app_config",
    "load_environment_config",
    "AppConfig",
    "AlertsConfig",
    "LoggingConfig",
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "EnvironmentConfig",
    "LogLevel",
    "LogFormat",
    "Weekday",
    "ConfigurationError",
]
