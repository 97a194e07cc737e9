"""Configuration utilities for the bridge automation."""

from .loader import (
    ApiUrlsConfig,
    BridgeConfig,
    BridgeOperation,
    ChainConfig,
    ConfigError,
    MonitoringConfig,
    NotificationConfig,
    OptionsConfig,
    RetryPolicy,
    ThresholdConfig,
    load_config,
    parse_config,
)

__all__ = [
    "ApiUrlsConfig",
    "BridgeConfig",
    "BridgeOperation",
    "ChainConfig",
    "ConfigError",
    "MonitoringConfig",
    "NotificationConfig",
    "OptionsConfig",
    "RetryPolicy",
    "ThresholdConfig",
    "load_config",
    "parse_config",
]
