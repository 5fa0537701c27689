from __future__ import annotations
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type
from pydantic import BaseModel, Field, ValidationError, field_validator

from relay_trader.utils.constants import DEFAULT_INIT_TIMEOUT_MS, endpoints_for_network

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_CONFIG_SUFFIXES = (".yaml", ".yml")

# Keys a config file must spell out; everything else has a default
REQUIRED_KEYS: Dict[str, Type] = {"Endpoint": str, "WebsocketEndpoint": str}


class RelayConfig(BaseModel):
    """Root configuration for the relay client"""
    Endpoint: str
    WebsocketEndpoint: str
    SdkInitializationTimeout: float = Field(default=DEFAULT_INIT_TIMEOUT_MS, description="Per-step timeout in milliseconds")
    ConsoleLevel: str = "INFO"
    FileLevel: str = "DEBUG"
    LogPath: Optional[str] = None

    @field_validator("Endpoint", "WebsocketEndpoint")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        if not value:
            raise ValueError("endpoint must not be empty")
        return value.rstrip("/")

    @field_validator("SdkInitializationTimeout")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"SdkInitializationTimeout must be positive, got {value}")
        return value

    @field_validator("ConsoleLevel", "FileLevel")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level {value}, expected one of {', '.join(_LOG_LEVELS)}")
        return level


def _parse_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as err:
        raise OSError(f"Unable to read config file {path}: {err}") from err
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise ValueError(f"YAML syntax error in {path}: {err}") from err

    # An empty file parses to None
    raw = {} if raw is None else raw
    if not isinstance(raw, dict):
        raise TypeError(f"Top-level YAML must be a mapping, got {type(raw).__name__}")
    return raw


def _check_required(raw: Dict[str, Any]):
    missing = [key for key in REQUIRED_KEYS if key not in raw]
    if missing:
        raise KeyError(f"Missing required top-level key(s): {', '.join(missing)}")
    for key, expected in REQUIRED_KEYS.items():
        if not isinstance(raw[key], expected):
            raise TypeError(f"'{key}' must be a {expected.__name__}, got {type(raw[key]).__name__}")


def read_config(path: str | Path, logger: logging.Logger) -> RelayConfig:
    """
    Load a YAML configuration file and return a validated `RelayConfig`.

    Parameters
    ----------
    path : str | Path
        Location of the YAML file (.yaml | .yml).
    logger : logging.Logger
        Logger instance for diagnostics.

    Raises
    ------
    (ValueError, FileNotFoundError, TypeError, KeyError, ValidationError)
    """
    config_file = Path(path)
    if config_file.suffix not in _CONFIG_SUFFIXES:
        raise ValueError(f"Config file must be YAML (.yaml or .yml), got {config_file.name}")
    if not config_file.is_file():
        raise FileNotFoundError(config_file)

    logger.debug(f"Reading relay configuration from {config_file}")
    raw = _parse_file(config_file)
    _check_required(raw)

    try:
        config = RelayConfig.model_validate(raw)
    except ValidationError as err:
        logger.error(f"Invalid relay configuration in {config_file.name}: {err}")
        raise

    logger.info(f"Relay configuration loaded from {config_file.name} (endpoint {config.Endpoint})")
    return config


def create_default_config(logger: logging.Logger, network_id: int = 1) -> RelayConfig:
    """
    Build a configuration pointing at the public endpoints of `network_id`.

    Args:
        logger: Logger instance
        network_id: Chain id (1 mainnet, 42 kovan)

    Returns:
        RelayConfig: Default configuration object
    """
    endpoints = endpoints_for_network(network_id)
    logger.info(f"No config file, using public endpoints of network {network_id}: {endpoints['endpoint']}")
    return RelayConfig(Endpoint=endpoints["endpoint"], WebsocketEndpoint=endpoints["websocket_endpoint"])
