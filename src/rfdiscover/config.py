"""Configuration loading and merging for rfdiscover."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .transport import DEFAULT_MQTT_URL, HEARTBEAT_TOPIC


MQTT_URL_ENV = "RF_MQTT_URL"
OUTPUT_FORMATS = ("text", "json")


@dataclass
class DiscoveryConfig:
    # Broker URL; falls back to $RF_MQTT_URL, then DEFAULT_MQTT_URL
    mqtt_url: Optional[str] = None
    topic: str = HEARTBEAT_TOPIC

    # Stop early after this many seconds without any heartbeat
    idle_timeout: float = 4.0

    # Hard ceiling on the whole discovery window (seconds)
    discovery_timeout: float = 30.0

    # Seconds to wait for the broker's CONNACK
    connect_timeout: float = 10.0

    # Client id prefix; hostname and a random suffix are appended
    client_prefix: str = "rf-client"

    format: str = "text"
    verbose: bool = False


class ConfigError(ValueError):
    """Configuration file or values are unusable."""


def load_config(path: str | Path) -> DiscoveryConfig:
    """Load a DiscoveryConfig from a YAML file. Unknown keys are ignored."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"can't read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    valid_fields = {f.name for f in fields(DiscoveryConfig)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return DiscoveryConfig(**filtered)


def merge_cli_args(config: DiscoveryConfig, args) -> DiscoveryConfig:
    """Overlay CLI arguments onto an existing config. CLI values take precedence."""
    for f in fields(DiscoveryConfig):
        cli_val = getattr(args, f.name, None)
        if cli_val is not None:
            setattr(config, f.name, cli_val)
    return config


def apply_env(config: DiscoveryConfig) -> DiscoveryConfig:
    """Overlay $RF_MQTT_URL onto a file-loaded config. CLI values are merged after."""
    url = os.environ.get(MQTT_URL_ENV)
    if url:
        config.mqtt_url = url
    return config


def resolve_mqtt_url(config: DiscoveryConfig) -> str:
    return config.mqtt_url or DEFAULT_MQTT_URL


def validate_config(config: DiscoveryConfig) -> None:
    for name in ("idle_timeout", "discovery_timeout", "connect_timeout"):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"{name} must be a positive number, got {value!r}")
    if config.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {config.format!r}"
        )
    if not config.topic:
        raise ConfigError("topic must not be empty")
