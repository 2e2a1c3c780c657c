"""Application configuration loaded from a YAML file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "config/prod.yaml"


class ConfigError(Exception):
    """Raised when the configuration file is missing or malformed."""


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"'{key}' must be a scalar value")


def _integer(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer")
    return value


@dataclass
class HTTPServerConfig:
    """Where the HTTP server listens."""

    host: str = ""


@dataclass
class DatabaseConfig:
    """How to reach the PostgreSQL database."""

    host: str = ""
    port: int = 0
    db_name: str = ""
    user: str = ""
    password: str = field(default="", repr=False)


@dataclass
class Config:
    """The whole application configuration."""

    env: str = ""
    description: str = ""
    http_server: HTTPServerConfig = field(default_factory=HTTPServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> Config:
        """Build a configuration from parsed YAML; absent keys keep empty values."""
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigError("configuration must be a mapping")
        server = _section(data, "http_server")
        database = _section(data, "database")
        return cls(
            env=_text(data, "env"),
            description=_text(data, "description"),
            http_server=HTTPServerConfig(host=_text(server, "host")),
            database=DatabaseConfig(
                host=_text(database, "host"),
                port=_integer(database, "port"),
                db_name=_text(database, "db_name"),
                user=_text(database, "user"),
                password=_text(database, "password"),
            ),
        )


def load_config(path: str | os.PathLike[str] | None = None) -> Config:
    """Read the configuration file at ``path`` (or the default location)."""
    config_path = os.fspath(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path:
        raise ConfigError("configuration file path is not set")
    if not os.path.exists(config_path):
        raise ConfigError(f"config file does not exist at {config_path}")
    try:
        with open(config_path, encoding="utf-8") as stream:
            data = yaml.safe_load(stream)
        return Config.from_mapping(data)
    except (OSError, yaml.YAMLError, ConfigError) as exc:
        raise ConfigError(f"failed to load configuration: {exc}") from exc