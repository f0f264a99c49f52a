"""
Runtime configuration for the company directory service.
"""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "COMPANYDIR_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class Config:
    """Settings for the store and the HTTP service."""
    data_file: str = "companies.csv"
    host: str = "127.0.0.1"
    port: int = 8080
    truncate: bool = False
    sync_writes: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Config':
        """
        Build a configuration from COMPANYDIR_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        if environ is None:
            environ = os.environ

        config = cls()
        if f"{ENV_PREFIX}DATA_FILE" in environ:
            config.data_file = environ[f"{ENV_PREFIX}DATA_FILE"]
        if f"{ENV_PREFIX}HOST" in environ:
            config.host = environ[f"{ENV_PREFIX}HOST"]
        if f"{ENV_PREFIX}PORT" in environ:
            config.port = parse_port(environ[f"{ENV_PREFIX}PORT"])
        if f"{ENV_PREFIX}TRUNCATE" in environ:
            config.truncate = parse_bool(environ[f"{ENV_PREFIX}TRUNCATE"])
        if f"{ENV_PREFIX}SYNC_WRITES" in environ:
            config.sync_writes = parse_bool(environ[f"{ENV_PREFIX}SYNC_WRITES"])
        if f"{ENV_PREFIX}LOG_LEVEL" in environ:
            config.log_level = parse_log_level(environ[f"{ENV_PREFIX}LOG_LEVEL"])
        return config


def parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"Invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range: {port}")
    return port


def parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Invalid log level: {value!r}")
    return level
