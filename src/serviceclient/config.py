"""
Configuration sources and logging settings.

The HTTP client resolves its base address from a ``ConfigurationSource``
once, at construction. Keys use ``Section:Key`` notation; the environment
source maps them to ``SECTION__KEY`` variables.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Protocol

from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SENSITIVE_HEADERS = frozenset({"authorization", "x-api-key", "api-key", "cookie", "set-cookie"})
DEFAULT_MASKED_PROPERTIES = frozenset({"password", "passwordhash"})


class ConfigurationSource(Protocol):
    """Read-only source of string configuration values."""

    def get_string(self, key: str) -> str:
        """
        Return the value stored under ``key``.

        Raises:
            ConfigurationError: If the key is missing or empty.
        """
        ...


class MappingConfiguration:
    """Configuration backed by an in-memory mapping."""

    def __init__(self, values: Mapping[str, str]):
        self._values = dict(values)

    def get_string(self, key: str) -> str:
        value = self._values.get(key)
        if not value:
            raise ConfigurationError(key)
        return value


class EnvConfiguration:
    """
    Configuration backed by environment variables.

    A ``.env`` file is loaded first (without overriding variables that are
    already set). ``Endpoints:UserService`` is looked up as
    ``<PREFIX>ENDPOINTS__USERSERVICE``.
    """

    def __init__(self, prefix: str = "", dotenv_path: Path | None = None):
        self.prefix = prefix
        load_dotenv(dotenv_path=dotenv_path)

    def env_name(self, key: str) -> str:
        """Map a ``Section:Key`` key to its environment variable name."""
        return self.prefix + key.replace(":", "__").replace("-", "_").upper()

    def get_string(self, key: str) -> str:
        name = self.env_name(key)
        value = os.environ.get(name)
        if not value:
            raise ConfigurationError(key, f"Configuration key '{key}' is missing or empty (env: {name})")
        logger.debug(f"Resolved configuration key {key} from {name}")
        return value


def _split_names(raw: str | None, default: frozenset[str]) -> frozenset[str]:
    if not raw:
        return default
    return frozenset(name.strip().lower() for name in raw.split(",") if name.strip())


@dataclass
class LoggingSettings:
    """
    Settings for the logging substrate and for payload masking.

    Attributes:
        level: Root log level name.
        json_log_file: If set, records are also written as JSON lines here.
        sensitive_headers: Header names (lowercase) whose values are masked.
        masked_properties: Payload property names (lowercase) replaced by "***".
        level_overrides: Minimum level per logger name (noisy libraries).
        application: Application name attached to JSON records.
        environment: Environment name attached to JSON records.
    """

    level: str = "INFO"
    json_log_file: Path | None = None
    sensitive_headers: frozenset[str] = DEFAULT_SENSITIVE_HEADERS
    masked_properties: frozenset[str] = DEFAULT_MASKED_PROPERTIES
    level_overrides: dict[str, str] = field(
        default_factory=lambda: {"aiohttp.access": "WARNING", "aiohttp.client": "WARNING"}
    )
    application: str = "serviceclient"
    environment: str = "production"

    @classmethod
    def from_env(cls, prefix: str = "SERVICECLIENT_") -> "LoggingSettings":
        """
        Build settings from environment variables.

        Recognized variables (with the default prefix): SERVICECLIENT_LOG_LEVEL,
        SERVICECLIENT_JSON_LOG_FILE, SERVICECLIENT_SENSITIVE_HEADERS,
        SERVICECLIENT_MASKED_PROPERTIES (comma separated), SERVICECLIENT_APPLICATION,
        SERVICECLIENT_ENVIRONMENT.
        """
        json_log_file = os.environ.get(f"{prefix}JSON_LOG_FILE")
        return cls(
            level=os.environ.get(f"{prefix}LOG_LEVEL", "INFO").upper(),
            json_log_file=Path(json_log_file) if json_log_file else None,
            sensitive_headers=_split_names(os.environ.get(f"{prefix}SENSITIVE_HEADERS"), DEFAULT_SENSITIVE_HEADERS),
            masked_properties=_split_names(os.environ.get(f"{prefix}MASKED_PROPERTIES"), DEFAULT_MASKED_PROPERTIES),
            application=os.environ.get(f"{prefix}APPLICATION", "serviceclient"),
            environment=os.environ.get(f"{prefix}ENVIRONMENT", "production"),
        )
