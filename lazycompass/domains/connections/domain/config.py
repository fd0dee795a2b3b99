"""Configuration domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from lazycompass.shared.core.errors import ValidationError
from lazycompass.shared.core.redaction import uri_has_credentials

DEFAULT_CONNECT_TIMEOUT_MS = 10_000
DEFAULT_QUERY_TIMEOUT_MS = 30_000
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_FILE = "lazycompass.log"
DEFAULT_LOG_MAX_SIZE_MB = 10
DEFAULT_LOG_MAX_BACKUPS = 3


class ConnectionPersistenceScope(Enum):
    """Where a connection added from the UI is stored."""

    SESSION_ONLY = "session"
    REPO = "repo"
    GLOBAL = "global"


def _optional_str(data: dict[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{where}: '{key}' must be a string")
    return value


def _optional_bool(data: dict[str, Any], key: str, where: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"{where}: '{key}' must be true or false")
    return value


def _optional_int(data: dict[str, Any], key: str, where: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{where}: '{key}' must be a non-negative integer")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"[{key}] must be a table")
    return value


@dataclass
class ConnectionSpec:
    """A named MongoDB connection."""

    name: str
    uri: str
    default_database: str | None = None
    # uri as written in the config file, before ${VAR} interpolation
    uri_template: str | None = field(default=None, compare=False, repr=False)

    @property
    def label(self) -> str:
        if self.default_database:
            return f"{self.name} ({self.default_database})"
        return self.name

    def validate(self) -> None:
        if not self.name.strip():
            raise ValidationError("connection name cannot be empty")
        if not self.uri.strip():
            raise ValidationError("connection uri cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "uri": self.uri}
        if self.default_database is not None:
            data["default_database"] = self.default_database
        return data

    @classmethod
    def from_dict(cls, data: Any, where: str = "connection") -> ConnectionSpec:
        if not isinstance(data, dict):
            raise ValidationError(f"{where} must be a table")
        for key in data:
            if key not in ("name", "uri", "default_database"):
                raise ValidationError(f"{where}: unknown field '{key}'")
        name = data.get("name")
        uri = data.get("uri")
        if not isinstance(name, str):
            raise ValidationError(f"{where}: 'name' must be a string")
        if not isinstance(uri, str):
            raise ValidationError(f"{where}: 'uri' must be a string")
        return cls(
            name=name,
            uri=uri,
            default_database=_optional_str(data, "default_database", where),
        )


@dataclass
class ThemeConfig:
    name: str | None = None


@dataclass
class LoggingConfig:
    level: str | None = None
    file: str | None = None
    max_size_mb: int | None = None
    max_backups: int | None = None

    def effective_level(self) -> str:
        return self.level or DEFAULT_LOG_LEVEL

    def max_size_bytes(self) -> int:
        return (self.max_size_mb or DEFAULT_LOG_MAX_SIZE_MB) * 1024 * 1024

    def effective_max_backups(self) -> int:
        return self.max_backups or DEFAULT_LOG_MAX_BACKUPS


@dataclass
class TimeoutConfig:
    connect_ms: int | None = None
    query_ms: int | None = None


@dataclass
class Config:
    """Merged application configuration.

    Scalar settings are optional so that a repo config can override the
    global config key by key; the accessor methods apply the defaults.
    """

    connections: list[ConnectionSpec] = field(default_factory=list)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    read_only: bool | None = None
    allow_pipeline_writes: bool | None = None
    allow_insecure: bool | None = None

    def is_read_only(self) -> bool:
        return True if self.read_only is None else self.read_only

    def pipeline_writes_allowed(self) -> bool:
        return bool(self.allow_pipeline_writes)

    def insecure_allowed(self) -> bool:
        return bool(self.allow_insecure)

    def connect_timeout_ms(self) -> int:
        return self.timeouts.connect_ms or DEFAULT_CONNECT_TIMEOUT_MS

    def query_timeout_ms(self) -> int:
        return self.timeouts.query_ms or DEFAULT_QUERY_TIMEOUT_MS

    def connection_named(self, name: str) -> ConnectionSpec | None:
        for connection in self.connections:
            if connection.name == name:
                return connection
        return None

    def validate(self) -> None:
        seen: set[str] = set()
        for index, connection in enumerate(self.connections):
            if not connection.name.strip():
                raise ValidationError(f"connection at index {index} has empty name")
            if not connection.uri.strip():
                raise ValidationError(f"connection '{connection.name}' has empty uri")
            if connection.name in seen:
                raise ValidationError(f"duplicate connection name '{connection.name}'")
            seen.add(connection.name)
        if self.timeouts.connect_ms == 0:
            raise ValidationError("connect timeout must be greater than 0")
        if self.timeouts.query_ms == 0:
            raise ValidationError("query timeout must be greater than 0")
        if self.logging.max_size_mb == 0:
            raise ValidationError("logging max_size_mb must be greater than 0")
        if self.logging.max_backups == 0:
            raise ValidationError("logging max_backups must be greater than 0")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        raw_connections = data.get("connections", [])
        if not isinstance(raw_connections, list):
            raise ValidationError("'connections' must be an array of tables")
        connections = [
            ConnectionSpec.from_dict(item, where=f"connection at index {index}")
            for index, item in enumerate(raw_connections)
        ]
        theme = _section(data, "theme")
        logging = _section(data, "logging")
        timeouts = _section(data, "timeouts")
        return cls(
            connections=connections,
            theme=ThemeConfig(name=_optional_str(theme, "name", "[theme]")),
            logging=LoggingConfig(
                level=_optional_str(logging, "level", "[logging]"),
                file=_optional_str(logging, "file", "[logging]"),
                max_size_mb=_optional_int(logging, "max_size_mb", "[logging]"),
                max_backups=_optional_int(logging, "max_backups", "[logging]"),
            ),
            timeouts=TimeoutConfig(
                connect_ms=_optional_int(timeouts, "connect_ms", "[timeouts]"),
                query_ms=_optional_int(timeouts, "query_ms", "[timeouts]"),
            ),
            read_only=_optional_bool(data, "read_only", "config"),
            allow_pipeline_writes=_optional_bool(data, "allow_pipeline_writes", "config"),
            allow_insecure=_optional_bool(data, "allow_insecure", "config"),
        )


def _tls_disabled(uri: str) -> bool:
    try:
        query = urlsplit(uri).query
    except ValueError:
        return False
    for key, value in parse_qsl(query):
        if key.lower() in ("tls", "ssl") and value.lower() == "false":
            return True
    return False


def connection_security_warnings(config: Config) -> list[str]:
    """Warnings for connections that leak credentials or skip TLS."""
    if config.insecure_allowed():
        return []
    warnings: list[str] = []
    for connection in config.connections:
        if connection.uri_template is None and uri_has_credentials(connection.uri):
            warnings.append(
                f"connection '{connection.name}' embeds credentials in its uri; "
                "use ${VAR} placeholders or a .env file"
            )
        if _tls_disabled(connection.uri):
            warnings.append(
                f"connection '{connection.name}' disables TLS; set allow_insecure = true to silence"
            )
    return warnings
