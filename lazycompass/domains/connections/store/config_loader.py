"""Loading and merging of global and repository config files."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from lazycompass.domains.connections.domain.config import (
    DEFAULT_LOG_FILE,
    Config,
    LoggingConfig,
    TimeoutConfig,
)
from lazycompass.domains.connections.store.paths import REPO_DIR, ConfigPaths
from lazycompass.shared.core.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


def interpolate_env_value(value: str) -> str:
    """Replace ``${NAME}`` placeholders with environment variable values."""
    output: list[str] = []
    remainder = value
    while True:
        start = remainder.find("${")
        if start < 0:
            break
        output.append(remainder[:start])
        rest = remainder[start + 2 :]
        end = rest.find("}")
        if end < 0:
            raise ValidationError("unterminated env var placeholder")
        name = rest[:end]
        if not name.strip():
            raise ValidationError("empty env var placeholder")
        resolved = os.environ.get(name)
        if resolved is None:
            raise ValidationError(f"missing environment variable '{name}'")
        output.append(resolved)
        remainder = rest[end + 1 :]
    output.append(remainder)
    return "".join(output)


def dotenv_path_for_config(path: Path) -> Path:
    parent = path.parent
    if parent.name == REPO_DIR:
        return parent.parent / ".env"
    return parent / ".env"


def read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise StorageError(f"unable to read config file {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise StorageError(f"invalid TOML in config file {path}: {exc}") from exc


def _resolve_env_vars(config: Config, path: Path) -> None:
    for index, connection in enumerate(config.connections):
        if "${" not in connection.uri:
            continue
        label = f"connection '{connection.name}'" if connection.name.strip() else f"connection at index {index}"
        try:
            resolved = interpolate_env_value(connection.uri)
        except ValidationError as exc:
            raise ValidationError(f"config {path}: unable to resolve env vars in {label} uri: {exc}") from exc
        config.connections[index] = replace(connection, uri=resolved, uri_template=connection.uri)

    log_file = config.logging.file
    if log_file and "${" in log_file:
        try:
            config.logging.file = interpolate_env_value(log_file)
        except ValidationError as exc:
            raise ValidationError(
                f"config {path}: unable to resolve env vars in logging.file: {exc}"
            ) from exc


def read_config(path: Path) -> Config:
    """Read one config file; a missing file yields an empty config."""
    if not path.is_file():
        return Config()
    dotenv_path = dotenv_path_for_config(path)
    if dotenv_path.is_file():
        logger.debug("loading environment from %s", dotenv_path)
        load_dotenv(dotenv_path, override=False)
    data = read_toml(path)
    try:
        config = Config.from_dict(data)
        _resolve_env_vars(config, path)
        config.validate()
    except ValidationError as exc:
        raise ValidationError(f"invalid config data in {path}: {exc}") from exc
    return config


def merge_config(global_config: Config, repo: Config) -> Config:
    """Overlay ``repo`` on ``global_config``.

    Connections with the same name are replaced in place, new ones are
    appended. Every scalar setting prefers the repo value when it is set.
    """
    connections = list(global_config.connections)
    for repo_connection in repo.connections:
        for index, existing in enumerate(connections):
            if existing.name == repo_connection.name:
                connections[index] = repo_connection
                break
        else:
            connections.append(repo_connection)

    def pick(repo_value: Any, global_value: Any) -> Any:
        return repo_value if repo_value is not None else global_value

    theme = repo.theme if repo.theme.name is not None else global_config.theme
    return Config(
        connections=connections,
        theme=theme,
        logging=LoggingConfig(
            level=pick(repo.logging.level, global_config.logging.level),
            file=pick(repo.logging.file, global_config.logging.file),
            max_size_mb=pick(repo.logging.max_size_mb, global_config.logging.max_size_mb),
            max_backups=pick(repo.logging.max_backups, global_config.logging.max_backups),
        ),
        timeouts=TimeoutConfig(
            connect_ms=pick(repo.timeouts.connect_ms, global_config.timeouts.connect_ms),
            query_ms=pick(repo.timeouts.query_ms, global_config.timeouts.query_ms),
        ),
        read_only=pick(repo.read_only, global_config.read_only),
        allow_pipeline_writes=pick(repo.allow_pipeline_writes, global_config.allow_pipeline_writes),
        allow_insecure=pick(repo.allow_insecure, global_config.allow_insecure),
    )


def load_config(paths: ConfigPaths) -> Config:
    repo_path = paths.repo_config_path()
    repo = read_config(repo_path) if repo_path is not None else Config()
    global_config = read_config(paths.global_config_path())
    return merge_config(global_config, repo)


def log_file_path(paths: ConfigPaths, config: Config) -> Path:
    configured = config.logging.file
    if not configured:
        return paths.global_root / DEFAULT_LOG_FILE
    path = Path(configured).expanduser()
    if path.is_absolute():
        return path
    return paths.global_root / path
