"""Persisting connections added from the UI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import tomli_w

from lazycompass.domains.connections.domain.config import ConnectionSpec
from lazycompass.domains.connections.store.config_loader import read_toml
from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.domains.connections.store.security import ensure_secure_dir, write_secure_file
from lazycompass.shared.core.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


def _append_connection(config_root: Path, config_path: Path, connection: ConnectionSpec, label: str) -> Path:
    connection.validate()
    ensure_secure_dir(config_root)
    data: dict[str, Any] = read_toml(config_path) if config_path.is_file() else {}

    existing = data.get("connections")
    if existing is None:
        existing = []
    if not isinstance(existing, list):
        raise StorageError(f"invalid config data in {config_path}: 'connections' must be an array of tables")
    for item in existing:
        if isinstance(item, dict) and item.get("name") == connection.name:
            raise ValidationError(f"connection '{connection.name}' already exists in {label} config")

    existing.append(connection.to_dict())
    data["connections"] = existing
    write_secure_file(config_path, tomli_w.dumps(data))
    logger.info("added connection %s to %s", connection.name, config_path)
    return config_path


def append_connection_to_repo_config(paths: ConfigPaths, connection: ConnectionSpec) -> Path:
    """Append ``connection`` to .lazycompass/config.toml, creating it if needed."""
    repo_root = paths.repo_config_root()
    config_path = paths.repo_config_path()
    if repo_root is None or config_path is None:
        raise StorageError("no repo config found; run inside a repo with .lazycompass")
    return _append_connection(repo_root, config_path, connection, "repo")


def append_connection_to_global_config(paths: ConfigPaths, connection: ConnectionSpec) -> Path:
    """Append ``connection`` to the global config.toml, creating it if needed."""
    return _append_connection(paths.global_root, paths.global_config_path(), connection, "global")
