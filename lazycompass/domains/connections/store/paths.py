"""Filesystem locations for global and repository configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_DIR = "lazycompass"
REPO_DIR = ".lazycompass"
CONFIG_FILE = "config.toml"
CONFIG_DIR_ENV = "LAZYCOMPASS_CONFIG_DIR"


def default_global_root() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_DIR, appauthor=False))


def find_repo_root(start: Path) -> Path | None:
    """Walk up from ``start`` to the first directory holding .lazycompass or .git."""
    for directory in (start, *start.parents):
        if (directory / REPO_DIR).is_dir():
            return directory
        if (directory / ".git").exists():
            return directory
    return None


@dataclass(frozen=True)
class ConfigPaths:
    global_root: Path
    repo_root: Path | None = None

    @classmethod
    def resolve_from(cls, cwd: Path, global_root: Path | None = None) -> ConfigPaths:
        return cls(
            global_root=global_root or default_global_root(),
            repo_root=find_repo_root(cwd.resolve()),
        )

    def global_config_path(self) -> Path:
        return self.global_root / CONFIG_FILE

    def repo_config_root(self) -> Path | None:
        if self.repo_root is None:
            return None
        return self.repo_root / REPO_DIR

    def repo_config_path(self) -> Path | None:
        root = self.repo_config_root()
        return root / CONFIG_FILE if root else None

    def repo_queries_dir(self) -> Path | None:
        root = self.repo_config_root()
        return root / "queries" if root else None

    def repo_aggregations_dir(self) -> Path | None:
        root = self.repo_config_root()
        return root / "aggregations" if root else None
