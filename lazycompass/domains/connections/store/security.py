"""Owner-only permissions for config directories and files."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.shared.core.errors import StorageError
from lazycompass.shared.core.redaction import redact_sensitive_text

SECURE_DIR_MODE = 0o700
SECURE_FILE_MODE = 0o600


def _posix() -> bool:
    return os.name == "posix"


def ensure_secure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
        if _posix():
            path.chmod(SECURE_DIR_MODE)
    except OSError as exc:
        raise StorageError(f"unable to create directory {path}") from exc


def write_secure_file(path: Path, contents: str) -> None:
    """Write ``contents`` to ``path`` so that only the owner can read it."""
    try:
        if _posix():
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECURE_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(contents)
            path.chmod(SECURE_FILE_MODE)
        else:
            path.write_text(contents, encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"unable to write file {path}") from exc


def _mode(path: Path) -> int | None:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except OSError:
        return None


def _check(path: Path, expected: int, kind: str, warnings: list[str]) -> None:
    mode = _mode(path)
    if mode is None or mode & 0o077 == 0:
        return
    warnings.append(
        redact_sensitive_text(
            f"permission warning: {kind} {path} has mode {mode:03o}, expected {expected:03o}"
        )
    )


def permission_warnings(paths: ConfigPaths) -> list[str]:
    """Report config locations readable by group or others."""
    if not _posix():
        return []
    warnings: list[str] = []
    if paths.global_root.is_dir():
        _check(paths.global_root, SECURE_DIR_MODE, "directory", warnings)
    if paths.global_config_path().is_file():
        _check(paths.global_config_path(), SECURE_FILE_MODE, "file", warnings)
    repo_root = paths.repo_config_root()
    if repo_root is None or not repo_root.is_dir():
        return warnings
    _check(repo_root, SECURE_DIR_MODE, "directory", warnings)
    config_path = paths.repo_config_path()
    if config_path is not None and config_path.is_file():
        _check(config_path, SECURE_FILE_MODE, "file", warnings)
    for directory in (paths.repo_queries_dir(), paths.repo_aggregations_dir()):
        if directory is None or not directory.is_dir():
            continue
        _check(directory, SECURE_DIR_MODE, "directory", warnings)
        for item in sorted(directory.glob("*.json")):
            _check(item, SECURE_FILE_MODE, "file", warnings)
    return warnings
