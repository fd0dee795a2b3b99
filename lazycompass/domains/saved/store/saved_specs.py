"""Saved query and aggregation files under .lazycompass/."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.domains.connections.store.security import ensure_secure_dir, write_secure_file
from lazycompass.domains.saved.domain.payloads import (
    dump_json,
    parse_saved_aggregation_payload,
    parse_saved_query_payload,
)
from lazycompass.domains.saved.domain.specs import (
    SavedAggregation,
    SavedQuery,
    SavedScope,
    parse_scope_from_saved_id,
    validate_saved_id,
)
from lazycompass.shared.core.errors import LazyCompassError, StorageError, ValidationError
from lazycompass.shared.core.redaction import redact_sensitive_text

logger = logging.getLogger(__name__)

MISSING_REPO = "repository config not found; run inside a repo with .lazycompass"

T = TypeVar("T", SavedQuery, SavedAggregation)


def collect_json_paths(directory: Path) -> list[Path]:
    """List ``*.json`` files directly inside ``directory``, sorted."""
    if not directory.is_dir():
        return []
    try:
        return sorted(path for path in directory.iterdir() if path.is_file() and path.suffix == ".json")
    except OSError as exc:
        raise StorageError(f"unable to read directory {directory}") from exc


def saved_id_from_path(path: Path) -> str:
    saved_id = path.stem
    validate_saved_id(saved_id)
    return saved_id


def _load_one(path: Path, kind: str, parse: Callable[[Any, str, SavedScope], T]) -> T:
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"unable to read saved {kind} file {path}") from exc
    try:
        data = json.loads(contents)
    except json.JSONDecodeError as exc:
        raise StorageError(f"invalid JSON in saved {kind} {path}: {exc}") from exc
    saved_id = saved_id_from_path(path)
    try:
        scope = parse_scope_from_saved_id(saved_id)
    except ValidationError as exc:
        raise ValidationError(f"invalid saved {kind} id '{saved_id}': {exc}") from exc
    try:
        return parse(data, saved_id, scope)
    except LazyCompassError as exc:
        raise ValidationError(f"invalid saved {kind} {path}: {exc}") from exc


def _load_dir(
    directory: Path | None, kind: str, parse: Callable[[Any, str, SavedScope], T]
) -> tuple[list[T], list[str]]:
    if directory is None:
        return [], []
    items: list[T] = []
    warnings: list[str] = []
    for path in collect_json_paths(directory):
        try:
            items.append(_load_one(path, kind, parse))
        except LazyCompassError as exc:
            warning = redact_sensitive_text(f"skipping saved {kind} {path}: {exc}")
            logger.warning(warning)
            warnings.append(warning)
    return items, warnings


def load_saved_queries(paths: ConfigPaths) -> tuple[list[SavedQuery], list[str]]:
    return _load_dir(paths.repo_queries_dir(), "query", parse_saved_query_payload)


def load_saved_aggregations(paths: ConfigPaths) -> tuple[list[SavedAggregation], list[str]]:
    return _load_dir(paths.repo_aggregations_dir(), "aggregation", parse_saved_aggregation_payload)


def saved_query_path(paths: ConfigPaths, saved_id: str) -> Path:
    validate_saved_id(saved_id)
    directory = paths.repo_queries_dir()
    if directory is None:
        raise StorageError(MISSING_REPO)
    return directory / f"{saved_id}.json"


def saved_aggregation_path(paths: ConfigPaths, saved_id: str) -> Path:
    validate_saved_id(saved_id)
    directory = paths.repo_aggregations_dir()
    if directory is None:
        raise StorageError(MISSING_REPO)
    return directory / f"{saved_id}.json"


def _check_scope(saved_id: str, scope: SavedScope, kind: str) -> None:
    if parse_scope_from_saved_id(saved_id) != scope:
        raise ValidationError(f"saved {kind} id '{saved_id}' does not match its scope")


def _write(path: Path, saved_id: str, kind: str, contents: str, overwrite: bool) -> Path:
    if path.exists() and not overwrite:
        raise ValidationError(f"saved {kind} '{saved_id}' already exists")
    ensure_secure_dir(path.parent)
    try:
        write_secure_file(path, contents)
    except StorageError as exc:
        raise StorageError(f"unable to write saved {kind} {path}") from exc
    logger.info("wrote saved %s %s", kind, path)
    return path


def write_saved_query(paths: ConfigPaths, query: SavedQuery, overwrite: bool = False) -> Path:
    """Validate ``query`` and write it as ``<id>.json``.

    The scope must agree with the id grammar; both checks happen before
    anything touches the filesystem.
    """
    query.validate()
    _check_scope(query.id, query.scope, "query")
    path = saved_query_path(paths, query.id)
    return _write(path, query.id, "query", dump_json(query.payload()), overwrite)


def write_saved_aggregation(paths: ConfigPaths, aggregation: SavedAggregation, overwrite: bool = False) -> Path:
    aggregation.validate()
    _check_scope(aggregation.id, aggregation.scope, "aggregation")
    path = saved_aggregation_path(paths, aggregation.id)
    return _write(path, aggregation.id, "aggregation", dump_json(aggregation.pipeline), overwrite)
