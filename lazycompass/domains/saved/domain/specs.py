"""Saved query and aggregation models and the saved id grammar."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, TypeVar

from lazycompass.shared.core.errors import ValidationError

QUERY_FIELDS = ("filter", "projection", "sort", "limit")


@dataclass(frozen=True)
class SharedScope:
    """Runs against whatever database and collection are selected."""

    @property
    def label(self) -> str:
        return "shared"


@dataclass(frozen=True)
class ScopedScope:
    """Bound to a fixed database and collection."""

    database: str
    collection: str

    @property
    def label(self) -> str:
        return f"{self.database}.{self.collection}"


SavedScope = SharedScope | ScopedScope

SHARED = SharedScope()


def validate_saved_id(saved_id: str) -> None:
    if not saved_id.strip():
        raise ValidationError("saved id cannot be empty")
    if saved_id.strip() != saved_id:
        raise ValidationError("saved id cannot have leading or trailing whitespace")
    if "/" in saved_id or "\\" in saved_id:
        raise ValidationError("saved id cannot contain path separators")
    segments = saved_id.split(".")
    if any(not segment.strip() for segment in segments):
        raise ValidationError("saved id cannot contain empty segments")
    if len(segments) == 2:
        raise ValidationError(
            "saved id with two segments is invalid; use <name> or <db>.<collection>.<name>"
        )


def parse_scope_from_saved_id(saved_id: str) -> SavedScope:
    """Derive the scope encoded in a saved id.

    ``name`` is shared; ``db.collection.name`` is scoped, and everything
    between the first and last segment is the collection name, so
    collections may contain dots themselves.
    """
    validate_saved_id(saved_id)
    segments = saved_id.split(".")
    if len(segments) == 1:
        return SHARED
    return ScopedScope(database=segments[0], collection=".".join(segments[1:-1]))


def saved_scope_label(scope: SavedScope) -> str:
    return scope.label


def default_saved_id(kind: str, scope: SavedScope) -> str:
    name = f"{kind}_{int(time.time() * 1000)}"
    if isinstance(scope, ScopedScope):
        return f"{scope.database}.{scope.collection}.{name}"
    return name


def _require_object(value: Any, label: str) -> None:
    if value is not None and not isinstance(value, dict):
        raise ValidationError(f"saved query {label} must be a JSON object")


@dataclass
class SavedQuery:
    id: str
    scope: SavedScope = SHARED
    filter: dict[str, Any] | None = None
    projection: dict[str, Any] | None = None
    sort: dict[str, Any] | None = None
    limit: int | None = None

    def validate(self) -> None:
        validate_saved_id(self.id)
        _require_object(self.filter, "filter")
        _require_object(self.projection, "projection")
        _require_object(self.sort, "sort")
        if self.limit is not None and (isinstance(self.limit, bool) or self.limit < 0):
            raise ValidationError("field 'limit' must be a non-negative integer")

    def payload(self) -> dict[str, Any]:
        """On-disk payload; only the fields that are set."""
        data: dict[str, Any] = {}
        for key in QUERY_FIELDS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class SavedAggregation:
    id: str
    scope: SavedScope = SHARED
    pipeline: list[dict[str, Any]] = field(default_factory=list)

    def validate(self) -> None:
        validate_saved_id(self.id)
        if not isinstance(self.pipeline, list):
            raise ValidationError("saved aggregation pipeline must be a JSON array")
        if any(not isinstance(stage, dict) for stage in self.pipeline):
            raise ValidationError("saved aggregation pipeline stages must be JSON objects")


SavedSpec = TypeVar("SavedSpec", SavedQuery, SavedAggregation)


def upsert_by_id(items: list[SavedSpec], item: SavedSpec) -> None:
    """Replace the entry with the same id in place, or append it."""
    for index, existing in enumerate(items):
        if existing.id == item.id:
            items[index] = item
            return
    items.append(item)
