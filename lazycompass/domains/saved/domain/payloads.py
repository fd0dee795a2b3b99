"""Editor templates and payload parsers for queries and aggregations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from lazycompass.domains.saved.domain.specs import (
    QUERY_FIELDS,
    SavedAggregation,
    SavedQuery,
    SavedScope,
)
from lazycompass.shared.core.errors import PayloadError, ValidationError

INLINE_QUERY_TEMPLATE: dict[str, Any] = {"filter": {}, "sort": {"_id": -1}, "limit": 20}
INLINE_AGGREGATION_TEMPLATE: list[dict[str, Any]] = [{"$match": {}}, {"$limit": 20}]


@dataclass
class InlineQueryPayload:
    filter: dict[str, Any] | None = None
    projection: dict[str, Any] | None = None
    sort: dict[str, Any] | None = None
    limit: int | None = None


@dataclass
class InlineAggregationPayload:
    pipeline: list[dict[str, Any]] = field(default_factory=list)


P = TypeVar("P", InlineQueryPayload, InlineAggregationPayload)


@dataclass
class InlineDraft(Generic[P]):
    """Raw editor text for an ad-hoc query plus its last good parse."""

    text: str
    payload: P | None = None


def dump_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def load_json(contents: str, label: str) -> Any:
    try:
        return json.loads(contents)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"invalid JSON for {label}: {exc}") from exc


def _require_mapping(value: Any, label: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise PayloadError(f"{label} payload must be a JSON object")
    return value


def _reject_unknown(data: dict[str, Any], allowed: tuple[str, ...], label: str) -> None:
    for key in data:
        if key not in allowed:
            raise ValidationError(f"unknown field '{key}' in {label} payload")


def _object_field(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise PayloadError(f"field '{key}' must be a JSON object")
    return value


def _limit_field(data: dict[str, Any]) -> int | None:
    value = data.get("limit")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PayloadError("field 'limit' must be a non-negative integer")
    return value


def _pipeline(value: Any, label: str) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        raise PayloadError(f"{label} must be a JSON array")
    if any(not isinstance(stage, dict) for stage in value):
        raise PayloadError(f"{label} stages must be JSON objects")
    return value


def _query_values(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "filter": _object_field(data, "filter"),
        "projection": _object_field(data, "projection"),
        "sort": _object_field(data, "sort"),
        "limit": _limit_field(data),
    }


def _saved_id_field(data: dict[str, Any]) -> str:
    value = data.get("id")
    if not isinstance(value, str) or not value.strip():
        raise PayloadError("field 'id' must be a non-empty string")
    return value.strip()


# Saved query files


def parse_saved_query_payload(data: Any, saved_id: str, scope: SavedScope) -> SavedQuery:
    data = _require_mapping(data, "saved query")
    _reject_unknown(data, QUERY_FIELDS, "saved query")
    query = SavedQuery(id=saved_id, scope=scope, **_query_values(data))
    query.validate()
    return query


def parse_saved_aggregation_payload(data: Any, saved_id: str, scope: SavedScope) -> SavedAggregation:
    pipeline = _pipeline(data, "saved aggregation payload")
    aggregation = SavedAggregation(id=saved_id, scope=scope, pipeline=pipeline)
    aggregation.validate()
    return aggregation


# Save from the Documents screen (id and scope fixed by the scope step)


def render_query_payload_template(template: SavedQuery) -> str:
    return dump_json(template.payload())


def parse_query_payload_input(contents: str, template: SavedQuery) -> SavedQuery:
    data = _require_mapping(load_json(contents, "saved query"), "saved query")
    _reject_unknown(data, QUERY_FIELDS, "saved query")
    return SavedQuery(id=template.id, scope=template.scope, **_query_values(data))


def render_aggregation_payload_template(template: SavedAggregation) -> str:
    return dump_json(_pipeline(template.pipeline, "saved aggregation pipeline"))


def parse_aggregation_payload_input(contents: str, template: SavedAggregation) -> SavedAggregation:
    pipeline = _pipeline(load_json(contents, "saved aggregation"), "saved aggregation payload")
    return SavedAggregation(id=template.id, scope=template.scope, pipeline=pipeline)


# Inline drafts


def render_inline_query_template() -> str:
    return dump_json(INLINE_QUERY_TEMPLATE)


def parse_inline_query_payload(contents: str) -> InlineQueryPayload:
    data = _require_mapping(load_json(contents, "inline query"), "inline query")
    _reject_unknown(data, QUERY_FIELDS, "inline query")
    return InlineQueryPayload(**_query_values(data))


def render_inline_aggregation_template() -> str:
    return dump_json(INLINE_AGGREGATION_TEMPLATE)


def parse_inline_aggregation_payload(contents: str) -> InlineAggregationPayload:
    pipeline = _pipeline(load_json(contents, "inline aggregation"), "inline aggregation payload")
    return InlineAggregationPayload(pipeline=pipeline)


# Saving an inline draft (the id is edited along with the payload)


def render_query_save_template(saved_id: str, draft: InlineQueryPayload) -> str:
    data: dict[str, Any] = {"id": saved_id}
    for key in QUERY_FIELDS:
        value = getattr(draft, key)
        if value is not None:
            data[key] = value
    return dump_json(data)


def parse_query_save_input(contents: str, scope: SavedScope) -> SavedQuery:
    data = _require_mapping(load_json(contents, "saved query"), "saved query")
    _reject_unknown(data, ("id", *QUERY_FIELDS), "saved query")
    return SavedQuery(id=_saved_id_field(data), scope=scope, **_query_values(data))


def render_aggregation_save_template(saved_id: str, draft: InlineAggregationPayload) -> str:
    return dump_json({"id": saved_id, "pipeline": draft.pipeline})


def parse_aggregation_save_input(contents: str, scope: SavedScope) -> SavedAggregation:
    data = _require_mapping(load_json(contents, "saved aggregation"), "saved aggregation")
    _reject_unknown(data, ("id", "pipeline"), "saved aggregation")
    saved_id = _saved_id_field(data)
    if "pipeline" not in data:
        raise PayloadError("field 'pipeline' is required")
    pipeline = _pipeline(data["pipeline"], "field 'pipeline'")
    return SavedAggregation(id=saved_id, scope=scope, pipeline=pipeline)
