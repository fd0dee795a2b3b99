"""Extended JSON conversion and display helpers for documents."""

from __future__ import annotations

import json
from typing import Any

from bson import json_util
from bson.errors import InvalidId

from lazycompass.shared.core.errors import PayloadError, ValidationError

Document = dict[str, Any]

PREVIEW_WIDTH = 120
PIPELINE_WRITE_STAGES = ("$out", "$merge")

_JSON_OPTIONS = json_util.RELAXED_JSON_OPTIONS


def to_extended_json(value: Any, indent: int | None = None) -> str:
    return json_util.dumps(value, json_options=_JSON_OPTIONS, indent=indent, ensure_ascii=False)


def from_extended_json(contents: str, label: str) -> Any:
    try:
        return json_util.loads(contents)
    except (ValueError, TypeError, InvalidId) as exc:
        raise PayloadError(f"invalid JSON in {label}: {exc}") from exc


def to_bson_value(value: Any) -> Any:
    """Turn plain JSON data (with $oid, $date, ...) into BSON-ready values."""
    return json_util.loads(json.dumps(value))


def parse_json_document(label: str, contents: str) -> Document:
    value = from_extended_json(contents, label)
    if not isinstance(value, dict):
        raise PayloadError(f"{label} must be a JSON object")
    return value


def parse_json_pipeline(value: Any) -> list[Document]:
    pipeline = to_bson_value(value) if not isinstance(value, str) else from_extended_json(value, "pipeline")
    if not isinstance(pipeline, list):
        raise PayloadError("pipeline must be a JSON array")
    if any(not isinstance(stage, dict) for stage in pipeline):
        raise PayloadError("pipeline items must be JSON objects")
    return pipeline


def find_pipeline_write_stage(pipeline: list[Document]) -> str | None:
    for stage in pipeline:
        for key in stage:
            if key in PIPELINE_WRITE_STAGES:
                return key
    return None


def document_id(document: Document) -> Any:
    if "_id" not in document:
        raise ValidationError("document is missing _id")
    return document["_id"]


def format_bson(value: Any) -> str:
    """Compact rendering of a single value, strings unquoted."""
    if isinstance(value, str):
        return value
    return to_extended_json(value)


def document_preview(document: Document) -> str:
    text = to_extended_json(document).replace("\n", " ")
    if len(text) > PREVIEW_WIDTH:
        text = text[: PREVIEW_WIDTH - 3] + "..."
    return text


def format_document(document: Document) -> list[str]:
    return to_extended_json(document, indent=2).splitlines()
