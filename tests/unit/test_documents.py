from __future__ import annotations

import datetime

import pytest
from bson import ObjectId

from lazycompass.domains.mongo.domain.documents import (
    PREVIEW_WIDTH,
    document_id,
    document_preview,
    find_pipeline_write_stage,
    format_bson,
    format_document,
    parse_json_document,
    parse_json_pipeline,
    to_bson_value,
)
from lazycompass.shared.core.errors import PayloadError, ValidationError


def test_parse_extended_json_document() -> None:
    document = parse_json_document("document", '{"_id": {"$oid": "64b7f0f0f0f0f0f0f0f0f0f0"}, "n": 1}')

    assert document == {"_id": ObjectId("64b7f0f0f0f0f0f0f0f0f0f0"), "n": 1}


def test_parse_document_requires_object() -> None:
    with pytest.raises(PayloadError, match="document must be a JSON object"):
        parse_json_document("document", "[1, 2]")
    with pytest.raises(PayloadError, match="invalid JSON in document"):
        parse_json_document("document", "{")


def test_to_bson_value_converts_dates() -> None:
    value = to_bson_value({"at": {"$date": "2024-01-02T03:04:05Z"}})

    assert value["at"].replace(tzinfo=None) == datetime.datetime(2024, 1, 2, 3, 4, 5)


def test_pipeline_helpers() -> None:
    pipeline = parse_json_pipeline([{"$match": {}}, {"$merge": {"into": "x"}}])

    assert find_pipeline_write_stage(pipeline) == "$merge"
    assert find_pipeline_write_stage([{"$match": {}}]) is None
    with pytest.raises(PayloadError, match="pipeline must be a JSON array"):
        parse_json_pipeline({"$match": {}})


def test_document_id() -> None:
    assert document_id({"_id": 3}) == 3
    with pytest.raises(ValidationError, match="missing _id"):
        document_id({"n": 1})


def test_format_bson() -> None:
    assert format_bson("plain") == "plain"
    assert format_bson(5) == "5"
    assert format_bson(ObjectId("64b7f0f0f0f0f0f0f0f0f0f0")) == '{"$oid": "64b7f0f0f0f0f0f0f0f0f0f0"}'


def test_preview_is_truncated() -> None:
    preview = document_preview({"_id": 1, "text": "x" * 500})

    assert len(preview) == PREVIEW_WIDTH
    assert preview.endswith("...")
    assert document_preview({"_id": 1}) == '{"_id": 1}'


def test_format_document_is_indented() -> None:
    assert format_document({"_id": 1, "tags": ["a"]}) == [
        "{",
        '  "_id": 1,',
        '  "tags": [',
        '    "a"',
        "  ]",
        "}",
    ]
