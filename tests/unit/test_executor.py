from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure

from lazycompass.domains.connections.domain.config import Config, ConnectionSpec
from lazycompass.domains.mongo.app import executor as executor_module
from lazycompass.domains.mongo.app.executor import (
    AggregationSpec,
    DocumentDeleteSpec,
    DocumentInsertSpec,
    DocumentListSpec,
    DocumentReplaceSpec,
    MongoExecutor,
    MongoOperationError,
    QuerySpec,
    resolve_connection,
)
from lazycompass.shared.core.errors import ValidationError, WriteGuardError


class FakeCollection:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self.rows = rows
        self.find_calls: list[tuple[dict[str, Any], dict[str, Any]]] = []
        self.fail = False

    def find(self, filter_doc: dict[str, Any], **options: Any) -> list[dict[str, Any]]:
        if self.fail:
            raise OperationFailure("boom")
        self.find_calls.append((filter_doc, options))
        skip = options.get("skip", 0)
        limit = options.get("limit") or len(self.rows)
        return self.rows[skip : skip + limit]

    def aggregate(self, pipeline: list[dict[str, Any]], **options: Any) -> list[dict[str, Any]]:
        return [{"stages": len(pipeline)}]

    def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        self.rows.append(document)
        return SimpleNamespace(inserted_id=document.get("_id", "new-id"))

    def replace_one(self, query: dict[str, Any], document: dict[str, Any]) -> SimpleNamespace:
        matched = [row for row in self.rows if row.get("_id") == query["_id"]]
        return SimpleNamespace(matched_count=len(matched))

    def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        before = len(self.rows)
        self.rows[:] = [row for row in self.rows if row.get("_id") != query["_id"]]
        return SimpleNamespace(deleted_count=before - len(self.rows))


class FakeClient:
    instances: list[FakeClient] = []

    def __init__(self, uri: str, **options: Any) -> None:
        self.uri = uri
        self.options = options
        self.closed = False
        self.collection = FakeCollection([{"_id": index} for index in range(5)])
        FakeClient.instances.append(self)

    def list_database_names(self) -> list[str]:
        return ["admin", "app"]

    def __getitem__(self, name: str) -> Any:
        client = self

        class _Database:
            def list_collection_names(self) -> list[str]:
                return ["users"]

            def __getitem__(self, collection: str) -> FakeCollection:
                return client.collection

        return _Database()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr(executor_module, "MongoClient", FakeClient)
    return FakeClient


def _config(**overrides: Any) -> Config:
    config = Config(connections=[ConnectionSpec("local", "mongodb://localhost:27017")])
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


class TestResolveConnection:
    def test_by_name(self):
        config = Config(connections=[ConnectionSpec("a", "u1"), ConnectionSpec("b", "u2")])

        assert resolve_connection(config, "b").uri == "u2"

    def test_single_connection_is_default(self):
        assert resolve_connection(_config(), None).name == "local"

    def test_errors(self):
        with pytest.raises(ValidationError, match="no connections configured"):
            resolve_connection(Config(), None)
        with pytest.raises(ValidationError, match="connection 'x' not found"):
            resolve_connection(_config(), "x")
        config = Config(connections=[ConnectionSpec("a", "u1"), ConnectionSpec("b", "u2")])
        with pytest.raises(ValidationError, match="multiple connections"):
            resolve_connection(config, None)


class TestReads:
    def test_clients_are_cached_per_connection(self, fake_client):
        executor = MongoExecutor()

        assert executor.list_databases(_config(), "local") == ["admin", "app"]
        assert executor.list_collections(_config(), "local", "app") == ["users"]

        assert len(fake_client.instances) == 1
        assert fake_client.instances[0].options["appname"] == "lazycompass"
        assert fake_client.instances[0].options["serverSelectionTimeoutMS"] == 10_000

    def test_list_documents_pages(self, fake_client):
        executor = MongoExecutor()
        spec = DocumentListSpec("local", "app", "users", skip=2, limit=2)

        assert executor.list_documents(_config(), spec) == [{"_id": 2}, {"_id": 3}]
        _, options = fake_client.instances[0].collection.find_calls[0]
        assert options["max_time_ms"] == 30_000

    def test_query_converts_extended_json(self, fake_client):
        executor = MongoExecutor()
        oid = "64b7f0f0f0f0f0f0f0f0f0f0"
        spec = QuerySpec(
            "local",
            "app",
            "users",
            filter={"_id": {"$oid": oid}},
            sort={"n": -1},
            limit=1,
        )

        executor.execute_query(_config(), spec)

        filter_doc, options = fake_client.instances[0].collection.find_calls[0]
        assert filter_doc == {"_id": ObjectId(oid)}
        assert options["sort"] == [("n", -1)]
        assert options["limit"] == 1
        assert "projection" not in options

    def test_driver_errors_are_wrapped(self, fake_client):
        executor = MongoExecutor()
        executor.list_databases(_config(), None)
        fake_client.instances[0].collection.fail = True

        with pytest.raises(MongoOperationError, match="failed to load documents from app.users") as info:
            executor.list_documents(_config(), DocumentListSpec(None, "app", "users", skip=0, limit=5))
        assert isinstance(info.value.__cause__, OperationFailure)

    def test_close_closes_clients(self, fake_client):
        executor = MongoExecutor()
        executor.list_databases(_config(), None)

        executor.close()

        assert fake_client.instances[0].closed


class TestAggregationGuard:
    def test_write_stage_needs_permission(self, fake_client):
        executor = MongoExecutor()
        spec = AggregationSpec("local", "app", "users", pipeline=[{"$match": {}}, {"$out": "copy"}])

        with pytest.raises(WriteGuardError, match="read-only mode"):
            executor.execute_aggregation(_config(), spec)
        with pytest.raises(WriteGuardError, match=r"\$out writes data"):
            executor.execute_aggregation(_config(read_only=False), spec)
        assert fake_client.instances == []

        allowed = _config(read_only=False, allow_pipeline_writes=True)
        assert executor.execute_aggregation(allowed, spec) == [{"stages": 2}]

    def test_read_pipeline_runs_in_read_only_mode(self, fake_client):
        executor = MongoExecutor()
        spec = AggregationSpec("local", "app", "users", pipeline=[{"$count": "n"}])

        assert executor.execute_aggregation(_config(), spec) == [{"stages": 1}]


class TestWrites:
    def test_writes_require_write_mode(self, fake_client):
        executor = MongoExecutor()

        with pytest.raises(WriteGuardError, match="cannot insert documents"):
            executor.insert_document(_config(), DocumentInsertSpec("local", "app", "users", {"a": 1}))
        assert fake_client.instances == []

    def test_insert_replace_delete(self, fake_client):
        executor = MongoExecutor()
        config = _config(read_only=False)

        inserted = executor.insert_document(config, DocumentInsertSpec("local", "app", "users", {"_id": 9}))
        executor.replace_document(config, DocumentReplaceSpec("local", "app", "users", 9, {"_id": 9, "a": 1}))
        executor.delete_document(config, DocumentDeleteSpec("local", "app", "users", 9))

        assert inserted == 9

    def test_missing_document(self, fake_client):
        executor = MongoExecutor()
        config = _config(read_only=False)

        with pytest.raises(ValidationError, match="document not found"):
            executor.replace_document(config, DocumentReplaceSpec("local", "app", "users", 99, {"_id": 99}))
        with pytest.raises(ValidationError, match="document not found"):
            executor.delete_document(config, DocumentDeleteSpec("local", "app", "users", 99))
