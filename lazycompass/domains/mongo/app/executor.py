"""MongoDB access for the session: reads, writes and connection resolution."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from pymongo import MongoClient
from pymongo.errors import ConfigurationError, InvalidURI, PyMongoError

from lazycompass.core.write_guard import WriteGuard
from lazycompass.domains.connections.domain.config import Config, ConnectionSpec
from lazycompass.domains.mongo.domain.documents import (
    Document,
    find_pipeline_write_stage,
    parse_json_pipeline,
    to_bson_value,
)
from lazycompass.shared.core.errors import LazyCompassError, ValidationError
from lazycompass.shared.core.redaction import redact_connection_uri

logger = logging.getLogger(__name__)


class MongoOperationError(LazyCompassError):
    """A driver call failed; the driver exception is the cause."""


@dataclass(frozen=True)
class QuerySpec:
    connection: str | None
    database: str
    collection: str
    filter: dict[str, Any] | None = None
    projection: dict[str, Any] | None = None
    sort: dict[str, Any] | None = None
    limit: int | None = None


@dataclass(frozen=True)
class AggregationSpec:
    connection: str | None
    database: str
    collection: str
    pipeline: list[dict[str, Any]]


@dataclass(frozen=True)
class DocumentListSpec:
    connection: str | None
    database: str
    collection: str
    skip: int
    limit: int


@dataclass(frozen=True)
class DocumentInsertSpec:
    connection: str | None
    database: str
    collection: str
    document: Document


@dataclass(frozen=True)
class DocumentReplaceSpec:
    connection: str | None
    database: str
    collection: str
    id: Any
    document: Document


@dataclass(frozen=True)
class DocumentDeleteSpec:
    connection: str | None
    database: str
    collection: str
    id: Any


def resolve_connection(config: Config, name: str | None) -> ConnectionSpec:
    if not config.connections:
        raise ValidationError("no connections configured")
    name = (name or "").strip()
    if name:
        connection = config.connection_named(name)
        if connection is None:
            raise ValidationError(f"connection '{name}' not found")
        return connection
    if len(config.connections) == 1:
        return config.connections[0]
    raise ValidationError(
        "multiple connections configured; specify --connection or set connection in the saved spec"
    )


class MongoExecutor:
    """Runs operations against the configured connections.

    Reads are called from worker threads, writes from the UI thread, so
    the client cache is guarded by a lock. pymongo clients themselves are
    thread-safe.
    """

    def __init__(self) -> None:
        self._clients: dict[tuple[str, str], MongoClient] = {}
        self._lock = threading.Lock()

    def resolve_connection(self, config: Config, name: str | None) -> ConnectionSpec:
        return resolve_connection(config, name)

    def _client(self, config: Config, connection: ConnectionSpec) -> MongoClient:
        key = (connection.name, connection.uri)
        with self._lock:
            client = self._clients.get(key)
            if client is not None:
                return client
            redacted = redact_connection_uri(connection.uri)
            timeout_ms = config.connect_timeout_ms()
            try:
                client = MongoClient(
                    connection.uri,
                    connectTimeoutMS=timeout_ms,
                    serverSelectionTimeoutMS=timeout_ms,
                    appname="lazycompass",
                )
            except (ConfigurationError, InvalidURI) as exc:
                raise MongoOperationError(f"unable to parse connection options for {redacted}") from exc
            logger.info("opened client for connection %s (%s)", connection.name, redacted)
            self._clients[key] = client
            return client

    def _collection(self, config: Config, name: str | None, database: str, collection: str) -> Any:
        connection = self.resolve_connection(config, name)
        return self._client(config, connection)[database][collection]

    def close(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()

    # Reads

    def list_databases(self, config: Config, connection: str | None) -> list[str]:
        resolved = self.resolve_connection(config, connection)
        client = self._client(config, resolved)
        try:
            return list(client.list_database_names())
        except PyMongoError as exc:
            raise MongoOperationError(f"failed to list databases for connection '{resolved.name}'") from exc

    def list_collections(self, config: Config, connection: str | None, database: str) -> list[str]:
        resolved = self.resolve_connection(config, connection)
        client = self._client(config, resolved)
        try:
            return list(client[database].list_collection_names())
        except PyMongoError as exc:
            raise MongoOperationError(f"failed to list collections in {database}") from exc

    def list_documents(self, config: Config, spec: DocumentListSpec) -> list[Document]:
        collection = self._collection(config, spec.connection, spec.database, spec.collection)
        try:
            cursor = collection.find({}, skip=spec.skip, limit=spec.limit, max_time_ms=config.query_timeout_ms())
            return list(cursor)
        except PyMongoError as exc:
            raise MongoOperationError(f"failed to load documents from {spec.database}.{spec.collection}") from exc

    def execute_query(self, config: Config, spec: QuerySpec) -> list[Document]:
        collection = self._collection(config, spec.connection, spec.database, spec.collection)
        filter_doc = to_bson_value(spec.filter) if spec.filter else {}
        options: dict[str, Any] = {"max_time_ms": config.query_timeout_ms()}
        if spec.projection:
            options["projection"] = to_bson_value(spec.projection)
        if spec.sort:
            options["sort"] = list(to_bson_value(spec.sort).items())
        if spec.limit is not None:
            options["limit"] = spec.limit
        try:
            return list(collection.find(filter_doc, **options))
        except PyMongoError as exc:
            raise MongoOperationError(f"failed to run find on {spec.database}.{spec.collection}") from exc

    def execute_aggregation(self, config: Config, spec: AggregationSpec) -> list[Document]:
        pipeline = parse_json_pipeline(spec.pipeline)
        stage = find_pipeline_write_stage(pipeline)
        if stage is not None:
            WriteGuard.from_config(config).ensure_pipeline_allowed(stage)
        collection = self._collection(config, spec.connection, spec.database, spec.collection)
        try:
            return list(collection.aggregate(pipeline, maxTimeMS=config.query_timeout_ms()))
        except PyMongoError as exc:
            raise MongoOperationError(
                f"failed to run aggregation on {spec.database}.{spec.collection}"
            ) from exc

    # Writes

    def insert_document(self, config: Config, spec: DocumentInsertSpec) -> Any:
        WriteGuard.from_config(config).ensure_write_allowed("insert documents")
        collection = self._collection(config, spec.connection, spec.database, spec.collection)
        try:
            result = collection.insert_one(spec.document)
        except PyMongoError as exc:
            raise MongoOperationError(
                f"failed to insert document into {spec.database}.{spec.collection}"
            ) from exc
        logger.info("inserted document into %s.%s", spec.database, spec.collection)
        return result.inserted_id

    def replace_document(self, config: Config, spec: DocumentReplaceSpec) -> None:
        WriteGuard.from_config(config).ensure_write_allowed("replace documents")
        collection = self._collection(config, spec.connection, spec.database, spec.collection)
        try:
            result = collection.replace_one({"_id": spec.id}, spec.document)
        except PyMongoError as exc:
            raise MongoOperationError(
                f"failed to replace document in {spec.database}.{spec.collection}"
            ) from exc
        if result.matched_count == 0:
            raise ValidationError(f"document not found in {spec.database}.{spec.collection}")
        logger.info("replaced document in %s.%s", spec.database, spec.collection)

    def delete_document(self, config: Config, spec: DocumentDeleteSpec) -> None:
        WriteGuard.from_config(config).ensure_write_allowed("delete documents")
        collection = self._collection(config, spec.connection, spec.database, spec.collection)
        try:
            result = collection.delete_one({"_id": spec.id})
        except PyMongoError as exc:
            raise MongoOperationError(
                f"failed to delete document from {spec.database}.{spec.collection}"
            ) from exc
        if result.deleted_count == 0:
            raise ValidationError(f"document not found in {spec.database}.{spec.collection}")
        logger.info("deleted document from %s.%s", spec.database, spec.collection)
