"""Background load dispatch and result reconciliation."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from queue import Empty
from typing import Any

from lazycompass.domains.connections.domain.config import Config
from lazycompass.domains.loading.domain.results import (
    COLLECTION_SOURCE,
    IDLE,
    LOADING,
    DocumentLoadReason,
    DocumentResultSource,
    Failed,
    InlineAggregationSource,
    InlineQuerySource,
    LoadKind,
    LoadResult,
    SavedAggregationSource,
    SavedQuerySource,
)
from lazycompass.domains.mongo.app.executor import AggregationSpec, DocumentListSpec, QuerySpec
from lazycompass.domains.navigation.domain.screens import PAGE_SIZE, Screen
from lazycompass.domains.navigation.domain.selection import clamp_index, select_first
from lazycompass.domains.saved.domain.payloads import InlineAggregationPayload, InlineQueryPayload
from lazycompass.domains.saved.domain.specs import SHARED, SavedScope, ScopedScope
from lazycompass.shared.core.errors import SelectionMissingError, format_error
from lazycompass.shared.ui.protocols.session import SessionProtocol

logger = logging.getLogger(__name__)

_STATE_ATTRS: dict[LoadKind, str] = {
    LoadKind.DATABASES: "database_state",
    LoadKind.COLLECTIONS: "collection_state",
    LoadKind.DOCUMENTS: "document_state",
    LoadKind.SAVED_QUERY_EXEC: "saved_query_state",
    LoadKind.SAVED_AGGREGATION_EXEC: "saved_agg_state",
    LoadKind.INLINE_QUERY_EXEC: "inline_query_state",
    LoadKind.INLINE_AGGREGATION_EXEC: "inline_agg_state",
}


class LoadingMixin:
    """Mixin providing load dispatch and the reconciler.

    Every read runs off the UI thread and reports back through the inbox as
    a ``LoadResult``. A result is applied only if its id is still the
    expected id for its kind; anything else is a stale response and is
    dropped.
    """

    def _config_snapshot(self: SessionProtocol) -> Config:
        config = self.storage.config
        return dataclasses.replace(config, connections=list(config.connections))

    def _dispatch(
        self: SessionProtocol,
        kind: LoadKind,
        work: Callable[[], Any],
        label: str | None = None,
    ) -> int:
        request_id = self.loads.begin(kind)
        setattr(self, _STATE_ATTRS[kind], LOADING)
        inbox = self.inbox

        def job() -> None:
            try:
                value = work()
            except Exception as error:
                message = format_error(error)
                logger.warning("%s request %d failed: %s", kind.value, request_id, message)
                inbox.put(LoadResult(kind, request_id, error=message, label=label))
                return
            inbox.put(LoadResult(kind, request_id, value=value, label=label))

        logger.debug("dispatching %s request %d", kind.value, request_id)
        self.tasks.submit(f"load-{kind.value}-{request_id}", job)
        return request_id

    # Dispatch

    def start_load_databases(self: SessionProtocol) -> None:
        connection = self.selected_connection()
        if connection is None:
            raise SelectionMissingError("select a connection")
        config = self._config_snapshot()
        executor = self.executor
        name = connection.name
        self.database_items = []
        self.database_index = None
        self.message = None
        self._dispatch(LoadKind.DATABASES, lambda: executor.list_databases(config, name))

    def start_load_collections(self: SessionProtocol) -> None:
        connection = self.selected_connection()
        if connection is None:
            raise SelectionMissingError("select a connection")
        database = self.selected_database()
        if database is None:
            raise SelectionMissingError("select a database")
        config = self._config_snapshot()
        executor = self.executor
        name = connection.name
        self.collection_items = []
        self.collection_index = None
        self.message = None
        self._dispatch(LoadKind.COLLECTIONS, lambda: executor.list_collections(config, name, database))

    def start_load_documents(
        self: SessionProtocol,
        pending_index: int | None,
        reason: DocumentLoadReason,
    ) -> None:
        connection, database, collection = self.selected_context()
        spec = DocumentListSpec(
            connection=connection,
            database=database,
            collection=collection,
            skip=self.document_page * PAGE_SIZE,
            limit=PAGE_SIZE,
        )
        config = self._config_snapshot()
        executor = self.executor
        self.document_result_source = COLLECTION_SOURCE
        self.document_load_reason = reason
        self.document_pending_index = pending_index
        self.documents = []
        self.document_index = None
        self.document_lines = []
        self.document_scroll = 0
        self.message = None
        self._dispatch(LoadKind.DOCUMENTS, lambda: executor.list_documents(config, spec))

    def _target_for(self: SessionProtocol, scope: SavedScope, what: str) -> tuple[str, str]:
        if isinstance(scope, ScopedScope):
            return scope.database, scope.collection
        database = self.selected_database()
        if database is None:
            raise SelectionMissingError(f"select a database for {what}")
        collection = self.selected_collection()
        if collection is None:
            raise SelectionMissingError(f"select a collection for {what}")
        return database, collection

    def _connection_name(self: SessionProtocol) -> str | None:
        connection = self.selected_connection()
        return connection.name if connection is not None else None

    def start_execute_saved_query(self: SessionProtocol) -> None:
        index = self.saved_query_index
        if index is None or index >= len(self.storage.queries):
            raise SelectionMissingError("select a saved query")
        saved = self.storage.queries[index]
        database, collection = self._target_for(saved.scope, "shared saved queries")
        spec = QuerySpec(
            connection=self._connection_name(),
            database=database,
            collection=collection,
            filter=saved.filter,
            projection=saved.projection,
            sort=saved.sort,
            limit=saved.limit,
        )
        config = self._config_snapshot()
        executor = self.executor
        self.message = f"executing saved query '{saved.id}'..."
        self._dispatch(LoadKind.SAVED_QUERY_EXEC, lambda: executor.execute_query(config, spec), label=saved.id)

    def start_execute_saved_aggregation(self: SessionProtocol) -> None:
        index = self.saved_agg_index
        if index is None or index >= len(self.storage.aggregations):
            raise SelectionMissingError("select a saved aggregation")
        saved = self.storage.aggregations[index]
        database, collection = self._target_for(saved.scope, "shared saved aggregations")
        spec = AggregationSpec(
            connection=self._connection_name(),
            database=database,
            collection=collection,
            pipeline=saved.pipeline,
        )
        config = self._config_snapshot()
        executor = self.executor
        self.message = f"executing saved aggregation '{saved.id}'..."
        self._dispatch(
            LoadKind.SAVED_AGGREGATION_EXEC,
            lambda: executor.execute_aggregation(config, spec),
            label=saved.id,
        )

    def start_execute_inline_query(self: SessionProtocol, payload: InlineQueryPayload) -> None:
        database, collection = self._target_for(SHARED, "inline queries")
        spec = QuerySpec(
            connection=self._connection_name(),
            database=database,
            collection=collection,
            filter=payload.filter,
            projection=payload.projection,
            sort=payload.sort,
            limit=payload.limit,
        )
        config = self._config_snapshot()
        executor = self.executor
        self.message = "executing inline query..."
        self._dispatch(LoadKind.INLINE_QUERY_EXEC, lambda: executor.execute_query(config, spec))

    def start_execute_inline_aggregation(self: SessionProtocol, payload: InlineAggregationPayload) -> None:
        database, collection = self._target_for(SHARED, "inline aggregations")
        spec = AggregationSpec(
            connection=self._connection_name(),
            database=database,
            collection=collection,
            pipeline=payload.pipeline,
        )
        config = self._config_snapshot()
        executor = self.executor
        self.message = "executing inline aggregation..."
        self._dispatch(LoadKind.INLINE_AGGREGATION_EXEC, lambda: executor.execute_aggregation(config, spec))

    def reload_documents_after_change(self: SessionProtocol) -> None:
        if self.screen not in (Screen.DOCUMENTS, Screen.DOCUMENT_VIEW):
            return
        self.start_load_documents(self.document_index, DocumentLoadReason.REFRESH)

    # Reconcile

    def drain_load_results(self: SessionProtocol) -> bool:
        """Apply every queued result; return True if anything was drained."""
        drained = False
        while True:
            try:
                result = self.inbox.get_nowait()
            except Empty:
                return drained
            drained = True
            self.apply_load_result(result)

    def apply_load_result(self: SessionProtocol, result: LoadResult) -> None:
        if not self.loads.accept(result):
            logger.debug("dropping stale %s result %d", result.kind.value, result.id)
            return
        state_attr = _STATE_ATTRS[result.kind]
        if not result.ok:
            message = result.error or "request failed"
            setattr(self, state_attr, Failed(message))
            self.message = message
            return

        kind = result.kind
        if kind is LoadKind.DATABASES:
            self.database_items = sorted(result.value)
            self.database_index = select_first(len(self.database_items))
            self.database_state = IDLE
        elif kind is LoadKind.COLLECTIONS:
            self.collection_items = sorted(result.value)
            self.collection_index = select_first(len(self.collection_items))
            self.collection_state = IDLE
        elif kind is LoadKind.DOCUMENTS:
            self._apply_documents_page(list(result.value))
        else:
            setattr(self, state_attr, IDLE)
            self._apply_result_set(list(result.value), _result_source(kind, result.label))

    def _apply_documents_page(self: SessionProtocol, documents: list[Any]) -> None:
        self.documents = documents
        if not documents and self.document_page > 0:
            # Past the last page: step back and reload the previous one.
            past_end = self.document_load_reason is DocumentLoadReason.NAVIGATE_NEXT
            pending_index = self.document_pending_index
            status = self.message
            self.document_pending_index = None
            self.document_page -= 1
            try:
                self.start_load_documents(pending_index, DocumentLoadReason.REFRESH)
            except Exception as error:
                self.set_error(error)
                return
            # Keep the mutation status of a refresh; a page turn reports the end.
            self.message = "no more documents" if past_end else status
            return
        self.document_state = IDLE
        pending_index = self.document_pending_index
        self.document_pending_index = None
        if self.document_load_reason in (DocumentLoadReason.NAVIGATE_NEXT, DocumentLoadReason.NAVIGATE_PREVIOUS):
            # A page turn starts at the top; its pending index only survives a backtrack.
            pending_index = None
        if pending_index is not None:
            self.document_index = clamp_index(pending_index, len(documents))
        else:
            self.document_index = select_first(len(documents))
        if not documents:
            self.document_lines = []
            self.document_scroll = 0
        if self.screen is Screen.DOCUMENT_VIEW:
            self.prepare_document_view()

    def _apply_result_set(self: SessionProtocol, documents: list[Any], source: DocumentResultSource) -> None:
        self.documents = documents
        self.document_index = select_first(len(documents))
        self.document_page = 0
        self.document_lines = []
        self.document_scroll = 0
        self.document_result_source = source
        self.screen = Screen.DOCUMENTS
        noun = "aggregation" if isinstance(source, (SavedAggregationSource, InlineAggregationSource)) else "query"
        self.message = f"{noun} returned {len(documents)} document(s)"


def _result_source(kind: LoadKind, label: str | None) -> DocumentResultSource:
    if kind is LoadKind.SAVED_QUERY_EXEC:
        return SavedQuerySource(label or "")
    if kind is LoadKind.SAVED_AGGREGATION_EXEC:
        return SavedAggregationSource(label or "")
    if kind is LoadKind.INLINE_QUERY_EXEC:
        return InlineQuerySource()
    return InlineAggregationSource()
