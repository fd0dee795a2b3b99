"""Protocols for session controller mixins."""

from __future__ import annotations

from collections import deque
from queue import SimpleQueue
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from lazycompass.core.key_router import GoTopChord
    from lazycompass.core.key_router import KeyPress
    from lazycompass.domains.connections.domain.config import ConnectionPersistenceScope, ConnectionSpec
    from lazycompass.domains.connections.store.paths import ConfigPaths
    from lazycompass.domains.editor.app.editor import EditorLauncher
    from lazycompass.domains.editor.domain.actions import PendingEditorAction
    from lazycompass.domains.loading.app.tracker import LoadTracker
    from lazycompass.domains.loading.domain.results import (
        DocumentLoadReason,
        DocumentResultSource,
        LoadResult,
        LoadState,
    )
    from lazycompass.domains.mongo.app.executor import MongoExecutor
    from lazycompass.domains.mongo.domain.documents import Document
    from lazycompass.domains.navigation.domain.screens import Screen
    from lazycompass.domains.prompts.domain.overlay import ConfirmAction, Overlay
    from lazycompass.domains.saved.domain.payloads import (
        InlineAggregationPayload,
        InlineDraft,
        InlineQueryPayload,
    )
    from lazycompass.domains.saved.domain.specs import SavedAggregation, SavedQuery, SavedScope
    from lazycompass.shared.app.storage import StorageSnapshot
    from lazycompass.shared.app.tasks import TaskRunner
    from lazycompass.shared.ui.clipboard import Clipboard


class SessionStateProtocol(Protocol):
    paths: ConfigPaths
    storage: StorageSnapshot
    executor: MongoExecutor
    tasks: TaskRunner
    editor_launcher: EditorLauncher
    clipboard: Clipboard
    read_only: bool

    screen: Screen
    connection_index: int | None
    database_items: list[str]
    database_index: int | None
    database_state: LoadState
    collection_items: list[str]
    collection_index: int | None
    collection_state: LoadState
    documents: list[Document]
    document_index: int | None
    document_page: int
    document_state: LoadState
    document_lines: list[str]
    document_scroll: int
    document_pending_index: int | None
    document_load_reason: DocumentLoadReason
    document_result_source: DocumentResultSource
    saved_query_index: int | None
    saved_query_state: LoadState
    saved_agg_index: int | None
    saved_agg_state: LoadState
    inline_query_state: LoadState
    inline_agg_state: LoadState
    save_query_scope_index: int | None
    save_agg_scope_index: int | None
    add_connection_scope_index: int | None
    inline_query_draft: InlineDraft[InlineQueryPayload] | None
    inline_agg_draft: InlineDraft[InlineAggregationPayload] | None

    overlay: Overlay | None
    help_visible: bool
    chord: GoTopChord
    message: str | None
    warnings: deque[str]
    editor_command: str | None

    loads: LoadTracker
    inbox: SimpleQueue[LoadResult]


class NavigationProtocol(Protocol):
    def selected_connection(self) -> ConnectionSpec | None:
        ...

    def selected_database(self) -> str | None:
        ...

    def selected_collection(self) -> str | None:
        ...

    def selected_context(self) -> tuple[str, str, str]:
        ...

    def selected_document(self) -> Document:
        ...

    def prepare_document_view(self) -> None:
        ...

    def scroll_document(self, delta: int) -> None:
        ...

    def max_document_scroll(self) -> int:
        ...

    def _cursor(self) -> tuple[str, int] | None:
        ...

    def _move(self, delta: int) -> None:
        ...

    def set_error(self, error: BaseException) -> None:
        ...

    def block_if_read_only(self, action: str) -> bool:
        ...


class LoadingProtocol(Protocol):
    def start_load_databases(self) -> None:
        ...

    def start_load_collections(self) -> None:
        ...

    def start_load_documents(self, pending_index: int | None, reason: DocumentLoadReason) -> None:
        ...

    def start_execute_saved_query(self) -> None:
        ...

    def start_execute_saved_aggregation(self) -> None:
        ...

    def start_execute_inline_query(self, payload: InlineQueryPayload) -> None:
        ...

    def start_execute_inline_aggregation(self, payload: InlineAggregationPayload) -> None:
        ...

    def reload_documents_after_change(self) -> None:
        ...

    def drain_load_results(self) -> bool:
        ...

    def apply_load_result(self, result: LoadResult) -> None:
        ...


class EditorWorkflowProtocol(Protocol):
    def ensure_editor_command(self, action: PendingEditorAction) -> str | None:
        ...

    def perform_editor_action(self, action: PendingEditorAction) -> None:
        ...

    def run_editor_action(self, action: PendingEditorAction) -> None:
        ...

    def open_editor(self, label: str, initial: str) -> str:
        ...

    def save_query_with_template(self, template: SavedQuery) -> None:
        ...

    def save_aggregation_with_template(self, template: SavedAggregation) -> None:
        ...

    def save_inline_query_with_draft(
        self, scope: SavedScope, draft: InlineDraft[InlineQueryPayload]
    ) -> None:
        ...

    def save_inline_aggregation_with_draft(
        self, scope: SavedScope, draft: InlineDraft[InlineAggregationPayload]
    ) -> None:
        ...

    def run_inline_query_in_editor(self) -> None:
        ...

    def run_inline_aggregation_in_editor(self) -> None:
        ...

    def add_connection_with_template(
        self, scope: ConnectionPersistenceScope, template: ConnectionSpec
    ) -> None:
        ...


class SavedSpecsProtocol(Protocol):
    def select_query_save_scope(self) -> None:
        ...

    def select_aggregation_save_scope(self) -> None:
        ...

    def store_saved_query(self, query: SavedQuery) -> None:
        ...

    def store_saved_aggregation(self, aggregation: SavedAggregation) -> None:
        ...


class PromptsProtocol(Protocol):
    def handle_overlay_key(self, press: KeyPress) -> None:
        ...

    def perform_confirm_action(self, action: ConfirmAction) -> None:
        ...

    def export_documents(self, path: str) -> None:
        ...


class ConnectionsProtocol(Protocol):
    def select_connection_scope(self) -> None:
        ...


class SessionProtocol(
    SessionStateProtocol,
    NavigationProtocol,
    LoadingProtocol,
    EditorWorkflowProtocol,
    SavedSpecsProtocol,
    PromptsProtocol,
    ConnectionsProtocol,
    Protocol,
):
    """Full session surface used by mixins."""

    pass
