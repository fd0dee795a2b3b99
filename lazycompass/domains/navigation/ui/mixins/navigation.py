"""Screen navigation, list selection and document scrolling."""

from __future__ import annotations

import logging

from lazycompass.core.write_guard import WriteGuard
from lazycompass.domains.connections.domain.config import ConnectionSpec
from lazycompass.domains.loading.domain.results import DocumentLoadReason
from lazycompass.domains.mongo.domain.documents import Document, format_document
from lazycompass.domains.navigation.domain.screens import (
    ADD_CONNECTION_SCOPE_ITEMS,
    PARENT_SCREENS,
    SAVE_SCOPE_ITEMS,
    Screen,
)
from lazycompass.domains.navigation.domain.selection import (
    clamp_index,
    clamp_scroll,
    move_selection,
    select_last,
)
from lazycompass.shared.core.errors import SelectionMissingError, WriteGuardError, format_error
from lazycompass.shared.ui.protocols.session import SessionProtocol

logger = logging.getLogger(__name__)

# Scope pickers whose index resets when backing out.
_RESET_ON_BACK: dict[Screen, str] = {
    Screen.SAVE_QUERY_SCOPE_SELECT: "save_query_scope_index",
    Screen.SAVE_AGGREGATION_SCOPE_SELECT: "save_agg_scope_index",
    Screen.ADD_CONNECTION_SCOPE_SELECT: "add_connection_scope_index",
}


class NavigationMixin:
    """Mixin providing the screen navigator."""

    # Selection context

    def selected_connection(self: SessionProtocol) -> ConnectionSpec | None:
        connections = self.storage.config.connections
        if self.connection_index is None or self.connection_index >= len(connections):
            return None
        return connections[self.connection_index]

    def selected_database(self: SessionProtocol) -> str | None:
        if self.database_index is None or self.database_index >= len(self.database_items):
            return None
        return self.database_items[self.database_index]

    def selected_collection(self: SessionProtocol) -> str | None:
        if self.collection_index is None or self.collection_index >= len(self.collection_items):
            return None
        return self.collection_items[self.collection_index]

    def selected_context(self: SessionProtocol) -> tuple[str, str, str]:
        connection = self.selected_connection()
        if connection is None:
            raise SelectionMissingError("select a connection")
        database = self.selected_database()
        if database is None:
            raise SelectionMissingError("select a database")
        collection = self.selected_collection()
        if collection is None:
            raise SelectionMissingError("select a collection")
        return connection.name, database, collection

    def selected_document(self: SessionProtocol) -> Document:
        if self.document_index is None or self.document_index >= len(self.documents):
            raise SelectionMissingError("select a document")
        return self.documents[self.document_index]

    def set_error(self: SessionProtocol, error: BaseException) -> None:
        logger.debug("action failed: %s", error, exc_info=error)
        self.message = format_error(error)

    def block_if_read_only(self: SessionProtocol, action: str) -> bool:
        guard = WriteGuard(self.read_only, self.storage.config.pipeline_writes_allowed())
        try:
            guard.ensure_write_allowed(action)
        except WriteGuardError as error:
            self.message = str(error)
            return True
        return False

    # List cursors

    def _cursor(self: SessionProtocol) -> tuple[str, int] | None:
        """Index attribute and item count for the current list screen."""
        screen = self.screen
        if screen is Screen.CONNECTIONS:
            return "connection_index", len(self.storage.config.connections)
        if screen is Screen.DATABASES:
            return "database_index", len(self.database_items)
        if screen is Screen.COLLECTIONS:
            return "collection_index", len(self.collection_items)
        if screen is Screen.DOCUMENTS:
            return "document_index", len(self.documents)
        if screen is Screen.SAVED_QUERY_SELECT:
            return "saved_query_index", len(self.storage.queries)
        if screen is Screen.SAVED_AGGREGATION_SELECT:
            return "saved_agg_index", len(self.storage.aggregations)
        if screen is Screen.SAVE_QUERY_SCOPE_SELECT:
            return "save_query_scope_index", len(SAVE_SCOPE_ITEMS)
        if screen is Screen.SAVE_AGGREGATION_SCOPE_SELECT:
            return "save_agg_scope_index", len(SAVE_SCOPE_ITEMS)
        if screen is Screen.ADD_CONNECTION_SCOPE_SELECT:
            return "add_connection_scope_index", len(ADD_CONNECTION_SCOPE_ITEMS)
        return None

    def _move(self: SessionProtocol, delta: int) -> None:
        if self.screen is Screen.DOCUMENT_VIEW:
            self.scroll_document(delta)
            return
        cursor = self._cursor()
        if cursor is None:
            return
        attr, length = cursor
        setattr(self, attr, move_selection(getattr(self, attr), length, delta))

    def scroll_document(self: SessionProtocol, delta: int) -> None:
        if not self.document_lines:
            self.document_scroll = 0
            return
        self.document_scroll = clamp_scroll(self.document_scroll + delta, len(self.document_lines))

    def max_document_scroll(self: SessionProtocol) -> int:
        return max(len(self.document_lines) - 1, 0)

    def prepare_document_view(self: SessionProtocol) -> None:
        if self.document_index is None or self.document_index >= len(self.documents):
            return
        self.document_lines = format_document(self.documents[self.document_index])
        self.document_scroll = 0

    # Actions

    def action_move_down(self: SessionProtocol) -> None:
        self._move(1)

    def action_move_up(self: SessionProtocol) -> None:
        self._move(-1)

    def action_go_top(self: SessionProtocol) -> None:
        if self.screen is Screen.DOCUMENT_VIEW:
            self.document_scroll = 0
            return
        cursor = self._cursor()
        if cursor is not None:
            attr, length = cursor
            setattr(self, attr, clamp_index(0, length))

    def action_go_bottom(self: SessionProtocol) -> None:
        if self.screen is Screen.DOCUMENT_VIEW:
            self.document_scroll = self.max_document_scroll()
            return
        cursor = self._cursor()
        if cursor is not None:
            attr, length = cursor
            setattr(self, attr, select_last(length))

    def action_back(self: SessionProtocol) -> None:
        parent = PARENT_SCREENS.get(self.screen)
        if parent is None:
            return
        reset_attr = _RESET_ON_BACK.get(self.screen)
        if reset_attr is not None:
            setattr(self, reset_attr, 0)
        self.screen = parent

    def action_forward(self: SessionProtocol) -> None:
        screen = self.screen
        try:
            if screen is Screen.CONNECTIONS:
                if self.connection_index is not None:
                    self.start_load_databases()
                    self.screen = Screen.DATABASES
            elif screen is Screen.DATABASES:
                if self.database_index is not None:
                    self.start_load_collections()
                    self.screen = Screen.COLLECTIONS
            elif screen is Screen.COLLECTIONS:
                if self.collection_index is not None:
                    self.document_page = 0
                    self.start_load_documents(None, DocumentLoadReason.ENTER_COLLECTION)
                    self.screen = Screen.DOCUMENTS
            elif screen is Screen.DOCUMENTS:
                if self.document_index is not None:
                    self.prepare_document_view()
                    self.screen = Screen.DOCUMENT_VIEW
            elif screen is Screen.SAVED_QUERY_SELECT:
                self.start_execute_saved_query()
            elif screen is Screen.SAVED_AGGREGATION_SELECT:
                self.start_execute_saved_aggregation()
            elif screen is Screen.SAVE_QUERY_SCOPE_SELECT:
                self.select_query_save_scope()
            elif screen is Screen.SAVE_AGGREGATION_SCOPE_SELECT:
                self.select_aggregation_save_scope()
            elif screen is Screen.ADD_CONNECTION_SCOPE_SELECT:
                self.select_connection_scope()
        except Exception as error:
            self.set_error(error)

    def action_next_page(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        self.document_page += 1
        try:
            self.start_load_documents(self.document_index, DocumentLoadReason.NAVIGATE_NEXT)
        except Exception as error:
            self.set_error(error)

    def action_previous_page(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS or self.document_page == 0:
            return
        self.document_page -= 1
        try:
            self.start_load_documents(self.document_index, DocumentLoadReason.NAVIGATE_PREVIOUS)
        except Exception as error:
            self.set_error(error)

    def action_toggle_help(self: SessionProtocol) -> None:
        self.help_visible = not self.help_visible
