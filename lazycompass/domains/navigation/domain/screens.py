"""Screens, their titles and the fixed choice lists shown on scope pickers."""

from __future__ import annotations

from enum import Enum

from lazycompass.domains.connections.domain.config import ConnectionPersistenceScope

PAGE_SIZE = 20


class Screen(Enum):
    CONNECTIONS = "connections"
    DATABASES = "databases"
    COLLECTIONS = "collections"
    DOCUMENTS = "documents"
    DOCUMENT_VIEW = "document_view"
    SAVED_QUERY_SELECT = "saved_query_select"
    SAVED_AGGREGATION_SELECT = "saved_aggregation_select"
    SAVE_QUERY_SCOPE_SELECT = "save_query_scope_select"
    SAVE_AGGREGATION_SCOPE_SELECT = "save_aggregation_scope_select"
    ADD_CONNECTION_SCOPE_SELECT = "add_connection_scope_select"


# Where "back" leads from each screen; CONNECTIONS has no parent.
PARENT_SCREENS: dict[Screen, Screen] = {
    Screen.DATABASES: Screen.CONNECTIONS,
    Screen.COLLECTIONS: Screen.DATABASES,
    Screen.DOCUMENTS: Screen.COLLECTIONS,
    Screen.DOCUMENT_VIEW: Screen.DOCUMENTS,
    Screen.SAVED_QUERY_SELECT: Screen.DOCUMENTS,
    Screen.SAVED_AGGREGATION_SELECT: Screen.DOCUMENTS,
    Screen.SAVE_QUERY_SCOPE_SELECT: Screen.DOCUMENTS,
    Screen.SAVE_AGGREGATION_SCOPE_SELECT: Screen.DOCUMENTS,
    Screen.ADD_CONNECTION_SCOPE_SELECT: Screen.CONNECTIONS,
}

HEADER_TITLES: dict[Screen, str] = {
    Screen.CONNECTIONS: "Connections",
    Screen.DATABASES: "Databases",
    Screen.COLLECTIONS: "Collections",
    Screen.DOCUMENTS: "Documents",
    Screen.DOCUMENT_VIEW: "Document",
    Screen.SAVED_QUERY_SELECT: "Run Saved Query",
    Screen.SAVED_AGGREGATION_SELECT: "Run Saved Aggregation",
    Screen.SAVE_QUERY_SCOPE_SELECT: "Save Query",
    Screen.SAVE_AGGREGATION_SCOPE_SELECT: "Save Aggregation",
    Screen.ADD_CONNECTION_SCOPE_SELECT: "Add Connection",
}

PICKER_TITLES: dict[Screen, str] = {
    Screen.SAVED_QUERY_SELECT: "Select Saved Query to Run",
    Screen.SAVED_AGGREGATION_SELECT: "Select Saved Aggregation to Run",
    Screen.SAVE_QUERY_SCOPE_SELECT: "Select Query Save Scope",
    Screen.SAVE_AGGREGATION_SCOPE_SELECT: "Select Aggregation Save Scope",
    Screen.ADD_CONNECTION_SCOPE_SELECT: "Select Persistence Scope for New Connection",
}

SAVE_SCOPE_ITEMS: tuple[str, ...] = (
    "Shared (uses current db/collection when running)",
    "Scoped (encode current db/collection in filename)",
)

ADD_CONNECTION_SCOPE_ITEMS: tuple[str, ...] = (
    "Session only (not persisted)",
    "Save to repo config (.lazycompass/config.toml)",
    "Save to global config (~/.config/lazycompass/config.toml)",
)

ADD_CONNECTION_SCOPES: tuple[ConnectionPersistenceScope, ...] = (
    ConnectionPersistenceScope.SESSION_ONLY,
    ConnectionPersistenceScope.REPO,
    ConnectionPersistenceScope.GLOBAL,
)
