"""Adding a connection from the UI, for the session or persisted to config."""

from __future__ import annotations

import dataclasses
import logging
import tomllib

import tomli_w

from lazycompass.domains.connections.domain.config import ConnectionPersistenceScope, ConnectionSpec
from lazycompass.domains.connections.store.config_loader import interpolate_env_value
from lazycompass.domains.connections.store.connections import (
    append_connection_to_global_config,
    append_connection_to_repo_config,
)
from lazycompass.domains.editor.app.editor import is_editor_cancelled
from lazycompass.domains.editor.domain.actions import AddConnection
from lazycompass.domains.navigation.domain.screens import ADD_CONNECTION_SCOPES, Screen
from lazycompass.shared.core.errors import PayloadError, StorageError, ValidationError
from lazycompass.shared.ui.protocols.session import SessionProtocol

logger = logging.getLogger(__name__)

CONNECTION_TEMPLATE = ConnectionSpec(
    name="new_connection",
    uri="mongodb://localhost:27017",
    default_database="test",
)


class AddConnectionMixin:
    """Mixin providing the add-connection workflow."""

    def action_add_connection(self: SessionProtocol) -> None:
        if self.screen is not Screen.CONNECTIONS:
            return
        self.add_connection_scope_index = 0
        self.screen = Screen.ADD_CONNECTION_SCOPE_SELECT

    def select_connection_scope(self: SessionProtocol) -> None:
        index = self.add_connection_scope_index
        if index is None or not 0 <= index < len(ADD_CONNECTION_SCOPES):
            return
        self.run_editor_action(AddConnection(scope=ADD_CONNECTION_SCOPES[index], template=CONNECTION_TEMPLATE))

    def add_connection_with_template(
        self: SessionProtocol,
        scope: ConnectionPersistenceScope,
        template: ConnectionSpec,
    ) -> None:
        initial = tomli_w.dumps(template.to_dict())
        contents = self.open_editor("connection", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            self.screen = Screen.CONNECTIONS
            return
        try:
            data = tomllib.loads(contents)
        except tomllib.TOMLDecodeError as exc:
            raise PayloadError(f"invalid TOML for connection: {exc}") from exc
        connection = ConnectionSpec.from_dict(data)
        connection.validate()
        if self.storage.config.connection_named(connection.name) is not None:
            raise ValidationError(f"connection with name '{connection.name}' already exists")
        session_connection = connection
        if "${" in connection.uri:
            session_connection = dataclasses.replace(
                connection,
                uri=interpolate_env_value(connection.uri),
                uri_template=connection.uri,
            )

        if scope is ConnectionPersistenceScope.SESSION_ONLY:
            suffix = "(session only)"
        elif scope is ConnectionPersistenceScope.REPO:
            if self.paths.repo_config_root() is None:
                raise StorageError("no repo config found; run inside a repo with .lazycompass")
            if not self._persist_connection(append_connection_to_repo_config, connection):
                return
            suffix = "to repo config"
        else:
            if not self._persist_connection(append_connection_to_global_config, connection):
                return
            suffix = "to global config"

        self.storage.config.connections.append(session_connection)
        self.connection_index = len(self.storage.config.connections) - 1
        self.message = f"added connection '{connection.name}' {suffix}"
        self.screen = Screen.CONNECTIONS

    def _persist_connection(self: SessionProtocol, append, connection: ConnectionSpec) -> bool:
        try:
            append(self.paths, connection)
        except Exception as error:
            self.set_error(error)
            self.screen = Screen.CONNECTIONS
            return False
        return True
