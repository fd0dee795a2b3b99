"""Editor round trips for document mutations and saved/inline specs."""

from __future__ import annotations

import logging

from lazycompass.domains.editor.app.editor import is_editor_cancelled, resolve_editor
from lazycompass.domains.editor.domain.actions import (
    AddConnection,
    EditDocument,
    InsertDocument,
    PendingEditorAction,
    RunInlineAggregation,
    RunInlineQuery,
    SaveAggregation,
    SaveInlineAggregation,
    SaveInlineQuery,
    SaveQuery,
)
from lazycompass.domains.mongo.app.executor import DocumentInsertSpec, DocumentReplaceSpec
from lazycompass.domains.mongo.domain.documents import (
    document_id,
    format_bson,
    parse_json_document,
    to_extended_json,
)
from lazycompass.domains.navigation.domain.screens import Screen
from lazycompass.domains.prompts.domain.overlay import EDITOR_PROMPT_TEXT, EditorPromptOverlay
from lazycompass.shared.core.errors import EditorError
from lazycompass.shared.ui.protocols.session import SessionProtocol

logger = logging.getLogger(__name__)


class EditorWorkflowMixin:
    """Mixin providing the editor workflow controller."""

    def ensure_editor_command(self: SessionProtocol, action: PendingEditorAction) -> str | None:
        """Return the editor command, or open the editor prompt and return None.

        The pending action is parked in the prompt overlay and resumed once
        the user types a command.
        """
        if self.editor_command is not None:
            return self.editor_command
        try:
            editor = resolve_editor()
        except EditorError:
            self.overlay = EditorPromptOverlay(prompt=EDITOR_PROMPT_TEXT, action=action)
            return None
        self.editor_command = editor
        return editor

    def run_editor_action(self: SessionProtocol, action: PendingEditorAction) -> None:
        if self.ensure_editor_command(action) is None:
            return
        self.perform_editor_action(action)

    def open_editor(self: SessionProtocol, label: str, initial: str) -> str:
        if self.editor_command is None:
            raise EditorError("editor command missing")
        logger.debug("opening editor for %s", label)
        return self.editor_launcher.edit(self.editor_command, label, initial)

    def perform_editor_action(self: SessionProtocol, action: PendingEditorAction) -> None:
        if isinstance(action, InsertDocument):
            self._insert_document_with_context(action)
        elif isinstance(action, EditDocument):
            self._edit_document_with_context(action)
        elif isinstance(action, SaveQuery):
            self.save_query_with_template(action.template)
        elif isinstance(action, SaveAggregation):
            self.save_aggregation_with_template(action.template)
        elif isinstance(action, RunInlineQuery):
            self.run_inline_query_in_editor()
        elif isinstance(action, RunInlineAggregation):
            self.run_inline_aggregation_in_editor()
        elif isinstance(action, SaveInlineQuery):
            self.save_inline_query_with_draft(action.scope, action.draft)
        elif isinstance(action, SaveInlineAggregation):
            self.save_inline_aggregation_with_draft(action.scope, action.draft)
        elif isinstance(action, AddConnection):
            self.add_connection_with_template(action.scope, action.template)
        else:
            raise TypeError(f"unsupported editor action: {action!r}")

    # Document mutations

    def action_insert_document(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        if self.block_if_read_only("insert documents"):
            return
        try:
            connection, database, collection = self.selected_context()
            self.run_editor_action(InsertDocument(connection, database, collection))
        except Exception as error:
            self.set_error(error)

    def action_edit_document(self: SessionProtocol) -> None:
        if self.screen not in (Screen.DOCUMENTS, Screen.DOCUMENT_VIEW):
            return
        if self.block_if_read_only("edit documents"):
            return
        try:
            connection, database, collection = self.selected_context()
            document = dict(self.selected_document())
            self.run_editor_action(EditDocument(connection, database, collection, document))
        except Exception as error:
            self.set_error(error)

    def _insert_document_with_context(self: SessionProtocol, action: InsertDocument) -> None:
        initial = "{}"
        contents = self.open_editor("insert", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        document = parse_json_document("document", contents)
        spec = DocumentInsertSpec(
            connection=action.connection,
            database=action.database,
            collection=action.collection,
            document=document,
        )
        if self.block_if_read_only("insert documents"):
            return
        inserted_id = self.executor.insert_document(self.storage.config, spec)
        self.reload_documents_after_change()
        self.message = f"inserted document {format_bson(inserted_id)}"

    def _edit_document_with_context(self: SessionProtocol, action: EditDocument) -> None:
        original_id = document_id(action.document)
        initial = to_extended_json(action.document, indent=2)
        contents = self.open_editor("edit", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        updated = parse_json_document("document", contents)
        id_changed = "_id" not in updated or updated["_id"] != original_id
        if id_changed:
            updated["_id"] = original_id
        spec = DocumentReplaceSpec(
            connection=action.connection,
            database=action.database,
            collection=action.collection,
            id=original_id,
            document=updated,
        )
        if self.block_if_read_only("edit documents"):
            return
        self.executor.replace_document(self.storage.config, spec)
        self.reload_documents_after_change()
        self.message = "updated document (kept original _id)" if id_changed else "updated document"
