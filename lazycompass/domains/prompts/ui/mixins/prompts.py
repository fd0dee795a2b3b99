"""Key handling for the active overlay (editor prompt, path prompt, confirmation)."""

from __future__ import annotations

from lazycompass.core.key_router import KeyPress
from lazycompass.core.write_guard import WriteGuard
from lazycompass.domains.navigation.domain.screens import Screen
from lazycompass.domains.prompts.domain.overlay import (
    ConfirmAction,
    ConfirmOverlay,
    DeleteDocument,
    EditorPromptOverlay,
    OverwriteAggregation,
    OverwriteQuery,
    PathPromptOverlay,
)
from lazycompass.domains.saved.domain.specs import upsert_by_id
from lazycompass.domains.saved.store.saved_specs import write_saved_aggregation, write_saved_query
from lazycompass.shared.core.errors import WriteGuardError
from lazycompass.shared.ui.protocols.session import SessionProtocol


class PromptsMixin:
    """Mixin providing overlay key handling.

    The overlay is taken out of the session before its handler runs and put
    back only when the handler keeps it; a handler may open a new overlay
    (an overwrite confirmation after saving) in its place.
    """

    def handle_overlay_key(self: SessionProtocol, press: KeyPress) -> None:
        overlay = self.overlay
        self.overlay = None
        self.chord.reset()
        if isinstance(overlay, EditorPromptOverlay):
            self._handle_editor_prompt_key(overlay, press)
        elif isinstance(overlay, PathPromptOverlay):
            self._handle_path_prompt_key(overlay, press)
        elif isinstance(overlay, ConfirmOverlay):
            self._handle_confirm_key(overlay, press)

    def _handle_editor_prompt_key(self: SessionProtocol, prompt: EditorPromptOverlay, press: KeyPress) -> None:
        if press.key == "escape":
            self.message = "cancelled"
        elif press.key == "backspace":
            prompt.input = prompt.input[:-1]
            self.overlay = prompt
        elif press.key == "enter":
            editor = prompt.input.strip()
            if not editor:
                self.overlay = prompt
                return
            self.editor_command = editor
            try:
                self.perform_editor_action(prompt.action)
            except Exception as error:
                self.set_error(error)
        elif press.printable is not None:
            prompt.input += press.printable
            self.overlay = prompt
        else:
            self.overlay = prompt

    def _handle_path_prompt_key(self: SessionProtocol, prompt: PathPromptOverlay, press: KeyPress) -> None:
        if press.key == "escape":
            self.message = "cancelled"
        elif press.key == "backspace":
            prompt.input = prompt.input[:-1]
            self.overlay = prompt
        elif press.key == "enter":
            path = prompt.input.strip()
            if not path:
                self.overlay = prompt
                return
            try:
                self.export_documents(path)
            except Exception as error:
                self.set_error(error)
        elif press.printable is not None:
            prompt.input += press.printable
            self.overlay = prompt
        else:
            self.overlay = prompt

    def _handle_confirm_key(self: SessionProtocol, confirm: ConfirmOverlay, press: KeyPress) -> None:
        if confirm.required is not None:
            self._handle_typed_confirm_key(confirm, confirm.required, press)
            return
        if press.key in ("y", "Y"):
            self._run_confirm_action(confirm.action)
        elif press.key in ("n", "q", "escape"):
            self.message = "cancelled"
        else:
            self.overlay = confirm

    def _handle_typed_confirm_key(
        self: SessionProtocol,
        confirm: ConfirmOverlay,
        required: str,
        press: KeyPress,
    ) -> None:
        if press.key in ("escape", "q"):
            self.message = "cancelled"
        elif press.key == "backspace":
            confirm.input = confirm.input[:-1]
            self.overlay = confirm
        elif press.key == "enter":
            if confirm.input.strip().lower() == required.lower():
                self._run_confirm_action(confirm.action)
            else:
                self.message = f"must type '{required}' to confirm"
                self.overlay = confirm
        elif press.printable is not None:
            confirm.input += press.printable
            self.overlay = confirm
        else:
            self.overlay = confirm

    def _run_confirm_action(self: SessionProtocol, action: ConfirmAction) -> None:
        try:
            self.perform_confirm_action(action)
        except Exception as error:
            self.set_error(error)

    def perform_confirm_action(self: SessionProtocol, action: ConfirmAction) -> None:
        """Execute a confirmed action; the write guard is checked again first."""
        guard = WriteGuard(self.read_only, self.storage.config.pipeline_writes_allowed())
        try:
            if isinstance(action, DeleteDocument):
                guard.ensure_write_allowed("delete documents")
            elif isinstance(action, OverwriteQuery):
                guard.ensure_write_allowed("save queries")
            else:
                guard.ensure_write_allowed("save aggregations")
        except WriteGuardError as error:
            self.message = str(error)
            return

        if isinstance(action, DeleteDocument):
            self.executor.delete_document(self.storage.config, action.spec)
            if action.return_to_documents:
                self.screen = Screen.DOCUMENTS
            self.reload_documents_after_change()
            self.message = "document deleted"
        elif isinstance(action, OverwriteQuery):
            path = write_saved_query(self.paths, action.query, overwrite=True)
            upsert_by_id(self.storage.queries, action.query)
            self.message = f"saved query to {path}"
        elif isinstance(action, OverwriteAggregation):
            path = write_saved_aggregation(self.paths, action.aggregation, overwrite=True)
            upsert_by_id(self.storage.aggregations, action.aggregation)
            self.message = f"saved aggregation to {path}"
