"""Session controller: all state plus the key handling entry point."""

from __future__ import annotations

import logging
from collections import deque
from queue import SimpleQueue

from lazycompass.core.input_context import InputContext
from lazycompass.core.key_router import GoTopChord, KeyPress, resolve_action
from lazycompass.core.keymap import KeymapProvider, get_keymap
from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.domains.connections.ui.mixins.add_connection import AddConnectionMixin
from lazycompass.domains.editor.app.editor import EditorLauncher
from lazycompass.domains.editor.ui.mixins.editor_workflow import EditorWorkflowMixin
from lazycompass.domains.loading.app.tracker import LoadTracker
from lazycompass.domains.loading.domain.results import (
    COLLECTION_SOURCE,
    IDLE,
    CollectionSource,
    DocumentLoadReason,
    DocumentResultSource,
    LoadResult,
    LoadState,
)
from lazycompass.domains.loading.ui.mixins.loading import LoadingMixin
from lazycompass.domains.mongo.app.executor import MongoExecutor
from lazycompass.domains.mongo.domain.documents import Document
from lazycompass.domains.mongo.ui.mixins.document_actions import DocumentActionsMixin
from lazycompass.domains.navigation.domain.screens import Screen
from lazycompass.domains.navigation.ui.mixins.navigation import NavigationMixin
from lazycompass.domains.prompts.domain.overlay import (
    ConfirmOverlay,
    EditorPromptOverlay,
    Overlay,
    PathPromptOverlay,
)
from lazycompass.domains.prompts.ui.mixins.prompts import PromptsMixin
from lazycompass.domains.saved.domain.payloads import (
    InlineAggregationPayload,
    InlineDraft,
    InlineQueryPayload,
)
from lazycompass.domains.saved.ui.mixins.saved_specs import SavedSpecsMixin
from lazycompass.domains.shell.app.theme import Theme, resolve_theme
from lazycompass.shared.app.storage import StorageSnapshot
from lazycompass.shared.app.tasks import TaskRunner
from lazycompass.shared.ui.clipboard import Clipboard

logger = logging.getLogger(__name__)

NO_CONNECTIONS_MESSAGE = "no connections configured"


def overlay_kind(overlay: Overlay | None) -> str | None:
    if isinstance(overlay, EditorPromptOverlay):
        return "editor_prompt"
    if isinstance(overlay, PathPromptOverlay):
        return "path_prompt"
    if isinstance(overlay, ConfirmOverlay):
        return "confirm"
    return None


class SessionController(
    NavigationMixin,
    LoadingMixin,
    EditorWorkflowMixin,
    SavedSpecsMixin,
    DocumentActionsMixin,
    PromptsMixin,
    AddConnectionMixin,
):
    """Owns the session state and turns key presses into actions.

    Only the UI thread touches this object. Reads are handed to ``tasks``
    and come back through ``inbox``; mutations call the executor and the
    stores directly and block until they return.
    """

    def __init__(
        self,
        *,
        paths: ConfigPaths,
        storage: StorageSnapshot,
        executor: MongoExecutor,
        tasks: TaskRunner,
        editor_launcher: EditorLauncher,
        clipboard: Clipboard,
        read_only: bool | None = None,
        keymap: KeymapProvider | None = None,
    ) -> None:
        self.paths = paths
        self.storage = storage
        self.executor = executor
        self.tasks = tasks
        self.editor_launcher = editor_launcher
        self.clipboard = clipboard
        self.read_only = storage.config.is_read_only() if read_only is None else read_only
        self.keymap = keymap or get_keymap()

        theme, theme_warning = resolve_theme(storage.config.theme.name)
        self.theme: Theme = theme
        self.warnings: deque[str] = deque(storage.warnings)
        if theme_warning is not None:
            self.warnings.append(theme_warning)

        self.screen = Screen.CONNECTIONS
        self.connection_index: int | None = 0 if storage.config.connections else None
        self.database_items: list[str] = []
        self.database_index: int | None = None
        self.database_state: LoadState = IDLE
        self.collection_items: list[str] = []
        self.collection_index: int | None = None
        self.collection_state: LoadState = IDLE
        self.documents: list[Document] = []
        self.document_index: int | None = None
        self.document_page = 0
        self.document_state: LoadState = IDLE
        self.document_lines: list[str] = []
        self.document_scroll = 0
        self.document_pending_index: int | None = None
        self.document_load_reason = DocumentLoadReason.REFRESH
        self.document_result_source: DocumentResultSource = COLLECTION_SOURCE
        self.saved_query_index: int | None = None
        self.saved_query_state: LoadState = IDLE
        self.saved_agg_index: int | None = None
        self.saved_agg_state: LoadState = IDLE
        self.inline_query_state: LoadState = IDLE
        self.inline_agg_state: LoadState = IDLE
        self.save_query_scope_index: int | None = 0
        self.save_agg_scope_index: int | None = 0
        self.add_connection_scope_index: int | None = 0
        self.inline_query_draft: InlineDraft[InlineQueryPayload] | None = None
        self.inline_agg_draft: InlineDraft[InlineAggregationPayload] | None = None

        self.overlay: Overlay | None = None
        self.help_visible = False
        self.chord = GoTopChord()
        self.message: str | None = None if self.connection_index is not None else NO_CONNECTIONS_MESSAGE
        self.editor_command: str | None = None

        self.loads = LoadTracker()
        self.inbox: SimpleQueue[LoadResult] = SimpleQueue()

    def handle_key(self, press: KeyPress) -> bool:
        """Process one key press. Returns True when the session should quit."""
        if self.overlay is not None:
            self.handle_overlay_key(press)
            return False

        if self.warnings:
            self.warnings.popleft()
        self.message = None

        if self.help_visible:
            self.chord.reset()
            if press.key == "escape":
                self.help_visible = False
                return False
            action = self.keymap.action_for_key(press.key)
            if action == "quit":
                return True
            if action == "toggle_help":
                self.help_visible = False
            return False

        action = resolve_action(press, self.chord, self.keymap)
        if action is None:
            return False
        return self.apply_action(action)

    def apply_action(self, name: str) -> bool:
        if name == "quit":
            return True
        handler = getattr(self, f"action_{name}", None)
        if handler is None:
            logger.debug("no handler for action %s", name)
            return False
        try:
            handler()
        except Exception as error:
            self.set_error(error)
        return False

    def input_context(self) -> InputContext:
        return InputContext(
            screen=self.screen.value,
            overlay=overlay_kind(self.overlay),
            help_visible=self.help_visible,
            chord_pending=self.chord.pending,
            read_only=self.read_only,
            has_documents=bool(self.documents),
            applied_results=not isinstance(self.document_result_source, CollectionSource),
        )
