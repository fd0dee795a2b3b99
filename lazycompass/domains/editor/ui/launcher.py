"""Editor launcher that hands the terminal over to the editor process."""

from __future__ import annotations

from typing import Any

from lazycompass.domains.editor.app.editor import open_in_editor


class SuspendingEditorLauncher:
    """Suspends the Textual app while the editor runs."""

    def __init__(self, app: Any) -> None:
        self._app = app

    def edit(self, editor: str, label: str, initial: str) -> str:
        return open_in_editor(editor, label, initial, suspend=self._app.suspend)
