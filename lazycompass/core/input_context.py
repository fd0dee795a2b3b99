"""UI-agnostic input context used for key state evaluation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class InputContext:
    """Snapshot of session input state for hint and help evaluation."""

    screen: str  # Screen value, e.g. "connections" | "documents" | "document_view"
    overlay: str | None  # "confirm" | "editor_prompt" | "path_prompt" | None
    help_visible: bool
    chord_pending: bool
    read_only: bool
    has_documents: bool
    applied_results: bool  # documents come from a saved or inline run
