"""Modal overlays: at most one is active and it owns every key press."""

from __future__ import annotations

from dataclasses import dataclass

from lazycompass.domains.editor.domain.actions import PendingEditorAction
from lazycompass.domains.mongo.app.executor import DocumentDeleteSpec
from lazycompass.domains.saved.domain.specs import SavedAggregation, SavedQuery

DELETE_PHRASE = "delete"
EDITOR_PROMPT_TEXT = "editor command required (set $VISUAL/$EDITOR or enter here)"
EXPORT_PROMPT_TEXT = "export documents to path"


@dataclass(frozen=True)
class DeleteDocument:
    spec: DocumentDeleteSpec
    return_to_documents: bool


@dataclass(frozen=True)
class OverwriteQuery:
    query: SavedQuery


@dataclass(frozen=True)
class OverwriteAggregation:
    aggregation: SavedAggregation


ConfirmAction = DeleteDocument | OverwriteQuery | OverwriteAggregation


@dataclass
class ConfirmOverlay:
    """Yes/no prompt, or a typed-phrase prompt when ``required`` is set."""

    prompt: str
    action: ConfirmAction
    input: str = ""
    required: str | None = None


@dataclass
class EditorPromptOverlay:
    prompt: str
    action: PendingEditorAction
    input: str = ""


@dataclass
class PathPromptOverlay:
    prompt: str = EXPORT_PROMPT_TEXT
    input: str = ""


Overlay = ConfirmOverlay | EditorPromptOverlay | PathPromptOverlay
