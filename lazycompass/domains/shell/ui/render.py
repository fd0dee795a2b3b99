"""Screen layout and text rendering for the session."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from lazycompass.domains.loading.domain.results import (
    IDLE,
    CollectionSource,
    DocumentResultSource,
    Failed,
    Loading,
    LoadState,
    source_title_suffix,
)
from lazycompass.domains.mongo.domain.documents import document_preview
from lazycompass.domains.navigation.domain.hints import help_lines, hint_line
from lazycompass.domains.navigation.domain.screens import (
    ADD_CONNECTION_SCOPE_ITEMS,
    HEADER_TITLES,
    PICKER_TITLES,
    SAVE_SCOPE_ITEMS,
    Screen,
)
from lazycompass.domains.prompts.domain.overlay import ConfirmOverlay, EditorPromptOverlay, PathPromptOverlay
from lazycompass.domains.saved.domain.specs import saved_scope_label
from lazycompass.domains.shell.app.session import SessionController
from lazycompass.domains.shell.app.theme import Theme

HIGHLIGHT_SYMBOL = "> "
HELP_TITLE = "Help"
DOCUMENT_TITLE = "Document"


@dataclass(frozen=True)
class ListPane:
    title: str
    items: list[str]
    selected: int | None
    load_state: LoadState
    loading_label: str
    focused: bool = True


@dataclass(frozen=True)
class DocumentPane:
    title: str
    lines: list[str]
    scroll: int


Pane = ListPane | DocumentPane


@dataclass(frozen=True)
class ScreenLayout:
    """Panes for one frame.

    ``side`` takes the left 20% when present. ``picker`` sits above
    ``main`` in the right column.
    """

    main: Pane
    side: ListPane | None = None
    picker: ListPane | None = None


def documents_title(page: int, source: DocumentResultSource) -> str:
    title = f"Documents (page {page + 1}){source_title_suffix(source)}"
    if not isinstance(source, CollectionSource):
        title += " [c clear applied]"
    return title


def _connections_pane(session: SessionController) -> ListPane:
    return ListPane(
        title="Connections",
        items=[connection.label for connection in session.storage.config.connections],
        selected=session.connection_index,
        load_state=IDLE,
        loading_label="loading connections...",
    )


def _databases_pane(session: SessionController) -> ListPane:
    return ListPane(
        title="Databases",
        items=list(session.database_items),
        selected=session.database_index,
        load_state=session.database_state,
        loading_label="loading databases...",
    )


def _collections_pane(session: SessionController) -> ListPane:
    return ListPane(
        title="Collections",
        items=list(session.collection_items),
        selected=session.collection_index,
        load_state=session.collection_state,
        loading_label="loading collections...",
    )


def _documents_pane(session: SessionController, focused: bool = True) -> ListPane:
    return ListPane(
        title=documents_title(session.document_page, session.document_result_source),
        items=[document_preview(document) for document in session.documents],
        selected=session.document_index,
        load_state=session.document_state,
        loading_label="loading documents...",
        focused=focused,
    )


def _scope_pane(title: str, items: tuple[str, ...], selected: int | None) -> ListPane:
    return ListPane(
        title=title,
        items=list(items),
        selected=selected,
        load_state=IDLE,
        loading_label="loading...",
    )


def screen_layout(session: SessionController) -> ScreenLayout:
    screen = session.screen
    if screen is Screen.CONNECTIONS:
        return ScreenLayout(main=_connections_pane(session))
    if screen is Screen.DATABASES:
        return ScreenLayout(side=_connections_pane(session), main=_databases_pane(session))
    if screen is Screen.COLLECTIONS:
        return ScreenLayout(side=_databases_pane(session), main=_collections_pane(session))
    if screen is Screen.DOCUMENTS:
        return ScreenLayout(side=_collections_pane(session), main=_documents_pane(session))
    if screen is Screen.DOCUMENT_VIEW:
        body = DocumentPane(title=DOCUMENT_TITLE, lines=list(session.document_lines), scroll=session.document_scroll)
        return ScreenLayout(side=_documents_pane(session), main=body)
    if screen is Screen.SAVED_QUERY_SELECT:
        picker = ListPane(
            title=PICKER_TITLES[screen],
            items=[f"{query.id} ({saved_scope_label(query.scope)})" for query in session.storage.queries],
            selected=session.saved_query_index,
            load_state=session.saved_query_state,
            loading_label="running saved query...",
        )
        return ScreenLayout(
            side=_collections_pane(session),
            picker=picker,
            main=_documents_pane(session, focused=False),
        )
    if screen is Screen.SAVED_AGGREGATION_SELECT:
        picker = ListPane(
            title=PICKER_TITLES[screen],
            items=[f"{agg.id} ({saved_scope_label(agg.scope)})" for agg in session.storage.aggregations],
            selected=session.saved_agg_index,
            load_state=session.saved_agg_state,
            loading_label="running saved aggregation...",
        )
        return ScreenLayout(
            side=_collections_pane(session),
            picker=picker,
            main=_documents_pane(session, focused=False),
        )
    if screen is Screen.SAVE_QUERY_SCOPE_SELECT:
        return ScreenLayout(main=_scope_pane(PICKER_TITLES[screen], SAVE_SCOPE_ITEMS, session.save_query_scope_index))
    if screen is Screen.SAVE_AGGREGATION_SCOPE_SELECT:
        return ScreenLayout(main=_scope_pane(PICKER_TITLES[screen], SAVE_SCOPE_ITEMS, session.save_agg_scope_index))
    return ScreenLayout(
        main=_scope_pane(PICKER_TITLES[screen], ADD_CONNECTION_SCOPE_ITEMS, session.add_connection_scope_index)
    )


def visible_start(selected: int | None, count: int, height: int) -> int:
    """First item index to draw so that ``selected`` stays in view."""
    if height <= 0 or count <= height or selected is None:
        return 0
    start = selected - height + 1
    return max(0, min(start, count - height))


def render_list(pane: ListPane, theme: Theme, height: int = 0) -> Text:
    if not pane.items:
        if isinstance(pane.load_state, Loading):
            return Text(pane.loading_label, style=theme.text)
        if isinstance(pane.load_state, Failed):
            return Text(f"error: {pane.load_state.message}", style=theme.error)
        return Text("no items", style=theme.text)

    selected = pane.selected if pane.focused else None
    start = visible_start(selected, len(pane.items), height)
    stop = start + height if height > 0 else len(pane.items)
    text = Text(style=theme.text, no_wrap=True, overflow="ellipsis")
    for index in range(start, min(stop, len(pane.items))):
        if index > start:
            text.append("\n")
        if index == selected:
            text.append(f"{HIGHLIGHT_SYMBOL}{pane.items[index]}", style=theme.selection)
        else:
            text.append(f"{' ' * len(HIGHLIGHT_SYMBOL)}{pane.items[index]}")
    return text


def render_document(pane: DocumentPane, theme: Theme) -> Text:
    return Text("\n".join(pane.lines[pane.scroll :]), style=theme.text)


def header_text(session: SessionController) -> Text:
    theme = session.theme
    connection = session.selected_connection()
    path = (
        f"Conn: {connection.name if connection else '-'}  "
        f"Db: {session.selected_database() or '-'}  "
        f"Coll: {session.selected_collection() or '-'}"
    )
    text = Text()
    text.append(HEADER_TITLES[session.screen], style=f"bold {theme.accent}")
    text.append("\n")
    text.append(path, style=theme.text)
    if session.read_only:
        text.append("\n")
        text.append("MODE: READ-ONLY", style=f"bold {theme.warning}")
    return text


def _input_display(value: str) -> str:
    return f"'{value}'" if value else "[type below]"


def footer_lines(session: SessionController) -> list[tuple[str, str | None]]:
    """Footer rows as (text, style kind); kind is "warning", "error" or None."""
    hint = hint_line(session.input_context(), session.keymap)
    overlay = session.overlay
    if isinstance(overlay, EditorPromptOverlay):
        return [
            (overlay.prompt, "warning"),
            (f"Enter to launch editor (current: {_input_display(overlay.input)})  Esc to cancel", None),
        ]
    if isinstance(overlay, PathPromptOverlay):
        return [
            (overlay.prompt, "warning"),
            (f"Enter to export (current: {_input_display(overlay.input)})  Esc to cancel", None),
        ]
    if isinstance(overlay, ConfirmOverlay):
        if overlay.required is not None:
            action_line = (
                f"Confirm: type '{overlay.required}' then press Enter "
                f"(currently: {_input_display(overlay.input)})  Esc to cancel"
            )
        else:
            action_line = "y confirm  n cancel  Esc to cancel"
        return [(overlay.prompt, "warning"), (action_line, None)]
    if session.message is not None:
        return [(session.message, "error"), (hint, None)]
    if session.warnings:
        return [(f"warning: {session.warnings[0]}", "warning"), (hint, None)]
    return [(hint, None), (" ", None)]


def footer_text(session: SessionController) -> Text:
    theme = session.theme
    styles = {"warning": theme.warning, "error": theme.error, None: theme.text}
    text = Text(no_wrap=True, overflow="ellipsis")
    for index, (line, kind) in enumerate(footer_lines(session)):
        if index:
            text.append("\n")
        text.append(line, style=styles[kind])
    return text


def help_text(session: SessionController) -> Text:
    return Text("\n".join(help_lines(session.input_context(), session.keymap)), style=session.theme.text)
