"""Per-screen key hint groups for the footer and help overlay."""

from __future__ import annotations

from dataclasses import dataclass

from lazycompass.core.input_context import InputContext
from lazycompass.core.keymap import KeymapProvider, get_keymap
from lazycompass.domains.navigation.domain.screens import Screen


@dataclass(frozen=True)
class HintGroup:
    actions: tuple[str, ...]
    label: str


MOVE = ("move_down", "move_up")
FORWARD = ("forward",)
BACK = ("back",)
TOP_BOTTOM = ("go_top", "go_bottom")
HELP = HintGroup(("toggle_help",), "help")
QUIT = HintGroup(("quit",), "quit")

CONNECTION_HINTS = (
    HintGroup(MOVE, "move"),
    HintGroup(FORWARD, "enter"),
    HintGroup(TOP_BOTTOM, "top/bottom"),
    HintGroup(("add_connection",), "new connection"),
    HELP,
    QUIT,
)

DATABASE_HINTS = (
    HintGroup(MOVE, "move"),
    HintGroup(FORWARD, "enter"),
    HintGroup(BACK, "back"),
    HintGroup(TOP_BOTTOM, "top/bottom"),
    HELP,
    QUIT,
)

DOCUMENT_HINTS = (
    HintGroup(MOVE, "move"),
    HintGroup(FORWARD, "view"),
    HintGroup(BACK, "back"),
    HintGroup(("insert_document", "edit_document", "delete_document"), "insert/edit/delete"),
    HintGroup(("save_query", "save_aggregation"), "save query/agg"),
    HintGroup(("run_saved_query", "run_saved_aggregation"), "run saved"),
    HintGroup(("run_inline_query", "run_inline_aggregation"), "inline query/agg"),
    HintGroup(("copy_document", "export_documents"), "copy/export"),
    HintGroup(("previous_page", "next_page"), "page"),
    HintGroup(TOP_BOTTOM, "top/bottom"),
    HELP,
    QUIT,
)

CLEAR_APPLIED_HINT = HintGroup(("clear_applied",), "clear applied")

SAVED_SELECT_HINTS = (
    HintGroup(MOVE, "move"),
    HintGroup(FORWARD, "run"),
    HintGroup(BACK, "cancel"),
    HintGroup(TOP_BOTTOM, "top/bottom"),
    HELP,
    QUIT,
)

SCOPE_SELECT_HINTS = (
    HintGroup(MOVE, "move"),
    HintGroup(FORWARD, "select"),
    HintGroup(BACK, "cancel"),
    HintGroup(TOP_BOTTOM, "top/bottom"),
    HELP,
    QUIT,
)

DOCUMENT_VIEW_HINTS = (
    HintGroup(MOVE, "scroll"),
    HintGroup(BACK, "back"),
    HintGroup(("edit_document", "delete_document"), "edit/delete"),
    HintGroup(TOP_BOTTOM, "top/bottom"),
    HELP,
    QUIT,
)

_SCREEN_HINTS: dict[Screen, tuple[HintGroup, ...]] = {
    Screen.CONNECTIONS: CONNECTION_HINTS,
    Screen.DATABASES: DATABASE_HINTS,
    Screen.COLLECTIONS: DATABASE_HINTS,
    Screen.DOCUMENTS: DOCUMENT_HINTS,
    Screen.DOCUMENT_VIEW: DOCUMENT_VIEW_HINTS,
    Screen.SAVED_QUERY_SELECT: SAVED_SELECT_HINTS,
    Screen.SAVED_AGGREGATION_SELECT: SAVED_SELECT_HINTS,
    Screen.SAVE_QUERY_SCOPE_SELECT: SCOPE_SELECT_HINTS,
    Screen.SAVE_AGGREGATION_SCOPE_SELECT: SCOPE_SELECT_HINTS,
    Screen.ADD_CONNECTION_SCOPE_SELECT: SCOPE_SELECT_HINTS,
}


def hint_groups(ctx: InputContext) -> list[HintGroup]:
    groups = list(_SCREEN_HINTS[Screen(ctx.screen)])
    if ctx.applied_results and ctx.screen in (Screen.DOCUMENTS.value, Screen.DOCUMENT_VIEW.value):
        groups.insert(len(groups) - 2, CLEAR_APPLIED_HINT)
    return groups


def keys_for_actions(actions: tuple[str, ...], keymap: KeymapProvider | None = None) -> str:
    keymap = keymap or get_keymap()
    keys: list[str] = []
    for action in actions:
        keys.extend(keymap.display_keys(action))
    return "/".join(keys)


def hint_line(ctx: InputContext, keymap: KeymapProvider | None = None) -> str:
    return "  ".join(f"{keys_for_actions(group.actions, keymap)} {group.label}" for group in hint_groups(ctx))


def help_lines(ctx: InputContext, keymap: KeymapProvider | None = None) -> list[str]:
    lines = [f"{keys_for_actions(group.actions, keymap):<12} {group.label}" for group in hint_groups(ctx)]
    lines.append(" ")
    lines.append("press ? or Esc to close")
    return lines
