"""Key bindings for the session, independent of Textual widgets."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

KEY_LABELS: dict[str, str] = {
    "question_mark": "?",
    "slash": "/",
    "escape": "Esc",
    "enter": "Enter",
    "backspace": "Backspace",
    "pageup": "PgUp",
    "pagedown": "PgDn",
    "up": "Up",
    "down": "Down",
}


def format_key(key: str) -> str:
    """Label for a Textual key name as shown in the footer and help."""
    label = KEY_LABELS.get(key)
    if label is not None:
        return label
    modifier, _, rest = key.partition("+")
    if modifier == "shift" and len(rest) == 1:
        return rest.upper()
    if modifier == "ctrl" and rest:
        return f"^{rest}"
    return key


@dataclass(frozen=True)
class ActionKeyDef:
    """One key bound to one session action."""

    key: str  # Textual key name, e.g. "j", "G", "pagedown"
    action: str
    context: str | None = None  # screen group, for help grouping only
    primary: bool = True  # shown in hints; aliases are not
    chord: bool = False  # fires on the second consecutive press


class KeymapProvider(ABC):
    """Source of key bindings; lookups are derived from ``get_action_keys``."""

    @abstractmethod
    def get_action_keys(self) -> list[ActionKeyDef]:
        raise NotImplementedError

    def _lookup(self, key: str, *, chord: bool) -> str | None:
        return next(
            (ak.action for ak in self.get_action_keys() if ak.key == key and ak.chord is chord),
            None,
        )

    def action_for_key(self, key: str) -> str | None:
        return self._lookup(key, chord=False)

    def chord_for_key(self, key: str) -> str | None:
        return self._lookup(key, chord=True)

    def keys_for_action(self, action_name: str, *, include_secondary: bool = True) -> list[str]:
        bound = [ak for ak in self.get_action_keys() if ak.action == action_name]
        keys = [ak.key for ak in bound if ak.primary]
        if include_secondary:
            keys.extend(ak.key for ak in bound if not ak.primary)
        return keys

    def display_keys(self, action_name: str) -> list[str]:
        """Primary keys for an action as hint labels; chords are shown doubled."""
        return [
            format_key(ak.key) * (2 if ak.chord else 1)
            for ak in self.get_action_keys()
            if ak.action == action_name and ak.primary
        ]


DEFAULT_BINDINGS: tuple[ActionKeyDef, ...] = (
    ActionKeyDef("q", "quit", "global"),
    ActionKeyDef("question_mark", "toggle_help", "global"),
    ActionKeyDef("j", "move_down", "list"),
    ActionKeyDef("down", "move_down", "list", primary=False),
    ActionKeyDef("k", "move_up", "list"),
    ActionKeyDef("up", "move_up", "list", primary=False),
    ActionKeyDef("h", "back", "list"),
    ActionKeyDef("l", "forward", "list"),
    ActionKeyDef("enter", "forward", "list"),
    ActionKeyDef("g", "go_top", "list", chord=True),
    ActionKeyDef("G", "go_bottom", "list"),
    ActionKeyDef("shift+g", "go_bottom", "list", primary=False),
    ActionKeyDef("n", "add_connection", "connections"),
    ActionKeyDef("pagedown", "next_page", "documents"),
    ActionKeyDef("pageup", "previous_page", "documents"),
    ActionKeyDef("i", "insert_document", "documents"),
    ActionKeyDef("e", "edit_document", "documents"),
    ActionKeyDef("d", "delete_document", "documents"),
    ActionKeyDef("Q", "save_query", "documents"),
    ActionKeyDef("shift+q", "save_query", "documents", primary=False),
    ActionKeyDef("A", "save_aggregation", "documents"),
    ActionKeyDef("shift+a", "save_aggregation", "documents", primary=False),
    ActionKeyDef("r", "run_saved_query", "documents"),
    ActionKeyDef("a", "run_saved_aggregation", "documents"),
    ActionKeyDef("c", "clear_applied", "documents"),
    ActionKeyDef("slash", "run_inline_query", "documents"),
    ActionKeyDef("p", "run_inline_aggregation", "documents"),
    ActionKeyDef("y", "copy_document", "documents"),
    ActionKeyDef("x", "export_documents", "documents"),
)


class DefaultKeymapProvider(KeymapProvider):
    def get_action_keys(self) -> list[ActionKeyDef]:
        return list(DEFAULT_BINDINGS)


_provider: KeymapProvider | None = None


def get_keymap() -> KeymapProvider:
    global _provider
    if _provider is None:
        _provider = DefaultKeymapProvider()
    return _provider


def set_keymap(provider: KeymapProvider) -> None:
    """Install a custom provider; tests use this for small keymaps."""
    global _provider
    _provider = provider


def reset_keymap() -> None:
    global _provider
    _provider = None
