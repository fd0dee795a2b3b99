from __future__ import annotations

import pytest

from lazycompass.core.input_context import InputContext
from lazycompass.core.key_router import ChordOutcome, ChordState, GoTopChord, KeyPress, resolve_action
from lazycompass.core.keymap import (
    ActionKeyDef,
    DefaultKeymapProvider,
    KeymapProvider,
    format_key,
    get_keymap,
    set_keymap,
)
from lazycompass.core.write_guard import WriteGuard
from lazycompass.domains.navigation.domain.hints import help_lines, hint_line
from lazycompass.shared.core.errors import WriteGuardError


class TinyKeymap(KeymapProvider):
    def get_action_keys(self) -> list[ActionKeyDef]:
        return [
            ActionKeyDef("x", "quit"),
            ActionKeyDef("z", "go_top", chord=True),
        ]


def _context(screen: str = "connections", **overrides) -> InputContext:
    values = {
        "screen": screen,
        "overlay": None,
        "help_visible": False,
        "chord_pending": False,
        "read_only": False,
        "has_documents": False,
        "applied_results": False,
    }
    values.update(overrides)
    return InputContext(**values)


class TestGoTopChord:
    """The gg chord is a two-state machine."""

    def test_first_press_waits(self):
        chord = GoTopChord()

        assert chord.feed("g") is ChordOutcome.PENDING
        assert chord.state is ChordState.AWAITING_SECOND_PRESS

    def test_second_press_fires_and_resets(self):
        chord = GoTopChord()
        chord.feed("g")

        assert chord.feed("g") is ChordOutcome.FIRE
        assert chord.state is ChordState.IDLE

    def test_other_key_resets(self):
        chord = GoTopChord()
        chord.feed("g")

        assert chord.feed("j") is ChordOutcome.PASS
        assert not chord.pending
        assert chord.feed("g") is ChordOutcome.PENDING


class TestResolveAction:
    def test_single_keys(self):
        chord = GoTopChord()

        assert resolve_action(KeyPress("j", "j"), chord) == "move_down"
        assert resolve_action(KeyPress("down"), chord) == "move_down"
        assert resolve_action(KeyPress("G", "G"), chord) == "go_bottom"
        assert resolve_action(KeyPress("shift+g"), chord) == "go_bottom"
        assert resolve_action(KeyPress("F5"), chord) is None

    def test_chord(self):
        chord = GoTopChord()

        assert resolve_action(KeyPress("g", "g"), chord) is None
        assert resolve_action(KeyPress("g", "g"), chord) == "go_top"

    def test_custom_keymap(self):
        set_keymap(TinyKeymap())
        chord = GoTopChord(key="z")

        assert resolve_action(KeyPress("x", "x"), chord) == "quit"
        assert resolve_action(KeyPress("j", "j"), chord) is None
        assert resolve_action(KeyPress("z", "z"), chord) is None
        assert resolve_action(KeyPress("z", "z"), chord) == "go_top"

    def test_printable(self):
        assert KeyPress("a", "a").printable == "a"
        assert KeyPress("enter", "\r").printable is None
        assert KeyPress("up").printable is None


class TestKeymap:
    def test_default_provider_is_cached(self):
        assert get_keymap() is get_keymap()
        assert isinstance(get_keymap(), DefaultKeymapProvider)

    def test_keys_for_action_lists_primary_first(self):
        keymap = DefaultKeymapProvider()

        assert keymap.keys_for_action("move_down") == ["j", "down"]
        assert keymap.keys_for_action("move_down", include_secondary=False) == ["j"]
        assert keymap.keys_for_action("save_query") == ["Q", "shift+q"]

    def test_display_keys(self):
        keymap = DefaultKeymapProvider()

        assert keymap.display_keys("go_top") == ["gg"]
        assert keymap.display_keys("forward") == ["l", "Enter"]
        assert keymap.display_keys("run_inline_query") == ["/"]

    @pytest.mark.parametrize(
        ("key", "shown"),
        [("question_mark", "?"), ("shift+q", "Q"), ("ctrl+d", "^d"), ("pagedown", "PgDn"), ("x", "x")],
    )
    def test_format_key(self, key, shown):
        assert format_key(key) == shown


class TestWriteGuard:
    def test_read_only_blocks_writes(self):
        guard = WriteGuard(read_only=True, allow_pipeline_writes=True)

        with pytest.raises(WriteGuardError, match="read-only mode: cannot delete documents"):
            guard.ensure_write_allowed("delete documents")

    def test_writable_session(self):
        WriteGuard(read_only=False, allow_pipeline_writes=False).ensure_write_allowed("insert documents")

    def test_pipeline_write_stages(self):
        guard = WriteGuard(read_only=False, allow_pipeline_writes=False)

        with pytest.raises(WriteGuardError, match=r"\$out writes data"):
            guard.ensure_pipeline_allowed("$out")
        WriteGuard(read_only=False, allow_pipeline_writes=True).ensure_pipeline_allowed("$merge")


class TestHints:
    def test_documents_hint_line(self):
        line = hint_line(_context("documents"))

        assert "i/e/d insert/edit/delete" in line
        assert "PgUp/PgDn page" in line
        assert "clear applied" not in line

    def test_applied_results_add_clear_hint(self):
        line = hint_line(_context("documents", applied_results=True))

        assert "c clear applied" in line
        assert line.index("c clear applied") < line.index("? help")

    def test_help_lines_end_with_close_hint(self):
        lines = help_lines(_context("document_view"))

        assert lines[-1] == "press ? or Esc to close"
        assert any(line.startswith("j/k") and line.endswith("scroll") for line in lines)
