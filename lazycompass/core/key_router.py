"""Key routing: translate key presses into session action names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lazycompass.core.keymap import KeymapProvider, get_keymap


@dataclass(frozen=True)
class KeyPress:
    """A single key press as delivered by the terminal.

    ``key`` is the Textual key name and ``character`` the printable
    character, if any.
    """

    key: str
    character: str | None = None

    @property
    def printable(self) -> str | None:
        if self.character and self.character.isprintable():
            return self.character
        return None


class ChordState(Enum):
    IDLE = "idle"
    AWAITING_SECOND_PRESS = "awaiting_second_press"


class ChordOutcome(Enum):
    FIRE = "fire"  # second press completed the chord
    PENDING = "pending"  # first press consumed
    PASS = "pass"  # not part of a chord; route normally


class GoTopChord:
    """Two-state machine for the ``gg`` chord.

    Any key other than the chord key resets to IDLE and is then handled
    normally.
    """

    def __init__(self, key: str = "g") -> None:
        self.key = key
        self.state = ChordState.IDLE

    @property
    def pending(self) -> bool:
        return self.state is ChordState.AWAITING_SECOND_PRESS

    def reset(self) -> None:
        self.state = ChordState.IDLE

    def feed(self, key: str) -> ChordOutcome:
        if key != self.key:
            self.state = ChordState.IDLE
            return ChordOutcome.PASS
        if self.state is ChordState.AWAITING_SECOND_PRESS:
            self.state = ChordState.IDLE
            return ChordOutcome.FIRE
        self.state = ChordState.AWAITING_SECOND_PRESS
        return ChordOutcome.PENDING


def resolve_action(
    press: KeyPress,
    chord: GoTopChord,
    keymap: KeymapProvider | None = None,
) -> str | None:
    """Return the action bound to ``press``, or None when nothing fires."""
    keymap = keymap or get_keymap()
    outcome = chord.feed(press.key)
    if outcome is ChordOutcome.FIRE:
        return keymap.chord_for_key(press.key)
    if outcome is ChordOutcome.PENDING:
        return None
    return keymap.action_for_key(press.key)
