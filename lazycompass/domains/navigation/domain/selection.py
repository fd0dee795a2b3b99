"""Pure list-selection arithmetic shared by every list screen."""

from __future__ import annotations


def move_selection(selected: int | None, length: int, delta: int) -> int | None:
    """Move a selection by ``delta``, clamped to ``[0, length - 1]``.

    An empty list has no selection; a missing selection counts as 0.
    """
    if length == 0:
        return None
    current = selected if selected is not None else 0
    return max(0, min(current + delta, length - 1))


def select_first(length: int) -> int | None:
    return 0 if length > 0 else None


def select_last(length: int) -> int | None:
    return length - 1 if length > 0 else None


def clamp_index(index: int | None, length: int) -> int | None:
    if length == 0:
        return None
    if index is None:
        return 0
    return min(index, length - 1)


def clamp_scroll(scroll: int, line_count: int) -> int:
    if line_count == 0:
        return 0
    return max(0, min(scroll, line_count - 1))
