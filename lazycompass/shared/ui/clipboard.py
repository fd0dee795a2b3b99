"""Clipboard access: pyperclip with an OSC 52 fallback."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Protocol

import pyperclip

from lazycompass.shared.core.errors import LazyCompassError

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


def prefers_osc52() -> bool:
    """Over SSH the system clipboard belongs to the remote host."""
    return bool(os.environ.get("SSH_TTY"))


def copy_with_pyperclip(text: str) -> None:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        raise LazyCompassError(f"system clipboard unavailable: {exc}") from exc


class SystemClipboard:
    """Copies through the system clipboard or the terminal (OSC 52).

    ``osc52`` writes the escape sequence to the terminal; inside the app
    this is Textual's ``App.copy_to_clipboard``.
    """

    def __init__(self, osc52: Callable[[str], None]) -> None:
        self._osc52 = osc52

    def copy(self, text: str) -> None:
        methods: list[tuple[str, Callable[[str], None]]] = [
            ("system", copy_with_pyperclip),
            ("osc52", self._osc52),
        ]
        if prefers_osc52():
            methods.reverse()
        errors: list[str] = []
        for name, method in methods:
            try:
                method(text)
            except Exception as exc:
                logger.debug("clipboard method %s failed: %s", name, exc)
                errors.append(str(exc))
                continue
            return
        raise LazyCompassError(f"clipboard copy failed: {'; '.join(errors)}")
