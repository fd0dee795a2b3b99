"""External editor round trip through an owner-only temp file."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
import time
from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Protocol

from lazycompass.shared.core.errors import EditorError, StorageError

logger = logging.getLogger(__name__)

EDITOR_ENV_VARS = ("VISUAL", "EDITOR")


def resolve_editor() -> str:
    for name in EDITOR_ENV_VARS:
        value = os.environ.get(name, "")
        if value.strip():
            return value
    raise EditorError("$VISUAL or $EDITOR is required for editing")


def parse_editor_command(editor: str) -> list[str]:
    """Split an editor command the way a POSIX shell would, without expansion."""
    args: list[str] = []
    current: list[str] = []
    chars = iter(editor)
    in_single = False
    in_double = False

    for ch in chars:
        if in_single:
            if ch == "'":
                in_single = False
            else:
                current.append(ch)
            continue
        if in_double:
            if ch == '"':
                in_double = False
            elif ch == "\\":
                escaped = next(chars, None)
                if escaped is None:
                    raise EditorError("unterminated escape in editor command")
                current.append(escaped)
            else:
                current.append(ch)
            continue
        if ch == "'":
            in_single = True
        elif ch == '"':
            in_double = True
        elif ch == "\\":
            escaped = next(chars, None)
            if escaped is None:
                raise EditorError("unterminated escape in editor command")
            current.append(escaped)
        elif ch.isspace():
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(ch)

    if in_single or in_double:
        raise EditorError("unterminated quote in editor command")
    if current:
        args.append("".join(current))
    if not args:
        raise EditorError("editor command is empty")
    return args


def editor_temp_path(label: str) -> Path:
    return Path(tempfile.gettempdir()) / f"lazycompass_{label}_{os.getpid()}_{time.time_ns()}.tmp"


def write_editor_temp_file(path: Path, contents: str) -> None:
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(contents)
        if os.name == "posix":
            path.chmod(0o600)
    except OSError as exc:
        raise StorageError(f"unable to write temporary file {path}") from exc


def run_editor_command(editor: str, path: Path) -> int:
    args = parse_editor_command(editor)
    try:
        completed = subprocess.run([*args, str(path)], check=False)
    except OSError as exc:
        raise EditorError("failed to launch editor") from exc
    return completed.returncode


def is_editor_cancelled(contents: str, initial: str) -> bool:
    trimmed = contents.strip()
    return not trimmed or trimmed == initial.strip()


def open_in_editor(
    editor: str,
    label: str,
    initial: str,
    suspend: Callable[[], AbstractContextManager[object]],
) -> str:
    """Edit ``initial`` in ``editor`` and return the saved contents.

    The terminal UI is suspended for the duration of the subprocess and
    is resumed by the context manager even if the editor fails. The temp
    file is always removed.
    """
    path = editor_temp_path(label)
    write_editor_temp_file(path, initial)
    try:
        with suspend():
            status = run_editor_command(editor, path)
        if status != 0:
            raise EditorError("editor exited with non-zero status")
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"unable to read temporary file {path}") from exc
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("unable to remove temporary file %s", path)


class EditorLauncher(Protocol):
    """Runs the external editor; blocks until it exits."""

    def edit(self, editor: str, label: str, initial: str) -> str: ...
