"""Built-in color themes."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_THEME_NAME = "classic"


@dataclass(frozen=True)
class Theme:
    name: str
    text: str
    accent: str
    border: str
    selection_fg: str
    selection_bg: str
    warning: str
    error: str

    @property
    def selection(self) -> str:
        return f"{self.selection_fg} on {self.selection_bg}"


CLASSIC = Theme(
    name="classic",
    text="#a8a8a8",
    accent="#00c0c0",
    border="#585858",
    selection_fg="#000000",
    selection_bg="#00c0c0",
    warning="#d7d700",
    error="#d70000",
)

EMBER = Theme(
    name="ember",
    text="#ffffff",
    accent="#ff6060",
    border="#c00000",
    selection_fg="#000000",
    selection_bg="#ff6060",
    warning="#ffff60",
    error="#ff6060",
)

THEMES: dict[str, Theme] = {
    "classic": CLASSIC,
    "default": CLASSIC,
    "ember": EMBER,
}


def resolve_theme(name: str | None) -> tuple[Theme, str | None]:
    """Look up a theme by name.

    A blank name selects classic silently; an unknown name selects classic
    and returns a warning for the status line.
    """
    if name is None or not name.strip():
        return CLASSIC, None
    key = name.strip().lower()
    theme = THEMES.get(key)
    if theme is None:
        return CLASSIC, f"unknown theme '{name.strip()}', using classic"
    return theme, None
