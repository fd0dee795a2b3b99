"""Main Textual application for lazycompass."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, ClassVar

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.timer import Timer
from textual.widgets import Static

from lazycompass.core.key_router import KeyPress
from lazycompass.domains.editor.ui.launcher import SuspendingEditorLauncher
from lazycompass.domains.shell.app.session import SessionController
from lazycompass.domains.shell.ui.render import (
    HELP_TITLE,
    DocumentPane,
    ListPane,
    Pane,
    footer_text,
    header_text,
    help_text,
    render_document,
    render_list,
    screen_layout,
)
from lazycompass.shared.app.runtime import RuntimeConfig
from lazycompass.shared.app.services import AppServices, build_app_services
from lazycompass.shared.app.tasks import WorkerTaskRunner
from lazycompass.shared.ui.clipboard import SystemClipboard

logger = logging.getLogger(__name__)

SessionFactory = Callable[["LazyCompassApp"], SessionController]


class LazyCompassApp(App):
    """Thin Textual shell around a ``SessionController``.

    Every key press is forwarded to the session; after each key press and
    on every tick that drained load results, the whole frame is redrawn
    from session state.
    """

    TITLE = "lazycompass"

    DEFAULT_CSS = """
    Screen {
        layers: base overlay;
    }

    #header {
        height: 5;
        border: round $primary;
        padding: 0 1;
    }

    #panes {
        height: 1fr;
    }

    #side {
        width: 20%;
        height: 1fr;
        border: round $primary;
    }

    #right {
        width: 1fr;
        height: 1fr;
    }

    #picker {
        height: 15%;
        border: round $primary;
    }

    #main {
        height: 1fr;
        border: round $primary;
    }

    #footer {
        height: 4;
        border: round $primary;
        padding: 0 1;
    }

    #help {
        layer: overlay;
        display: none;
        width: 70%;
        height: 70%;
        offset: 15% 15%;
        border: round $primary;
        background: $surface;
        padding: 0 1;
    }
    """

    BINDINGS: ClassVar[list[Any]] = []

    def __init__(
        self,
        *,
        services: AppServices | None = None,
        runtime: RuntimeConfig | None = None,
        session_factory: SessionFactory | None = None,
    ):
        super().__init__()
        self._session_factory = session_factory
        self.services: AppServices | None = None
        if session_factory is None:
            self.services = services or build_app_services(runtime or RuntimeConfig.from_env())
        self.runtime = self.services.runtime if self.services else (runtime or RuntimeConfig())
        self.session: SessionController | None = None
        self._tick_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Static("", id="header")
        with Horizontal(id="panes"):
            yield Static("", id="side")
            with Vertical(id="right"):
                yield Static("", id="picker")
                yield Static("", id="main")
        yield Static("", id="footer")
        yield Static("", id="help")

    def on_mount(self) -> None:
        self.session = self._build_session()
        self._tick_timer = self.set_interval(self.runtime.tick_ms / 1000, self.tick)
        self.refresh_view()

    def on_unmount(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.stop()
            self._tick_timer = None
        if self.services is not None:
            self.services.executor.close()

    def _build_session(self) -> SessionController:
        if self._session_factory is not None:
            return self._session_factory(self)
        services = self.services
        assert services is not None
        return SessionController(
            paths=services.paths,
            storage=services.storage,
            executor=services.executor,
            tasks=WorkerTaskRunner(self, on_done=self.tick),
            editor_launcher=SuspendingEditorLauncher(self),
            clipboard=SystemClipboard(osc52=self.copy_to_clipboard),
        )

    def tick(self) -> None:
        """Apply queued load results and redraw if anything changed."""
        if self.session is None:
            return
        if self.session.drain_load_results():
            self.refresh_view()

    def on_key(self, event: Key) -> None:
        """Route every key press through the session."""
        if self.session is None:
            return
        event.prevent_default()
        event.stop()
        should_quit = self.session.handle_key(KeyPress(event.key, event.character))
        if should_quit:
            self.exit()
            return
        self.refresh_view()

    def refresh_view(self) -> None:
        session = self.session
        if session is None:
            return
        theme = session.theme
        layout = screen_layout(session)

        header = self.query_one("#header", Static)
        header.update(header_text(session))
        header.styles.border = ("round", theme.border)

        side = self.query_one("#side", Static)
        side.display = layout.side is not None
        if layout.side is not None:
            self._paint(side, layout.side)

        picker = self.query_one("#picker", Static)
        picker.display = layout.picker is not None
        if layout.picker is not None:
            self._paint(picker, layout.picker)

        self._paint(self.query_one("#main", Static), layout.main)

        footer = self.query_one("#footer", Static)
        footer.update(footer_text(session))
        footer.styles.border = ("round", theme.border)

        help_widget = self.query_one("#help", Static)
        help_widget.display = session.help_visible
        if session.help_visible:
            help_widget.border_title = HELP_TITLE
            help_widget.styles.border = ("round", theme.border)
            help_widget.styles.border_title_color = theme.accent
            help_widget.update(help_text(session))

    def _paint(self, widget: Static, pane: Pane) -> None:
        session = self.session
        assert session is not None
        theme = session.theme
        focused = not isinstance(pane, ListPane) or pane.focused
        widget.border_title = pane.title
        widget.styles.border = ("round", theme.border)
        widget.styles.border_title_color = theme.accent if focused else theme.text
        widget.styles.opacity = 1.0 if focused else 0.6
        if isinstance(pane, DocumentPane):
            widget.update(render_document(pane, theme))
            return
        widget.update(render_list(pane, theme, height=widget.content_size.height))
