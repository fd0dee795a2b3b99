"""Session tests for screen navigation, the gg chord and help mode."""

from __future__ import annotations

from lazycompass.domains.loading.domain.results import IDLE, LOADING
from lazycompass.domains.navigation.domain.screens import Screen

from .mocks import (
    MockExecutor,
    build_test_session,
    create_test_connection,
    make_documents,
    open_collection,
    press,
    settle,
)


def _executor() -> MockExecutor:
    return MockExecutor(
        databases=["zeta", "app"],
        collections={"app": ["users", "orders"]},
        documents={("app", "users"): make_documents(5)},
    )


class TestForwardNavigation:
    """Forward moves require a selection and start the next load."""

    def test_enter_on_connection_starts_database_load(self, config_paths):
        session = build_test_session(config_paths, executor=_executor())

        press(session, "l")

        assert session.screen is Screen.DATABASES
        assert session.database_state == LOADING
        assert session.database_items == []
        assert len(session.tasks.jobs) == 1

    def test_databases_are_sorted_and_first_selected(self, config_paths):
        session = build_test_session(config_paths, executor=_executor())

        press(session, "enter")
        settle(session)

        assert session.database_items == ["app", "zeta"]
        assert session.database_index == 0
        assert session.database_state == IDLE

    def test_forward_without_connections_does_nothing(self, config_paths):
        session = build_test_session(config_paths, connections=[])

        assert session.message == "no connections configured"
        press(session, "enter")

        assert session.screen is Screen.CONNECTIONS
        assert session.tasks.jobs == []

    def test_walk_down_to_document_view(self, config_paths):
        executor = MockExecutor(
            databases=["app"],
            collections={"app": ["users"]},
            documents={("app", "users"): make_documents(3)},
        )
        session = build_test_session(config_paths, executor=executor)

        open_collection(session)
        assert session.screen is Screen.DOCUMENTS
        assert [doc["_id"] for doc in session.documents] == [0, 1, 2]

        press(session, "j", "enter")

        assert session.screen is Screen.DOCUMENT_VIEW
        assert session.document_index == 1
        assert session.document_lines[0] == "{"
        assert any('"n": 1' in line for line in session.document_lines)


class TestBackNavigation:
    """Back pops to the parent screen."""

    def test_back_from_databases(self, config_paths):
        session = build_test_session(config_paths, executor=_executor())
        press(session, "enter")
        settle(session)

        press(session, "h")

        assert session.screen is Screen.CONNECTIONS

    def test_back_on_connections_is_a_no_op(self, config_paths):
        session = build_test_session(config_paths)

        press(session, "h")

        assert session.screen is Screen.CONNECTIONS

    def test_back_from_scope_picker_resets_its_index(self, config_paths):
        session = build_test_session(config_paths)
        press(session, "n", "j", "j")
        assert session.add_connection_scope_index == 2

        press(session, "h")

        assert session.screen is Screen.CONNECTIONS
        assert session.add_connection_scope_index == 0


class TestSelectionMovement:
    """Movement clamps to the list bounds."""

    def test_move_clamps(self, config_paths):
        connections = [create_test_connection(f"c{i}") for i in range(3)]
        session = build_test_session(config_paths, connections=connections)

        press(session, "k")
        assert session.connection_index == 0
        press(session, "j", "j", "j", "j")
        assert session.connection_index == 2

    def test_go_bottom_and_chord_top(self, config_paths):
        connections = [create_test_connection(f"c{i}") for i in range(4)]
        session = build_test_session(config_paths, connections=connections)

        press(session, "G")
        assert session.connection_index == 3

        press(session, "g")
        assert session.connection_index == 3
        assert session.chord.pending

        press(session, "g")
        assert session.connection_index == 0
        assert not session.chord.pending

    def test_other_key_cancels_pending_chord(self, config_paths):
        connections = [create_test_connection(f"c{i}") for i in range(4)]
        session = build_test_session(config_paths, connections=connections)
        press(session, "G", "g", "k", "g")

        assert session.connection_index == 2
        assert session.chord.pending


class TestHelpMode:
    """While help is shown only quit and toggle-help are honored."""

    def test_help_swallows_navigation(self, config_paths):
        connections = [create_test_connection(f"c{i}") for i in range(3)]
        session = build_test_session(config_paths, connections=connections)

        press(session, "question_mark")
        assert session.help_visible

        press(session, "j", "enter")
        assert session.connection_index == 0
        assert session.screen is Screen.CONNECTIONS
        assert session.help_visible

    def test_escape_closes_help(self, config_paths):
        session = build_test_session(config_paths)
        press(session, "question_mark", "escape")

        assert not session.help_visible

    def test_quit_from_help(self, config_paths):
        session = build_test_session(config_paths)
        press(session, "question_mark")

        assert press(session, "q") is True

    def test_chord_key_in_help_is_ignored(self, config_paths):
        connections = [create_test_connection(f"c{i}") for i in range(3)]
        session = build_test_session(config_paths, connections=connections)
        press(session, "G", "question_mark", "g", "question_mark", "g")

        assert not session.help_visible
        assert session.chord.pending
        assert session.connection_index == 2


class TestWarningsAndMessages:
    """Status line bookkeeping on normal key presses."""

    def test_key_press_discards_oldest_warning(self, config_paths):
        session = build_test_session(config_paths, warnings=["first", "second"])

        press(session, "j")

        assert list(session.warnings) == ["second"]

    def test_unknown_theme_warning_is_queued_last(self, config_paths):
        session = build_test_session(config_paths, warnings=["storage"], theme="neon")

        assert list(session.warnings) == ["storage", "unknown theme 'neon', using classic"]
        assert session.theme.name == "classic"

    def test_key_press_clears_message(self, config_paths):
        session = build_test_session(config_paths)
        session.message = "old"

        press(session, "j")

        assert session.message is None
