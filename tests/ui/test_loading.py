"""Session tests for background load dispatch and reconciliation."""

from __future__ import annotations

from pymongo.errors import ConnectionFailure

from lazycompass.domains.loading.domain.results import (
    IDLE,
    Failed,
    LoadKind,
    LoadResult,
)
from lazycompass.domains.navigation.domain.screens import PAGE_SIZE, Screen

from .mocks import (
    MockExecutor,
    build_test_session,
    make_documents,
    open_collection,
    press,
    settle,
    type_text,
)


def _executor(document_count: int = 3) -> MockExecutor:
    return MockExecutor(
        databases=["app"],
        collections={"app": ["users"]},
        documents={("app", "users"): make_documents(document_count)},
    )


class TestStaleResults:
    """Only the latest request of a kind may update the session."""

    def test_superseded_database_result_is_dropped(self, config_paths):
        executor = _executor()
        session = build_test_session(config_paths, executor=executor)
        press(session, "enter", "h", "enter")
        assert len(session.tasks.jobs) == 2

        executor.databases = ["old"]
        session.tasks.run(0)
        executor.databases = ["new"]
        session.tasks.run(0)
        session.drain_load_results()

        assert session.database_items == ["new"]

    def test_late_result_after_newer_one_is_dropped(self, config_paths):
        executor = _executor()
        session = build_test_session(config_paths, executor=executor)
        press(session, "enter", "h", "enter")

        executor.databases = ["new"]
        session.tasks.run(1)
        session.drain_load_results()
        executor.databases = ["old"]
        session.tasks.run(0)
        session.drain_load_results()

        assert session.database_items == ["new"]

    def test_duplicate_delivery_is_ignored(self, config_paths):
        session = build_test_session(config_paths, executor=_executor())
        press(session, "enter")
        request_id = session.loads.expected(LoadKind.DATABASES)

        session.inbox.put(LoadResult(LoadKind.DATABASES, request_id, value=["a"]))
        session.inbox.put(LoadResult(LoadKind.DATABASES, request_id, value=["b"]))
        session.drain_load_results()

        assert session.database_items == ["a"]

    def test_drain_reports_whether_anything_arrived(self, config_paths):
        session = build_test_session(config_paths, executor=_executor())

        assert session.drain_load_results() is False
        press(session, "enter")
        session.tasks.run_all()
        assert session.drain_load_results() is True


class TestLoadFailures:
    """Failed reads mark the pane and surface the formatted error."""

    def test_failed_database_load(self, config_paths):
        executor = _executor()
        executor.fail_with = ConnectionFailure("connection refused")
        session = build_test_session(config_paths, executor=executor)

        press(session, "enter")
        settle(session)

        assert isinstance(session.database_state, Failed)
        assert "connection refused" in session.message
        assert session.database_state.message == session.message
        assert session.screen is Screen.DATABASES

    def test_failure_redacts_credentials(self, config_paths):
        executor = _executor()
        executor.fail_with = RuntimeError("cannot reach mongodb://alice:hunter2@db:27017")
        session = build_test_session(config_paths, executor=executor)

        press(session, "enter")
        settle(session)

        assert "hunter2" not in session.message


class TestDocumentPaging:
    """Document pages, the pending index and the past-the-end backtrack."""

    def test_first_page_selects_first_document(self, config_paths):
        session = build_test_session(config_paths, executor=_executor(3))
        open_collection(session)

        assert session.document_index == 0
        assert session.document_state == IDLE
        assert session.document_page == 0

    def test_next_page_loads_following_slice(self, config_paths):
        executor = _executor(PAGE_SIZE + 5)
        session = build_test_session(config_paths, executor=executor)
        open_collection(session)

        press(session, "pagedown")
        settle(session)

        assert session.document_page == 1
        assert [doc["_id"] for doc in session.documents] == list(range(PAGE_SIZE, PAGE_SIZE + 5))

    def test_next_page_past_end_steps_back(self, config_paths):
        executor = _executor(PAGE_SIZE)
        session = build_test_session(config_paths, executor=executor)
        open_collection(session)

        press(session, "pagedown")
        settle(session)

        assert session.document_page == 0
        assert len(session.documents) == PAGE_SIZE
        assert session.message == "no more documents"

    def test_past_end_keeps_selected_row(self, config_paths):
        session = build_test_session(config_paths, executor=_executor(PAGE_SIZE))
        open_collection(session)
        press(session, "j", "j", "j", "j", "j")

        press(session, "pagedown")
        settle(session)

        assert session.document_page == 0
        assert session.document_index == 5
        assert session.message == "no more documents"

    def test_page_turn_starts_at_top(self, config_paths):
        session = build_test_session(config_paths, executor=_executor(PAGE_SIZE + 5))
        open_collection(session)
        press(session, "j", "j")

        press(session, "pagedown")
        settle(session)

        assert session.document_page == 1
        assert session.document_index == 0

    def test_previous_page_on_first_page_is_ignored(self, config_paths):
        session = build_test_session(config_paths, executor=_executor())
        open_collection(session)

        press(session, "pageup")

        assert session.tasks.jobs == []
        assert session.document_page == 0

    def test_pending_index_is_clamped_after_refresh(self, config_paths):
        executor = _executor(5)
        session = build_test_session(config_paths, executor=executor)
        open_collection(session)
        press(session, "G")
        assert session.document_index == 4

        executor.documents[("app", "users")] = make_documents(2)
        session.reload_documents_after_change()
        settle(session)

        assert session.document_index == 1

    def test_document_view_is_rebuilt_after_refresh(self, config_paths):
        executor = _executor(2)
        session = build_test_session(config_paths, executor=executor)
        open_collection(session)
        press(session, "enter")
        assert session.screen is Screen.DOCUMENT_VIEW

        executor.documents[("app", "users")] = [{"_id": 0, "n": "changed"}, {"_id": 1}]
        session.reload_documents_after_change()
        settle(session)

        assert any("changed" in line for line in session.document_lines)

    def test_empty_collection_has_no_selection(self, config_paths):
        session = build_test_session(config_paths, executor=_executor(0))
        open_collection(session)

        assert session.documents == []
        assert session.document_index is None


class TestRefreshAfterMutation:
    """A refresh that lands past the end steps back quietly."""

    def test_deleting_last_document_on_page_steps_back(self, config_paths):
        executor = _executor(PAGE_SIZE + 1)
        session = build_test_session(config_paths, executor=executor)
        open_collection(session)
        press(session, "pagedown")
        settle(session)
        assert [doc["_id"] for doc in session.documents] == [PAGE_SIZE]

        press(session, "d")
        type_text(session, "delete")
        press(session, "enter")
        settle(session)

        assert session.document_page == 0
        assert len(session.documents) == PAGE_SIZE
        assert session.document_index == 0
        assert session.document_state == IDLE
        assert session.message == "document deleted"
