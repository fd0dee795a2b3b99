"""Mock collaborators for session controller tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from lazycompass.core.key_router import KeyPress
from lazycompass.domains.connections.domain.config import Config, ConnectionSpec
from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.domains.mongo.app.executor import (
    AggregationSpec,
    DocumentDeleteSpec,
    DocumentInsertSpec,
    DocumentListSpec,
    DocumentReplaceSpec,
    QuerySpec,
)
from lazycompass.domains.saved.domain.specs import SavedAggregation, SavedQuery
from lazycompass.domains.shell.app.session import SessionController
from lazycompass.shared.app.storage import StorageSnapshot


class MockExecutor:
    """In-memory stand-in for ``MongoExecutor``.

    ``documents`` maps (database, collection) to the full document list;
    pages are sliced from it. Set ``fail_with`` to make every read raise.
    """

    def __init__(
        self,
        databases: list[str] | None = None,
        collections: dict[str, list[str]] | None = None,
        documents: dict[tuple[str, str], list[dict[str, Any]]] | None = None,
    ) -> None:
        self.databases = databases or []
        self.collections = collections or {}
        self.documents = documents or {}
        self.query_results: list[dict[str, Any]] = []
        self.aggregation_results: list[dict[str, Any]] = []
        self.fail_with: Exception | None = None
        self.calls: list[tuple[str, Any]] = []

    def _read(self, name: str, spec: Any) -> None:
        self.calls.append((name, spec))
        if self.fail_with is not None:
            raise self.fail_with

    def list_databases(self, config: Config, connection: str | None) -> list[str]:
        self._read("list_databases", connection)
        return list(self.databases)

    def list_collections(self, config: Config, connection: str | None, database: str) -> list[str]:
        self._read("list_collections", database)
        return list(self.collections.get(database, []))

    def list_documents(self, config: Config, spec: DocumentListSpec) -> list[dict[str, Any]]:
        self._read("list_documents", spec)
        rows = self.documents.get((spec.database, spec.collection), [])
        return [dict(row) for row in rows[spec.skip : spec.skip + spec.limit]]

    def execute_query(self, config: Config, spec: QuerySpec) -> list[dict[str, Any]]:
        self._read("execute_query", spec)
        return list(self.query_results)

    def execute_aggregation(self, config: Config, spec: AggregationSpec) -> list[dict[str, Any]]:
        self._read("execute_aggregation", spec)
        return list(self.aggregation_results)

    def insert_document(self, config: Config, spec: DocumentInsertSpec) -> Any:
        self.calls.append(("insert_document", spec))
        rows = self.documents.setdefault((spec.database, spec.collection), [])
        document = dict(spec.document)
        document.setdefault("_id", len(rows) + 1000)
        rows.append(document)
        return document["_id"]

    def replace_document(self, config: Config, spec: DocumentReplaceSpec) -> None:
        self.calls.append(("replace_document", spec))
        rows = self.documents.get((spec.database, spec.collection), [])
        for index, row in enumerate(rows):
            if row.get("_id") == spec.id:
                rows[index] = dict(spec.document)

    def delete_document(self, config: Config, spec: DocumentDeleteSpec) -> None:
        self.calls.append(("delete_document", spec))
        rows = self.documents.get((spec.database, spec.collection), [])
        rows[:] = [row for row in rows if row.get("_id") != spec.id]

    def close(self) -> None:
        pass

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class ManualTaskRunner:
    """Collects submitted jobs; tests decide when and in which order they run."""

    def __init__(self) -> None:
        self.jobs: list[tuple[str, Callable[[], None]]] = []

    def submit(self, name: str, job: Callable[[], None]) -> None:
        self.jobs.append((name, job))

    def run(self, index: int) -> None:
        _, job = self.jobs.pop(index)
        job()

    def run_all(self) -> None:
        while self.jobs:
            self.run(0)


class ImmediateTaskRunner:
    """Runs each job as soon as it is submitted."""

    def submit(self, name: str, job: Callable[[], None]) -> None:
        job()


@dataclass
class ScriptedEditorLauncher:
    """Returns queued editor results; ``None`` means "return the initial text".

    ``on_edit`` runs while the editor is "open", before the result is returned.
    """

    responses: list[str | None] = field(default_factory=list)
    calls: list[tuple[str, str, str]] = field(default_factory=list)
    on_edit: Callable[[], None] | None = None

    def edit(self, editor: str, label: str, initial: str) -> str:
        self.calls.append((editor, label, initial))
        if self.on_edit is not None:
            self.on_edit()
        if not self.responses:
            return initial
        response = self.responses.pop(0)
        return initial if response is None else response


@dataclass
class RecordingClipboard:
    copied: list[str] = field(default_factory=list)

    def copy(self, text: str) -> None:
        self.copied.append(text)


def create_test_connection(name: str = "local", uri: str = "mongodb://localhost:27017") -> ConnectionSpec:
    return ConnectionSpec(name=name, uri=uri)


def make_documents(count: int) -> list[dict[str, Any]]:
    return [{"_id": index, "n": index} for index in range(count)]


def build_test_session(
    paths: ConfigPaths,
    *,
    connections: list[ConnectionSpec] | None = None,
    executor: MockExecutor | None = None,
    tasks: Any | None = None,
    editor: ScriptedEditorLauncher | None = None,
    clipboard: RecordingClipboard | None = None,
    queries: list[SavedQuery] | None = None,
    aggregations: list[SavedAggregation] | None = None,
    warnings: list[str] | None = None,
    read_only: bool = False,
    editor_command: str | None = "vi",
    theme: str | None = None,
) -> SessionController:
    config = Config(connections=list(connections if connections is not None else [create_test_connection()]))
    config.theme.name = theme
    storage = StorageSnapshot(
        config=config,
        queries=list(queries or []),
        aggregations=list(aggregations or []),
        warnings=list(warnings or []),
    )
    session = SessionController(
        paths=paths,
        storage=storage,
        executor=executor or MockExecutor(),
        tasks=tasks or ManualTaskRunner(),
        editor_launcher=editor or ScriptedEditorLauncher(),
        clipboard=clipboard or RecordingClipboard(),
        read_only=read_only,
    )
    session.editor_command = editor_command
    return session


def settle(session: SessionController) -> None:
    """Run pending jobs and apply results until no follow-up load is queued."""
    manual = isinstance(session.tasks, ManualTaskRunner)
    while True:
        if manual:
            session.tasks.run_all()
        drained = session.drain_load_results()
        if not drained and not (manual and session.tasks.jobs):
            return


def press(session: SessionController, *keys: str) -> bool:
    """Feed key names to the session; single characters are also sent as text."""
    quit_requested = False
    for key in keys:
        character = key if len(key) == 1 else None
        quit_requested = session.handle_key(KeyPress(key, character))
    return quit_requested


def type_text(session: SessionController, text: str) -> None:
    for character in text:
        session.handle_key(KeyPress(character, character))


def open_collection(session: SessionController, database: str = "app", collection: str = "users") -> None:
    """Walk Connections -> Databases -> Collections -> Documents."""
    for _ in range(3):
        press(session, "enter")
        settle(session)
    assert session.selected_database() == database
    assert session.selected_collection() == collection
