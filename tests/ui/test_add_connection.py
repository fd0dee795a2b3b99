"""Session tests for adding connections from the Connections screen."""

from __future__ import annotations

import tomllib

from lazycompass.domains.navigation.domain.screens import Screen

from .mocks import ScriptedEditorLauncher, build_test_session, press

NEW_CONNECTION = 'name = "staging"\nuri = "mongodb://staging:27017"\ndefault_database = "app"\n'


def _session(paths, *responses):
    editor = ScriptedEditorLauncher(responses=list(responses))
    return build_test_session(paths, editor=editor), editor


class TestAddConnection:
    """``n`` picks a persistence scope and then edits a TOML template."""

    def test_add_opens_scope_picker(self, config_paths):
        session, _ = _session(config_paths)

        press(session, "n")

        assert session.screen is Screen.ADD_CONNECTION_SCOPE_SELECT
        assert session.add_connection_scope_index == 0

    def test_template_is_toml(self, config_paths):
        session, editor = _session(config_paths, None)

        press(session, "n", "enter")

        _, label, initial = editor.calls[0]
        assert label == "connection"
        assert tomllib.loads(initial) == {
            "name": "new_connection",
            "uri": "mongodb://localhost:27017",
            "default_database": "test",
        }
        assert session.message == "cancelled"
        assert session.screen is Screen.CONNECTIONS

    def test_session_only_is_not_persisted(self, config_paths):
        session, _ = _session(config_paths, NEW_CONNECTION)

        press(session, "n", "enter")

        assert session.message == "added connection 'staging' (session only)"
        assert session.screen is Screen.CONNECTIONS
        assert session.connection_index == 1
        assert session.selected_connection().label == "staging (app)"
        assert not config_paths.global_config_path().exists()
        assert not config_paths.repo_config_path().exists()

    def test_repo_scope_appends_to_repo_config(self, config_paths):
        session, _ = _session(config_paths, NEW_CONNECTION)

        press(session, "n", "j", "enter")

        assert session.message == "added connection 'staging' to repo config"
        data = tomllib.loads(config_paths.repo_config_path().read_text())
        assert data["connections"] == [
            {"name": "staging", "uri": "mongodb://staging:27017", "default_database": "app"}
        ]

    def test_global_scope_appends_to_global_config(self, config_paths):
        session, _ = _session(config_paths, NEW_CONNECTION)

        press(session, "n", "j", "j", "enter")

        assert session.message == "added connection 'staging' to global config"
        data = tomllib.loads(config_paths.global_config_path().read_text())
        assert data["connections"][0]["name"] == "staging"

    def test_repo_scope_outside_repo_fails(self, bare_paths):
        session, _ = _session(bare_paths, NEW_CONNECTION)

        press(session, "n", "j", "enter")

        assert session.message == "no repo config found; run inside a repo with .lazycompass"
        assert len(session.storage.config.connections) == 1

    def test_duplicate_name_is_rejected(self, config_paths):
        session, _ = _session(config_paths, 'name = "local"\nuri = "mongodb://other"\n')

        press(session, "n", "enter")

        assert session.message == "connection with name 'local' already exists"
        assert len(session.storage.config.connections) == 1

    def test_invalid_toml(self, config_paths):
        session, _ = _session(config_paths, "name = ")

        press(session, "n", "enter")

        assert session.message.startswith("invalid TOML for connection")

    def test_existing_global_entry_is_reported(self, config_paths):
        config_paths.global_root.mkdir(parents=True)
        config_paths.global_config_path().write_text(
            '[[connections]]\nname = "staging"\nuri = "mongodb://elsewhere"\n'
        )
        session, _ = _session(config_paths, NEW_CONNECTION)

        press(session, "n", "j", "j", "enter")

        assert session.message == "connection 'staging' already exists in global config"
        assert session.screen is Screen.CONNECTIONS
        assert len(session.storage.config.connections) == 1

    def test_placeholder_uri_is_interpolated_for_session(self, config_paths, monkeypatch):
        monkeypatch.setenv("STAGING_URI", "mongodb://resolved:27017")
        session, _ = _session(config_paths, 'name = "env"\nuri = "${STAGING_URI}"\n')

        press(session, "n", "j", "j", "enter")

        added = session.storage.config.connections[-1]
        assert added.uri == "mongodb://resolved:27017"
        assert added.uri_template == "${STAGING_URI}"
        data = tomllib.loads(config_paths.global_config_path().read_text())
        assert data["connections"][0]["uri"] == "${STAGING_URI}"

    def test_add_only_from_connections_screen(self, config_paths):
        session, _ = _session(config_paths)
        session.screen = Screen.DATABASES

        press(session, "n")

        assert session.screen is Screen.DATABASES
