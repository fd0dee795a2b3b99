"""Pytest fixtures for lazycompass tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="lazycompass-test-config-"))
os.environ.setdefault("LAZYCOMPASS_CONFIG_DIR", str(_TEST_CONFIG_DIR))


@pytest.fixture(autouse=True)
def _reset_keymap():
    """Ensure a custom keymap does not leak between tests."""
    from lazycompass.core.keymap import reset_keymap

    reset_keymap()
    yield
    reset_keymap()


@pytest.fixture(autouse=True)
def _no_editor_env(monkeypatch):
    """Tests choose their editor explicitly."""
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.delenv("EDITOR", raising=False)
    monkeypatch.delenv("SSH_TTY", raising=False)


@pytest.fixture
def config_paths(tmp_path: Path):
    """Global root plus a repository with an empty .lazycompass directory."""
    from lazycompass.domains.connections.store.paths import REPO_DIR, ConfigPaths

    global_root = tmp_path / "global"
    repo_root = tmp_path / "repo"
    (repo_root / REPO_DIR).mkdir(parents=True)
    return ConfigPaths(global_root=global_root, repo_root=repo_root)


@pytest.fixture
def bare_paths(tmp_path: Path):
    """Config paths outside of any repository."""
    from lazycompass.domains.connections.store.paths import ConfigPaths

    return ConfigPaths(global_root=tmp_path / "global", repo_root=None)
