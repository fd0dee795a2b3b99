"""Protocols for session controller mixins."""

from __future__ import annotations

from .session import (
    ConnectionsProtocol,
    EditorWorkflowProtocol,
    LoadingProtocol,
    NavigationProtocol,
    PromptsProtocol,
    SavedSpecsProtocol,
    SessionProtocol,
    SessionStateProtocol,
)

__all__ = [
    "ConnectionsProtocol",
    "EditorWorkflowProtocol",
    "LoadingProtocol",
    "NavigationProtocol",
    "PromptsProtocol",
    "SavedSpecsProtocol",
    "SessionProtocol",
    "SessionStateProtocol",
]
