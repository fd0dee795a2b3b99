"""Editor actions that can be resumed once an editor command is known."""

from __future__ import annotations

from dataclasses import dataclass

from lazycompass.domains.connections.domain.config import ConnectionPersistenceScope, ConnectionSpec
from lazycompass.domains.mongo.domain.documents import Document
from lazycompass.domains.saved.domain.payloads import (
    InlineAggregationPayload,
    InlineDraft,
    InlineQueryPayload,
)
from lazycompass.domains.saved.domain.specs import SavedAggregation, SavedQuery, SavedScope


@dataclass(frozen=True)
class InsertDocument:
    connection: str
    database: str
    collection: str


@dataclass(frozen=True)
class EditDocument:
    connection: str
    database: str
    collection: str
    document: Document


@dataclass(frozen=True)
class SaveQuery:
    template: SavedQuery


@dataclass(frozen=True)
class SaveAggregation:
    template: SavedAggregation


@dataclass(frozen=True)
class RunInlineQuery:
    pass


@dataclass(frozen=True)
class RunInlineAggregation:
    pass


@dataclass(frozen=True)
class SaveInlineQuery:
    scope: SavedScope
    draft: InlineDraft[InlineQueryPayload]


@dataclass(frozen=True)
class SaveInlineAggregation:
    scope: SavedScope
    draft: InlineDraft[InlineAggregationPayload]


@dataclass(frozen=True)
class AddConnection:
    scope: ConnectionPersistenceScope
    template: ConnectionSpec


PendingEditorAction = (
    InsertDocument
    | EditDocument
    | SaveQuery
    | SaveAggregation
    | RunInlineQuery
    | RunInlineAggregation
    | SaveInlineQuery
    | SaveInlineAggregation
    | AddConnection
)
