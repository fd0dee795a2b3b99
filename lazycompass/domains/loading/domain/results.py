"""Background load kinds, states and result messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class LoadKind(Enum):
    DATABASES = "databases"
    COLLECTIONS = "collections"
    DOCUMENTS = "documents"
    SAVED_QUERY_EXEC = "saved_query_exec"
    SAVED_AGGREGATION_EXEC = "saved_aggregation_exec"
    INLINE_QUERY_EXEC = "inline_query_exec"
    INLINE_AGGREGATION_EXEC = "inline_aggregation_exec"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Failed:
    message: str


LoadState = Idle | Loading | Failed

IDLE = Idle()
LOADING = Loading()


class DocumentLoadReason(Enum):
    ENTER_COLLECTION = "enter_collection"
    NAVIGATE_NEXT = "navigate_next"
    NAVIGATE_PREVIOUS = "navigate_previous"
    REFRESH = "refresh"


@dataclass(frozen=True)
class CollectionSource:
    pass


@dataclass(frozen=True)
class SavedQuerySource:
    id: str


@dataclass(frozen=True)
class SavedAggregationSource:
    id: str


@dataclass(frozen=True)
class InlineQuerySource:
    pass


@dataclass(frozen=True)
class InlineAggregationSource:
    pass


DocumentResultSource = (
    CollectionSource | SavedQuerySource | SavedAggregationSource | InlineQuerySource | InlineAggregationSource
)

COLLECTION_SOURCE = CollectionSource()


def source_title_suffix(source: DocumentResultSource) -> str:
    if isinstance(source, SavedQuerySource):
        return f" [saved query: {source.id}]"
    if isinstance(source, SavedAggregationSource):
        return f" [saved aggregation: {source.id}]"
    if isinstance(source, InlineQuerySource):
        return " [inline query]"
    if isinstance(source, InlineAggregationSource):
        return " [inline aggregation]"
    return ""


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one background request.

    ``error`` holds the already formatted message on failure; ``value`` is
    the payload on success. ``label`` carries the saved spec id for
    saved-spec executions.
    """

    kind: LoadKind
    id: int
    value: Any = None
    error: str | None = None
    label: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
