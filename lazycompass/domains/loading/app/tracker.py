"""Request-id bookkeeping for background loads."""

from __future__ import annotations

from lazycompass.domains.loading.domain.results import LoadKind, LoadResult

MAX_REQUEST_ID = 2**64 - 1


class LoadTracker:
    """Hands out request ids and remembers the latest one per load kind.

    Ids come from a saturating counter. A result is accepted only when its
    id equals the expected id for its kind; accepting clears the slot so a
    duplicate delivery is ignored.
    """

    def __init__(self) -> None:
        self._last_id = 0
        self._expected: dict[LoadKind, int | None] = {kind: None for kind in LoadKind}

    def begin(self, kind: LoadKind) -> int:
        if self._last_id < MAX_REQUEST_ID:
            self._last_id += 1
        self._expected[kind] = self._last_id
        return self._last_id

    def expected(self, kind: LoadKind) -> int | None:
        return self._expected[kind]

    def accept(self, result: LoadResult) -> bool:
        if self._expected[result.kind] != result.id:
            return False
        self._expected[result.kind] = None
        return True
