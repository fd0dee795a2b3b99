"""Read-only and pipeline-write enforcement (UI-agnostic)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lazycompass.shared.core.errors import WriteGuardError

if TYPE_CHECKING:
    from lazycompass.domains.connections.domain.config import Config


@dataclass(frozen=True)
class WriteGuard:
    read_only: bool
    allow_pipeline_writes: bool

    @classmethod
    def from_config(cls, config: Config) -> WriteGuard:
        return cls(read_only=config.is_read_only(), allow_pipeline_writes=config.pipeline_writes_allowed())

    def ensure_write_allowed(self, action: str) -> None:
        if self.read_only:
            raise WriteGuardError(
                f"read-only mode: cannot {action}; restart with --write-enabled or set read_only = false"
            )

    def ensure_pipeline_allowed(self, stage: str) -> None:
        self.ensure_write_allowed(f"run aggregation with {stage}")
        if not self.allow_pipeline_writes:
            raise WriteGuardError(
                f"aggregation stage {stage} writes data; set allow_pipeline_writes = true "
                "or pass --allow-pipeline-writes"
            )
