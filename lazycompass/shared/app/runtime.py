"""Runtime configuration for lazycompass."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from lazycompass.domains.connections.domain.config import Config

DEFAULT_TICK_MS = 50
TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in TRUTHY


def _env_positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw.isdecimal():
        return default
    return int(raw) or default


@dataclass
class RuntimeConfig:
    """Runtime configuration provided by CLI or tests.

    The flag fields override the matching config file keys when set.
    """

    config_dir: Path | None = None
    debug_mode: bool = False
    tick_ms: int = DEFAULT_TICK_MS
    write_enabled: bool = False
    allow_pipeline_writes: bool = False
    allow_insecure: bool = False

    @classmethod
    def from_env(cls) -> RuntimeConfig:
        config_dir = os.environ.get("LAZYCOMPASS_CONFIG_DIR", "").strip()
        return cls(
            config_dir=Path(config_dir).expanduser() if config_dir else None,
            debug_mode=_env_flag("LAZYCOMPASS_DEBUG"),
            tick_ms=_env_positive_int("LAZYCOMPASS_TICK_MS", DEFAULT_TICK_MS),
        )

    def apply_overrides(self, config: Config) -> None:
        if self.write_enabled:
            config.read_only = False
        if self.allow_pipeline_writes:
            config.allow_pipeline_writes = True
        if self.allow_insecure:
            config.allow_insecure = True
