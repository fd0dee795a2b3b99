"""Service wiring for the application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from lazycompass.domains.connections.store.config_loader import log_file_path
from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.domains.mongo.app.executor import MongoExecutor
from lazycompass.shared.app.runtime import RuntimeConfig
from lazycompass.shared.app.storage import StorageSnapshot, load_storage
from lazycompass.shared.core.log_setup import configure_logging

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    runtime: RuntimeConfig
    paths: ConfigPaths
    storage: StorageSnapshot
    executor: MongoExecutor
    log_path: Path | None = None


def build_app_services(runtime: RuntimeConfig, cwd: Path | None = None) -> AppServices:
    """Resolve paths, load config and saved specs, and configure logging.

    Config errors propagate to the caller; they abort startup.
    """
    paths = ConfigPaths.resolve_from(cwd or Path.cwd(), global_root=runtime.config_dir)
    storage = load_storage(paths, apply_overrides=runtime.apply_overrides)
    log_path = log_file_path(paths, storage.config)
    level_warning = configure_logging(storage.config.logging, log_path, debug=runtime.debug_mode)
    if level_warning is not None:
        storage.warnings.append(level_warning)
    logger.info(
        "starting session: %d connection(s), %d saved query(ies), %d saved aggregation(s)",
        len(storage.config.connections),
        len(storage.queries),
        len(storage.aggregations),
    )
    return AppServices(
        runtime=runtime,
        paths=paths,
        storage=storage,
        executor=MongoExecutor(),
        log_path=log_path,
    )
