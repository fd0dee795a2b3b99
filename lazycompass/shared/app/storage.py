"""Startup snapshot of config and saved specs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from lazycompass.domains.connections.domain.config import Config, connection_security_warnings
from lazycompass.domains.connections.store.config_loader import load_config
from lazycompass.domains.connections.store.paths import ConfigPaths
from lazycompass.domains.connections.store.security import permission_warnings
from lazycompass.domains.saved.domain.specs import SavedAggregation, SavedQuery
from lazycompass.domains.saved.store.saved_specs import load_saved_aggregations, load_saved_queries


@dataclass
class StorageSnapshot:
    config: Config = field(default_factory=Config)
    queries: list[SavedQuery] = field(default_factory=list)
    aggregations: list[SavedAggregation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def load_storage(
    paths: ConfigPaths,
    apply_overrides: Callable[[Config], None] | None = None,
) -> StorageSnapshot:
    """Load config and saved specs once for the session.

    Broken saved spec files become warnings; config errors propagate.
    ``apply_overrides`` runs before the security warnings are computed.
    """
    config = load_config(paths)
    if apply_overrides is not None:
        apply_overrides(config)
    warnings = connection_security_warnings(config)
    warnings.extend(permission_warnings(paths))
    queries, query_warnings = load_saved_queries(paths)
    aggregations, aggregation_warnings = load_saved_aggregations(paths)
    warnings.extend(query_warnings)
    warnings.extend(aggregation_warnings)
    return StorageSnapshot(config=config, queries=queries, aggregations=aggregations, warnings=warnings)
