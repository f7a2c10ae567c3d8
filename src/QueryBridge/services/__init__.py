"""Component factories for QueryBridge.

Wires the config-backed collaborators into a ``DslCompiler`` so that callers
only deal with ``AppConfig``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from QueryBridge.catalog import Snapshot, SnapshotVisibility, StaticCatalog
from QueryBridge.dsl import DslCompiler
from QueryBridge.utils.log import log

if TYPE_CHECKING:
    from QueryBridge.config import AppConfig


def create_catalog(config: AppConfig) -> StaticCatalog:
    """Create the catalog of declared indexes.

    Args:
        config: Application configuration containing the ``indexes`` section.

    Returns:
        Catalog that also serves link discovery.
    """
    catalog = StaticCatalog.from_entries(
        (definition.name, definition.options) for definition in config.catalog.indexes
    )
    log.debug("Catalog loaded with %d index(es)", len(catalog))
    return catalog


def create_visibility(config: AppConfig) -> SnapshotVisibility:
    """Create the visibility clause builder from the configured snapshot."""
    snapshot = Snapshot(
        my_xid=config.visibility.my_xid,
        xmin=config.visibility.xmin,
        xmax=config.visibility.xmax,
        command_id=config.visibility.command_id,
        active_xids=config.visibility.active_xids,
    )
    return SnapshotVisibility(snapshot=snapshot)


def create_compiler(config: AppConfig) -> DslCompiler:
    """Create a compiler bound to the configured catalog and snapshot.

    Args:
        config: Application configuration.

    Returns:
        Configured DslCompiler instance.
    """
    catalog = create_catalog(config)
    if config.compiler.ignore_visibility:
        log.info("Visibility filtering disabled by compiler.ignore_visibility")
    return DslCompiler(
        catalog=catalog,
        links=catalog,
        visibility=create_visibility(config),
        ignore_visibility=config.compiler.ignore_visibility,
        doc_type=config.compiler.doc_type,
    )


__all__ = [
    "create_catalog",
    "create_compiler",
    "create_visibility",
]
