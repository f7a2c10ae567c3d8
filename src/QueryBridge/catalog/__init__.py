"""Index catalog, link topology and visibility collaborators.

The compiler depends only on the protocols in ``base``. ``StaticCatalog`` and
``SnapshotVisibility`` are the config-backed implementations used by the CLI.
"""

from __future__ import annotations

from QueryBridge.catalog.base import IndexCatalog, IndexOptions, LinkDiscovery, VisibilityBuilder
from QueryBridge.catalog.static import StaticCatalog
from QueryBridge.catalog.visibility import Snapshot, SnapshotVisibility

__all__ = [
    "IndexCatalog",
    "IndexOptions",
    "LinkDiscovery",
    "VisibilityBuilder",
    "StaticCatalog",
    "Snapshot",
    "SnapshotVisibility",
]
