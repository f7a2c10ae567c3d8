"""Snapshot-based visibility clauses.

A row of a joined index is visible when the transaction that wrote it is
committed and not concurrent with the reading snapshot. The backend evaluates
that rule through a ``visibility`` query; this module only fills in the
snapshot it needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ABORTED_XIDS_FIELD = "aborted_xids"


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Transaction snapshot of the reading session.

    Attributes:
        my_xid: Transaction id of the reader, 0 when it has not written.
        xmin: Oldest transaction id still running.
        xmax: First transaction id not yet assigned.
        command_id: Command counter within the reading transaction.
        active_xids: Transaction ids in progress when the snapshot was taken.
    """

    my_xid: int
    xmin: int
    xmax: int
    command_id: int
    active_xids: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if self.xmin > self.xmax:
            raise ValueError(f"snapshot xmin ({self.xmin}) must not exceed xmax ({self.xmax})")


@dataclass(frozen=True, slots=True)
class SnapshotVisibility:
    """Build visibility clauses from a fixed snapshot."""

    snapshot: Snapshot

    def build_clause(self, backend_name: str, type_name: str) -> dict[str, Any]:
        """Return the visibility filter for ``backend_name`` documents of ``type_name``."""
        snapshot = self.snapshot
        return {
            "visibility": {
                "myxid": snapshot.my_xid,
                "xmin": snapshot.xmin,
                "xmax": snapshot.xmax,
                "commandid": snapshot.command_id,
                "active_xids": sorted(snapshot.active_xids),
                "index": backend_name,
                "type": type_name,
                "field": ABORTED_XIDS_FIELD,
                "id": ABORTED_XIDS_FIELD,
            }
        }
