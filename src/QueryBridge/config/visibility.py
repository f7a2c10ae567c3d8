"""Visibility domain configuration (the reading transaction snapshot)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from QueryBridge.config.common import expect_int, expect_int_list, get_optional_value, get_section


@dataclass(frozen=True, slots=True)
class VisibilityConfig:
    """Snapshot used to build visibility clauses."""

    my_xid: int = 0
    xmin: int = 1
    xmax: int = 1
    command_id: int = 0
    active_xids: tuple[int, ...] = ()


def load_visibility(raw: Mapping[str, Any]) -> VisibilityConfig:
    """Load the optional ``visibility`` section."""
    section = get_section(raw, "visibility", required=False)
    return VisibilityConfig(
        my_xid=expect_int(get_optional_value(section, "my_xid", 0), "visibility.my_xid"),
        xmin=expect_int(get_optional_value(section, "xmin", 1), "visibility.xmin"),
        xmax=expect_int(get_optional_value(section, "xmax", 1), "visibility.xmax"),
        command_id=expect_int(get_optional_value(section, "command_id", 0), "visibility.command_id"),
        active_xids=tuple(expect_int_list(get_optional_value(section, "active_xids", []), "visibility.active_xids")),
    )


def check_visibility(config: VisibilityConfig) -> None:
    """Validate snapshot constraints.

    Raises:
        ValueError: If ids are negative or xmin exceeds xmax.
    """
    for key in ("my_xid", "xmin", "xmax", "command_id"):
        if getattr(config, key) < 0:
            raise ValueError(f"visibility.{key} must not be negative")
    if config.xmin > config.xmax:
        raise ValueError("visibility.xmin must not exceed visibility.xmax")
    if any(xid < 0 for xid in config.active_xids):
        raise ValueError("visibility.active_xids must not contain negative ids")
