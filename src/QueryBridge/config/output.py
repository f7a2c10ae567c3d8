"""Output domain configuration for debug command results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from QueryBridge.config.common import (
    expect_str,
    expect_str_list,
    get_optional_value,
    get_section,
)

_ALLOWED_FORMATS = {"console", "json"}


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Output configuration."""

    base_dir: str = "output"
    formats: tuple[str, ...] = ("console",)


def load_output(raw: Mapping[str, Any]) -> OutputConfig:
    """Load the optional ``output`` section.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "output", required=False)
    formats = expect_str_list(get_optional_value(section, "formats", ["console"]), "output.formats")
    return OutputConfig(
        base_dir=expect_str(get_optional_value(section, "base_dir", "output"), "output.base_dir"),
        formats=tuple(dict.fromkeys(item.strip().lower() for item in formats)),
    )


def check_output(config: OutputConfig) -> None:
    """Validate output constraints.

    Raises:
        ValueError: If formats are empty or unknown.
    """
    if not config.formats:
        raise ValueError("output.formats must include at least one format")
    unknown = [fmt for fmt in config.formats if fmt not in _ALLOWED_FORMATS]
    if unknown:
        raise ValueError(f"output.formats has unknown format(s): {unknown}")
    if "json" in config.formats and not config.base_dir.strip():
        raise ValueError("output.base_dir must not be empty when output.formats includes json")
