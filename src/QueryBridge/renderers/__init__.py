"""Output renderers for command results.

Exports the OutputWriter base for new output formats and a factory that
instantiates writers from configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from QueryBridge.renderers.base import MultiOutputWriter, OutputWriter
from QueryBridge.renderers.console import ConsoleOutputWriter
from QueryBridge.renderers.json import JsonFileWriter
from QueryBridge.renderers.tree import render_tree

if TYPE_CHECKING:
    from QueryBridge.config import AppConfig


def create_output_writer(config: AppConfig) -> OutputWriter:
    """Create output writer based on config.

    Raises:
        ValueError: If no known format is configured.
    """
    writers: list[OutputWriter] = []
    if "console" in config.output.formats:
        writers.append(ConsoleOutputWriter())
    if "json" in config.output.formats:
        writers.append(JsonFileWriter(config.output.base_dir))

    if not writers:
        raise ValueError("No output writers configured")
    return MultiOutputWriter(writers)


__all__ = [
    "OutputWriter",
    "ConsoleOutputWriter",
    "JsonFileWriter",
    "MultiOutputWriter",
    "render_tree",
    "create_output_writer",
]
