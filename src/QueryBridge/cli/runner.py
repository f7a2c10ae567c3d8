"""Command runner for coordinating CLI execution.

Configures logging, builds components from config, and turns any failure into
a logged error plus ``click.Abort``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import click

from QueryBridge.cli.commands import DebugCommand, DumpCommand
from QueryBridge.config import AppConfig
from QueryBridge.core.ast import IndexLink, QualifiedIndex
from QueryBridge.renderers import OutputWriter, create_output_writer
from QueryBridge.services import create_compiler
from QueryBridge.utils.log import configure_logging, log


class CommandRunner:
    """Runs one CLI command against a loaded configuration."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def run_dump(self, action: str, query_files: Sequence[Path], root: str | None = None) -> None:
        """Compile ``query_files`` and write the resulting QueryDSL.

        Args:
            action: The CLI command name (e.g., 'dump').
            query_files: Structured query documents to compile.
            root: Qualified index overriding ``compiler.root``.

        Raises:
            click.Abort: When any document fails to load or compile.
        """

        def build(writer: OutputWriter) -> DumpCommand:
            root_index = QualifiedIndex.parse(root) if root else self.config.compiler.root
            return DumpCommand(
                compiler=create_compiler(self.config),
                root=IndexLink.from_relation(root_index),
                query_files=tuple(query_files),
                output_writer=writer,
            )

        self._run(action, build)

    def run_debug(self, action: str, query_files: Sequence[Path]) -> None:
        """Describe ``query_files`` without compiling them.

        Raises:
            click.Abort: When a query document cannot be loaded.
        """
        self._run(action, lambda writer: DebugCommand(query_files=tuple(query_files), output_writer=writer))

    def _run(self, action: str, build: Callable[[OutputWriter], DumpCommand | DebugCommand]) -> None:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            writer = create_output_writer(self.config)
            build(writer).execute()
            # Files are only written once every document succeeded.
            writer.finalize(action)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
