"""Command implementations for the QueryBridge CLI.

Each command loads its query documents, renders them, and hands the text to
an OutputWriter. Parameter handling and error reporting stay in the CLI layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from QueryBridge.core.ast import IndexLink
from QueryBridge.core.loader import load_query_file
from QueryBridge.dsl import DslCompiler, debug_query, dump_query
from QueryBridge.renderers import OutputWriter
from QueryBridge.utils.log import log


@dataclass(slots=True)
class DumpCommand:
    """Compile query documents and emit pretty-printed QueryDSL."""

    compiler: DslCompiler
    root: IndexLink
    query_files: Sequence[Path]
    output_writer: OutputWriter

    def execute(self) -> None:
        multiple = len(self.query_files) > 1
        for idx, path in enumerate(self.query_files, start=1):
            if multiple:
                log.debug("Compiling query %d/%d: %s", idx, len(self.query_files), path)
            expr = load_query_file(path)
            log.debug("root=%s query=%s", self.root.qualified_index, expr)
            self.output_writer.write_result(str(path), dump_query(self.compiler, self.root, expr))


@dataclass(slots=True)
class DebugCommand:
    """Show the normalized query, used fields and syntax tree."""

    query_files: Sequence[Path]
    output_writer: OutputWriter

    def execute(self) -> None:
        for path in self.query_files:
            expr = load_query_file(path)
            self.output_writer.write_result(str(path), debug_query(expr))
