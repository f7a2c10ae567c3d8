"""Console output via the QueryBridge logger."""

from __future__ import annotations

from QueryBridge.renderers.base import OutputWriter
from QueryBridge.utils.log import log


class ConsoleOutputWriter(OutputWriter):
    """Log each result line immediately."""

    def write_result(self, source: str, content: str) -> None:
        log.info("=== %s ===", source)
        for line in content.splitlines():
            log.info(line)

    def finalize(self, action: str) -> None:
        """Console output needs no finalization."""
