"""Base classes for output writers.

Separates command control flow from where results end up (console, files).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence


class OutputWriter(ABC):
    """Abstract base class for command output writers."""

    @abstractmethod
    def write_result(self, source: str, content: str) -> None:
        """Write the rendered result for one query document.

        Args:
            source: Name of the query document (usually its file path).
            content: Rendered text (pretty JSON for ``dump``).
        """

    @abstractmethod
    def finalize(self, action: str) -> None:
        """Finalize output (e.g., write accumulated results to file).

        Args:
            action: The CLI command name (e.g., 'dump').
        """


@dataclass(slots=True)
class MultiOutputWriter(OutputWriter):
    """Delegate output to multiple writers."""

    writers: Sequence[OutputWriter]

    def write_result(self, source: str, content: str) -> None:
        for writer in self.writers:
            writer.write_result(source, content)

    def finalize(self, action: str) -> None:
        for writer in self.writers:
            writer.finalize(action)
