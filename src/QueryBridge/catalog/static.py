"""Config-backed catalog and link discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from QueryBridge.catalog.base import IndexOptions
from QueryBridge.core.ast import IndexLink, QualifiedIndex
from QueryBridge.utils.log import log


@dataclass(slots=True)
class StaticCatalog:
    """Serve index options and links from a fixed set of declarations.

    Implements both ``IndexCatalog`` and ``LinkDiscovery``.
    """

    _entries: dict[QualifiedIndex, IndexOptions] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Iterable[tuple[QualifiedIndex, IndexOptions]]) -> StaticCatalog:
        """Build a catalog from ``(index, options)`` pairs.

        Raises:
            ValueError: If an index is declared twice.
        """
        catalog = cls()
        for index, options in entries:
            catalog.register(index, options)
        return catalog

    def register(self, index: QualifiedIndex, options: IndexOptions) -> None:
        if index in self._entries:
            raise ValueError(f"Index declared twice: {index}")
        self._entries[index] = options

    def resolve(self, index: QualifiedIndex) -> IndexOptions:
        """Return options for ``index``.

        Raises:
            KeyError: If ``index`` was never declared.
        """
        options = self._entries.get(index)
        if options is None:
            raise KeyError(f"Unknown index: {index}")
        return options

    def discover_links(self, index: QualifiedIndex) -> Sequence[IndexLink]:
        links = self.resolve(index).links
        log.debug("Discovered %d link(s) from %s", len(links), index)
        return links

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def __len__(self) -> int:
        return len(self._entries)
