"""Collaborator interfaces consumed by the DSL compiler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence

from QueryBridge.core.ast import IndexLink, QualifiedIndex


@dataclass(frozen=True, slots=True)
class IndexOptions:
    """Physical options of an indexed entity.

    Attributes:
        backend_name: Name of the index on the search backend.
        type_name: Document type marker of this index; None falls back to the
            compiler default.
        links: Outgoing link declarations of this entity.
    """

    backend_name: str
    type_name: Optional[str] = None
    links: tuple[IndexLink, ...] = ()

    def index_name(self) -> str:
        """Return the name used to address this index in queries."""
        return self.backend_name


class IndexCatalog(Protocol):
    """Resolve an entity to its physical backend options."""

    def resolve(self, index: QualifiedIndex) -> IndexOptions:
        """Return options for ``index``; raise if it cannot be resolved."""
        raise NotImplementedError


class LinkDiscovery(Protocol):
    """Enumerate the outgoing joins of an entity."""

    def discover_links(self, index: QualifiedIndex) -> Sequence[IndexLink]:
        """Return links whose source side is ``index``, in declaration order."""
        raise NotImplementedError


class VisibilityBuilder(Protocol):
    """Build the consistency filter applied at every join boundary."""

    def build_clause(self, backend_name: str, type_name: str) -> Mapping[str, Any]:
        """Return a backend filter clause restricting rows of ``backend_name``.

        ``type_name`` is the document type marker of that index.
        """
        raise NotImplementedError
