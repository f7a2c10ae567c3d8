"""Shortest join path search over an index link topology.

Nodes are indexed entities held in an arena; edges are ``IndexLink``s in the
order they were pushed. Breadth-first search keeps join depth minimal. The
first visit to an entity fixes its parent edge, so among equally short paths
the one whose hops were pushed earliest wins, compared hop by hop from the
root.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from QueryBridge.core.ast import IndexLink, QualifiedIndex
from QueryBridge.core.errors import PathNotFoundError


@dataclass(frozen=True, slots=True)
class _Edge:
    source: int
    target: int
    link: IndexLink


@dataclass(slots=True)
class PathFinder:
    """Find the join path from ``root`` to any entity reachable from it."""

    root: IndexLink
    _nodes: list[QualifiedIndex] = field(default_factory=list)
    _node_ids: dict[QualifiedIndex, int] = field(default_factory=dict)
    _edges: list[_Edge] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._node(self.root.qualified_index)

    def push(self, source: QualifiedIndex, link: IndexLink) -> None:
        """Add ``link`` as an edge from ``source`` to ``link.qualified_index``."""
        if link.is_self:
            return
        self._edges.append(
            _Edge(source=self._node(source), target=self._node(link.qualified_index), link=link)
        )

    def find_path(self, start: IndexLink, target: QualifiedIndex) -> list[IndexLink]:
        """Return the hops leading from ``start`` to ``target``.

        The list is ordered from the start side to the target side and is
        empty when ``target`` is the start entity itself.

        Raises:
            PathNotFoundError: If ``target`` is unreachable.
        """
        origin = start.qualified_index
        if origin == target:
            return []
        if origin not in self._node_ids or target not in self._node_ids:
            raise PathNotFoundError(origin, target)

        begin = self._node_ids[origin]
        goal = self._node_ids[target]
        parents: dict[int, _Edge | None] = {begin: None}
        queue: deque[int] = deque([begin])
        while queue:
            current = queue.popleft()
            if current == goal:
                break
            for edge in self._edges:
                if edge.source != current or edge.target in parents:
                    continue
                parents[edge.target] = edge
                queue.append(edge.target)

        if goal not in parents:
            raise PathNotFoundError(origin, target)

        hops: list[IndexLink] = []
        edge = parents[goal]
        while edge is not None:
            hops.append(edge.link)
            edge = parents[edge.source]
        hops.reverse()
        return hops

    def _node(self, index: QualifiedIndex) -> int:
        node_id = self._node_ids.get(index)
        if node_id is None:
            node_id = len(self._nodes)
            self._nodes.append(index)
            self._node_ids[index] = node_id
        return node_id
