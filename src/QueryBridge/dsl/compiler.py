"""Expression to QueryDSL compiler.

Walks an ``Expr`` tree and produces the backend's boolean query JSON. Leaves go
through ``term_to_dsl``. ``Linked`` nodes are resolved to a join path and
folded into nested ``subselect`` clauses, innermost hop first, each carrying a
visibility filter for the entity it joins unless visibility is ignored.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Sequence

from QueryBridge.catalog.base import IndexCatalog, IndexOptions, LinkDiscovery, VisibilityBuilder
from QueryBridge.core.ast import (
    AndList,
    Comparison,
    ComparisonOpcode,
    Expr,
    IndexLink,
    Linked,
    Not,
    OrList,
    QualifiedIndex,
    WithList,
)
from QueryBridge.core.errors import (
    AmbiguousNestedPathError,
    CollaboratorFailure,
    QueryBridgeError,
    UnsupportedConstructError,
)
from QueryBridge.dsl.path_finder import PathFinder
from QueryBridge.dsl.terms import term_to_dsl
from QueryBridge.utils.log import log

_ENCODABLE_OPCODES = frozenset(
    {
        ComparisonOpcode.CONTAINS,
        ComparisonOpcode.EQ,
        ComparisonOpcode.DOES_NOT_CONTAIN,
        ComparisonOpcode.NE,
        ComparisonOpcode.REGEX,
        ComparisonOpcode.GT,
        ComparisonOpcode.GTE,
        ComparisonOpcode.LT,
        ComparisonOpcode.LTE,
    }
)


@dataclass(frozen=True, slots=True)
class DslCompiler:
    """Compile query ASTs against a catalog and link topology.

    Attributes:
        catalog: Resolves entities to backend index options.
        links: Enumerates outgoing joins of an entity.
        visibility: Builds the per-join visibility filter.
        ignore_visibility: Skip visibility filters at join boundaries.
        doc_type: Document type marker for indexes that do not declare their own.
    """

    catalog: IndexCatalog
    links: LinkDiscovery
    visibility: VisibilityBuilder
    ignore_visibility: bool = False
    doc_type: str = "_doc"

    def compile(self, root: IndexLink, expr: Expr) -> dict[str, Any]:
        """Translate ``expr`` into QueryDSL, evaluated against ``root``.

        Raises:
            CompileError: On any unsupported or unresolvable construct. Nothing
                is returned for a partially translated tree.
        """
        if isinstance(expr, WithList):
            path = Expr.nested_path(expr.items)
            if path is None:
                raise AmbiguousNestedPathError(expr)
            dsl = [self.compile(root, child) for child in expr.items]
            return {"nested": {"path": path, "query": {"bool": {"must": dsl}}}}

        if isinstance(expr, AndList):
            return {"bool": {"must": [self.compile(root, child) for child in expr.items]}}

        if isinstance(expr, OrList):
            return {"bool": {"should": [self.compile(root, child) for child in expr.items]}}

        if isinstance(expr, Not):
            return {"bool": {"must_not": [self.compile(root, expr.child)]}}

        if isinstance(expr, Comparison):
            if expr.opcode not in _ENCODABLE_OPCODES:
                raise UnsupportedConstructError(type(expr).__name__, f"unsupported expression: {expr}")
            return term_to_dsl(expr.field, expr.term, _normalize_opcode(expr.opcode))

        if isinstance(expr, Linked):
            return self._compile_linked(root, expr)

        raise UnsupportedConstructError(type(expr).__name__, f"unsupported expression: {expr!r}")

    def resolve_path(self, root: IndexLink, target: QualifiedIndex) -> list[IndexLink]:
        """Return the join hops from ``root`` to ``target``.

        The topology reachable from ``root`` is discovered breadth-first, in the
        order the link discovery collaborator returns links.
        """
        finder = PathFinder(root)
        seen = {root.qualified_index}
        pending: deque[QualifiedIndex] = deque([root.qualified_index])
        while pending:
            source = pending.popleft()
            for link in self._discover(source):
                finder.push(source, link)
                if link.qualified_index not in seen:
                    seen.add(link.qualified_index)
                    pending.append(link.qualified_index)

        path = finder.find_path(root, target)
        log.debug(
            "Resolved path %s -> %s: %s",
            root.qualified_index,
            target,
            " / ".join(str(hop) for hop in path) or "(self)",
        )
        return path

    def fold(self, path: Sequence[IndexLink], query: dict[str, Any]) -> dict[str, Any]:
        """Wrap ``query`` in one ``subselect`` per hop, from the target end back.

        ``query`` must already be compiled against the entity at the end of
        ``path``.
        """
        current = query
        for hop in reversed(path):
            options = self._resolve(hop.qualified_index)
            index_name = options.index_name()
            type_name = options.type_name or self.doc_type

            if self.ignore_visibility:
                inner = current
            else:
                clause = self._visibility_clause(index_name, type_name)
                log.debug("Applying visibility filter for %s", index_name)
                inner = {"bool": {"must": [current], "filter": [clause]}}

            current = {
                "subselect": {
                    "index": index_name,
                    "type": type_name,
                    "left_fieldname": hop.left_field,
                    "right_fieldname": hop.right_field,
                    "query": inner,
                }
            }
            log.debug("Folded hop %s into subselect on %s", hop, index_name)
        return current

    def _compile_linked(self, root: IndexLink, expr: Linked) -> dict[str, Any]:
        path = self.resolve_path(root, expr.link.qualified_index)
        if not path:
            return self.compile(root, expr.child)
        target = IndexLink.from_relation(expr.link.qualified_index)
        return self.fold(path, self.compile(target, expr.child))

    def _discover(self, index: QualifiedIndex) -> Sequence[IndexLink]:
        try:
            return self.links.discover_links(index)
        except QueryBridgeError:
            raise
        except Exception as error:  # noqa: BLE001 - collaborator boundary
            raise CollaboratorFailure("topology", error) from error

    def _resolve(self, index: QualifiedIndex) -> IndexOptions:
        try:
            return self.catalog.resolve(index)
        except QueryBridgeError:
            raise
        except Exception as error:  # noqa: BLE001 - collaborator boundary
            raise CollaboratorFailure("catalog", error) from error

    def _visibility_clause(self, index_name: str, type_name: str) -> dict[str, Any]:
        try:
            return dict(self.visibility.build_clause(index_name, type_name))
        except QueryBridgeError:
            raise
        except Exception as error:  # noqa: BLE001 - collaborator boundary
            raise CollaboratorFailure("visibility", error) from error


def _normalize_opcode(opcode: ComparisonOpcode) -> ComparisonOpcode:
    if opcode is ComparisonOpcode.EQ:
        return ComparisonOpcode.CONTAINS
    if opcode is ComparisonOpcode.NE:
        return ComparisonOpcode.DOES_NOT_CONTAIN
    return opcode
