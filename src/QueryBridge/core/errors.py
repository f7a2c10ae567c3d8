"""Exception hierarchy for QueryBridge.

Every compile failure aborts the whole compilation. Callers that host many
compilations catch ``CompileError`` per query.
"""

from __future__ import annotations

from typing import Any


class QueryBridgeError(Exception):
    """Base exception for all QueryBridge errors."""


class CompileError(QueryBridgeError):
    """A query could not be translated."""


class UnsupportedConstructError(CompileError):
    """AST node, term, or opcode combination with no defined mapping."""

    def __init__(self, node_kind: str, detail: str | None = None) -> None:
        self.node_kind = node_kind
        self.detail = detail
        message = f"Unsupported construct: {node_kind}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class TermMismatchError(UnsupportedConstructError):
    """The term kind is not valid for the comparison opcode."""

    def __init__(self, opcode: Any, term: Any) -> None:
        self.opcode = opcode
        self.term = term
        super().__init__(
            type(term).__name__,
            f"invalid term type for opcode {getattr(opcode, 'name', opcode)}: {term}",
        )


class PathNotFoundError(CompileError):
    """No chain of index links connects the root to the target."""

    def __init__(self, root: Any, target: Any) -> None:
        self.root = root
        self.target = target
        super().__init__(f"No index link path from {root} to {target}")


class AmbiguousNestedPathError(CompileError):
    """Children of a WITH group do not share exactly one nested path."""

    def __init__(self, node: Any) -> None:
        self.node = node
        super().__init__(f"Could not determine nested path for: {node}")


class CollaboratorFailure(CompileError):
    """Catalog, topology, or visibility lookup failed."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} lookup failed: {cause}")
