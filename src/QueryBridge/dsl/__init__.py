"""Query AST to backend QueryDSL translation."""

from __future__ import annotations

from QueryBridge.dsl.compiler import DslCompiler
from QueryBridge.dsl.debug import debug_query, dump_query
from QueryBridge.dsl.path_finder import PathFinder
from QueryBridge.dsl.terms import term_to_dsl

__all__ = [
    "DslCompiler",
    "PathFinder",
    "term_to_dsl",
    "dump_query",
    "debug_query",
]
