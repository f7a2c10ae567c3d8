"""Developer-facing dump and debug views of a query."""

from __future__ import annotations

import json

from QueryBridge.core.ast import Expr, IndexLink
from QueryBridge.dsl.compiler import DslCompiler
from QueryBridge.renderers.tree import render_tree


def dump_query(compiler: DslCompiler, root: IndexLink, expr: Expr) -> str:
    """Compile ``expr`` against ``root`` and return pretty-printed QueryDSL."""
    return json.dumps(compiler.compile(root, expr), indent=2, ensure_ascii=False)


def debug_query(expr: Expr) -> str:
    """Describe ``expr``: normalized text, used fields and syntax tree."""
    tree = render_tree(expr).replace("\n", "\n   ")
    used_fields = ", ".join(sorted(expr.used_fields()))
    return (
        f"Normalized Query:\n   {expr}\n"
        f"Used Fields:\n   {used_fields}\n"
        f"SyntaxTree:\n   {tree}"
    )
