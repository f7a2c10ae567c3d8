"""Indented structural rendering of query ASTs."""

from __future__ import annotations

from QueryBridge.core.ast import Comparison, Expr, Linked, ParsedArrayTerm, Term

_INDENT = "    "


def render_tree(expr: Expr) -> str:
    """Render ``expr`` as an indented tree, one node per line.

    Example:
        AndList
            Contains(title, StringTerm "foo")
            Not
                Eq(tags.name, NullTerm NULL)
    """
    lines: list[str] = []
    _render(expr, 0, lines)
    return "\n".join(lines)


def _render(expr: Expr, depth: int, lines: list[str]) -> None:
    pad = _INDENT * depth
    if isinstance(expr, Comparison):
        lines.append(f"{pad}{type(expr).__name__}({expr.field}, {_term_label(expr.term)})")
        if isinstance(expr.term, ParsedArrayTerm):
            for member in expr.term.terms:
                lines.append(f"{pad}{_INDENT}- {_term_label(member)}")
        return
    if isinstance(expr, Linked):
        lines.append(f"{pad}Linked {expr.link}")
    else:
        lines.append(f"{pad}{type(expr).__name__}")
    for child in expr.children():
        _render(child, depth + 1, lines)


def _term_label(term: Term) -> str:
    return f"{type(term).__name__} {term}"
