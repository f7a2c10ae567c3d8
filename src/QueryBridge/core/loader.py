"""Structured query documents.

Builds an ``Expr`` tree from an already-structured YAML/JSON document. This is
not a query-language parser: each mapping key names an AST node directly.

Example document::

    and:
      - contains: {field: title, phrase: "red shoes"}
      - linked:
          link: "id=<public.orders.idxorders>product_id"
          query:
            gt: {field: amount, string: "10"}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from QueryBridge.core.ast import (
    AndList,
    Comparison,
    Contains,
    DoesNotContain,
    Eq,
    Expr,
    FuzzyLikeThis,
    FuzzyTerm,
    Gt,
    Gte,
    IndexLink,
    Linked,
    Lt,
    Lte,
    MatchAllTerm,
    MoreLikeThis,
    Ne,
    Not,
    NullTerm,
    OrList,
    ParsedArrayTerm,
    PhraseTerm,
    PhraseWithWildcardTerm,
    ProximityChainTerm,
    QualifiedField,
    RangeTerm,
    Regex,
    RegexTerm,
    StringTerm,
    Term,
    UnparsedArrayTerm,
    WildcardTerm,
    WithList,
)


class QueryDocumentError(ValueError):
    """A structured query document is malformed."""


_COMPARISONS: dict[str, type[Comparison]] = {
    "contains": Contains,
    "eq": Eq,
    "does_not_contain": DoesNotContain,
    "ne": Ne,
    "regex": Regex,
    "gt": Gt,
    "gte": Gte,
    "lt": Lt,
    "lte": Lte,
    "more_like_this": MoreLikeThis,
    "fuzzy_like_this": FuzzyLikeThis,
}

_LISTS: dict[str, Callable[[tuple[Expr, ...]], Expr]] = {
    "and": AndList,
    "or": OrList,
    "with": WithList,
}

_TERM_KINDS = (
    "null",
    "match_all",
    "string",
    "phrase",
    "phrase_wildcard",
    "wildcard",
    "fuzzy",
    "range",
    "regex",
    "array",
    "proximity",
    "unparsed_array",
)


def load_query_file(path: Path) -> Expr:
    """Read a YAML or JSON query document from ``path``."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as error:
        raise QueryDocumentError(f"{path}: invalid YAML/JSON: {error}") from error
    return parse_query_document(data)


def parse_query_document(value: Any, config_key: str = "query") -> Expr:
    """Convert a document node into an ``Expr``.

    Raises:
        QueryDocumentError: With the dotted key path of the offending node.
    """
    if not isinstance(value, Mapping) or len(value) != 1:
        raise QueryDocumentError(f"{config_key} must be an object with exactly one key")

    (kind, body), = value.items()
    if not isinstance(kind, str):
        raise QueryDocumentError(f"{config_key} keys must be strings")
    key = f"{config_key}.{kind}"

    if kind in _LISTS:
        if not isinstance(body, list) or not body:
            raise QueryDocumentError(f"{key} must be a non-empty list")
        children = tuple(parse_query_document(item, f"{key}[{idx}]") for idx, item in enumerate(body))
        return _LISTS[kind](children)

    if kind == "not":
        return Not(parse_query_document(body, key))

    if kind == "linked":
        return _parse_linked(body, key)

    comparison = _COMPARISONS.get(kind)
    if comparison is not None:
        return _parse_comparison(comparison, body, key)

    raise QueryDocumentError(f"{config_key} has unknown node: {kind}")


def _parse_linked(body: Any, config_key: str) -> Linked:
    if not isinstance(body, Mapping):
        raise QueryDocumentError(f"{config_key} must be an object with link and query")
    link_text = body.get("link")
    if not isinstance(link_text, str):
        raise QueryDocumentError(f"{config_key}.link must be a string")
    try:
        link = IndexLink.parse(link_text)
    except ValueError as error:
        raise QueryDocumentError(f"{config_key}.link: {error}") from error
    if "query" not in body:
        raise QueryDocumentError(f"Missing required key: {config_key}.query")
    return Linked(link=link, child=parse_query_document(body["query"], f"{config_key}.query"))


def _parse_comparison(comparison: type[Comparison], body: Any, config_key: str) -> Comparison:
    if not isinstance(body, Mapping):
        raise QueryDocumentError(f"{config_key} must be an object")
    field_name = body.get("field")
    if not isinstance(field_name, str) or not field_name.strip():
        raise QueryDocumentError(f"{config_key}.field must be a non-empty string")
    term = parse_term(body, config_key)
    return comparison(field=QualifiedField(field_name.strip()), term=term)


def parse_term(body: Mapping[str, Any], config_key: str) -> Term:
    """Build a ``Term`` from the single term-kind key in ``body``."""
    kinds = [kind for kind in _TERM_KINDS if kind in body]
    if len(kinds) != 1:
        raise QueryDocumentError(f"{config_key} must have exactly one of: {', '.join(_TERM_KINDS)}")
    kind = kinds[0]
    value = body[kind]
    key = f"{config_key}.{kind}"
    boost = _boost(body.get("boost"), f"{config_key}.boost")

    try:
        if kind in ("null", "match_all"):
            if value is not True:
                raise QueryDocumentError(f"{key} must be true")
            return NullTerm() if kind == "null" else MatchAllTerm()
        if kind == "string":
            return StringTerm(_expect_scalar(value, key), boost)
        if kind == "phrase":
            return PhraseTerm(_expect_scalar(value, key), boost)
        if kind == "phrase_wildcard":
            return PhraseWithWildcardTerm(_expect_scalar(value, key), boost)
        if kind == "wildcard":
            return WildcardTerm(_expect_scalar(value, key), boost)
        if kind == "fuzzy":
            distance = body.get("distance", 0)
            if isinstance(distance, bool) or not isinstance(distance, int):
                raise QueryDocumentError(f"{config_key}.distance must be an integer")
            return FuzzyTerm(_expect_scalar(value, key), distance, boost)
        if kind == "range":
            if not isinstance(value, list) or len(value) != 2:
                raise QueryDocumentError(f"{key} must be a [start, end] list")
            return RangeTerm(_expect_scalar(value[0], f"{key}[0]"), _expect_scalar(value[1], f"{key}[1]"), boost)
        if kind == "regex":
            return RegexTerm(_expect_scalar(value, key), boost)
        if kind == "array":
            return ParsedArrayTerm(_parse_array(value, key), boost)
        if kind == "proximity":
            if not isinstance(value, list):
                raise QueryDocumentError(f"{key} must be a list")
            return ProximityChainTerm(
                tuple(_expect_scalar(item, f"{key}[{idx}]") for idx, item in enumerate(value)), boost
            )
        return UnparsedArrayTerm(_expect_scalar(value, key), boost)
    except QueryDocumentError:
        raise
    except ValueError as error:
        raise QueryDocumentError(f"{config_key}: {error}") from error


def _parse_array(value: Any, config_key: str) -> tuple[Term, ...]:
    if not isinstance(value, list):
        raise QueryDocumentError(f"{config_key} must be a list")
    members: list[Term] = []
    for idx, item in enumerate(value):
        if isinstance(item, Mapping):
            members.append(parse_term(item, f"{config_key}[{idx}]"))
        else:
            members.append(StringTerm(_expect_scalar(item, f"{config_key}[{idx}]")))
    return tuple(members)


def _expect_scalar(value: Any, config_key: str) -> str:
    """Accept strings and numbers; numbers keep their YAML text form."""
    if isinstance(value, bool) or value is None or isinstance(value, (list, Mapping)):
        raise QueryDocumentError(f"{config_key} must be a string or number")
    return str(value)


def _boost(value: Any, config_key: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QueryDocumentError(f"{config_key} must be a number")
    return float(value)
