"""Leaf term encoding.

Maps one ``(field, term, opcode)`` triple to a backend query fragment. Boosts
default to 1.0 here and nowhere earlier.
"""

from __future__ import annotations

from typing import Any, Optional

from QueryBridge.core.ast import (
    ComparisonOpcode,
    FuzzyTerm,
    MatchAllTerm,
    NullTerm,
    ParsedArrayTerm,
    PhraseTerm,
    PhraseWithWildcardTerm,
    QualifiedField,
    RangeTerm,
    RegexTerm,
    StringTerm,
    Term,
    WildcardTerm,
)
from QueryBridge.core.errors import TermMismatchError, UnsupportedConstructError

DEFAULT_BOOST = 1.0

_RANGE_BOUNDS: dict[ComparisonOpcode, str] = {
    ComparisonOpcode.GT: "gt",
    ComparisonOpcode.GTE: "gte",
    ComparisonOpcode.LT: "lt",
    ComparisonOpcode.LTE: "lte",
}

# Members of a ParsedArray that are encoded one clause each.
_ARRAY_CLAUSE_TERMS = (PhraseTerm, PhraseWithWildcardTerm, WildcardTerm, FuzzyTerm)


def term_to_dsl(field: QualifiedField, term: Term, opcode: ComparisonOpcode) -> dict[str, Any]:
    """Encode a single comparison.

    Raises:
        TermMismatchError: If ``term`` is not valid for ``opcode``.
        UnsupportedConstructError: If ``opcode`` or ``term`` has no mapping.
    """
    if opcode in (ComparisonOpcode.CONTAINS, ComparisonOpcode.EQ):
        return eq(field, term)

    if opcode in (ComparisonOpcode.DOES_NOT_CONTAIN, ComparisonOpcode.NE):
        return {"bool": {"must_not": [eq(field, term)]}}

    if opcode is ComparisonOpcode.REGEX:
        return regex(field, term)

    bound = _RANGE_BOUNDS.get(opcode)
    if bound is not None:
        value, boost = range_bound(term, opcode)
        return {"range": {field.field_name: {bound: value, "boost": _boost(boost)}}}

    raise UnsupportedConstructError(f"opcode {opcode.name}")


def eq(field: QualifiedField, term: Term) -> dict[str, Any]:
    """Encode equality of ``field`` against ``term``."""
    name = field.field_name

    if isinstance(term, NullTerm):
        return {"bool": {"must_not": [{"exists": {"field": name}}]}}

    if isinstance(term, MatchAllTerm):
        return {"exists": {"field": name}}

    if isinstance(term, StringTerm):
        return {"term": {name: {"value": term.value, "boost": _boost(term.boost)}}}

    if isinstance(term, PhraseTerm):
        return {"match_phrase": {name: {"query": term.value, "boost": _boost(term.boost)}}}

    if isinstance(term, PhraseWithWildcardTerm):
        if not is_right_truncated(term.value):
            # TODO: expand into a proximity chain once phrases can be analyzed
            #  against the backend's analyzer.
            raise UnsupportedConstructError(
                "PhraseWithWildcardTerm",
                f"phrases with non-right-truncated wildcards are not supported: {term}",
            )
        return {
            "match_phrase_prefix": {
                name: {"query": term.value[:-1], "boost": _boost(term.boost)}
            }
        }

    if isinstance(term, WildcardTerm):
        return {"wildcard": {name: {"value": term.value, "boost": _boost(term.boost)}}}

    if isinstance(term, FuzzyTerm):
        return {
            "fuzzy": {
                name: {
                    "value": term.value,
                    "prefix_length": term.distance,
                    "boost": _boost(term.boost),
                }
            }
        }

    if isinstance(term, RangeTerm):
        return {
            "range": {
                name: {"gte": term.start, "lte": term.end, "boost": _boost(term.boost)}
            }
        }

    if isinstance(term, ParsedArrayTerm):
        return _parsed_array(field, term)

    raise UnsupportedConstructError(type(term).__name__, f"unsupported term: {term}")


def regex(field: QualifiedField, term: Term) -> dict[str, Any]:
    """Encode a regular expression match; only ``RegexTerm`` is accepted."""
    if not isinstance(term, RegexTerm):
        raise TermMismatchError(ComparisonOpcode.REGEX, term)
    return {"regex": {field.field_name: {"value": term.value, "boost": _boost(term.boost)}}}


def range_bound(term: Term, opcode: ComparisonOpcode) -> tuple[str, Optional[float]]:
    """Return the bound value and boost of a range comparison."""
    if not isinstance(term, StringTerm):
        raise TermMismatchError(opcode, term)
    return term.value, term.boost


def is_right_truncated(value: str) -> bool:
    """Return True when the only wildcard in ``value`` is one trailing ``*``."""
    return value.endswith("*") and value.count("*") == 1 and "?" not in value


def _parsed_array(field: QualifiedField, term: ParsedArrayTerm) -> dict[str, Any]:
    strings: list[str] = []
    clauses: list[dict[str, Any]] = []

    for member in term.terms:
        if isinstance(member, StringTerm):
            strings.append(member.value)
        elif isinstance(member, _ARRAY_CLAUSE_TERMS):
            clauses.append(eq(field, member))
        else:
            raise UnsupportedConstructError(
                type(member).__name__, f"unsupported term in an array: {member}"
            )

    if strings:
        clauses.append({"terms": {field.field_name: strings}})

    if len(clauses) == 1:
        return clauses[0]
    return {"bool": {"should": clauses}}


def _boost(boost: Optional[float]) -> float:
    return DEFAULT_BOOST if boost is None else float(boost)
