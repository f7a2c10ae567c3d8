"""Query AST model.

The parser that produces these trees lives outside this package. The compiler
only reads them, so every node is a frozen dataclass and child collections are
tuples.

Terms and expressions are closed sets: code that dispatches over them must end
with an explicit failure branch for unknown node types.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, Optional


class ComparisonOpcode(Enum):
    """Comparison operators carried by comparison nodes."""

    CONTAINS = ":"
    EQ = "="
    DOES_NOT_CONTAIN = "<>"
    NE = "!="
    REGEX = ":~"
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    MORE_LIKE_THIS = ":@"
    FUZZY_LIKE_THIS = ":@~"


# ---------------------------------------------------------------------------
# Entities and links
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QualifiedIndex:
    """Identity of an indexed entity.

    Attributes:
        schema: Optional schema (namespace) name.
        table: Table name; always present.
        index: Optional index name.
    """

    schema: Optional[str]
    table: str
    index: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> QualifiedIndex:
        """Parse ``table``, ``schema.table`` or ``schema.table.index``.

        Raises:
            ValueError: If the text is empty or has more than three parts.
        """
        parts = [p.strip() for p in text.strip().split(".")]
        if not text.strip() or any(not p for p in parts):
            raise ValueError(f"Invalid qualified index: {text!r}")
        if len(parts) == 1:
            return cls(schema=None, table=parts[0])
        if len(parts) == 2:
            return cls(schema=parts[0], table=parts[1])
        if len(parts) == 3:
            return cls(schema=parts[0], table=parts[1], index=parts[2])
        raise ValueError(f"Invalid qualified index: {text!r}")

    def __str__(self) -> str:
        return ".".join(p for p in (self.schema, self.table, self.index) if p)


_RE_LINK = re.compile(
    r"""^\s*
    (?:(?P<name>[\w$]+)\s*:\s*)?
    \(?\s*
    (?P<left>[\w.$]+)\s*=\s*
    <\s*(?P<index>[\w.$]+)\s*>\s*
    (?P<right>[\w.$]+)
    \s*\)?\s*$""",
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class IndexLink:
    """A join from a source entity to ``qualified_index``.

    ``left_field`` lives on the source side and ``right_field`` on the target
    side. The self link of an entity has neither.
    """

    name: Optional[str]
    left_field: Optional[str]
    qualified_index: QualifiedIndex
    right_field: Optional[str]

    @classmethod
    def from_relation(cls, index: QualifiedIndex) -> IndexLink:
        """Return the link that represents ``index`` itself (no join)."""
        return cls(name=None, left_field=None, qualified_index=index, right_field=None)

    @classmethod
    def parse(cls, text: str) -> IndexLink:
        """Parse a link declaration like ``name:(user_id=<public.users.idx>id)``.

        Raises:
            ValueError: If the declaration is malformed.
        """
        match = _RE_LINK.match(text)
        if match is None:
            raise ValueError(f"Invalid index link declaration: {text!r}")
        return cls(
            name=match.group("name"),
            left_field=match.group("left"),
            qualified_index=QualifiedIndex.parse(match.group("index")),
            right_field=match.group("right"),
        )

    @property
    def is_self(self) -> bool:
        return self.left_field is None and self.right_field is None

    def __str__(self) -> str:
        if self.is_self:
            return f"<{self.qualified_index}>"
        body = f"{self.left_field}=<{self.qualified_index}>{self.right_field}"
        if self.name:
            return f"{self.name}:({body})"
        return body


@dataclass(frozen=True, slots=True)
class QualifiedField:
    """A field name plus the entity it is qualified against."""

    field: str
    index: Optional[IndexLink] = None

    @property
    def field_name(self) -> str:
        """Canonical backend field name."""
        return self.field

    @property
    def nested_path(self) -> Optional[str]:
        """Dotted prefix before the last segment, or None for top-level fields."""
        if "." not in self.field:
            return None
        return self.field.rsplit(".", 1)[0]

    def __str__(self) -> str:
        return self.field


# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------


def _check_boost(boost: Optional[float]) -> None:
    if boost is None:
        return
    if isinstance(boost, bool) or not isinstance(boost, (int, float)):
        raise ValueError(f"boost must be a number, got {boost!r}")
    if not math.isfinite(boost) or boost < 0:
        raise ValueError(f"boost must be finite and non-negative, got {boost!r}")


def _boost_suffix(boost: Optional[float]) -> str:
    return "" if boost is None else f"^{boost:g}"


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class Term:
    """Base class of leaf values."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class NullTerm(Term):
    def __str__(self) -> str:
        return "NULL"


@dataclass(frozen=True, slots=True)
class MatchAllTerm(Term):
    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True, slots=True)
class StringTerm(Term):
    value: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return _quote(self.value) + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class PhraseTerm(Term):
    value: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return _quote(self.value) + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class PhraseWithWildcardTerm(Term):
    value: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return _quote(self.value) + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class WildcardTerm(Term):
    value: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return _quote(self.value) + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class FuzzyTerm(Term):
    """Fuzzy value; ``distance`` is emitted as the backend's prefix length."""

    value: str
    distance: int
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)
        if self.distance < 0:
            raise ValueError(f"fuzzy distance must be non-negative, got {self.distance}")

    def __str__(self) -> str:
        return f"{_quote(self.value)}~{self.distance}{_boost_suffix(self.boost)}"


@dataclass(frozen=True, slots=True)
class RangeTerm(Term):
    start: str
    end: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return f"{_quote(self.start)} /to/ {_quote(self.end)}{_boost_suffix(self.boost)}"


@dataclass(frozen=True, slots=True)
class RegexTerm(Term):
    value: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return _quote(self.value) + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class ParsedArrayTerm(Term):
    terms: tuple[Term, ...]
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return "[" + ",".join(str(t) for t in self.terms) + "]" + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class UnparsedArrayTerm(Term):
    value: str
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return f"[[{self.value}]]" + _boost_suffix(self.boost)


@dataclass(frozen=True, slots=True)
class ProximityChainTerm(Term):
    parts: tuple[str, ...]
    boost: Optional[float] = None

    def __post_init__(self) -> None:
        _check_boost(self.boost)

    def __str__(self) -> str:
        return "(" + " W/ ".join(_quote(p) for p in self.parts) + ")" + _boost_suffix(self.boost)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class Expr:
    """Base class of AST nodes."""

    __slots__ = ()

    def walk(self) -> Iterator[Expr]:
        """Yield this node and every descendant, depth-first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def children(self) -> tuple[Expr, ...]:
        return ()

    def used_fields(self) -> set[str]:
        """Return the names of all fields referenced in this tree."""
        return {node.field.field_name for node in self.walk() if isinstance(node, Comparison)}

    @staticmethod
    def nested_path(exprs: tuple[Expr, ...]) -> Optional[str]:
        """Return the single nested path shared by ``exprs``.

        Every comparison leaf counts, top-level fields included, and ``Linked``
        subtrees are not searched. Returns None unless all leaves agree on one
        nested path.
        """
        paths: list[Optional[str]] = []
        pending = list(exprs)
        while pending:
            node = pending.pop(0)
            if isinstance(node, Linked):
                continue
            if isinstance(node, Comparison):
                path = node.field.nested_path
                if path not in paths:
                    paths.append(path)
                continue
            pending.extend(node.children())
        if len(paths) != 1:
            return None
        return paths[0]


def _join(children: tuple[Expr, ...], op: str) -> str:
    return "(" + f" {op} ".join(str(c) for c in children) + ")"


@dataclass(frozen=True, slots=True)
class WithList(Expr):
    items: tuple[Expr, ...]

    def children(self) -> tuple[Expr, ...]:
        return self.items

    def __str__(self) -> str:
        return _join(self.items, "WITH")


@dataclass(frozen=True, slots=True)
class AndList(Expr):
    items: tuple[Expr, ...]

    def children(self) -> tuple[Expr, ...]:
        return self.items

    def __str__(self) -> str:
        return _join(self.items, "AND")


@dataclass(frozen=True, slots=True)
class OrList(Expr):
    items: tuple[Expr, ...]

    def children(self) -> tuple[Expr, ...]:
        return self.items

    def __str__(self) -> str:
        return _join(self.items, "OR")


@dataclass(frozen=True, slots=True)
class Not(Expr):
    child: Expr

    def children(self) -> tuple[Expr, ...]:
        return (self.child,)

    def __str__(self) -> str:
        return f"NOT ({self.child})"


@dataclass(frozen=True, slots=True)
class Linked(Expr):
    """``child`` is evaluated against the entity reachable through ``link``."""

    link: IndexLink
    child: Expr

    def children(self) -> tuple[Expr, ...]:
        return (self.child,)

    def __str__(self) -> str:
        return f"#link<{self.link}>({self.child})"


@dataclass(frozen=True, slots=True)
class Comparison(Expr):
    """A field compared against a term. Subclasses fix the opcode."""

    opcode: ClassVar[ComparisonOpcode]

    field: QualifiedField
    term: Term

    def __str__(self) -> str:
        return f"{self.field}{self.opcode.value}{self.term}"


@dataclass(frozen=True, slots=True)
class Contains(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.CONTAINS


@dataclass(frozen=True, slots=True)
class Eq(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.EQ


@dataclass(frozen=True, slots=True)
class DoesNotContain(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.DOES_NOT_CONTAIN


@dataclass(frozen=True, slots=True)
class Ne(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.NE


@dataclass(frozen=True, slots=True)
class Regex(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.REGEX


@dataclass(frozen=True, slots=True)
class Gt(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.GT


@dataclass(frozen=True, slots=True)
class Gte(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.GTE


@dataclass(frozen=True, slots=True)
class Lt(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.LT


@dataclass(frozen=True, slots=True)
class Lte(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.LTE


@dataclass(frozen=True, slots=True)
class MoreLikeThis(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.MORE_LIKE_THIS


@dataclass(frozen=True, slots=True)
class FuzzyLikeThis(Comparison):
    opcode: ClassVar[ComparisonOpcode] = ComparisonOpcode.FUZZY_LIKE_THIS
