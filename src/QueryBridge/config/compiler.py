"""Compiler domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from QueryBridge.config.common import (
    expect_bool,
    expect_non_empty_str,
    get_optional_value,
    get_required_value,
    get_section,
)
from QueryBridge.core.ast import QualifiedIndex


@dataclass(frozen=True, slots=True)
class CompilerConfig:
    """Settings passed explicitly to the DSL compiler.

    Attributes:
        root: Entity queries are evaluated against unless overridden.
        ignore_visibility: Skip visibility filters at join boundaries.
        doc_type: Document type marker written into join clauses.
    """

    root: QualifiedIndex
    ignore_visibility: bool = False
    doc_type: str = "_doc"


def load_compiler(raw: Mapping[str, Any]) -> CompilerConfig:
    """Load the ``compiler`` section.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If ``compiler.root`` is missing or malformed.
    """
    section = get_section(raw, "compiler", required=True)
    root_text = expect_non_empty_str(get_required_value(section, "root", "compiler.root"), "compiler.root")
    try:
        root = QualifiedIndex.parse(root_text)
    except ValueError as error:
        raise ValueError(f"compiler.root: {error}") from error
    return CompilerConfig(
        root=root,
        ignore_visibility=expect_bool(
            get_optional_value(section, "ignore_visibility", False), "compiler.ignore_visibility"
        ),
        doc_type=expect_non_empty_str(get_optional_value(section, "doc_type", "_doc"), "compiler.doc_type"),
    )


def check_compiler(config: CompilerConfig) -> None:
    """Validate compiler constraints."""
    if any(ch.isspace() for ch in config.doc_type):
        raise ValueError("compiler.doc_type must not contain whitespace")
