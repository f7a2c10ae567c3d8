"""Index catalog configuration: entities, backend names and links."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from QueryBridge.catalog.base import IndexOptions
from QueryBridge.config.common import (
    expect_list,
    expect_non_empty_str,
    expect_str_list,
    get_optional_value,
    get_required_value,
)
from QueryBridge.core.ast import IndexLink, QualifiedIndex


@dataclass(frozen=True, slots=True)
class IndexDefinition:
    """One declared entity."""

    name: QualifiedIndex
    options: IndexOptions


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    """All declared entities, in declaration order."""

    indexes: tuple[IndexDefinition, ...]

    def names(self) -> tuple[QualifiedIndex, ...]:
        return tuple(definition.name for definition in self.indexes)


def load_catalog(raw: Mapping[str, Any]) -> CatalogConfig:
    """Load the ``indexes`` list.

    Each entry looks like::

        - name: public.products.idxproducts
          backend_name: db.public.products.idxproducts
          links:
            - "id=<public.orders.idxorders>product_id"

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing or a link is malformed.
    """
    entries = expect_list(get_required_value(raw, "indexes", "indexes"), "indexes")
    return CatalogConfig(
        indexes=tuple(_parse_index(entry, f"indexes[{idx}]") for idx, entry in enumerate(entries))
    )


def check_catalog(config: CatalogConfig) -> None:
    """Validate catalog constraints.

    Raises:
        ValueError: If the catalog is empty, names repeat or a link targets an
            undeclared index.
    """
    if not config.indexes:
        raise ValueError("indexes must declare at least one index")

    seen_names: set[QualifiedIndex] = set()
    seen_backend: set[str] = set()
    for idx, definition in enumerate(config.indexes):
        if definition.name in seen_names:
            raise ValueError(f"indexes[{idx}].name is declared twice: {definition.name}")
        seen_names.add(definition.name)
        backend_name = definition.options.backend_name
        if backend_name in seen_backend:
            raise ValueError(f"indexes[{idx}].backend_name is declared twice: {backend_name}")
        seen_backend.add(backend_name)

    for idx, definition in enumerate(config.indexes):
        for jdx, link in enumerate(definition.options.links):
            if link.qualified_index not in seen_names:
                raise ValueError(
                    f"indexes[{idx}].links[{jdx}] targets an undeclared index: {link.qualified_index}"
                )


def _parse_index(value: Any, config_key: str) -> IndexDefinition:
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")

    name_text = expect_non_empty_str(get_required_value(value, "name", f"{config_key}.name"), f"{config_key}.name")
    try:
        name = QualifiedIndex.parse(name_text)
    except ValueError as error:
        raise ValueError(f"{config_key}.name: {error}") from error

    type_name = get_optional_value(value, "type_name", None)
    options = IndexOptions(
        backend_name=expect_non_empty_str(
            get_required_value(value, "backend_name", f"{config_key}.backend_name"),
            f"{config_key}.backend_name",
        ),
        type_name=expect_non_empty_str(type_name, f"{config_key}.type_name") if type_name is not None else None,
        links=_parse_links(get_optional_value(value, "links", []), f"{config_key}.links"),
    )
    return IndexDefinition(name=name, options=options)


def _parse_links(value: Any, config_key: str) -> tuple[IndexLink, ...]:
    links: list[IndexLink] = []
    for idx, text in enumerate(expect_str_list(value, config_key)):
        try:
            links.append(IndexLink.parse(text))
        except ValueError as error:
            raise ValueError(f"{config_key}[{idx}]: {error}") from error
    return tuple(links)
