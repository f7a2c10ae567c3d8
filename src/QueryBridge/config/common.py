from __future__ import annotations

"""Typed accessors shared by the per-domain config loaders.

Every error message carries the full dotted key (``compiler.root``,
``indexes[2].links[0]``) so a bad config file can be fixed without guessing.
Type problems raise ``TypeError``; missing or empty values raise ``ValueError``.
"""

from typing import Any, Mapping


def _wrong_type(config_key: str, expected: str, value: Any) -> TypeError:
    return TypeError(f"{config_key} must be {expected}, got {type(value).__name__}")


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return the mapping under ``key``.

    A missing or null optional section reads as an empty mapping.

    Raises:
        ValueError: If a required section is missing.
        TypeError: If the section is not a mapping.
    """
    section = raw.get(key)
    if section is None and not required:
        return {}
    if section is None:
        raise ValueError(f"Missing required config section: {key}")
    if isinstance(section, Mapping):
        return section
    raise _wrong_type(key, "an object", section)


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    try:
        return section[field]
    except KeyError:
        raise ValueError(f"Missing required config: {config_key}") from None


def get_optional_value(section: Mapping[str, Any], field: str, default: Any) -> Any:
    """Return ``section[field]``; absent and null both read as ``default``."""
    value = section.get(field)
    return default if value is None else value


def expect_str(value: Any, config_key: str) -> str:
    if isinstance(value, str):
        return value
    raise _wrong_type(config_key, "a string", value)


def expect_non_empty_str(value: Any, config_key: str) -> str:
    """Return ``value`` stripped; blank strings are rejected."""
    stripped = expect_str(value, config_key).strip()
    if stripped:
        return stripped
    raise ValueError(f"{config_key} must not be empty")


def expect_bool(value: Any, config_key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise _wrong_type(config_key, "a boolean", value)


def expect_int(value: Any, config_key: str) -> int:
    # bool is an int subclass; YAML true/false must not pass as 1/0.
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise _wrong_type(config_key, "an integer", value)


def expect_list(value: Any, config_key: str) -> list[Any]:
    if isinstance(value, list):
        return value
    raise _wrong_type(config_key, "a list", value)


def expect_str_list(value: Any, config_key: str) -> list[str]:
    items = expect_list(value, config_key)
    return [expect_str(item, f"{config_key}[{idx}]") for idx, item in enumerate(items)]


def expect_int_list(value: Any, config_key: str) -> list[int]:
    items = expect_list(value, config_key)
    return [expect_int(item, f"{config_key}[{idx}]") for idx, item in enumerate(items)]
