from __future__ import annotations

"""Application config: domain assembly, layering and YAML file loading.

A config file is merged over ``config/default.yml`` before any domain sees it,
so every loader works on one complete mapping.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from QueryBridge.config.catalog import CatalogConfig, check_catalog, load_catalog
from QueryBridge.config.compiler import CompilerConfig, check_compiler, load_compiler
from QueryBridge.config.output import OutputConfig, check_output, load_output
from QueryBridge.config.runtime import RuntimeConfig, check_runtime, load_runtime
from QueryBridge.config.visibility import VisibilityConfig, check_visibility, load_visibility

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Validated configuration of every domain."""

    runtime: RuntimeConfig
    compiler: CompilerConfig
    visibility: VisibilityConfig
    catalog: CatalogConfig
    output: OutputConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Build an ``AppConfig`` from a merged mapping.

    All domains are loaded (type errors) before any is checked (value errors);
    cross-domain rules run last.

    Raises:
        TypeError: If a value has the wrong type.
        ValueError: If a value is missing or out of range.
    """
    config = AppConfig(
        runtime=load_runtime(raw),
        compiler=load_compiler(raw),
        visibility=load_visibility(raw),
        catalog=load_catalog(raw),
        output=load_output(raw),
    )
    check_runtime(config.runtime)
    check_compiler(config.compiler)
    check_visibility(config.visibility)
    check_catalog(config.catalog)
    check_output(config.output)
    check_cross_domain(config)
    return config


def load_config(path: Path) -> AppConfig:
    """Load a single, self-contained config file."""
    return parse_config_dict(read_config_file(path))


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load ``default_path`` and overlay ``config_path`` when it is another file."""
    raw = read_config_file(default_path)
    if config_path.resolve() != default_path.resolve():
        raw = merge_config_dicts(raw, read_config_file(config_path))
    return parse_config_dict(raw)


def check_cross_domain(config: AppConfig) -> None:
    """The root entity must be one of the declared indexes."""
    if config.compiler.root not in config.catalog.names():
        raise ValueError(f"compiler.root is not declared under indexes: {config.compiler.root}")


def read_config_file(path: Path) -> dict[str, Any]:
    """Read ``path`` as a YAML mapping; an empty file is an empty mapping."""
    try:
        return parse_yaml(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as error:
        raise ValueError(f"{path}: invalid YAML: {error}") from error


def parse_yaml(text: str) -> dict[str, Any]:
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay ``override`` on ``base``.

    Mappings merge key by key. Any other value, lists included, replaces the
    base value outright.
    """
    merged = {**base}
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(current, value)
        else:
            merged[key] = value
    return merged
