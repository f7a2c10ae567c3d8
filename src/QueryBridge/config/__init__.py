from __future__ import annotations

"""Public configuration API for QueryBridge."""

from QueryBridge.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    check_cross_domain,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from QueryBridge.config.catalog import CatalogConfig, IndexDefinition
from QueryBridge.config.compiler import CompilerConfig
from QueryBridge.config.output import OutputConfig
from QueryBridge.config.runtime import RuntimeConfig
from QueryBridge.config.visibility import VisibilityConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "RuntimeConfig",
    "CompilerConfig",
    "VisibilityConfig",
    "CatalogConfig",
    "IndexDefinition",
    "OutputConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
    "check_cross_domain",
]
