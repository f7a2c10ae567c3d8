"""CLI package for QueryBridge debug entry points."""

from __future__ import annotations

__all__ = ["CommandRunner", "cli", "main"]

from QueryBridge.cli.runner import CommandRunner
from QueryBridge.cli.ui import cli


def main() -> None:
    """Run QueryBridge CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
