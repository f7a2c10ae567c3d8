"""Click entry points: the ``query-bridge`` group with ``dump`` and ``debug``.

Commands only parse arguments; ``CommandRunner`` does the work.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from QueryBridge.cli.runner import CommandRunner
from QueryBridge.config import DEFAULT_CONFIG_PATH, load_config_with_defaults

_QUERY_FILES = click.argument(
    "query_files",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
)


@click.group(help="QueryBridge: compile query ASTs into search backend QueryDSL.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    envvar="QUERYBRIDGE_CONFIG",
    help="Path to YAML config file, merged over config/default.yml when present.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """Load ``.env``, then the layered config, into the click context.

    When config/default.yml is absent the given file must be complete.
    """
    load_dotenv()

    default_path = DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else config_path
    ctx.obj = load_config_with_defaults(config_path, default_path=default_path)


@cli.command("dump")
@_QUERY_FILES
@click.option("--root", default=None, help="Qualified index to compile against (overrides compiler.root).")
@click.pass_context
def dump_cmd(ctx: click.Context, query_files: tuple[Path, ...], root: str | None) -> None:
    """Compile query documents and print pretty QueryDSL JSON."""
    runner = CommandRunner(ctx.obj)
    runner.run_dump(action=ctx.command.name, query_files=query_files, root=root)


@cli.command("debug")
@_QUERY_FILES
@click.pass_context
def debug_cmd(ctx: click.Context, query_files: tuple[Path, ...]) -> None:
    """Print normalized query, used fields and syntax tree."""
    runner = CommandRunner(ctx.obj)
    runner.run_debug(action=ctx.command.name, query_files=query_files)
