from __future__ import annotations

import runpy
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from . import __version__, api
from .config import ConfigError, load_settings
from .logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_CONFIG_ERROR = 2
MAX_EXIT_CODE = 254


def _print_version_and_exit() -> None:
    typer.echo(__version__)
    raise typer.Exit()


def _version_callback(value: bool) -> None:
    if value:
        _print_version_and_exit()


def _exit_config_error(error: ConfigError) -> None:
    typer.echo(f"error: {error}", err=True)
    raise typer.Exit(code=EXIT_CONFIG_ERROR)


def run(
    script: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Test script to execute."
    ),
    args: list[str] | None = typer.Argument(None, help="Arguments for the script."),
    color: bool | None = typer.Option(
        None,
        "--color/--no-color",
        help="Highlight where captured output diverges from the expectation.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Log episode start and finish to stderr.",
    ),
) -> None:
    """Run a test script and exit with its failure count."""
    setup_logging(debug=debug, cache_logger_on_first_use=False)
    try:
        controller = api.get_controller()
    except ConfigError as e:
        _exit_config_error(e)
        return
    if color is not None:
        api.color(color)

    builder = api.get_builder()
    logger.info("script.start", script=str(script), color=controller.color)
    saved_argv = sys.argv
    sys.argv = [str(script), *(args or [])]
    try:
        runpy.run_path(str(script), run_name="__main__")
    finally:
        sys.argv = saved_argv
        controller.abort()

    failed = builder.finish()
    logger.info("script.finish", script=str(script), failed=failed)
    raise typer.Exit(code=min(failed, MAX_EXIT_CODE))


def show_config(
    path: Path | None = typer.Option(
        None, "--path", help="Read settings from this TOML file."
    ),
) -> None:
    """Print the resolved taptester settings."""
    try:
        settings = load_settings(path)
    except ConfigError as e:
        _exit_config_error(e)
        return

    table = Table(title="taptester settings")
    table.add_column("key")
    table.add_column("value")
    for field in settings.__struct_fields__:
        table.add_row(field, str(getattr(settings, field)))
    Console().print(table)


def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Test the output of TAP producing tests."""


def create_app() -> typer.Typer:
    app = typer.Typer(
        add_completion=False,
        no_args_is_help=True,
        help="Test the output of TAP producing tests.",
    )
    app.command(name="run")(run)
    app.command(name="config")(show_config)
    app.callback()(app_main)
    return app


def main() -> None:
    app = create_app()
    app()


if __name__ == "__main__":
    main()
