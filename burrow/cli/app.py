from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from result import Err, Ok, Result

from burrow.config.defaults import default_config
from burrow.config.loader import load_config, sample_config_json
from burrow.engine import Navigator
from burrow.models.errors import FsError, FsErrorCode
from burrow.services.fs import DEFAULT_FS, FileSystem
from burrow.ui.app import BurrowApp

console = Console()

DEBUG_ENV = "BURROW_DEBUG"
DEBUG_LOG_FILE = "burrow-debug.log"


def resolve_start(path: str, fs: FileSystem = DEFAULT_FS) -> Result[str, FsError]:
    """Validate the start directory and return its absolute path."""
    expanded = fs.expanduser(path)
    if not fs.exists(expanded):
        return Err(FsError(code=FsErrorCode.NOT_FOUND, path=expanded, message="Path does not exist"))
    resolved = fs.absolute(expanded)
    try:
        st = fs.stat(resolved)
    except OSError as exc:
        return Err(FsError.from_os_error(exc, resolved))
    if not st.is_dir:
        return Err(FsError(code=FsErrorCode.NOT_DIRECTORY, path=resolved, message="Path is not a directory"))
    return Ok(resolved)


def configure_logging(log_file: str | None) -> None:
    if log_file is None and os.environ.get(DEBUG_ENV):
        log_file = DEBUG_LOG_FILE
    if log_file is None:
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def run(
    path: Annotated[str, typer.Argument(help="Directory to start browsing in.")] = ".",
    sample_config: Annotated[bool, typer.Option("--sample-config", help="Print sample config JSON.")] = False,
    hidden: Annotated[
        bool | None,
        typer.Option("--hidden/--no-hidden", help="Show or hide dotfiles."),
    ] = None,
    dirs_first: Annotated[bool, typer.Option("--dirs-first", help="List directories before files.")] = False,
    log_file: Annotated[str | None, typer.Option("--log-file", help="Write debug logs to this file.")] = None,
) -> None:
    if sample_config:
        console.print(sample_config_json())
        raise typer.Exit(0)

    configure_logging(log_file)

    config_result = load_config()
    if isinstance(config_result, Err):
        console.print(f"[yellow]{escape(config_result.unwrap_err())} Using defaults.[/]")
        config = default_config()
    else:
        config = config_result.unwrap()

    overrides: dict[str, object] = {}
    if hidden is not None:
        overrides["show_hidden"] = hidden
    if dirs_first:
        overrides["directories_first"] = True
    if overrides:
        config = replace(config, **overrides)

    start = resolve_start(path)
    if isinstance(start, Err):
        error = start.unwrap_err()
        console.print(f"[red]Cannot open {escape(error.path)}: {escape(error.message)}[/]")
        raise typer.Exit(1)

    navigator = Navigator.open(start.unwrap(), config=config)
    if isinstance(navigator, Err):
        error = navigator.unwrap_err()
        console.print(f"[red]Cannot open {escape(error.path)}: {escape(error.message)}[/]")
        raise typer.Exit(1)

    BurrowApp(navigator.unwrap()).run()


def cli() -> None:
    typer.run(run)


if __name__ == "__main__":
    cli()
