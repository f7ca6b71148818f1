"""
Root Typer application for docrun.

Every documentation operation is a sub-command taking raw literal tokens::

    docrun application myapp '"."' '[{def,{vsn,"1.0"}}]'
    docrun file '"src/a.py"' '[{dir,"doc"}]'
    docrun toc '"doc"' '["a","b"]'

The process exit status is 0 on success and 1 on any failure.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from typer import Typer

from docrun import entrypoints
from docrun.dispatch import ENTRY_POINTS
from docrun.logging import configure_logging
from docrun.settings import DocrunSettings, get_settings

console = Console()
err_console = Console(stderr=True)

app = Typer(
    name="docrun",
    help="docrun — run documentation engine operations from the command line.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Literal tokens such as -1 or '-x' must reach the decoder, not the option parser.
_TOKEN_CONTEXT = {"ignore_unknown_options": True}


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("docrun")
        except PackageNotFoundError:
            v = "0.1.0"
        console.print(f"docrun {v}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    engine: str | None = typer.Option(
        None,
        "--engine",
        "-e",
        help="Engine import path, MODULE[:ATTR]. Overrides DOCRUN_ENGINE.",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Diagnostic log level."),
    json_logs: bool | None = typer.Option(
        None, "--json-logs/--console-logs", help="Emit diagnostics as JSON lines."
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """docrun CLI — decode literal arguments and hand them to a documentation engine."""
    overrides: dict[str, Any] = {}
    if engine is not None:
        overrides["engine"] = engine
    if log_level is not None:
        overrides["log_level"] = log_level
    if json_logs is not None:
        overrides["json_logs"] = json_logs
    try:
        ctx.obj = DocrunSettings(**{**get_settings().model_dump(), **overrides})
    except ValidationError as e:
        err_console.print(f"[bold red]Configuration Error:[/bold red] {_summarise(e)}")
        raise typer.Exit(code=1) from e


def _summarise(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


def _run(ctx: typer.Context, name: str, tokens: list[str] | None) -> None:
    settings: DocrunSettings = ctx.obj or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    entrypoints.main(name, tokens or [], settings=settings)


# ── Entry-point commands ─────────────────────────────────────────────────


@app.command("file", context_settings=_TOKEN_CONTEXT)
def file_cmd(
    ctx: typer.Context,
    tokens: list[str] | None = typer.Argument(None, metavar="FILE [OPTIONS]"),
) -> None:
    """Document a single source file."""
    _run(ctx, "file", tokens)


@app.command("files", context_settings=_TOKEN_CONTEXT)
def files_cmd(
    ctx: typer.Context,
    tokens: list[str] | None = typer.Argument(None, metavar="FILES [OPTIONS]"),
) -> None:
    """Document a list of source files."""
    _run(ctx, "files", tokens)


@app.command("packages", context_settings=_TOKEN_CONTEXT)
def packages_cmd(
    ctx: typer.Context,
    tokens: list[str] | None = typer.Argument(None, metavar="PACKAGES [OPTIONS]"),
) -> None:
    """Document a list of packages."""
    _run(ctx, "packages", tokens)


@app.command("application", context_settings=_TOKEN_CONTEXT)
def application_cmd(
    ctx: typer.Context,
    tokens: list[str] | None = typer.Argument(None, metavar="APP [[DIR] OPTIONS]"),
) -> None:
    """Document a whole application."""
    _run(ctx, "application", tokens)


@app.command("toc", context_settings=_TOKEN_CONTEXT)
def toc_cmd(
    ctx: typer.Context,
    tokens: list[str] | None = typer.Argument(None, metavar="DIR PATHS [OPTIONS]"),
) -> None:
    """Build a table of contents over generated documentation."""
    _run(ctx, "toc", tokens)


@app.command("entrypoints")
def list_entry_points() -> None:
    """List the entry points and the argument counts each accepts."""
    table = Table(title="Entry points", show_lines=False, pad_edge=False)
    table.add_column("Command", style="cyan")
    table.add_column("Arguments")
    table.add_column("Accepts", justify="center")
    table.add_column("Description", overflow="fold")
    for entry in ENTRY_POINTS.values():
        accepts = ", ".join(str(n) for n in entry.arities)
        table.add_row(entry.name, entry.usage, accepts, entry.summary)
    console.print(table)
