# === NAVMAP v1 ===
# {
#   "module": "Rulebook.cli",
#   "purpose": "Typer CLI for building, exporting, and rendering rulebooks",
#   "sections": [
#     {"id": "clicontext", "name": "CliContext", "anchor": "class-clicontext", "kind": "class"},
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "make", "name": "make", "anchor": "function-make", "kind": "function"},
#     {"id": "export", "name": "export", "anchor": "function-export", "kind": "function"},
#     {"id": "render", "name": "render", "anchor": "function-render", "kind": "function"},
#     {"id": "schema", "name": "schema", "anchor": "function-schema", "kind": "function"},
#     {"id": "version-cmd", "name": "version_cmd", "anchor": "function-version-cmd", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Typer CLI for building, exporting, and rendering rulebooks.

Example:
    $ rulebook -v make rules/ -o rulebook.html -f prose
    $ rulebook export rules/ -o rulebook.json
    $ rulebook render rulebook.json -o rulebook.html
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console

from . import __version__
from .errors import ConfigError, RulebookError, RulebookParseError
from .loader import load_rulebook
from .logging_config import setup_logging
from .rulebook import Rulebook
from .schema import DocumentKind, document_json_schema
from .settings import LogFormat, LogLevel, OutputFormat, RulebookSettings, get_settings

__all__ = ["app", "CliContext", "main"]

_VERBOSITY_LEVELS = {1: LogLevel.INFO, 2: LogLevel.DEBUG}


class CliContext:
    """Shared state of one CLI invocation: settings, logger, and consoles."""

    def __init__(
        self,
        settings: RulebookSettings,
        verbosity: int = 0,
    ) -> None:
        self.settings = settings
        self.verbosity = verbosity
        self.console = Console()
        self.err_console = Console(stderr=True)
        level = _VERBOSITY_LEVELS.get(min(verbosity, 2), settings.log_level)
        self.logger = setup_logging(level, settings.log_format)

    @property
    def colors(self) -> bool:
        return self.settings.color and self.err_console.is_terminal

    def report(self, exc: RulebookError) -> None:
        """Print a diagnostic for ``exc`` to stderr."""

        if isinstance(exc, RulebookParseError):
            typer.echo(exc.render(colors=self.colors), err=True)
        else:
            typer.echo(f"ERROR: {exc}", err=True)


app = typer.Typer(
    name="rulebook",
    help="Rulebook CLI - Render policy rulebooks from YAML sources",
    no_args_is_help=True,
)


def _cli_context(typer_ctx: typer.Context) -> CliContext:
    """Return the invocation state stored on the click context by :func:`main`."""
    ctx = typer_ctx.find_object(CliContext)
    if ctx is None:
        raise RuntimeError("CLI context not initialized")
    return ctx


@contextmanager
def _failures(ctx: CliContext) -> Iterator[None]:
    try:
        yield
    except RulebookError as exc:
        ctx.report(exc)
        raise typer.Exit(1) from exc


def _write(ctx: CliContext, output: Path, text: str, what: str) -> None:
    ctx.logger.info('saving rulebook %s "%s"', what, output)
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f'failed to write rulebook {what} "{output}": {exc}') from exc


@app.callback(invoke_without_command=True)
def main(
    typer_ctx: typer.Context,
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
    log_format: Optional[LogFormat] = typer.Option(
        None,
        "--log-format",
        help="Log output format: console or json",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colourised diagnostics",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Rulebook CLI - render policy rulebooks from YAML sources."""

    if version:
        typer.echo(f"rulebook {__version__}")
        raise typer.Exit(0)

    if typer_ctx.invoked_subcommand is None:
        typer.echo(typer_ctx.get_help())
        raise typer.Exit(0)

    try:
        settings = get_settings(log_format=log_format, color=False if no_color else None)
    except RulebookError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer_ctx.obj = CliContext(settings=settings, verbosity=verbosity)


@app.command()
def make(
    typer_ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Rulebook source directory"),
    output: Path = typer.Option(..., "--output", "-o", help="Output HTML file"),
    format: Optional[OutputFormat] = typer.Option(
        None, "--format", "-f", help="Output format (card, prose, app)"
    ),
) -> None:
    """Make the rulebook rendering from a source directory."""
    ctx = _cli_context(typer_ctx)
    selected = (format or ctx.settings.format).value
    with _failures(ctx):
        rulebook = load_rulebook(directory, settings=ctx.settings, logger=ctx.logger)
        ctx.logger.info('formatting rulebook into format "%s"', selected)
        html = rulebook.render(selected, indent=ctx.settings.indent, level=ctx.settings.base_level)
        _write(ctx, output, html, "output")


@app.command()
def export(
    typer_ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Rulebook source directory"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file (default: stdout)"),
) -> None:
    """Export the validated rulebook as JSON."""
    ctx = _cli_context(typer_ctx)
    with _failures(ctx):
        rulebook = load_rulebook(directory, settings=ctx.settings, logger=ctx.logger)
        payload = rulebook.export_json()
        if output is None:
            sys.stdout.write(payload + "\n")
        else:
            _write(ctx, output, payload, "export")


@app.command()
def render(
    typer_ctx: typer.Context,
    source: Path = typer.Argument(..., help="JSON export produced by 'rulebook export'"),
    output: Path = typer.Option(..., "--output", "-o", help="Output HTML file"),
    format: Optional[OutputFormat] = typer.Option(
        None, "--format", "-f", help="Output format (card, prose, app)"
    ),
) -> None:
    """Render a previously exported rulebook."""
    ctx = _cli_context(typer_ctx)
    selected = (format or ctx.settings.format).value
    with _failures(ctx):
        rulebook = Rulebook(logger=ctx.logger)
        ctx.logger.info('importing rulebook "%s"', source)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f'failed to read rulebook export "{source}": {exc}') from exc
        rulebook.import_json(text)
        rulebook.validate_cross_refs()
        html = rulebook.render(selected, indent=ctx.settings.indent, level=ctx.settings.base_level)
        _write(ctx, output, html, "output")


@app.command()
def schema(
    kind: DocumentKind = typer.Argument(DocumentKind.ASPECT, help="Document kind: index or aspect"),
) -> None:
    """Print the JSON Schema of a rulebook document kind."""
    typer.echo(json.dumps(document_json_schema(kind), indent=2))


@app.command("version")
def version_cmd(typer_ctx: typer.Context) -> None:
    """Show version information."""
    ctx = _cli_context(typer_ctx)
    ctx.console.print(f"[bold]rulebook[/bold] version {__version__}")


def run() -> None:
    """Console script entry point."""
    logging.captureWarnings(True)
    app()
