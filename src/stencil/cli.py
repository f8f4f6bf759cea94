"""Stencil CLI Entry Point

Usage:
    stencil render page.html                  # render with empty data
    stencil render page.html -d data.yaml     # data from a YAML/JSON file
    stencil render page.html -s name=Ann      # inline values
    stencil render page.html -o out.html      # write to file
    stencil compile page.html --debug         # show the generated Python
    stencil check page.html --json            # compile only, report errors
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax

from stencil._version import __version__
from stencil.config import EngineConfig, find_config_file, load_config
from stencil.diagnostics import SyntaxDiagnostic, encode
from stencil.engine import Engine
from stencil.errors import StencilError

console = Console()
err_console = Console(stderr=True)

typer_app = typer.Typer(no_args_is_help=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the stencil CLI.

    Log levels:
    - Normal: only warnings and template reports
    - Verbose (-v): INFO
    - Debug (STENCIL_DEBUG=1): DEBUG, with source paths
    """
    if os.environ.get("STENCIL_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=bool(os.environ.get("STENCIL_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("stencil")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def fail(message: str) -> typer.Exit:
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    return typer.Exit(code=1)


def build_engine(
    template_path: Path, config_path: Optional[Path], debug: bool = False
) -> Engine:
    """Engine for one template file; its directory serves includes."""
    config_path = config_path or find_config_file(template_path.parent.resolve())
    config = load_config(config_path) if config_path else EngineConfig()
    if debug:
        config = config.with_options(debug=True)

    engine = Engine(config)
    engine.loader.add_path(template_path.parent)
    return engine


def load_data(data_file: Optional[Path], assignments: List[str]) -> dict[str, Any]:
    """Merge a YAML/JSON data file with ``key=value`` assignments."""
    data: dict[str, Any] = {}
    if data_file is not None:
        loaded = yaml.safe_load(data_file.read_text(encoding="utf-8")) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{data_file} must contain a mapping")
        data.update(loaded)

    for item in assignments:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {item!r}")
        data[key] = yaml.safe_load(raw) if raw else ""

    return data


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"stencil {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Compile and render <% logic %> templates."""


@typer_app.command("render")
def render_command(
    template_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    data_file: Optional[Path] = typer.Option(
        None, "-d", "--data", exists=True, help="YAML or JSON data file."
    ),
    assignments: Optional[List[str]] = typer.Option(
        None, "-s", "--set", help="Data value as key=value (repeatable)."
    ),
    debug: bool = typer.Option(False, "--debug", help="Compile in debug mode."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write output to file instead of stdout."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to stencil.yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging."),
) -> None:
    """Render a template file with data."""
    setup_logging(verbose)

    try:
        engine = build_engine(template_path, config_path, debug)
        data = load_data(data_file, assignments or [])
    except (StencilError, ValueError, yaml.YAMLError) as exc:
        raise fail(str(exc))

    source = template_path.read_text(encoding="utf-8")
    tpl = engine.define(template_path.stem, source)
    if isinstance(tpl, str):
        raise typer.Exit(code=1)

    result = tpl(data)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result, encoding="utf-8")
        typer.echo(f"Wrote {output}", err=True)
    else:
        typer.echo(result, nl=False)

    if engine.reporter.history:
        raise typer.Exit(code=1)


@typer_app.command("compile")
def compile_command(
    template_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    debug: bool = typer.Option(False, "--debug", help="Compile in debug mode."),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to stencil.yaml."
    ),
) -> None:
    """Print the Python code generated for a template."""
    setup_logging()

    try:
        engine = build_engine(template_path, config_path, debug)
        unit = engine.compile(template_path.read_text(encoding="utf-8"))
    except StencilError as exc:
        raise fail(exc.message)

    if console.is_terminal:
        console.print(Syntax(unit.code, "python", line_numbers=True))
    else:
        typer.echo(unit.code, nl=False)


@typer_app.command("check")
def check_command(
    template_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    as_json: bool = typer.Option(False, "--json", help="Print diagnostic as JSON."),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to stencil.yaml."
    ),
) -> None:
    """Compile a template and report problems without rendering."""
    setup_logging()

    try:
        engine = build_engine(template_path, config_path)
    except StencilError as exc:
        raise fail(exc.message)

    try:
        unit = engine.compile(template_path.read_text(encoding="utf-8"))
    except StencilError as exc:
        diagnostic = SyntaxDiagnostic.from_error(template_path.stem, exc)
        if as_json:
            typer.echo(encode(diagnostic).decode())
        else:
            typer.echo(engine.reporter.format(diagnostic))
        raise typer.Exit(code=1)

    names = ", ".join(unit.variables) or "none"
    typer.echo(f"OK: {template_path} (free variables: {names})")


def app() -> None:
    """Entry point for the installed ``stencil`` script."""
    typer_app()


if __name__ == "__main__":
    app()
