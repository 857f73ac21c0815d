"""CLI interface for podlint using Typer framework."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from podlint import __description__, __version__
from podlint.config import FailurePolicy, LogLevel, OutputFormat, PodlintConfig, load_config
from podlint.formatter import ReportFormatter
from podlint.loader import DocumentParseError, DocumentReadError, load_document
from podlint.validation import ContainerRule, ValidationEngine
from podlint.validation.framework import rule_description

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_READ_ERROR = 2
EXIT_PARSE_ERROR = 3
EXIT_CONFIG_ERROR = 4

_LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

app = typer.Typer(
    name="podlint",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("podlint")


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"podlint version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """podlint - Validation CLI for Pod workload descriptors."""


def _setup_logging(level: LogLevel, verbose: bool) -> None:
    """Route podlint loggers to stderr through rich."""
    handler = RichHandler(console=err_console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else _LOG_LEVELS[LogLevel(level)])
    logger.propagate = False


def _error(message: str, code: int) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, emoji=False, soft_wrap=True)
    return typer.Exit(code)


def _apply_overrides(config: PodlintConfig, fail_fast: bool) -> PodlintConfig:
    if not fail_fast:
        return config
    policy = config.policy.model_copy(update={"failure_policy": FailurePolicy.FAIL_FAST})
    return config.model_copy(update={"policy": policy})


@app.command()
def validate(
    path: Annotated[
        Optional[Path],
        typer.Argument(help="Path to the Pod manifest (YAML)")
    ] = None,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", help="Path to the Pod manifest, alternative to the argument")
    ] = None,
    format: Annotated[
        Optional[OutputFormat],
        typer.Option("--format", "-f", help="Output format: text, json, markdown, table (default: from config, text)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .podlint.json)")
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", help="Stop at the first violation instead of collecting all")
    ] = False,
    line_numbers: Annotated[
        bool,
        typer.Option("--line-numbers/--no-line-numbers", help="Prefix violations with a best-effort source line")
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Validate a Pod manifest against the built-in rule catalog."""
    manifest = path or file
    if manifest is None:
        raise _error("YAML file path is required", EXIT_READ_ERROR)

    try:
        podlint_config = load_config(config)
    except ValueError as e:
        raise _error(str(e), EXIT_CONFIG_ERROR)

    podlint_config = _apply_overrides(podlint_config, fail_fast)
    _setup_logging(podlint_config.logging.level, verbose)

    try:
        loaded = load_document(manifest)
    except DocumentReadError as e:
        raise _error(str(e), EXIT_READ_ERROR)
    except DocumentParseError as e:
        raise _error(str(e), EXIT_PARSE_ERROR)

    engine = ValidationEngine(podlint_config)
    engine.create_default_rules()
    report = engine.validate(loaded.document)
    logger.info(f"{manifest}: {len(report.violations)} violation(s)")

    formatter = ReportFormatter(console, err_console)
    formatter.render(
        report,
        format or podlint_config.output.format,
        source=str(manifest),
        source_text=loaded.source_text,
        line_numbers=line_numbers and podlint_config.output.line_numbers,
    )

    raise typer.Exit(EXIT_OK if report.ok else EXIT_INVALID)


@app.command()
def rules() -> None:
    """List the built-in rules in evaluation order."""
    engine = ValidationEngine()
    engine.create_default_rules()

    table = Table()
    table.add_column("#", style="dim", justify="right")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Scope", style="white")
    table.add_column("Description", style="white")

    all_rules = [*engine.document_rules, *engine.container_rules]
    for index, rule in enumerate(all_rules, start=1):
        scope = "container" if isinstance(rule, ContainerRule) else "document"
        table.add_row(str(index), rule.name, scope, rule_description(rule))

    console.print(table)


if __name__ == "__main__":
    app()
