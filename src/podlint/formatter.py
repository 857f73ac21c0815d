"""Rendering of validation reports for the console.

Line numbers are a best-effort aid: the line of a violation is the first
line of the source whose key matches the last segment of the violation
path. Keys that recur in a manifest (``name``, ``port``) therefore always
resolve to their first occurrence, e.g. a container name violation may
point at ``metadata.name``.
"""

import json
import re

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import OutputFormat
from .validation import ValidationReport, Violation

_INDEX_SUFFIX = re.compile(r"(\[\d+\])+$")
VALID_MESSAGE = "YAML file is valid"

# Alternative spellings accepted by the document model
_KEY_ALIASES = {"apiVersion": ("schemaVersion",)}


def field_key(path: str) -> str:
    """Last key of a dotted field path, without list indices."""
    last = path.rsplit(".", 1)[-1]
    return _INDEX_SUFFIX.sub("", last)


def find_line(source_text: str, path: str) -> int | None:
    """Find the 1-based line where the field of ``path`` is first declared.

    Returns None when the path is empty or its key never appears.
    """
    key = field_key(path)
    if not key:
        return None

    lines = source_text.splitlines()
    for candidate in (key, *_KEY_ALIASES.get(key, ())):
        pattern = re.compile(rf"^\s*(?:-\s+)?[\"']?{re.escape(candidate)}[\"']?\s*:")
        for number, line in enumerate(lines, start=1):
            if pattern.match(line):
                return number
    return None


def format_violation(violation: Violation, source: str | None = None,
                     source_text: str | None = None) -> str:
    """Render ``<source>[:<line>]: <message>``, or the bare message without source."""
    if not source:
        return violation.message

    line = find_line(source_text, violation.path) if source_text is not None else None
    if line is None:
        return f"{source}: {violation.message}"
    return f"{source}:{line}: {violation.message}"


class ReportFormatter:
    """Writes a ValidationReport in one of the supported output formats.

    Text output sends violations to the error console and the success
    message to the regular console. Structured formats always go to the
    regular console.
    """

    def __init__(self, console: Console | None = None, err_console: Console | None = None):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    @staticmethod
    def _plain(console: Console, text: str) -> None:
        console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def render(self, report: ValidationReport, output_format: OutputFormat = OutputFormat.TEXT,
               source: str | None = None, source_text: str | None = None,
               line_numbers: bool = True) -> None:
        """Write the report."""
        text = source_text if line_numbers else None

        if output_format == OutputFormat.JSON:
            self._render_json(report, source, text)
        elif output_format == OutputFormat.MARKDOWN:
            self._render_markdown(report, source, text)
        elif output_format == OutputFormat.TABLE:
            self._render_table(report, source, text)
        else:
            self._render_text(report, source, text)

    def _render_text(self, report: ValidationReport, source: str | None,
                     source_text: str | None) -> None:
        if report.ok:
            message = f"{source}: {VALID_MESSAGE}" if source else VALID_MESSAGE
            self._plain(self.console, message)
            return

        for violation in report.violations:
            self._plain(self.err_console, format_violation(violation, source, source_text))

    def _render_json(self, report: ValidationReport, source: str | None,
                     source_text: str | None) -> None:
        data = report.to_dict()
        data["source"] = source
        for entry, violation in zip(data["violations"], report.violations):
            entry["line"] = find_line(source_text, violation.path) if source_text is not None else None
        self._plain(self.console, json.dumps(data, indent=2))

    def _render_markdown(self, report: ValidationReport, source: str | None,
                         source_text: str | None) -> None:
        lines = ["# Validation Report"]
        if source:
            lines.append(f"**Source:** {source}")
        lines.append(f"**Status:** {report.status.value}")
        lines.append(f"**Exit Code:** {report.exit_code}")
        lines.append("")

        if report.counters:
            lines.append("## Counters")
            for key, value in sorted(report.counters.items()):
                lines.append(f"- {key}: {value}")
            lines.append("")

        if report.violations:
            lines.append("## Violations")
            for violation in report.violations:
                lines.append(f"- **{violation.code.value}** `{violation.path}`: "
                             f"{format_violation(violation, source, source_text)}")

        self._plain(self.console, "\n".join(lines))

    def _render_table(self, report: ValidationReport, source: str | None,
                      source_text: str | None) -> None:
        status_color = "green" if report.ok else "red"
        self.console.print(f"[{status_color}]Validation Status: {report.status.value.upper()}[/{status_color}]")
        if source:
            self.console.print(f"Source: {escape(source)}")

        if not report.violations:
            self.console.print("\n[green]No violations found![/green]")
            return

        table = Table()
        table.add_column("#", style="dim", justify="right")
        table.add_column("Rule", style="cyan")
        table.add_column("Code", style="white")
        table.add_column("Location", style="dim")
        table.add_column("Message", style="white")

        for index, violation in enumerate(report.violations, start=1):
            location = violation.path
            line = find_line(source_text, violation.path) if source_text is not None else None
            if line is not None:
                location += f" (line {line})"
            table.add_row(
                str(index),
                violation.rule,
                violation.code.value,
                escape(location),
                escape(violation.message),
            )

        self.console.print(table)
