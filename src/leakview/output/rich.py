"""Rendering of findings for terminals and editors."""

from __future__ import annotations

import json
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape

from leakview.scanner.base import Finding, ScanResult

console = Console()
err_console = Console(stderr=True)

SEPARATOR = "-" * 60
LABEL_WIDTH = 13


def _line(label: str, value: object) -> str:
    return f"{label + ':':<{LABEL_WIDTH}}{value}"


def format_header(count: int) -> str:
    """Return the count line shown above the findings."""
    if count == 0:
        return "No secrets found"
    return f"Found {count} secret{'s' if count != 1 else ''}"


def format_finding(finding: Finding) -> str:
    """Render one finding as a fixed block of text.

    Field order: location, rule, secret, match, description, then the commit
    metadata, which is only shown for findings from repository scans.
    """
    lines = [
        f"{finding.file}:{finding.start_line}",
        _line("Rule", finding.rule_id),
        _line("Secret", finding.secret or ""),
        _line("Match", finding.match),
        _line("Description", finding.description),
    ]
    if finding.commit:
        lines.extend(
            [
                _line("Commit", finding.commit),
                _line("Author", finding.author),
                _line("Date", finding.date),
            ]
        )
    return "\n".join(lines)


def format_findings(findings: Sequence[Finding]) -> str:
    """Render the count header and every finding followed by a separator."""
    blocks = [format_header(len(findings))]
    for finding in findings:
        blocks.append(format_finding(finding))
        blocks.append(SEPARATOR)
    return "\n".join(blocks) + "\n"


def format_json(result: ScanResult) -> str:
    """Return the result as a JSON document for editors and scripts."""
    return json.dumps(
        {
            "target": str(result.target),
            "count": result.count,
            "timed_out": result.timed_out,
            "command": result.args,
            "findings": [finding.to_dict() for finding in result.findings],
        },
        indent=2,
    )


def print_findings(
    result: ScanResult,
    output: Console | None = None,
    surface: str = "*gitleaks*",
) -> None:
    """Write the findings of ``result`` to the named output surface."""
    out = output or console
    out.rule(escape(surface))
    if result.timed_out:
        out.print("[yellow]gitleaks did not finish before the timeout[/yellow]")
    out.print(escape(format_findings(result.findings)), end="", highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def print_success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")
