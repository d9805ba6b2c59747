"""Command-line interface for leakview.

Editors call these commands and read back either the rendered findings or,
with ``--json``, a machine-readable document.

\b
Exit codes:
  0 - No secrets found
  1 - Secrets found
  2 - leakview could not run the scan
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Optional

import typer
from rich.logging import RichHandler

from leakview.config import ConfigError, ScannerSettings, load_config
from leakview.output.rich import (
    console,
    err_console,
    format_json,
    print_error,
    print_findings,
    print_success,
    print_warning,
)
from leakview.scanner.base import LeakviewError, ScanKind, ScanResult, ScanTimedOut
from leakview.scanner.gitleaks import GitleaksScanner
from leakview.scanner.redaction import redact, redacted_count
from leakview.session import default_state_path, load_last_result, save_last_result

if TYPE_CHECKING:
    from collections.abc import Callable

app = typer.Typer(
    name="leakview",
    help="Run gitleaks on files, buffers and repositories and act on its findings.",
    no_args_is_help=True,
)

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2

JsonOption = Annotated[
    bool, typer.Option("--json", "-j", help="Output results as JSON")
]
TimeoutOption = Annotated[
    Optional[float],
    typer.Option("--timeout", "-t", help="Seconds to wait for gitleaks"),
]


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to leakview.toml (auto-detected if not specified)",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log gitleaks commands and timings")
    ] = False,
) -> None:
    """Run gitleaks and render, check or redact what it finds."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
    ctx.obj = config_file


def _settings(ctx: typer.Context) -> ScannerSettings:
    try:
        return load_config(ctx.obj)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e


def _state_path(settings: ScannerSettings) -> Path:
    return settings.state_path or default_state_path()


def _run_scan(
    ctx: typer.Context,
    operation: Callable[[GitleaksScanner], ScanResult],
    json_output: bool,
) -> None:
    """Run ``operation``, remember its result, render it and set the exit code."""
    settings = _settings(ctx)
    scanner = GitleaksScanner(settings)

    try:
        result = operation(scanner)
    except LeakviewError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e

    try:
        save_last_result(result, _state_path(settings))
    except OSError as e:
        print_warning(f"Could not store last result: {e}")

    if json_output:
        print(format_json(result))
    else:
        print_findings(result, console, settings.output_surface)

    if result.has_findings:
        raise typer.Exit(code=EXIT_FINDINGS)


@app.command("scan-file")
def scan_file(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="File to scan")],
    json_output: JsonOption = False,
    timeout: TimeoutOption = None,
) -> None:
    """Scan a single file for secrets."""
    _run_scan(ctx, lambda s: s.scan_file(path, timeout=timeout), json_output)


@app.command("scan-dir")
def scan_dir(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Directory to scan")] = Path("."),
    json_output: JsonOption = False,
    timeout: TimeoutOption = None,
) -> None:
    """Scan a directory tree for secrets (no git history)."""
    _run_scan(ctx, lambda s: s.scan_directory(path, timeout=timeout), json_output)


@app.command("scan-repo")
def scan_repo(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Argument(help="Repository to scan (default: enclosing repository)"),
    ] = None,
    json_output: JsonOption = False,
    timeout: TimeoutOption = None,
) -> None:
    """Scan the commit history of a git repository."""
    _run_scan(ctx, lambda s: s.scan_repository(path, timeout=timeout), json_output)


@app.command("scan-text")
def scan_text(
    ctx: typer.Context,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Buffer or file name reported for stdin"),
    ] = None,
    json_output: JsonOption = False,
    timeout: TimeoutOption = None,
) -> None:
    """Scan text read from stdin, such as an unsaved editor buffer."""
    text = sys.stdin.read()
    _run_scan(ctx, lambda s: s.scan_string(text, name=name, timeout=timeout), json_output)


@app.command()
def check(
    ctx: typer.Context,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Buffer or file name reported for stdin"),
    ] = None,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only set the exit code")] = False,
    timeout: TimeoutOption = None,
) -> None:
    """Exit with code 1 if the text on stdin contains a secret."""
    text = sys.stdin.read()
    scanner = GitleaksScanner(_settings(ctx))
    try:
        found = scanner.contains_secret(text, name=name, timeout=timeout)
    except LeakviewError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e

    if found:
        if not quiet:
            console.print("[red]Secret found[/red]")
        raise typer.Exit(code=EXIT_FINDINGS)
    if not quiet:
        print_success("No secrets found")


@app.command("redact")
def redact_command(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Argument(help="File to redact (default: read stdin)"),
    ] = None,
    in_place: Annotated[
        bool, typer.Option("--in-place", "-i", help="Rewrite PATH with the redacted text")
    ] = False,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the redacted text here")
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Buffer or file name reported for stdin"),
    ] = None,
    timeout: TimeoutOption = None,
) -> None:
    """Replace every secret gitleaks finds with ==REDACTED==."""
    if in_place and path is None:
        print_error("--in-place requires a PATH")
        raise typer.Exit(code=EXIT_ERROR)

    scanner = GitleaksScanner(_settings(ctx))
    destination = path if in_place else output
    try:
        if path is not None:
            result = scanner.scan_file(path, timeout=timeout, redact_mode=True)
            text = path.read_text(encoding="utf-8")
        else:
            text = sys.stdin.read()
            result = scanner.scan_string(text, name=name, timeout=timeout, redact_mode=True)
        if result.timed_out:
            raise ScanTimedOut("gitleaks did not finish in time; nothing was redacted")
    except LeakviewError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e

    redacted = redact(text, result.findings)
    if destination is not None:
        destination.write_text(redacted, encoding="utf-8")
        count = redacted_count(text, result.findings)
        err_console.print(f"Redacted {count} occurrence(s) into {destination}")
    else:
        sys.stdout.write(redacted)


@app.command()
def last(
    ctx: typer.Context,
    json_output: JsonOption = False,
) -> None:
    """Show the findings of the previous scan."""
    settings = _settings(ctx)
    result = load_last_result(_state_path(settings))
    if result is None:
        print_warning("No previous scan result")
        raise typer.Exit(code=EXIT_CLEAN)

    if json_output:
        print(format_json(result))
    else:
        print_findings(result, console, settings.output_surface)


@app.command("tool-version")
def tool_version(
    ctx: typer.Context,
    timeout: Annotated[
        float, typer.Option("--timeout", "-t", help="Seconds to wait for gitleaks")
    ] = 10.0,
) -> None:
    """Show the version of the gitleaks executable."""
    scanner = GitleaksScanner(_settings(ctx))
    try:
        version = scanner.get_version(timeout=timeout)
    except LeakviewError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e
    finally:
        scanner.runner.shutdown(wait=False)

    if version is None:
        print_error("gitleaks did not report a version")
        raise typer.Exit(code=EXIT_ERROR)
    console.print(f"gitleaks [bold green]{version}[/bold green]")


@app.command()
def baseline(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Argument(help="Path to scan (default: enclosing repository)"),
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Baseline file to write")
    ] = None,
    directory: Annotated[
        bool, typer.Option("--dir", help="Scan files instead of git history")
    ] = False,
    timeout: TimeoutOption = None,
) -> None:
    """Generate a gitleaks baseline to suppress already-known findings."""
    scanner = GitleaksScanner(_settings(ctx))
    kind = ScanKind.DIRECTORY if directory else ScanKind.GIT
    try:
        written = scanner.generate_baseline(path, output=output, kind=kind, timeout=timeout)
    except LeakviewError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e
    print_success(f"Baseline written to {written}")


@app.command()
def version() -> None:
    """Show leakview version."""
    from leakview import __version__

    console.print(f"leakview [bold green]{__version__}[/bold green]")


if __name__ == "__main__":
    app()
