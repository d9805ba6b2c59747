"""Command building for gitleaks invocations."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from leakview.scanner.base import (
    ExecutableNotFound,
    ReportFormat,
    ScanCommand,
    ScanKind,
    strip_redaction_flags,
)

__all__ = ["build_command", "find_executable", "strip_redaction_flags"]

if TYPE_CHECKING:
    from leakview.config import ScannerSettings

logger = logging.getLogger(__name__)


def find_executable(executable: str) -> str:
    """Resolve the gitleaks executable on the search path.

    Args:
        executable: Executable name or path from the settings.

    Returns:
        Absolute path to the executable.

    Raises:
        ExecutableNotFound: If the executable cannot be located.
    """
    resolved = shutil.which(executable)
    if not resolved:
        raise ExecutableNotFound(
            f"{executable} not found. Install with: brew install gitleaks "
            "or set scanner.executable in leakview.toml"
        )
    return resolved


def build_command(
    settings: ScannerSettings,
    target: Path,
    kind: ScanKind,
    extra_flags: Iterable[str] = (),
    report_path: Path | None = None,
    redact_mode: bool = False,
    report_format: ReportFormat | None = None,
    use_baseline: bool = True,
    executable: str | None = None,
) -> ScanCommand:
    """Build the command for one scan.

    Unless the caller already resolved it, the executable is looked up first,
    so a missing gitleaks aborts the operation before anything else happens.

    Args:
        settings: Scanner settings.
        target: Path handed to gitleaks as the last argument.
        kind: ``dir`` for files and directories, ``git`` for repositories.
        extra_flags: Flags supplied by the caller for this call only.
        report_path: Where gitleaks writes its report.
        redact_mode: Have ``to_args`` strip ``--redact`` flags so the report
            holds real secrets.
        report_format: Overrides the configured report format.
        use_baseline: Pass the configured baseline to gitleaks.
        executable: Already resolved executable path.

    Returns:
        ScanCommand ready for ``to_args``.
    """
    if executable is None:
        executable = find_executable(settings.executable)

    command = ScanCommand(
        executable=executable,
        kind=kind,
        target=target,
        report_format=report_format or settings.report_format,
        config_path=settings.config_path,
        baseline_path=settings.baseline_path if use_baseline else None,
        default_flags=tuple(settings.default_flags),
        extra_flags=tuple(extra_flags),
        report_path=report_path,
        redact_mode=redact_mode,
    )
    logger.debug("Built gitleaks command: %s", " ".join(command.to_args()))
    return command
