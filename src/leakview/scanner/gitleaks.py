"""Gitleaks scanner integration.

Gitleaks is a secret scanner for files, directories and git history.
This module provides:
- Scans of strings, editor buffers, files, directories and repositories
- JSON report parsing into Finding objects
- Redaction of reported secrets out of text
- Baseline generation and version reporting

Every scan writes its report to a fresh temp file that is removed before the
scan returns, whether or not anything was found.
"""

from __future__ import annotations

import dataclasses
import logging
import tempfile
import time
from concurrent.futures import Future
from pathlib import Path
from typing import TYPE_CHECKING

from leakview.scanner.base import (
    ExecutableNotFound,
    Finding,
    LeakviewError,
    ReportFormat,
    ScanKind,
    ScanResult,
    ScanTimedOut,
    TargetNotFound,
    TextBuffer,
)
from leakview.scanner.command import build_command, find_executable
from leakview.scanner.process import ProcessRunner
from leakview.scanner.redaction import redact
from leakview.scanner.report import read_report
from leakview.utils.git import resolve_repository_target

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from leakview.config import ScannerSettings

logger = logging.getLogger(__name__)

DEFAULT_BASELINE_NAME = ".gitleaks-baseline.json"


class GitleaksScanner:
    """Runs gitleaks and turns its reports into findings.

    Example:
        scanner = GitleaksScanner(load_config())
        result = scanner.scan_directory(Path("."))
        for finding in result.findings:
            print(f"{finding.file}:{finding.start_line} {finding.rule_id}")
    """

    def __init__(
        self,
        settings: ScannerSettings | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        """Create a scanner.

        Args:
            settings: Scanner settings; defaults are used when None.
            runner: Process runner, mainly for tests.
        """
        if settings is None:
            from leakview.config import ScannerSettings

            settings = ScannerSettings()
        self.settings = settings
        self.runner = runner or ProcessRunner()

    @property
    def name(self) -> str:
        """Return scanner identifier."""
        return "gitleaks"

    def is_installed(self) -> bool:
        """Return True when the gitleaks executable can be located."""
        try:
            find_executable(self.settings.executable)
            return True
        except ExecutableNotFound:
            return False

    # Scans

    def scan_file(
        self,
        path: Path,
        timeout: float | None = None,
        redact_mode: bool = False,
    ) -> ScanResult:
        """Scan a single file.

        Raises:
            TargetNotFound: If ``path`` does not exist.
            ExecutableNotFound: If gitleaks cannot be located.
        """
        return self._scan(
            self._existing_target(path),
            ScanKind.DIRECTORY,
            timeout=timeout,
            redact_mode=redact_mode,
        )

    def scan_directory(
        self,
        path: Path,
        timeout: float | None = None,
        redact_mode: bool = False,
    ) -> ScanResult:
        """Scan a directory tree without looking at git history.

        Raises:
            TargetNotFound: If ``path`` does not exist.
            ExecutableNotFound: If gitleaks cannot be located.
        """
        return self._scan(
            self._existing_target(path),
            ScanKind.DIRECTORY,
            timeout=timeout,
            redact_mode=redact_mode,
        )

    def scan_repository(
        self,
        path: Path | None = None,
        timeout: float | None = None,
    ) -> ScanResult:
        """Scan the commit history of a git repository.

        Args:
            path: Repository to scan. When None, the repository enclosing the
                working directory is used, or the working directory itself.
            timeout: Seconds to wait before giving up on gitleaks.

        Raises:
            TargetNotFound: If an explicit ``path`` does not exist.
            ExecutableNotFound: If gitleaks cannot be located.
        """
        if path is not None:
            target = self._existing_target(path)
        else:
            target = resolve_repository_target()
        return self._scan(target, ScanKind.GIT, timeout=timeout)

    def scan_string(
        self,
        text: str,
        name: str | None = None,
        timeout: float | None = None,
        redact_mode: bool = False,
    ) -> ScanResult:
        """Scan ``text`` by writing it to a temporary file.

        Args:
            text: Content to scan.
            name: Name reported for the content; its suffix is kept on the
                temporary file so file-name based rules still apply.
            timeout: Seconds to wait before giving up on gitleaks.
            redact_mode: Ask gitleaks for unmasked secrets.

        Returns:
            ScanResult whose findings report ``name`` (when given) as the file.
        """
        executable = find_executable(self.settings.executable)

        suffix = Path(name).suffix if name else ".txt"
        with tempfile.NamedTemporaryFile(
            mode="w",
            prefix="leakview-",
            suffix=suffix,
            encoding="utf-8",
            delete=False,
        ) as handle:
            handle.write(text)
            temp_path = Path(handle.name)

        try:
            result = self._scan(
                temp_path,
                ScanKind.DIRECTORY,
                timeout=timeout,
                redact_mode=redact_mode,
                executable=executable,
            )
        finally:
            temp_path.unlink(missing_ok=True)

        if name:
            result.findings = tuple(
                dataclasses.replace(finding, file=name) for finding in result.findings
            )
        return result

    def scan_buffer(
        self,
        buffer: TextBuffer,
        timeout: float | None = None,
        redact_mode: bool = False,
    ) -> ScanResult:
        """Scan the current contents of an editor buffer."""
        display_name = str(buffer.path) if buffer.path else buffer.name
        return self.scan_string(
            buffer.text,
            name=display_name,
            timeout=timeout,
            redact_mode=redact_mode,
        )

    def contains_secret(
        self,
        text: str,
        name: str | None = None,
        timeout: float | None = None,
    ) -> bool:
        """Return True when gitleaks reports at least one secret in ``text``.

        Raises:
            ScanTimedOut: If gitleaks did not finish in time.
        """
        result = self._completed(self.scan_string(text, name=name, timeout=timeout))
        return result.has_findings

    # Redaction

    def redact_string(
        self,
        text: str,
        name: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Return ``text`` with every reported secret replaced.

        Raises:
            ScanTimedOut: If gitleaks did not finish in time.
        """
        result = self._completed(
            self.scan_string(text, name=name, timeout=timeout, redact_mode=True)
        )
        return redact(text, result.findings)

    def redact_buffer(self, buffer: TextBuffer, timeout: float | None = None) -> TextBuffer:
        """Return a copy of ``buffer`` with every reported secret replaced."""
        result = self._completed(
            self.scan_buffer(buffer, timeout=timeout, redact_mode=True)
        )
        return dataclasses.replace(buffer, text=redact(buffer.text, result.findings))

    def redact_file(
        self,
        path: Path,
        output: Path | None = None,
        timeout: float | None = None,
    ) -> int:
        """Redact a file in place, or into ``output``.

        Returns:
            Number of findings used for the redaction.

        Raises:
            ScanTimedOut: If gitleaks did not finish in time; nothing is written.
        """
        result = self._completed(self.scan_file(path, timeout=timeout, redact_mode=True))
        text = path.read_text(encoding="utf-8")
        (output or path).write_text(redact(text, result.findings), encoding="utf-8")
        return result.count

    # Utilities

    def version(
        self,
        callback: Callable[[str | None], None] | None = None,
        timeout: float | None = None,
    ) -> Future[str | None]:
        """Report the gitleaks version without blocking.

        Args:
            callback: Called with the version (or None) once gitleaks exits
                or the deadline elapses.
            timeout: Seconds the background wait gives gitleaks.

        Returns:
            Future resolving to the version string, or None if gitleaks failed
            or did not answer in time.
        """
        executable = find_executable(self.settings.executable)
        version_future: Future[str | None] = Future()

        def _resolve(process_future: Future) -> None:
            try:
                status, output = process_future.result()
            except Exception as e:
                version_future.set_exception(e)
                return
            text = output.strip()
            version = text if status.returncode == 0 and text else None
            version_future.set_result(version)
            if callback is not None:
                callback(version)

        self.runner.run_async(
            [executable, "version"], timeout=timeout
        ).add_done_callback(_resolve)
        return version_future

    def get_version(self, timeout: float | None = 10) -> str | None:
        """Blocking convenience around ``version``."""
        return self.version(timeout=timeout).result()

    def generate_baseline(
        self,
        target: Path | None = None,
        output: Path | None = None,
        kind: ScanKind = ScanKind.GIT,
        timeout: float | None = None,
    ) -> Path:
        """Write a baseline report for later scans to suppress known findings.

        Args:
            target: Path to scan. Repository scans default to the enclosing
                repository; directory scans to the working directory.
            output: Baseline file to write. Defaults to the configured
                baseline path, then ``.gitleaks-baseline.json`` in the target.
            kind: ``git`` or ``dir`` scan.
            timeout: Seconds to wait before giving up on gitleaks.

        Returns:
            Path of the baseline file.

        Raises:
            ScanTimedOut: If gitleaks did not finish in time.
            LeakviewError: If gitleaks exited without writing the baseline.
        """
        if target is not None:
            scan_target = self._existing_target(target)
        elif kind is ScanKind.GIT:
            scan_target = resolve_repository_target()
        else:
            scan_target = Path.cwd().resolve()

        base_dir = scan_target if scan_target.is_dir() else scan_target.parent
        baseline = (
            output or self.settings.baseline_path or base_dir / DEFAULT_BASELINE_NAME
        ).resolve()

        command = build_command(
            self.settings,
            scan_target,
            kind,
            report_path=baseline,
            report_format=ReportFormat.JSON,
            use_baseline=False,
        )
        status, output_text = self.runner.run(
            command.to_args(), timeout=self._timeout(timeout)
        )
        if status.timed_out:
            raise ScanTimedOut(f"gitleaks did not finish the baseline for {scan_target}")
        if not baseline.is_file():
            raise LeakviewError(
                f"gitleaks exited with {status.returncode} without writing "
                f"{baseline}: {output_text.strip()}"
            )
        logger.info("Baseline written to %s (exit %s)", baseline, status.returncode)
        return baseline

    # Internals

    def _timeout(self, timeout: float | None) -> float | None:
        return timeout if timeout is not None else self.settings.timeout

    def _completed(self, result: ScanResult) -> ScanResult:
        if result.timed_out:
            raise ScanTimedOut(f"gitleaks did not finish scanning {result.target} in time")
        return result

    def _existing_target(self, path: Path) -> Path:
        target = path.expanduser().resolve()
        if not target.exists():
            raise TargetNotFound(f"Path not found: {path}")
        return target

    def _scan(
        self,
        target: Path,
        kind: ScanKind,
        timeout: float | None = None,
        redact_mode: bool = False,
        extra_flags: Iterable[str] = (),
        executable: str | None = None,
    ) -> ScanResult:
        """Run one gitleaks scan against ``target`` and parse its report."""
        start_time = time.time()
        if executable is None:
            executable = find_executable(self.settings.executable)

        with tempfile.NamedTemporaryFile(
            prefix="leakview-report-", suffix=".json", delete=False
        ) as report_file:
            report_path = Path(report_file.name)

        try:
            command = build_command(
                self.settings,
                target,
                kind,
                extra_flags=extra_flags,
                report_path=report_path,
                redact_mode=redact_mode,
                executable=executable,
            )
            args = command.to_args()
            status, output = self.runner.run(args, timeout=self._timeout(timeout))

            findings: tuple[Finding, ...] = ()
            if status.timed_out:
                logger.warning("gitleaks did not finish scanning %s in time", target)
            else:
                findings = read_report(report_path)
        finally:
            report_path.unlink(missing_ok=True)

        logger.debug("gitleaks reported %d finding(s) for %s", len(findings), target)
        return ScanResult(
            target=target,
            findings=findings,
            command=command,
            returncode=status.returncode,
            timed_out=status.timed_out,
            output=output,
            duration_ms=int((time.time() - start_time) * 1000),
            args=args,
        )
