"""Core types shared by the gitleaks integration.

This module defines:
- Finding: one secret reported by gitleaks
- ScanCommand: the command line issued for a single scan
- ScanResult: findings plus diagnostics for a single scan
- The exception hierarchy raised by scan operations
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

UNKNOWN = "unknown"

# gitleaks masks secrets in its report when a flag with this prefix is set
REDACT_FLAG_PREFIX = "--redact"


class LeakviewError(Exception):
    """Base error for leakview."""

    pass


class ExecutableNotFound(LeakviewError):
    """The configured scanner executable is not on the search path."""

    pass


class TargetNotFound(LeakviewError):
    """A file or directory target does not exist."""

    pass


class ReportParseFailure(LeakviewError):
    """The scanner report could not be decoded."""

    pass


class ScanTimedOut(LeakviewError):
    """gitleaks was still running when the wait deadline elapsed."""

    pass


class ReportFormat(str, Enum):
    """Report encodings gitleaks can emit. Only JSON is parsed."""

    JSON = "json"
    CSV = "csv"
    JUNIT = "junit"
    SARIF = "sarif"


class ScanKind(str, Enum):
    """Gitleaks subcommand used for a scan."""

    DIRECTORY = "dir"
    GIT = "git"


def _text(item: dict[str, Any], key: str, default: str = UNKNOWN) -> str:
    value = item.get(key)
    if value is None or value == "":
        return default
    return str(value)


def _int(item: dict[str, Any], key: str) -> int:
    try:
        return int(item.get(key) or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _float(item: dict[str, Any], key: str) -> float:
    try:
        return float(item.get(key) or 0.0)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class Finding:
    """A single secret reported by gitleaks.

    Attributes:
        rule_id: Identifier of the gitleaks rule that matched.
        description: Human readable rule description.
        file: Path of the file containing the secret, as reported.
        start_line: First line of the match (1-based, 0 when unknown).
        end_line: Last line of the match.
        start_column: First column of the match.
        end_column: Last column of the match.
        match: Full matched text (may include surrounding context).
        secret: The secret value itself.
        commit: Commit hash, only set for repository scans.
        author: Commit author.
        date: Commit date.
        email: Commit author email.
        message: Commit message.
        fingerprint: Gitleaks fingerprint, used by baselines and ignore files.
        entropy: Shannon entropy computed by gitleaks.
        tags: Rule tags.
    """

    rule_id: str = UNKNOWN
    description: str = UNKNOWN
    file: str = UNKNOWN
    start_line: int = 0
    end_line: int = 0
    start_column: int = 0
    end_column: int = 0
    match: str = ""
    secret: str | None = None
    commit: str | None = None
    author: str = UNKNOWN
    date: str = UNKNOWN
    email: str = UNKNOWN
    message: str = ""
    fingerprint: str = ""
    entropy: float = 0.0
    tags: tuple[str, ...] = ()

    @classmethod
    def from_report_item(cls, item: dict[str, Any]) -> Finding:
        """Decode one object of a gitleaks JSON report.

        Missing keys fall back to placeholders instead of failing.
        """
        secret = item.get("Secret")
        commit = item.get("Commit")
        tags = item.get("Tags")
        if isinstance(tags, str):
            tags = (tags,)
        elif not isinstance(tags, (list, tuple)):
            tags = ()

        return cls(
            rule_id=_text(item, "RuleID"),
            description=_text(item, "Description"),
            file=_text(item, "File"),
            start_line=_int(item, "StartLine"),
            end_line=_int(item, "EndLine"),
            start_column=_int(item, "StartColumn"),
            end_column=_int(item, "EndColumn"),
            match=_text(item, "Match", default=""),
            secret=str(secret) if secret else None,
            commit=str(commit) if commit else None,
            author=_text(item, "Author"),
            date=_text(item, "Date"),
            email=_text(item, "Email"),
            message=_text(item, "Message", default=""),
            fingerprint=_text(item, "Fingerprint", default=""),
            entropy=_float(item, "Entropy"),
            tags=tuple(str(tag) for tag in tags),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the finding keyed the way gitleaks reports it."""
        return {
            "RuleID": self.rule_id,
            "Description": self.description,
            "File": self.file,
            "StartLine": self.start_line,
            "EndLine": self.end_line,
            "StartColumn": self.start_column,
            "EndColumn": self.end_column,
            "Match": self.match,
            "Secret": self.secret or "",
            "Commit": self.commit or "",
            "Author": self.author,
            "Date": self.date,
            "Email": self.email,
            "Message": self.message,
            "Fingerprint": self.fingerprint,
            "Entropy": self.entropy,
            "Tags": list(self.tags),
        }


def strip_redaction_flags(flags: Iterable[str]) -> list[str]:
    """Drop every flag that would make gitleaks mask secrets in its report."""
    return [flag for flag in flags if not flag.startswith(REDACT_FLAG_PREFIX)]


@dataclass(frozen=True)
class ScanCommand:
    """A gitleaks invocation, built fresh for every scan.

    Use ``to_args`` to obtain the argument list handed to the process runner.
    """

    executable: str
    kind: ScanKind
    target: Path
    report_format: ReportFormat = ReportFormat.JSON
    config_path: Path | None = None
    baseline_path: Path | None = None
    default_flags: tuple[str, ...] = ()
    extra_flags: tuple[str, ...] = ()
    report_path: Path | None = None
    redact_mode: bool = False

    def to_args(self) -> list[str]:
        """Return the ordered argument list with the target last."""
        args = [self.executable, self.kind.value, "--no-banner", "--no-color"]

        if self.config_path is not None:
            args.extend(["--config", str(self.config_path)])
        if self.baseline_path is not None:
            args.extend(["--baseline-path", str(self.baseline_path)])

        args.extend(["--report-format", self.report_format.value])
        args.extend(self.default_flags)
        args.extend(self.extra_flags)

        if self.report_path is not None:
            args.extend(["--report-path", str(self.report_path)])

        args.append(str(self.target))

        if self.redact_mode:
            args = strip_redaction_flags(args)
        return args


@dataclass(frozen=True)
class TextBuffer:
    """Editor buffer contents.

    Attributes:
        text: Buffer contents.
        name: Buffer name; its suffix is kept on the scanned temp file.
        path: File the buffer visits, if any.
    """

    text: str
    name: str | None = None
    path: Path | None = None


@dataclass
class ScanResult:
    """Findings and diagnostics for one scan.

    Attributes:
        target: Absolute path that was scanned.
        findings: Parsed findings in report order.
        command: The command that was issued.
        returncode: Exit code of gitleaks, None when the wait timed out.
        timed_out: True when the wait deadline elapsed before gitleaks exited.
        output: Combined stdout/stderr of the process.
        duration_ms: Wall-clock duration of the scan.
    """

    target: Path
    findings: tuple[Finding, ...] = ()
    command: ScanCommand | None = None
    returncode: int | None = None
    timed_out: bool = False
    output: str = ""
    duration_ms: int = 0
    args: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of findings."""
        return len(self.findings)

    @property
    def has_findings(self) -> bool:
        """True when at least one secret was reported."""
        return bool(self.findings)
