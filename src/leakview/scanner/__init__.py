"""Gitleaks integration for leakview.

This module wraps the external gitleaks executable:
- GitleaksScanner: scans strings, buffers, files, directories and repositories
- parse_report: turns a gitleaks JSON report into Finding records
- redact: replaces reported secrets with a placeholder
"""

from leakview.scanner.base import (
    ExecutableNotFound,
    Finding,
    LeakviewError,
    ReportFormat,
    ReportParseFailure,
    ScanCommand,
    ScanKind,
    ScanResult,
    ScanTimedOut,
    TargetNotFound,
    TextBuffer,
)
from leakview.scanner.gitleaks import GitleaksScanner
from leakview.scanner.redaction import REDACTION_PLACEHOLDER, redact
from leakview.scanner.report import parse_report

__all__ = [
    "REDACTION_PLACEHOLDER",
    "ExecutableNotFound",
    "Finding",
    "GitleaksScanner",
    "LeakviewError",
    "ReportFormat",
    "ReportParseFailure",
    "ScanCommand",
    "ScanKind",
    "ScanResult",
    "ScanTimedOut",
    "TargetNotFound",
    "TextBuffer",
    "parse_report",
    "redact",
]
