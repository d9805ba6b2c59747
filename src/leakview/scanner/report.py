"""Parsing of gitleaks JSON reports.

gitleaks writes an array of objects to ``--report-path``. An empty file means
nothing was found; a missing file means gitleaks failed before reporting.
Anything that cannot be decoded is logged and treated as zero findings.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from leakview.scanner.base import Finding, ReportParseFailure

logger = logging.getLogger(__name__)


def decode_report(text: str) -> tuple[Finding, ...]:
    """Strictly decode report text.

    Raises:
        ReportParseFailure: If the text is not a JSON array of objects.
    """
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportParseFailure(f"Report is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ReportParseFailure(
            f"Expected a JSON array, got {type(data).__name__}"
        )

    findings: list[Finding] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ReportParseFailure(
                f"Report entry {index} is {type(item).__name__}, expected an object"
            )
        findings.append(Finding.from_report_item(item))
    return tuple(findings)


def parse_report(text: str | None) -> tuple[Finding, ...]:
    """Parse report text into findings, never raising.

    Args:
        text: Raw report contents. Empty or whitespace-only text yields no
            findings.

    Returns:
        Findings in report order, or an empty tuple on any decode failure.
    """
    if not text or not text.strip():
        return ()
    try:
        return decode_report(text)
    except ReportParseFailure as e:
        logger.warning("Ignoring unreadable gitleaks report: %s", e)
        return ()


def read_report(path: Path) -> tuple[Finding, ...]:
    """Read and parse the report at ``path``."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No report written at %s", path)
        return ()
    except UnicodeDecodeError as e:
        logger.warning("Ignoring unreadable gitleaks report: %s", e)
        return ()
    return parse_report(text)
