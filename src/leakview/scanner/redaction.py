"""Literal substitution of reported secrets."""

from __future__ import annotations

import re
from collections.abc import Iterable

from leakview.scanner.base import Finding

REDACTION_PLACEHOLDER = "==REDACTED=="


def redact(
    text: str,
    findings: Iterable[Finding],
    placeholder: str = REDACTION_PLACEHOLDER,
) -> str:
    """Replace every occurrence of each finding's secret with ``placeholder``.

    Findings are applied in order and overlaps are left alone, so an earlier
    finding claims any text it shares with a later one. Secrets are matched
    literally.

    Args:
        text: Original text.
        findings: Findings reported for ``text``.
        placeholder: Replacement token.

    Returns:
        The redacted copy, or ``text`` itself when nothing applies.
    """
    for finding in findings:
        if not finding.secret:
            continue
        # Lambda replacement keeps backslashes in the placeholder literal
        text = re.sub(re.escape(finding.secret), lambda _: placeholder, text)
    return text


def redacted_count(text: str, findings: Iterable[Finding]) -> int:
    """Count the substitutions ``redact`` would make on ``text``."""
    count = 0
    for finding in findings:
        if not finding.secret:
            continue
        count += len(re.findall(re.escape(finding.secret), text))
        text = text.replace(finding.secret, REDACTION_PLACEHOLDER)
    return count
