"""Last-result bookkeeping for interactive use.

Scan operations return their results; a ScanSession is how an interactive
caller keeps the most recent one around. The CLI persists it between
invocations with ``save_last_result`` / ``load_last_result``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from leakview.scanner.base import Finding, ScanResult

logger = logging.getLogger(__name__)


def default_state_path() -> Path:
    """Return ``$XDG_CACHE_HOME/leakview/last.json`` (``~/.cache`` by default)."""
    cache_home = os.environ.get("XDG_CACHE_HOME")
    base = Path(cache_home) if cache_home else Path.home() / ".cache"
    return base / "leakview" / "last.json"


@dataclass
class ScanSession:
    """Holds the most recent scan result. Last writer wins."""

    last_result: ScanResult | None = None

    def record(self, result: ScanResult) -> ScanResult:
        self.last_result = result
        return result

    def clear(self) -> None:
        self.last_result = None


def save_last_result(result: ScanResult, path: Path) -> None:
    """Persist ``result`` as JSON at ``path``."""
    payload = {
        "target": str(result.target),
        "command": result.args,
        "returncode": result.returncode,
        "timed_out": result.timed_out,
        "duration_ms": result.duration_ms,
        "findings": [finding.to_dict() for finding in result.findings],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_last_result(path: Path) -> ScanResult | None:
    """Load a result written by ``save_last_result``.

    Returns:
        The stored result, or None when nothing usable is stored.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Ignoring corrupt last-result file %s: %s", path, e)
        return None

    if not isinstance(payload, dict):
        return None

    return ScanResult(
        target=Path(payload.get("target", ".")),
        findings=tuple(
            Finding.from_report_item(item)
            for item in payload.get("findings", [])
            if isinstance(item, dict)
        ),
        returncode=payload.get("returncode"),
        timed_out=bool(payload.get("timed_out", False)),
        duration_ms=int(payload.get("duration_ms", 0)),
        args=list(payload.get("command", [])),
    )
