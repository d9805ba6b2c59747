"""Run gitleaks from your editor and act on what it finds.

leakview helps you:
- Scan strings, buffers, files, directories and git repositories with gitleaks
- Show findings in a fixed, readable layout or as JSON
- Redact reported secrets out of text before it leaves the editor
- Generate gitleaks baselines
"""

__version__ = "0.1.0"

from leakview.config import ScannerSettings, load_config
from leakview.scanner import Finding, GitleaksScanner, ScanResult, TextBuffer, redact
from leakview.session import ScanSession

__all__ = [
    "Finding",
    "GitleaksScanner",
    "ScanResult",
    "ScanSession",
    "ScannerSettings",
    "TextBuffer",
    "__version__",
    "load_config",
    "redact",
]
