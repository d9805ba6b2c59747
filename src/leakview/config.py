"""Configuration loading for leakview.

Settings are read from ``leakview.toml`` or from the ``[tool.leakview]`` table
of a ``pyproject.toml``, discovered by walking up from the working directory:

    [scanner]
    executable = "gitleaks"
    config_path = ".gitleaks.toml"
    baseline_path = ".gitleaks-baseline.json"
    report_format = "json"
    default_flags = ["--max-target-megabytes=5"]
    output_surface = "*gitleaks*"
    timeout = 60
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from leakview.scanner.base import LeakviewError, ReportFormat

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "leakview.toml"
EXECUTABLE_ENV_VAR = "LEAKVIEW_GITLEAKS"


class ConfigError(LeakviewError):
    """Configuration values are invalid."""

    pass


class ConfigNotFoundError(ConfigError):
    """An explicitly requested config file does not exist."""

    pass


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


@dataclass
class ScannerSettings:
    """Settings consumed by the gitleaks integration.

    Attributes:
        executable: Name or path of the gitleaks executable.
        config_path: gitleaks rule configuration passed with ``--config``.
        baseline_path: Baseline report passed with ``--baseline-path``.
        report_format: Report encoding requested from gitleaks.
        default_flags: Flags appended to every invocation.
        output_surface: Title of the surface findings are rendered on.
        timeout: Seconds to wait for a scan, None to wait indefinitely.
        state_path: Where the CLI keeps the last scan result.
    """

    executable: str = "gitleaks"
    config_path: Path | None = None
    baseline_path: Path | None = None
    report_format: ReportFormat = ReportFormat.JSON
    default_flags: list[str] = field(default_factory=list)
    output_surface: str = "*gitleaks*"
    timeout: float | None = None
    state_path: Path | None = None

    @classmethod
    def from_dict(cls, config: dict) -> ScannerSettings:
        """Create settings from a parsed config mapping.

        Args:
            config: Mapping with an optional ``scanner`` table.

        Returns:
            ScannerSettings instance.

        Raises:
            ConfigError: If a value has the wrong type or is not allowed.
        """
        scanner = config.get("scanner", {})
        if not isinstance(scanner, dict):
            raise ConfigError("[scanner] must be a table")

        fmt = str(scanner.get("report_format", ReportFormat.JSON.value)).lower()
        try:
            report_format = ReportFormat(fmt)
        except ValueError as e:
            allowed = ", ".join(f.value for f in ReportFormat)
            raise ConfigError(
                f"Invalid report_format '{fmt}'. Valid options: {allowed}"
            ) from e

        default_flags = scanner.get("default_flags", [])
        if isinstance(default_flags, str):
            default_flags = [default_flags]
        if not isinstance(default_flags, list):
            raise ConfigError("default_flags must be a list of strings")

        timeout = scanner.get("timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"timeout must be a number, got {timeout!r}") from e

        return cls(
            executable=str(scanner.get("executable", "gitleaks")),
            config_path=_optional_path(scanner.get("config_path")),
            baseline_path=_optional_path(scanner.get("baseline_path")),
            report_format=report_format,
            default_flags=[str(flag) for flag in default_flags],
            output_surface=str(scanner.get("output_surface", "*gitleaks*")),
            timeout=timeout,
            state_path=_optional_path(scanner.get("state_path")),
        )


def find_config(start: Path | None = None) -> Path | None:
    """Find the nearest config file, walking up from ``start``.

    A ``pyproject.toml`` only counts when it has a ``[tool.leakview]`` table.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

        pyproject = directory / "pyproject.toml"
        if pyproject.is_file():
            try:
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            except (OSError, tomllib.TOMLDecodeError):
                continue
            if "leakview" in data.get("tool", {}):
                return pyproject
    return None


def load_config(path: Path | None = None) -> ScannerSettings:
    """Load settings from ``path`` or from the discovered config file.

    Args:
        path: Explicit config file. When None, ``find_config`` is used and
            defaults are returned if nothing is found.

    Returns:
        ScannerSettings with the ``LEAKVIEW_GITLEAKS`` override applied.

    Raises:
        ConfigNotFoundError: If ``path`` is given but does not exist.
        ConfigError: If the file is not valid TOML or has invalid values.
    """
    if path is not None and not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    config_file = path or find_config()
    data: dict = {}
    if config_file is not None:
        logger.debug("Loading config from %s", config_file)
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_file}: {e}") from e
        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("leakview", {})

    settings = ScannerSettings.from_dict(data)

    executable = os.environ.get(EXECUTABLE_ENV_VAR)
    if executable:
        settings.executable = executable
    return settings
