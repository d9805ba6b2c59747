"""Child process management for gitleaks.

Each process writes its combined stdout/stderr to a uniquely named scratch
file. Callers either block on ``RunningProcess.wait`` (scans) or receive a
future from ``ProcessRunner.run_async`` (informational commands).
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404
import tempfile
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

# Seconds between liveness checks while waiting on a process
POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class ProcessExit:
    """Outcome of waiting on a process.

    Attributes:
        returncode: Exit code, or None if the deadline elapsed first.
        timed_out: True when the wait gave up before the process exited.
    """

    returncode: int | None
    timed_out: bool = False


class RunningProcess:
    """A launched child process and its scratch output file."""

    def __init__(self, args: Sequence[str], cwd: Path | None = None) -> None:
        self.args = list(args)
        scratch = tempfile.NamedTemporaryFile(
            prefix="leakview-output-", suffix=".log", delete=False
        )
        self.scratch_path = Path(scratch.name)
        try:
            self._popen = subprocess.Popen(  # nosec B603
                self.args,
                stdout=scratch,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                cwd=str(cwd) if cwd else None,
            )
        except OSError:
            scratch.close()
            self.scratch_path.unlink(missing_ok=True)
            raise
        finally:
            # The child keeps its own handle to the scratch file
            scratch.close()

    @property
    def pid(self) -> int:
        return self._popen.pid

    def poll(self) -> int | None:
        """Return the exit code, or None while the process is alive."""
        return self._popen.poll()

    def wait(
        self,
        timeout: float | None = None,
        poll_interval: float = POLL_INTERVAL,
    ) -> ProcessExit:
        """Block until the process exits or ``timeout`` seconds elapse.

        The process is not killed when the deadline elapses.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            returncode = self._popen.poll()
            if returncode is not None:
                return ProcessExit(returncode=returncode)
            if deadline is not None and time.monotonic() >= deadline:
                logger.debug("Process %s still running after %ss", self.pid, timeout)
                return ProcessExit(returncode=None, timed_out=True)
            time.sleep(poll_interval)

    def output(self) -> str:
        """Return everything the process has written so far."""
        try:
            return self.scratch_path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return ""

    def close(self) -> None:
        """Discard the scratch output file."""
        self.scratch_path.unlink(missing_ok=True)

    def __enter__(self) -> RunningProcess:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ProcessRunner:
    """Launches gitleaks processes.

    ``last_command`` holds the arguments of the most recent launch for
    debugging; it is overwritten by every call.

    Example:
        runner = ProcessRunner()
        exit_status, output = runner.run(["gitleaks", "version"], timeout=10)
    """

    def __init__(self, poll_interval: float = POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval
        self.last_command: list[str] | None = None
        self._executor: ThreadPoolExecutor | None = None

    def start(self, args: Sequence[str], cwd: Path | None = None) -> RunningProcess:
        """Launch ``args`` and return the running process."""
        self.last_command = list(args)
        logger.debug("Running: %s", " ".join(self.last_command))
        return RunningProcess(args, cwd=cwd)

    def run(
        self,
        args: Sequence[str],
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> tuple[ProcessExit, str]:
        """Launch ``args`` and block until it exits or the timeout elapses.

        Returns:
            Tuple of (exit status, combined output).
        """
        with self.start(args, cwd=cwd) as process:
            status = process.wait(timeout=timeout, poll_interval=self.poll_interval)
            return status, process.output()

    def run_async(
        self,
        args: Sequence[str],
        callback: Callable[[tuple[ProcessExit, str]], None] | None = None,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Future[tuple[ProcessExit, str]]:
        """Launch ``args`` and wait for it on a background worker.

        Args:
            args: Command line to run.
            callback: Called once with ``(exit status, output)`` when the
                process exits.
            cwd: Working directory for the process.
            timeout: Seconds the background wait gives the process; the
                process is not killed when it elapses.

        Returns:
            Future resolving to ``(exit status, output)``.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="leakview-process"
            )

        process = self.start(args, cwd=cwd)

        def _wait() -> tuple[ProcessExit, str]:
            with process:
                outcome = (
                    process.wait(timeout=timeout, poll_interval=self.poll_interval),
                    process.output(),
                )
                if callback is not None:
                    callback(outcome)
                return outcome

        return self._executor.submit(_wait)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background worker used by ``run_async``.

        Args:
            wait: Block until a pending background wait has finished.
        """
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
