"""
Bounded git invocations.

Every call carries a timeout and a per-stream output cap. Output is spooled to
anonymous temporary files rather than pipes, so a chatty child never blocks on
a full pipe and never grows our memory: the files are polled while the child
runs and only up to ``max_output`` bytes are ever read back.
"""

import logging
import os
import signal
import subprocess
import tempfile
import threading
import time
from dataclasses import dataclass
from typing import IO, List, Optional, Sequence

from .exceptions import (
    AcquisitionCancelledError,
    CommandTimeoutError,
    GitInvocationError,
    OutputLimitExceededError,
)

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.05
TERMINATE_GRACE = 5.0

# Markers git prints to stderr while working normally
PROGRESS_MARKERS = ("Cloning into", "remote:")
ERROR_MARKERS = ("fatal:", "error:", "permission denied", "not found")


@dataclass(frozen=True)
class GitResult:
    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class DiagnosticVerdict:
    is_error: bool


def classify_diagnostic_text(text: Optional[str]) -> DiagnosticVerdict:
    """
    Tell real failures apart from git's usual progress chatter on stderr.

    Text that mentions a progress marker is never an error; otherwise any
    error marker (case-insensitive) makes it one.
    """
    if not text:
        return DiagnosticVerdict(is_error=False)
    if any(marker in text for marker in PROGRESS_MARKERS):
        return DiagnosticVerdict(is_error=False)
    lowered = text.lower()
    return DiagnosticVerdict(is_error=any(marker in lowered for marker in ERROR_MARKERS))


def _size(handle: IO[bytes]) -> int:
    return os.fstat(handle.fileno()).st_size


def _read(handle: IO[bytes], limit: int) -> str:
    handle.seek(0)
    return handle.read(limit).decode("utf-8", errors="replace")


def _terminate(process: subprocess.Popen) -> None:
    """SIGTERM the child's process group, then SIGKILL it after a grace period."""
    try:
        if os.name == "posix":
            os.killpg(os.getpgid(process.pid), signal.SIGTERM)
        else:
            process.terminate()
        try:
            process.wait(timeout=TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            logger.warning("Process did not terminate gracefully, forcing kill...")
            if os.name == "posix":
                os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            else:
                process.kill()
            process.wait()
    except ProcessLookupError:
        # Process already died
        pass


def _wait(
    process: subprocess.Popen,
    command: List[str],
    stdout_f: IO[bytes],
    stderr_f: IO[bytes],
    timeout: float,
    max_output: int,
    cancel_event: Optional[threading.Event],
) -> int:
    deadline = time.monotonic() + timeout
    while True:
        try:
            return process.wait(timeout=POLL_INTERVAL)
        except subprocess.TimeoutExpired:
            pass

        if cancel_event is not None and cancel_event.is_set():
            logger.debug(f"Cancelling `{' '.join(command)}`")
            _terminate(process)
            raise AcquisitionCancelledError(command)
        if _size(stdout_f) > max_output or _size(stderr_f) > max_output:
            _terminate(process)
            raise OutputLimitExceededError(command, max_output)
        if time.monotonic() >= deadline:
            logger.debug(f"`{' '.join(command)}` timed out after {timeout:g}s")
            _terminate(process)
            raise CommandTimeoutError(command, timeout)


def run_git(
    args: Sequence[str],
    *,
    timeout: float,
    max_output: int,
    executable: str = "git",
    cancel_event: Optional[threading.Event] = None,
) -> GitResult:
    """
    Run ``executable *args`` and collect its output.

    A non-zero exit status is not an error here; callers inspect the result.

    Raises:
        OSError: the executable could not be started.
        CommandTimeoutError: the child outlived ``timeout`` seconds.
        OutputLimitExceededError: stdout or stderr exceeded ``max_output`` bytes.
        AcquisitionCancelledError: ``cancel_event`` was set while waiting.
    """
    command = [executable, *args]
    if cancel_event is not None and cancel_event.is_set():
        raise AcquisitionCancelledError(command)

    env = dict(os.environ)
    # A credential prompt would block until the timeout
    env["GIT_TERMINAL_PROMPT"] = "0"

    logger.debug(f"Running `{' '.join(command)}`")
    with tempfile.TemporaryFile() as stdout_f, tempfile.TemporaryFile() as stderr_f:
        process = subprocess.Popen(
            command,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=stdout_f,
            stderr=stderr_f,
            start_new_session=True,  # Creates new process group on POSIX
        )
        try:
            returncode = _wait(
                process, command, stdout_f, stderr_f, timeout, max_output, cancel_event
            )
        finally:
            # Ensure the child is gone even on KeyboardInterrupt
            if process.poll() is None:
                _terminate(process)

        if _size(stdout_f) > max_output or _size(stderr_f) > max_output:
            raise OutputLimitExceededError(command, max_output)

        return GitResult(
            command=command,
            returncode=returncode,
            stdout=_read(stdout_f, max_output),
            stderr=_read(stderr_f, max_output),
        )


def probe_git(
    executable: str = "git",
    *,
    timeout: float,
    max_output: int,
    cancel_event: Optional[threading.Event] = None,
) -> bool:
    """
    Check that ``executable --version`` runs and exits with status 0.

    Cancellation still propagates; every other failure means "unavailable".
    """
    try:
        result = run_git(
            ["--version"],
            timeout=timeout,
            max_output=max_output,
            executable=executable,
            cancel_event=cancel_event,
        )
    except (OSError, GitInvocationError) as e:
        logger.debug(f"{executable} probe failed: {e}")
        return False

    if not result.ok:
        logger.debug(f"{executable} probe exited with status {result.returncode}")
        return False
    return True
