"""
Exception classes for repository acquisition.
"""

from typing import Optional, Sequence


class BugsmithError(Exception):
    """Base exception for all bugsmith errors."""

    pass


class InvalidIdentityError(BugsmithError, ValueError):
    """Raised when a repository identifier is not of the form owner/name."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"Invalid repository format: {identifier}. Expected format: owner/repo"
        )


class FilesystemError(BugsmithError, OSError):
    """Raised when a cache directory or marker file cannot be written."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot write to {self.path}: {reason}")


class ToolUnavailableError(BugsmithError):
    """Raised when the git executable cannot be invoked."""

    def __init__(self, repo: str, executable: str = "git"):
        self.repo = repo
        self.executable = executable
        super().__init__(
            f"Failed to clone repository {repo}: {executable} is not installed "
            "or not in PATH. Please install Git to use this feature."
        )


class AcquisitionError(BugsmithError):
    """Raised when a clone fails for any reason other than a missing git."""

    def __init__(self, repo: str, cause: str):
        self.repo = repo
        self.cause = cause
        super().__init__(f"Failed to clone repository {repo}: {cause}")


class AcquisitionCancelledError(BugsmithError):
    """Raised when the caller cancels an in-flight git invocation."""

    def __init__(self, command: Optional[Sequence[str]] = None):
        self.command = list(command) if command else []
        if self.command:
            super().__init__(f"Cancelled: {' '.join(self.command)}")
        else:
            super().__init__("Cancelled")


class GitInvocationError(BugsmithError):
    """Base class for git invocations that did not run to completion."""

    def __init__(self, command: Sequence[str], message: str):
        self.command = list(command)
        super().__init__(message)


class CommandTimeoutError(GitInvocationError):
    """Raised when a git invocation outlives its timeout."""

    def __init__(self, command: Sequence[str], timeout: float):
        self.timeout = timeout
        super().__init__(
            command, f"`{' '.join(command)}` timed out after {timeout:g}s"
        )


class OutputLimitExceededError(GitInvocationError):
    """Raised when a git invocation writes more than its output cap."""

    def __init__(self, command: Sequence[str], limit: int):
        self.limit = limit
        super().__init__(
            command, f"`{' '.join(command)}` exceeded the output limit of {limit} bytes"
        )
