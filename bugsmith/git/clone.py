"""
Acquire a repository into its cache entry.

In a degraded environment only a placeholder marker is written and git is
never run; file contents are then fetched by other means. Otherwise an
existing checkout is pulled in place, and a fresh clone is attempted when
there is no checkout or the pull failed. A failed pull never deletes the
entry: a stale checkout is better than a half-deleted one, and the follow-up
clone reports the problem if the entry cannot be refreshed.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from filelock import Timeout

from bugsmith.config import GitSettings, get_git_settings
from bugsmith.constants import SERVERLESS_MARKER

from .cache import get_entry_lock, has_checkout, resolve_cache_path
from .environment import EnvironmentProfile, EnvironmentSnapshot, classify_environment
from .exceptions import (
    AcquisitionError,
    FilesystemError,
    GitInvocationError,
    ToolUnavailableError,
)
from .identity import RepositoryIdentity, parse_identity
from .process import classify_diagnostic_text, probe_git, run_git

logger = logging.getLogger(__name__)


def write_serverless_marker(identity: RepositoryIdentity, path: Path) -> Path:
    """Write (or overwrite) the placeholder marker inside ``path``."""
    marker = path / SERVERLESS_MARKER
    body = json.dumps(
        {"repo": str(identity), "cloned": False, "serverless": True},
        separators=(",", ":"),
    )
    try:
        marker.write_text(body, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(marker, e.strerror or str(e)) from e
    return marker


def update_checkout(
    identity: RepositoryIdentity,
    path: Path,
    settings: GitSettings,
    cancel_event: Optional[threading.Event] = None,
) -> bool:
    """
    Pull an existing checkout in place.

    Returns:
        True if the pull succeeded. Failures are logged, never raised, except
        for cancellation.
    """
    try:
        result = run_git(
            ["-C", str(path), "pull"],
            timeout=settings.update_timeout,
            max_output=settings.max_output,
            executable=settings.executable,
            cancel_event=cancel_event,
        )
    except (OSError, GitInvocationError) as e:
        logger.warning(f"Failed to update repository, will re-clone: {e}")
        return False

    if not result.ok:
        reason = result.stderr.strip() or f"exit status {result.returncode}"
        logger.warning(f"Failed to update repository, will re-clone: {reason}")
        return False

    logger.info(f"Updated existing repository {identity}")
    return True


def clone_checkout(
    identity: RepositoryIdentity,
    path: Path,
    settings: GitSettings,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """
    Clone the remote of ``identity`` into ``path``.

    Raises:
        ToolUnavailableError: git cannot be invoked at all.
        AcquisitionError: the clone failed.
    """
    repo = str(identity)
    if not probe_git(
        settings.executable,
        timeout=settings.probe_timeout,
        max_output=settings.probe_max_output,
        cancel_event=cancel_event,
    ):
        raise ToolUnavailableError(repo, settings.executable)

    repo_url = identity.remote_url(settings.host)
    logger.debug(f"Cloning {repo_url} into {path}")
    try:
        result = run_git(
            ["clone", repo_url, str(path)],
            timeout=settings.clone_timeout,
            max_output=settings.max_output,
            executable=settings.executable,
            cancel_event=cancel_event,
        )
    except FileNotFoundError as e:
        raise ToolUnavailableError(repo, settings.executable) from e
    except (OSError, GitInvocationError) as e:
        raise AcquisitionError(repo, str(e)) from e

    # git writes progress to stderr even when it succeeds
    if not result.ok:
        cause = result.stderr.strip() or f"git exited with status {result.returncode}"
        raise AcquisitionError(repo, f"Git clone error: {cause}")
    if classify_diagnostic_text(result.stderr).is_error:
        raise AcquisitionError(repo, f"Git clone error: {result.stderr.strip()}")


def acquire(
    identity: RepositoryIdentity,
    profile: EnvironmentProfile,
    path: Path,
    settings: Optional[GitSettings] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Path:
    """
    Populate the cache entry ``path`` for ``identity``.

    Args:
        identity: repository to acquire
        profile: result of classify_environment()
        path: entry directory from resolve_cache_path()
        settings: git limits (defaults to the configured ones)
        cancel_event: set it to abort a running git invocation

    Returns:
        ``path``, holding either a checkout or the placeholder marker

    Raises:
        FilesystemError, ToolUnavailableError, AcquisitionError,
        AcquisitionCancelledError
    """
    if profile.is_degraded:
        write_serverless_marker(identity, path)
        logger.info(
            f"Serverless mode: Created directory structure for {identity} at {path}"
        )
        return path

    if settings is None:
        settings = get_git_settings()

    try:
        with get_entry_lock(path, settings.lock_timeout):
            if has_checkout(path):
                if update_checkout(identity, path, settings, cancel_event):
                    return path

            clone_checkout(identity, path, settings, cancel_event)
    except Timeout as e:
        raise AcquisitionError(
            str(identity),
            f"another acquisition of this repository is still running ({e.lock_file})",
        ) from e

    logger.info(f"Successfully cloned repository {identity} to {path}")
    return path


def clone_repo(
    identifier: str,
    snapshot: Optional[EnvironmentSnapshot] = None,
    settings: Optional[GitSettings] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Path:
    """
    Clone or update ``owner/name`` into the local cache.

    This is the main entry point. It:
    1. Validates the identifier
    2. Classifies the environment (serverless or git available)
    3. Resolves and creates the cache entry
    4. Writes the placeholder, or pulls/clones the repository

    Returns:
        Absolute path to the cache entry
    """
    identity = parse_identity(identifier)

    if snapshot is None:
        snapshot = EnvironmentSnapshot.from_os()
    if settings is None:
        settings = get_git_settings(env=snapshot.env)

    profile = classify_environment(snapshot, settings)
    path = resolve_cache_path(identity, profile.is_degraded, snapshot)
    return acquire(identity, profile, path, settings, cancel_event)
