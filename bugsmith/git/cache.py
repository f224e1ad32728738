"""
On-disk cache of acquired repositories.

Cache Structure Example:
    /tmp/bugsmith/
    ├── octocat-Hello-World/          # Full clone
    │   ├── .git/
    │   └── ...
    ├── octocat-Hello-World.lock      # Held while the entry is cloned/updated
    └── vercel-next.js/               # Placeholder (degraded mode)
        └── .bugsmith-serverless

Each repository identity maps to exactly one entry directory. Entries are
created on first acquisition and updated in place afterwards; nothing in this
package ever deletes them.

Base directory:
    - degraded environments always use /tmp, whatever the OS
    - otherwise Windows uses %TEMP%, %TMP% or C:\\temp, everything else /tmp
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from dulwich import porcelain
from dulwich.errors import NotGitRepository
from filelock import FileLock

from bugsmith.constants import (
    APP_NAME,
    GIT_METADATA_DIR,
    SERVERLESS_MARKER,
    UNIVERSAL_TMP_ROOT,
    WINDOWS_TMP_FALLBACK,
)

from .environment import EnvironmentSnapshot
from .exceptions import FilesystemError
from .identity import RepositoryIdentity

logger = logging.getLogger(__name__)


def cache_root(degraded: bool, snapshot: Optional[EnvironmentSnapshot] = None) -> str:
    """Base temporary directory under which the bugsmith namespace lives."""
    if degraded:
        return UNIVERSAL_TMP_ROOT
    if snapshot is None:
        snapshot = EnvironmentSnapshot.from_os()
    if snapshot.is_windows:
        return snapshot.get("TEMP") or snapshot.get("TMP") or WINDOWS_TMP_FALLBACK
    return UNIVERSAL_TMP_ROOT


def cache_namespace_dir(
    degraded: bool, snapshot: Optional[EnvironmentSnapshot] = None
) -> Path:
    return Path(cache_root(degraded, snapshot)) / APP_NAME


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(path, e.strerror or str(e)) from e


def resolve_cache_path(
    identity: RepositoryIdentity,
    degraded: bool,
    snapshot: Optional[EnvironmentSnapshot] = None,
) -> Path:
    """
    Compute the cache entry for ``identity`` and make sure it exists.

    Calling this twice with the same arguments returns the same path.

    Raises:
        FilesystemError: a directory could not be created.
    """
    namespace_dir = cache_namespace_dir(degraded, snapshot)
    _ensure_dir(namespace_dir)

    target_dir = namespace_dir / identity.slug
    _ensure_dir(target_dir)
    return target_dir


def has_checkout(path: Path) -> bool:
    return (path / GIT_METADATA_DIR).is_dir()


def get_entry_lock(path: Path, timeout: float) -> FileLock:
    """
    Lock guarding one cache entry across threads and processes.

    The lock file sits next to the entry so the entry itself only ever holds
    repository content.
    """
    return FileLock(str(path.parent / f"{path.name}.lock"), timeout=timeout)


def _describe_checkout(entry: Path) -> dict:
    info = {"url": "unknown", "head": "unknown"}
    try:
        with porcelain.open_repo_closing(str(entry)) as repo:
            try:
                url = repo.get_config().get((b"remote", b"origin"), b"url")
                info["url"] = url.decode("utf-8")
            except KeyError:
                pass
            try:
                head_bytes = repo.head()
                if len(head_bytes) == 20:
                    info["head"] = head_bytes.hex()
                else:
                    info["head"] = head_bytes.decode("ascii")
            except KeyError:
                # Empty repository, HEAD points nowhere yet
                pass
    except NotGitRepository as e:
        logger.debug(f"Failed to read repo at {entry}: {e}")
    return info


def _describe_marker(marker: Path) -> dict:
    try:
        data = json.loads(marker.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Failed to read marker {marker}: {e}")
        return {"repo": "unknown"}
    return {"repo": data.get("repo", "unknown")}


def describe_cache(snapshot: Optional[EnvironmentSnapshot] = None) -> List[dict]:
    """
    Describe every entry in the cache.

    Both the degraded and the regular base directories are scanned; they are
    the same directory everywhere except on Windows.

    Returns:
        List of dictionaries with entry information:
        - path: absolute path of the entry
        - name: entry directory name (``owner-name``)
        - kind: "checkout", "serverless" or "empty"
        - url, head: for checkouts, origin URL and HEAD commit
        - repo: for placeholders, the identifier recorded in the marker
    """
    namespaces = []
    for degraded in (False, True):
        namespace_dir = cache_namespace_dir(degraded, snapshot)
        if namespace_dir not in namespaces:
            namespaces.append(namespace_dir)

    results = []
    for namespace_dir in namespaces:
        if not namespace_dir.is_dir():
            continue
        for entry in sorted(namespace_dir.iterdir()):
            if not entry.is_dir():
                continue

            info = {"path": str(entry), "name": entry.name}
            marker = entry / SERVERLESS_MARKER
            if has_checkout(entry):
                info["kind"] = "checkout"
                info.update(_describe_checkout(entry))
            elif marker.is_file():
                info["kind"] = "serverless"
                info.update(_describe_marker(marker))
            else:
                info["kind"] = "empty"
            results.append(info)

    return results
