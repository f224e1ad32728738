"""
Git acquisition module for bugsmith.

Fetches ``owner/name`` repositories into a per-repository cache entry so that
downstream tooling can read their files.

Architecture:
    identity     owner/name parsing
    environment  serverless detection and git probe
    cache        cache entry paths, locks and description
    clone        placeholder marker, pull-in-place and clone

Usage:
    path = clone_repo("octocat/Hello-World")
"""

from .cache import cache_root, describe_cache, resolve_cache_path
from .clone import acquire, clone_repo
from .environment import (
    EnvironmentProfile,
    EnvironmentSnapshot,
    classify_environment,
)
from .exceptions import (
    AcquisitionCancelledError,
    AcquisitionError,
    BugsmithError,
    FilesystemError,
    InvalidIdentityError,
    ToolUnavailableError,
)
from .identity import RepositoryIdentity, parse_identity
from .process import classify_diagnostic_text

__all__ = [
    "AcquisitionCancelledError",
    "AcquisitionError",
    "BugsmithError",
    "EnvironmentProfile",
    "EnvironmentSnapshot",
    "FilesystemError",
    "InvalidIdentityError",
    "RepositoryIdentity",
    "ToolUnavailableError",
    "acquire",
    "cache_root",
    "classify_diagnostic_text",
    "classify_environment",
    "clone_repo",
    "describe_cache",
    "parse_identity",
    "resolve_cache_path",
]
