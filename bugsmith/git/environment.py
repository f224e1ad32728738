"""
Detection of environments where a real git checkout is not possible.

Serverless runtimes (Vercel, AWS Lambda) usually lack a git binary and a
persistent writable filesystem. The classifier recognises them from a few
environment variables first and only falls back to spawning ``git --version``
when none of those heuristics trip.

All lookups go through an EnvironmentSnapshot so callers and tests can
classify an arbitrary environment without touching ``os.environ``.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional

from bugsmith.config import GitSettings, get_git_settings
from bugsmith.constants import (
    PLATFORM_ENV_TAG_VAR,
    SERVERLESS_FLAG_VAR,
    SERVERLESS_FUNCTION_VAR,
    TEMP_DIR_VARS,
)

from .process import probe_git

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Process environment variables and platform name, captured once."""

    env: Mapping[str, str] = field(default_factory=dict)
    platform: str = sys.platform

    @classmethod
    def from_os(cls) -> "EnvironmentSnapshot":
        return cls(env=dict(os.environ), platform=sys.platform)

    def get(self, name: str) -> Optional[str]:
        return self.env.get(name)

    def has(self, name: str) -> bool:
        return bool(self.env.get(name))

    @property
    def is_windows(self) -> bool:
        return self.platform == "win32"


@dataclass(frozen=True)
class EnvironmentProfile:
    is_degraded: bool
    reason: str


def detect_serverless(snapshot: EnvironmentSnapshot) -> Optional[str]:
    """
    Apply the environment-variable heuristics in order.

    Returns:
        A short description of the first rule that matched, or None.
    """
    if snapshot.has(SERVERLESS_FLAG_VAR):
        return f"{SERVERLESS_FLAG_VAR} is set"
    if snapshot.has(SERVERLESS_FUNCTION_VAR):
        return f"{SERVERLESS_FUNCTION_VAR} is set"
    if snapshot.has(PLATFORM_ENV_TAG_VAR):
        return f"{PLATFORM_ENV_TAG_VAR} is set"
    # Non-Windows hosts without TEMP/TMP are treated as constrained sandboxes
    if not any(snapshot.has(name) for name in TEMP_DIR_VARS) and not snapshot.is_windows:
        return "no TEMP or TMP variable on a non-Windows host"
    return None


def classify_environment(
    snapshot: Optional[EnvironmentSnapshot] = None,
    settings: Optional[GitSettings] = None,
) -> EnvironmentProfile:
    """
    Decide whether git can be used in this environment.

    Never raises: a failing probe is reported as a degraded profile.
    """
    if snapshot is None:
        snapshot = EnvironmentSnapshot.from_os()
    if settings is None:
        settings = get_git_settings(env=snapshot.env)

    reason = detect_serverless(snapshot)
    if reason is not None:
        logger.debug(f"Serverless environment detected: {reason}")
        return EnvironmentProfile(is_degraded=True, reason=reason)

    if not probe_git(
        settings.executable,
        timeout=settings.probe_timeout,
        max_output=settings.probe_max_output,
    ):
        logger.info("Git not available, using serverless mode")
        return EnvironmentProfile(
            is_degraded=True, reason=f"{settings.executable} is not invocable"
        )

    logger.debug("Git is available, using real checkouts")
    return EnvironmentProfile(is_degraded=False, reason="git available")
