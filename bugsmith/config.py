"""Configuration for git invocation limits and the remote host"""

import configparser
import logging
import math
import os
import platform
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pathlib import Path

from bugsmith.constants import (
    APP_NAME,
    DEFAULT_CLONE_TIMEOUT,
    DEFAULT_GIT_EXECUTABLE,
    DEFAULT_GIT_HOST,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_MAX_OUTPUT,
    DEFAULT_PROBE_MAX_OUTPUT,
    DEFAULT_UPDATE_TIMEOUT,
    MAX_PROBE_TIMEOUT,
)

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/bugsmith").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


default_cfg = {
    "git": {
        "executable": DEFAULT_GIT_EXECUTABLE,
        "host": DEFAULT_GIT_HOST,
        "probe_timeout": str(MAX_PROBE_TIMEOUT),
        "probe_max_output": str(DEFAULT_PROBE_MAX_OUTPUT),
        "update_timeout": str(DEFAULT_UPDATE_TIMEOUT),
        "clone_timeout": str(DEFAULT_CLONE_TIMEOUT),
        "max_output": str(DEFAULT_MAX_OUTPUT),
        "lock_timeout": str(DEFAULT_LOCK_TIMEOUT),
    }
}

# git option -> environment variable that overrides the config file
ENV_OVERRIDES = {
    "executable": "BUGSMITH_GIT_EXECUTABLE",
    "host": "BUGSMITH_GIT_HOST",
    "probe_timeout": "BUGSMITH_GIT_PROBE_TIMEOUT",
    "update_timeout": "BUGSMITH_GIT_UPDATE_TIMEOUT",
    "clone_timeout": "BUGSMITH_GIT_CLONE_TIMEOUT",
    "max_output": "BUGSMITH_GIT_MAX_OUTPUT",
    "lock_timeout": "BUGSMITH_GIT_LOCK_TIMEOUT",
}


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    Missing sections or keys are handled gracefully, and a missing or
    unreadable file simply yields an empty configuration.

    Usage:
        config = ConfigAccessor()
        value = config.get('git', 'host', default='github.com')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            try:
                self.config.read(self.config_path)
            except configparser.Error as e:
                logger.warning(
                    f"Could not parse configuration {self.config_path}: {e}. "
                    "Using defaults."
                )
                self.config = configparser.ConfigParser()

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default


# Create a global config accessor instance
config = ConfigAccessor()


@dataclass(frozen=True)
class GitSettings:
    """Resolved limits for every git invocation."""

    executable: str = DEFAULT_GIT_EXECUTABLE
    host: str = DEFAULT_GIT_HOST
    probe_timeout: float = MAX_PROBE_TIMEOUT
    probe_max_output: int = DEFAULT_PROBE_MAX_OUTPUT
    update_timeout: float = DEFAULT_UPDATE_TIMEOUT
    clone_timeout: float = DEFAULT_CLONE_TIMEOUT
    max_output: int = DEFAULT_MAX_OUTPUT
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT


def _lookup(
    accessor: ConfigAccessor, env: Mapping[str, str], key: str
) -> Optional[str]:
    env_name = ENV_OVERRIDES.get(key)
    if env_name and env.get(env_name):
        return env[env_name]
    return accessor.get("git", key, default_cfg["git"][key])


def _as_number(raw: Optional[str], key: str, cast):
    default = cast(float(default_cfg["git"][key]))
    try:
        number = float(raw)
        if not math.isfinite(number):
            raise ValueError(f"{raw!r} is not finite")
        value = cast(number)
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Invalid value {raw!r} for git.{key}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Non-positive value {raw!r} for git.{key}, using {default}")
        return default
    return value


def get_git_settings(
    accessor: Optional[ConfigAccessor] = None,
    env: Optional[Mapping[str, str]] = None,
) -> GitSettings:
    """
    Build GitSettings from the config file, with BUGSMITH_GIT_* environment
    variables taking precedence.

    The probe timeout is clamped to MAX_PROBE_TIMEOUT so that environment
    classification stays fast.
    """
    if accessor is None:
        accessor = config
    if env is None:
        env = os.environ

    probe_timeout = _as_number(_lookup(accessor, env, "probe_timeout"), "probe_timeout", float)

    return GitSettings(
        executable=_lookup(accessor, env, "executable") or DEFAULT_GIT_EXECUTABLE,
        host=_lookup(accessor, env, "host") or DEFAULT_GIT_HOST,
        probe_timeout=min(probe_timeout, MAX_PROBE_TIMEOUT),
        probe_max_output=_as_number(
            _lookup(accessor, env, "probe_max_output"), "probe_max_output", int
        ),
        update_timeout=_as_number(
            _lookup(accessor, env, "update_timeout"), "update_timeout", float
        ),
        clone_timeout=_as_number(
            _lookup(accessor, env, "clone_timeout"), "clone_timeout", float
        ),
        max_output=_as_number(_lookup(accessor, env, "max_output"), "max_output", int),
        lock_timeout=_as_number(
            _lookup(accessor, env, "lock_timeout"), "lock_timeout", float
        ),
    )
