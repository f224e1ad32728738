from typing import Final, Tuple

APP_NAME: Final[str] = "bugsmith"

# Placeholder written instead of a checkout when git cannot be used
SERVERLESS_MARKER: Final[str] = ".bugsmith-serverless"

# Metadata directory that marks a real checkout
GIT_METADATA_DIR: Final[str] = ".git"

# Universal temporary root, used whenever the environment is degraded
UNIVERSAL_TMP_ROOT: Final[str] = "/tmp"
WINDOWS_TMP_FALLBACK: Final[str] = "C:\\temp"

# Environment variables that betray a serverless runtime.
# Any non-empty value counts, including "0" or "false".
SERVERLESS_FLAG_VAR: Final[str] = "VERCEL"
SERVERLESS_FUNCTION_VAR: Final[str] = "AWS_LAMBDA_FUNCTION_NAME"
PLATFORM_ENV_TAG_VAR: Final[str] = "VERCEL_ENV"
TEMP_DIR_VARS: Final[Tuple[str, ...]] = ("TEMP", "TMP")

DEFAULT_GIT_HOST: Final[str] = "github.com"
DEFAULT_GIT_EXECUTABLE: Final[str] = "git"

# Timeouts are in seconds, output caps in bytes per stream
MAX_PROBE_TIMEOUT: Final[float] = 2.0
DEFAULT_PROBE_MAX_OUTPUT: Final[int] = 1024 * 1024
DEFAULT_UPDATE_TIMEOUT: Final[float] = 300.0
DEFAULT_CLONE_TIMEOUT: Final[float] = 600.0
DEFAULT_MAX_OUTPUT: Final[int] = 10 * 1024 * 1024
DEFAULT_LOCK_TIMEOUT: Final[float] = 900.0
