import io
import logging
import shutil

import pytest

from bugsmith.config import GitSettings
from bugsmith.git.environment import EnvironmentSnapshot


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("bugsmith")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream  # Yield the stream to the test function

    # Cleanup after the test
    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def tmp_root(tmp_path, monkeypatch):
    """Redirect the universal /tmp root into the test's temporary directory."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr("bugsmith.git.cache.UNIVERSAL_TMP_ROOT", str(root))
    return root


@pytest.fixture
def git_snapshot():
    """A Linux environment where no serverless heuristic trips."""
    return EnvironmentSnapshot(env={"TMP": "/tmp"}, platform="linux")


@pytest.fixture
def settings():
    return GitSettings()


@pytest.fixture
def git_executable():
    executable = shutil.which("git")
    if executable is None:
        pytest.skip("git executable not available")
    return executable
