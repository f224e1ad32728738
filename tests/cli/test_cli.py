"""Unit tests for the bugsmith CLI."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from bugsmith import __version__
from bugsmith.cli.main import cli
from bugsmith.git.environment import EnvironmentProfile
from bugsmith.git.exceptions import AcquisitionError, InvalidIdentityError


@pytest.mark.short
def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.short
class TestClone:
    def test_prints_path(self):
        with patch(
            "bugsmith.cli.clone.clone_repo",
            return_value=Path("/tmp/bugsmith/octocat-Hello-World"),
        ) as clone_repo:
            result = CliRunner().invoke(cli, ["clone", "octocat/Hello-World"])

        assert result.exit_code == 0
        assert "/tmp/bugsmith/octocat-Hello-World" in result.output
        clone_repo.assert_called_once_with("octocat/Hello-World")

    def test_invalid_identifier(self):
        with patch(
            "bugsmith.cli.clone.clone_repo", side_effect=InvalidIdentityError("a/b/c")
        ):
            result = CliRunner().invoke(cli, ["clone", "a/b/c"])
        assert result.exit_code == 1

    def test_acquisition_error(self):
        with patch(
            "bugsmith.cli.clone.clone_repo",
            side_effect=AcquisitionError("octocat/Hello-World", "fatal: boom"),
        ):
            result = CliRunner().invoke(cli, ["clone", "octocat/Hello-World"])
        assert result.exit_code == 1

    def test_missing_argument(self):
        result = CliRunner().invoke(cli, ["clone"])
        assert result.exit_code == 2

    def test_debug_flag(self):
        with patch(
            "bugsmith.cli.clone.clone_repo", return_value=Path("/tmp/bugsmith/a-b")
        ):
            result = CliRunner().invoke(cli, ["clone", "--debug", "a/b"])
        assert result.exit_code == 0


@pytest.mark.short
def test_env_reports_mode():
    profile = EnvironmentProfile(is_degraded=True, reason="VERCEL is set")
    with patch("bugsmith.cli.clone.classify_environment", return_value=profile):
        result = CliRunner().invoke(cli, ["env"])

    assert result.exit_code == 0
    assert "mode: serverless" in result.output
    assert "reason: VERCEL is set" in result.output
    assert "cache root: /tmp" in result.output


@pytest.mark.short
class TestCacheDescribe:
    ENTRIES = [
        {
            "path": "/tmp/bugsmith/octocat-Hello-World",
            "name": "octocat-Hello-World",
            "kind": "checkout",
            "url": "https://github.com/octocat/Hello-World.git",
            "head": "7fd1a60b01f91b314f59955a4e4d4e80d8edf11d",
        },
        {
            "path": "/tmp/bugsmith/vercel-next.js",
            "name": "vercel-next.js",
            "kind": "serverless",
            "repo": "vercel/next.js",
        },
    ]

    def test_table(self):
        with patch("bugsmith.cli.cache.describe_cache", return_value=self.ENTRIES):
            result = CliRunner().invoke(cli, ["cache", "describe"])

        assert result.exit_code == 0
        assert "octocat-Hello-World" in result.output
        assert "7fd1a60" in result.output
        assert "serverless vercel/next.js" in result.output

    def test_json(self):
        with patch("bugsmith.cli.cache.describe_cache", return_value=self.ENTRIES):
            result = CliRunner().invoke(cli, ["cache", "describe", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == self.ENTRIES
