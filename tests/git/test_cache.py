"""Tests for cache entry paths and cache description."""

import json

import pytest
from dulwich import porcelain

from bugsmith.git.cache import (
    cache_root,
    describe_cache,
    get_entry_lock,
    has_checkout,
    resolve_cache_path,
)
from bugsmith.git.environment import EnvironmentSnapshot
from bugsmith.git.exceptions import FilesystemError
from bugsmith.git.identity import RepositoryIdentity

IDENTITY = RepositoryIdentity("octocat", "Hello-World")
LINUX = EnvironmentSnapshot(env={"TMP": "/tmp"}, platform="linux")


@pytest.mark.short
class TestCacheRoot:
    def test_degraded_always_tmp(self):
        windows = EnvironmentSnapshot(env={"TEMP": "C:\\Temp"}, platform="win32")
        assert cache_root(True, windows) == "/tmp"
        assert cache_root(True, LINUX) == "/tmp"

    def test_linux(self):
        assert cache_root(False, LINUX) == "/tmp"

    def test_windows_temp(self):
        snapshot = EnvironmentSnapshot(
            env={"TEMP": "C:\\Temp", "TMP": "D:\\Tmp"}, platform="win32"
        )
        assert cache_root(False, snapshot) == "C:\\Temp"

    def test_windows_tmp(self):
        snapshot = EnvironmentSnapshot(env={"TMP": "D:\\Tmp"}, platform="win32")
        assert cache_root(False, snapshot) == "D:\\Tmp"

    def test_windows_fallback(self):
        snapshot = EnvironmentSnapshot(env={}, platform="win32")
        assert cache_root(False, snapshot) == "C:\\temp"


@pytest.mark.short
class TestResolveCachePath:
    def test_layout(self, tmp_root):
        path = resolve_cache_path(IDENTITY, True, LINUX)
        assert path == tmp_root / "bugsmith" / "octocat-Hello-World"
        assert path.is_dir()
        assert path.is_absolute()

    def test_idempotent(self, tmp_root):
        first = resolve_cache_path(IDENTITY, False, LINUX)
        (first / "keep.txt").write_text("kept")

        second = resolve_cache_path(IDENTITY, False, LINUX)

        assert str(first) == str(second)
        assert (second / "keep.txt").read_text() == "kept"

    def test_distinct_identities(self, tmp_root):
        a = resolve_cache_path(RepositoryIdentity("a", "b"), True, LINUX)
        b = resolve_cache_path(RepositoryIdentity("a", "c"), True, LINUX)
        assert a != b

    def test_unwritable_root(self, tmp_path, monkeypatch):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        monkeypatch.setattr("bugsmith.git.cache.UNIVERSAL_TMP_ROOT", str(blocker))

        with pytest.raises(FilesystemError) as excinfo:
            resolve_cache_path(IDENTITY, True, LINUX)
        assert "not-a-dir" in excinfo.value.path

    def test_filesystem_error_is_os_error(self, tmp_path, monkeypatch):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        monkeypatch.setattr("bugsmith.git.cache.UNIVERSAL_TMP_ROOT", str(blocker))

        with pytest.raises(OSError):
            resolve_cache_path(IDENTITY, True, LINUX)


@pytest.mark.short
def test_entry_lock_sits_next_to_entry(tmp_path):
    entry = tmp_path / "bugsmith" / "vercel-next.js"
    lock = get_entry_lock(entry, timeout=1)
    assert lock.lock_file == str(tmp_path / "bugsmith" / "vercel-next.js.lock")


@pytest.mark.short
def test_has_checkout(tmp_path):
    assert not has_checkout(tmp_path)
    (tmp_path / ".git").mkdir()
    assert has_checkout(tmp_path)


@pytest.mark.short
class TestDescribeCache:
    def test_missing_namespace(self, tmp_root):
        assert describe_cache(LINUX) == []

    def test_entries(self, tmp_root):
        namespace = tmp_root / "bugsmith"

        placeholder = namespace / "vercel-next.js"
        placeholder.mkdir(parents=True)
        (placeholder / ".bugsmith-serverless").write_text(
            json.dumps({"repo": "vercel/next.js", "cloned": False, "serverless": True})
        )

        checkout = namespace / "octocat-Hello-World"
        checkout.mkdir()
        porcelain.init(str(checkout))
        (checkout / "README").write_text("hello")
        porcelain.add(str(checkout), paths=[str(checkout / "README")])
        commit_sha = porcelain.commit(
            str(checkout),
            message=b"initial commit",
            author=b"Test <test@test>",
            committer=b"Test <test@test>",
        )

        (namespace / "a-b").mkdir()
        (namespace / "a-b.lock").write_text("")

        entries = {entry["name"]: entry for entry in describe_cache(LINUX)}

        assert set(entries) == {"vercel-next.js", "octocat-Hello-World", "a-b"}
        assert entries["vercel-next.js"]["kind"] == "serverless"
        assert entries["vercel-next.js"]["repo"] == "vercel/next.js"
        assert entries["octocat-Hello-World"]["kind"] == "checkout"
        assert entries["octocat-Hello-World"]["head"] == commit_sha.decode("ascii")
        assert entries["octocat-Hello-World"]["url"] == "unknown"
        assert entries["a-b"]["kind"] == "empty"
        assert entries["a-b"]["path"] == str(namespace / "a-b")

    def test_corrupt_marker(self, tmp_root):
        entry = tmp_root / "bugsmith" / "a-b"
        entry.mkdir(parents=True)
        (entry / ".bugsmith-serverless").write_text("{not json")

        (info,) = describe_cache(LINUX)
        assert info["kind"] == "serverless"
        assert info["repo"] == "unknown"
