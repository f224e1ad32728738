"""Tests for owner/name parsing."""

import pytest

from bugsmith.git.exceptions import InvalidIdentityError
from bugsmith.git.identity import RepositoryIdentity, parse_identity


@pytest.mark.short
class TestParseIdentity:
    def test_owner_and_name(self):
        identity = parse_identity("octocat/Hello-World")
        assert identity == RepositoryIdentity(owner="octocat", name="Hello-World")

    def test_dots_and_underscores_are_kept(self):
        identity = parse_identity("vercel/next.js")
        assert identity.owner == "vercel"
        assert identity.name == "next.js"

    @pytest.mark.parametrize(
        "identifier", ["a/b/c", "a", "", "/b", "a/", "/", "owner//name"]
    )
    def test_invalid_identifiers(self, identifier):
        with pytest.raises(InvalidIdentityError) as excinfo:
            parse_identity(identifier)
        assert excinfo.value.identifier == identifier
        assert "owner/repo" in str(excinfo.value)

    def test_invalid_identity_is_value_error(self):
        with pytest.raises(ValueError):
            parse_identity("a/b/c")


@pytest.mark.short
class TestRepositoryIdentity:
    def test_str(self):
        assert str(RepositoryIdentity("octocat", "Hello-World")) == "octocat/Hello-World"

    def test_slug(self):
        assert RepositoryIdentity("octocat", "Hello-World").slug == "octocat-Hello-World"

    def test_remote_url(self):
        identity = RepositoryIdentity("octocat", "Hello-World")
        assert (
            identity.remote_url("github.com")
            == "https://github.com/octocat/Hello-World.git"
        )

    def test_frozen(self):
        identity = RepositoryIdentity("octocat", "Hello-World")
        with pytest.raises(AttributeError):
            identity.owner = "someone"
