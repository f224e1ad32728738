from dataclasses import dataclass

from .exceptions import InvalidIdentityError


@dataclass(frozen=True)
class RepositoryIdentity:
    """A GitHub-style ``owner/name`` pair."""

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def slug(self) -> str:
        """Directory name of the cache entry, e.g. ``octocat-Hello-World``."""
        return f"{self.owner}-{self.name}"

    def remote_url(self, host: str) -> str:
        return f"https://{host}/{self.owner}/{self.name}.git"


def parse_identity(identifier: str) -> RepositoryIdentity:
    """
    Split ``owner/name`` into a RepositoryIdentity.

    Raises:
        InvalidIdentityError: unless the identifier has exactly one ``/``
            with a non-empty segment on each side.
    """
    parts = identifier.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidIdentityError(identifier)
    return RepositoryIdentity(owner=parts[0], name=parts[1])
