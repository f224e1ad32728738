"""bugsmith: fetch GitHub repositories into a local cache for analysis."""

__version__ = "0.1.0"
