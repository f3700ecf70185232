"""Plugin repository clients and errors."""

from .errors import (
    ChecksumMismatchError,
    MetadataParseError,
    PluginNotFoundError,
    RepositoryConnectionError,
    RepositoryError,
    RepositoryResponseError,
    VersionNotFoundError,
    VersionResolutionError,
    VersionUnsupportedError,
)

__all__ = [
    "ChecksumMismatchError",
    "MetadataParseError",
    "PluginNotFoundError",
    "RepositoryConnectionError",
    "RepositoryError",
    "RepositoryResponseError",
    "VersionNotFoundError",
    "VersionResolutionError",
    "VersionUnsupportedError",
]
