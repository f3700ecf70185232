"""Exception types raised by version resolution and registry clients.

Resolution failures (``VersionNotFoundError``, ``VersionUnsupportedError``)
are deterministic for a given catalog and request. Integrity failures
(``ChecksumMismatchError``) are kept apart from them so callers can suggest
retrying the download instead of choosing another version.
"""

from typing import Optional


class RepositoryError(Exception):
    """Base class for all plugin repository errors."""


class VersionResolutionError(RepositoryError):
    """A requested plugin version could not be selected."""

    def __init__(
        self,
        plugin_id: str,
        requested_version: str,
        system_info: str,
        fallback_version: Optional[str] = None,
    ):
        self.plugin_id = plugin_id
        self.requested_version = requested_version
        self.system_info = system_info
        self.fallback_version = fallback_version
        super().__init__(self._message())

    def _describe(self) -> str:
        return (
            f"Could not resolve {self.plugin_id} v{self.requested_version} "
            f"for your system ({self.system_info})"
        )

    def _message(self) -> str:
        msg = self._describe()
        if self.fallback_version:
            msg += f"; latest supported version is {self.fallback_version}"
        return msg


class VersionNotFoundError(VersionResolutionError):
    """The requested version is not present in the catalog."""

    def _describe(self) -> str:
        return (
            f"{self.plugin_id} v{self.requested_version} either does not exist "
            f"or is not supported on your system ({self.system_info})"
        )


class VersionUnsupportedError(VersionResolutionError):
    """No version, or not the requested one, supports the current platform."""

    def _describe(self) -> str:
        if not self.requested_version:
            return f"{self.plugin_id} is not supported on your system ({self.system_info})"
        return (
            f"{self.plugin_id} v{self.requested_version} is not supported "
            f"on your system ({self.system_info})"
        )


class ChecksumMismatchError(RepositoryError):
    """Downloaded archive does not hash to the recorded checksum."""

    def __init__(self, url: str, expected: str, actual: str):
        self.url = url
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Failed to verify integrity of plugin archive {url}: "
            f"expected sha256 {expected}, got {actual}"
        )


class PluginNotFoundError(RepositoryError):
    """The registry returned 404 for a plugin or archive."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"Plugin not found in repository: {target}")


class RepositoryResponseError(RepositoryError):
    """The registry answered with an unexpected HTTP status."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Plugin repository returned status {status_code}{detail}")


class RepositoryConnectionError(RepositoryError):
    """Timeout or transport failure talking to the registry."""


class MetadataParseError(RepositoryError):
    """The registry metadata payload is malformed."""
