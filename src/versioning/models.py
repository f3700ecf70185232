"""Data models for plugin catalogs and download selection."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# Platform key for releases that run anywhere.
PLATFORM_ANY = "any"


@dataclass(frozen=True)
class VersionEntry:
    """One published release of a plugin.

    ``platform_checksums`` is None for source-only releases, which are
    supported on every platform and carry no checksum.
    """
    version: str
    platform_checksums: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class PluginCatalog:
    """All published releases of one plugin, newest first.

    The newest-first order is supplied by the registry and is relied upon,
    never re-derived.
    """
    id: str
    versions: Tuple[VersionEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DownloadSelection:
    """Resolved version, expected checksum and archive location."""
    version: str
    checksum: str
    archive_url: str

    def to_dict(self) -> Dict[str, str]:
        """Serialize for JSON output."""
        return {
            "version": self.version,
            "checksum": self.checksum,
            "archiveURL": self.archive_url,
        }


@dataclass(frozen=True)
class CompatibilityOptions:
    """Caller context forwarded to the registry and used for platform checks."""
    grafana_version: str
    platform: Optional[str] = None
