"""Plugin version resolver.

Selects which published version of a plugin to download for the running
platform and derives its archive URL and expected checksum. Everything here
is pure: no I/O, no shared state.

The catalog's ``versions`` must be ordered newest first. That order is
trusted as given; ``is_newest_first`` exists only so callers can log when a
registry response looks out of order.
"""

import logging
from typing import Optional

import semantic_version

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from repository.errors import VersionNotFoundError, VersionUnsupportedError
from .models import PLATFORM_ANY, DownloadSelection, PluginCatalog, VersionEntry
from .parser import normalize_version

logger = logging.getLogger(__name__)


def supports_platform(entry: VersionEntry, platform: str) -> bool:
    """Return True if entry can be installed on platform.

    Source-only entries (no checksum map) are supported everywhere.
    """
    if entry.platform_checksums is None:
        return True
    return platform in entry.platform_checksums or PLATFORM_ANY in entry.platform_checksums


def latest_supported_version(catalog: PluginCatalog, platform: str) -> Optional[VersionEntry]:
    """Return the first entry in catalog order supported on platform."""
    for entry in catalog.versions:
        if supports_platform(entry, platform):
            return entry
    return None


def resolve_version(
    catalog: PluginCatalog,
    requested_version: Optional[str],
    platform: str,
    system_info: str = "",
) -> VersionEntry:
    """Select the catalog entry to download.

    Returns the requested version if it exists and supports platform, or the
    latest supported version when nothing was requested. A missing or
    unsupported requested version is an error; the latest supported version is
    only mentioned in the error, never substituted.

    Raises:
        VersionUnsupportedError: No entry supports platform, or the requested
            entry does not.
        VersionNotFoundError: The requested version is not in the catalog.
    """
    version = normalize_version(requested_version)
    system_info = system_info or platform

    fallback = latest_supported_version(catalog, platform)
    if fallback is None:
        raise VersionUnsupportedError(catalog.id, version, system_info)

    if not version:
        return fallback

    match = None
    for entry in catalog.versions:
        if entry.version == version:
            match = entry
            break

    if match is None:
        logger.debug(
            "Requested plugin version %s v%s not found but potential fallback version '%s' was found",
            catalog.id, version, fallback.version,
            extra=extra_context(event="decision", component="resolver", outcome="not_found"),
        )
        raise VersionNotFoundError(catalog.id, version, system_info, fallback.version)

    if not supports_platform(match, platform):
        logger.debug(
            "Requested plugin version %s v%s is not supported on your system but "
            "potential fallback version '%s' was found",
            catalog.id, version, fallback.version,
            extra=extra_context(event="decision", component="resolver", outcome="unsupported"),
        )
        raise VersionUnsupportedError(catalog.id, version, system_info, fallback.version)

    return match


def archive_url(plugin_id: str, version: str, base_url: Optional[str] = None) -> str:
    """Build ``{base}/{plugin_id}/versions/{version}/download``."""
    base = (base_url or Constants.DOWNLOAD_BASE_URL).rstrip("/")
    return Constants.ARCHIVE_PATH_TEMPLATE.format(base=base, plugin_id=plugin_id, version=version)


def build_download_options(
    entry: VersionEntry,
    plugin_id: str,
    platform: str,
    base_url: Optional[str] = None,
) -> DownloadSelection:
    """Derive the download selection for a resolved entry.

    The checksum for platform is preferred, then the ``any`` checksum. Entries
    without either (source-only releases) get an empty checksum.
    """
    checksum = ""
    if entry.platform_checksums is not None:
        checksum = entry.platform_checksums.get(platform)
        if checksum is None:
            checksum = entry.platform_checksums.get(PLATFORM_ANY, "")

    selection = DownloadSelection(
        version=entry.version,
        checksum=checksum,
        archive_url=archive_url(plugin_id, entry.version, base_url),
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Built download options",
            extra=extra_context(
                event="decision",
                component="resolver",
                action="build_download_options",
                target=selection.archive_url,
                outcome="checksum" if checksum else "no_checksum",
            ),
        )
    return selection


def is_newest_first(catalog: PluginCatalog) -> bool:
    """Check whether the catalog's parseable semver entries are in descending order.

    Partial versions such as ``2.0`` are coerced; entries that cannot be
    parsed at all are skipped.
    """
    previous = None
    for entry in catalog.versions:
        try:
            current = semantic_version.Version.coerce(entry.version)
        except ValueError:
            continue
        if previous is not None and current > previous:
            return False
        previous = current
    return True
