"""Plugin repository service.

Composes the metadata source, the version resolver and the archive fetcher
into the operations callers use: compute download options for a plugin and
version, or download the selected archive.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import CompatibilityOptions, DownloadSelection
from versioning.resolver import build_download_options, is_newest_first, resolve_version

from .archive import ArchiveFetcher, PluginArchive
from .metadata import MetadataSource
from .platform import SystemInfo

logger = logging.getLogger(__name__)


class RepositoryService:
    """Entry point for resolving and downloading plugins."""

    def __init__(
        self,
        repo_url: Optional[str] = None,
        *,
        download_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        skip_tls_verify: bool = False,
        metadata_source: Optional[MetadataSource] = None,
        archive_fetcher: Optional[ArchiveFetcher] = None,
    ):
        session = None
        if metadata_source is None or archive_fetcher is None:
            session = requests.Session()
        self.metadata_source = metadata_source or MetadataSource(
            repo_url, session=session, timeout=timeout, verify_tls=not skip_tls_verify
        )
        self.archive_fetcher = archive_fetcher or ArchiveFetcher(
            session=session, timeout=timeout, verify_tls=not skip_tls_verify
        )
        self.download_base_url = download_base_url or Constants.DOWNLOAD_BASE_URL

    @classmethod
    def from_constants(cls) -> "RepositoryService":
        """Build a service from the active configuration in Constants."""
        return cls(
            Constants.REPO_URL,
            download_base_url=Constants.DOWNLOAD_BASE_URL,
            timeout=Constants.REQUEST_TIMEOUT,
            skip_tls_verify=bool(Constants.SKIP_TLS_VERIFY),
        )

    def get_download_options(
        self, plugin_id: str, version: str, opts: CompatibilityOptions
    ) -> DownloadSelection:
        """Fetch the catalog, resolve version and build the download selection.

        Raises:
            VersionNotFoundError, VersionUnsupportedError: Resolution failed.
            RepositoryError: Metadata could not be fetched or parsed.
        """
        system_info = SystemInfo.detect(opts.grafana_version, opts.platform)
        platform = system_info.platform_key
        catalog = self.metadata_source.fetch_plugin_metadata(plugin_id, opts.grafana_version, platform)

        if not is_newest_first(catalog):
            logger.warning(
                "Versions for plugin %s are not ordered newest first; resolution follows registry order",
                catalog.id,
            )

        entry = resolve_version(catalog, version, platform, str(system_info))
        selection = build_download_options(entry, plugin_id, platform, self.download_base_url)

        if is_debug_enabled(logger):
            logger.debug(
                "Resolved plugin version",
                extra=extra_context(
                    event="decision",
                    component="service",
                    action="get_download_options",
                    outcome="resolved",
                    target=selection.version,
                )
            )
        return selection

    def download(self, plugin_id: str, version: str, opts: CompatibilityOptions) -> PluginArchive:
        """Resolve and download a plugin archive, verifying its checksum."""
        platform = SystemInfo.detect(opts.grafana_version, opts.platform).platform_key
        selection = self.get_download_options(plugin_id, version, opts)
        logger.info("Selected %s v%s", plugin_id, selection.version)
        return self.archive_fetcher.download(
            selection.archive_url, selection.checksum, opts.grafana_version, platform
        )

    def download_with_url(self, archive_url: str, opts: CompatibilityOptions) -> PluginArchive:
        """Download an archive from an explicit URL without checksum verification."""
        platform = SystemInfo.detect(opts.grafana_version, opts.platform).platform_key
        return self.archive_fetcher.download(archive_url, "", opts.grafana_version, platform)
