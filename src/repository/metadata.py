"""Plugin metadata source: fetch a plugin's version catalog from the registry."""
from __future__ import annotations

import logging
from typing import Optional

import requests

from constants import Constants
from common.http_client import compat_headers, error_message, safe_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from versioning.models import PluginCatalog
from versioning.parser import parse_plugin_catalog

from .errors import MetadataParseError, PluginNotFoundError, RepositoryResponseError
from .platform import os_and_arch_string, split_platform_key

logger = logging.getLogger(__name__)


class MetadataSource:
    """Client for ``{repo_url}/repo/{plugin_id}``."""

    def __init__(
        self,
        repo_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        verify_tls: bool = True,
    ):
        self.repo_url = (repo_url or Constants.REPO_URL).rstrip("/")
        self.session = session or requests.Session()
        self.session.verify = verify_tls
        self.timeout = timeout

    def metadata_url(self, plugin_id: str) -> str:
        return f"{self.repo_url}/repo/{plugin_id}"

    def fetch_plugin_metadata(
        self, plugin_id: str, grafana_version: str, platform: Optional[str] = None
    ) -> PluginCatalog:
        """Fetch and parse the catalog for plugin_id.

        Args:
            plugin_id: Plugin identifier.
            grafana_version: Compatibility context passed through to the registry.
            platform: PlatformKey sent as grafana-os/grafana-arch; defaults to
                the running system.

        Returns:
            PluginCatalog: Versions as published, newest first.

        Raises:
            PluginNotFoundError: Registry returned 404.
            RepositoryResponseError: Registry returned another non-2xx status.
            RepositoryConnectionError: Timeout or transport failure.
            MetadataParseError: Response body is not a valid catalog.
        """
        url = self.metadata_url(plugin_id)
        logger.debug('Fetching metadata for plugin "%s" from repo %s', plugin_id, safe_url(self.repo_url))

        os_name, arch = split_platform_key(platform or os_and_arch_string())

        with Timer() as timer:
            res = safe_get(
                url,
                context="metadata",
                session=self.session,
                timeout=self.timeout,
                headers=compat_headers(grafana_version, os_name, arch),
            )

        if res.status_code == 404:
            logger.warning(
                "HTTP 404 received for plugin metadata",
                extra=extra_context(
                    event="http_response",
                    outcome="not_found",
                    status_code=404,
                    target=safe_url(url),
                )
            )
            raise PluginNotFoundError(plugin_id)
        if res.status_code < 200 or res.status_code >= 300:
            logger.warning(
                "HTTP non-2xx received for plugin metadata",
                extra=extra_context(
                    event="http_response",
                    outcome="non_2xx",
                    status_code=res.status_code,
                    duration_ms=timer.duration_ms(),
                    target=safe_url(url),
                )
            )
            raise RepositoryResponseError(res.status_code, error_message(res))

        try:
            payload = res.json()
        except ValueError as exc:
            logger.error("Failed to unmarshal plugin repo response: %s", exc)
            raise MetadataParseError(f"Invalid JSON in metadata for {plugin_id}") from exc

        catalog = parse_plugin_catalog(payload)
        if is_debug_enabled(logger):
            logger.debug(
                "Parsed plugin metadata",
                extra=extra_context(
                    event="parse",
                    component="metadata",
                    outcome="success",
                    count=len(catalog.versions),
                    duration_ms=timer.duration_ms(),
                    target=safe_url(url),
                )
            )
        return catalog
