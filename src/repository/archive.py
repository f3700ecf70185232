"""Archive fetcher: download plugin archives and verify their checksum."""
from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Optional

import requests

from constants import Constants
from common.http_client import compat_headers, error_message, safe_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

from .errors import (
    ChecksumMismatchError,
    PluginNotFoundError,
    RepositoryConnectionError,
    RepositoryResponseError,
)
from .platform import os_and_arch_string, split_platform_key

logger = logging.getLogger(__name__)


@dataclass
class PluginArchive:
    """A downloaded archive on disk.

    Used as a context manager, the file is removed on exit unless it was
    moved elsewhere with ``move_to``.
    """

    path: str
    checksum: str
    size: int

    def move_to(self, destination: str) -> str:
        """Move the archive to destination and return the new path."""
        parent = os.path.dirname(os.path.abspath(destination))
        os.makedirs(parent, exist_ok=True)
        self.path = shutil.move(self.path, destination)
        return self.path

    def cleanup(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass

    def __enter__(self) -> "PluginArchive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


class ArchiveFetcher:
    """Streams plugin archives to temporary files."""

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        verify_tls: bool = True,
        chunk_size: Optional[int] = None,
    ):
        self.session = session or requests.Session()
        self.session.verify = verify_tls
        self.timeout = timeout
        self.chunk_size = chunk_size or Constants.DOWNLOAD_CHUNK_SIZE

    def download(
        self,
        archive_url: str,
        checksum: str,
        grafana_version: str,
        platform: Optional[str] = None,
    ) -> PluginArchive:
        """Fetch archive_url and verify it against checksum.

        An empty checksum skips verification (source-only releases). platform
        is the PlatformKey reported to the registry, defaulting to the running
        system.

        Raises:
            ChecksumMismatchError: Digest differs from checksum.
            PluginNotFoundError: Registry returned 404.
            RepositoryResponseError: Registry returned another non-2xx status.
            RepositoryConnectionError: Timeout or transport failure.
        """
        target = safe_url(archive_url)
        logger.info("Downloading plugin archive from %s", target)

        os_name, arch = split_platform_key(platform or os_and_arch_string())

        with Timer() as timer:
            res = safe_get(
                archive_url,
                context="archive",
                session=self.session,
                timeout=self.timeout,
                stream=True,
                headers=compat_headers(grafana_version, os_name, arch),
            )
            try:
                if res.status_code == 404:
                    raise PluginNotFoundError(target)
                if res.status_code < 200 or res.status_code >= 300:
                    raise RepositoryResponseError(res.status_code, error_message(res))
                path, digest, size = self._write_temp(res, target)
            finally:
                res.close()

        if checksum and digest.lower() != checksum.lower():
            os.remove(path)
            logger.error(
                "Checksum mismatch for plugin archive",
                extra=extra_context(
                    event="verify",
                    component="archive",
                    outcome="checksum_mismatch",
                    target=target,
                )
            )
            raise ChecksumMismatchError(target, checksum, digest)

        if is_debug_enabled(logger):
            logger.debug(
                "Plugin archive downloaded",
                extra=extra_context(
                    event="download",
                    component="archive",
                    outcome="verified" if checksum else "unverified",
                    size=size,
                    duration_ms=timer.duration_ms(),
                    target=target,
                )
            )
        return PluginArchive(path=path, checksum=digest if checksum else "", size=size)

    def _write_temp(self, res: requests.Response, target: str):
        """Stream the body to a temp file, returning (path, sha256 hex, size)."""
        sha = hashlib.sha256()
        size = 0
        fd, path = tempfile.mkstemp(prefix="plugin_", suffix=".zip")
        try:
            with os.fdopen(fd, "wb") as out:
                for chunk in res.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    sha.update(chunk)
                    out.write(chunk)
                    size += len(chunk)
        except requests.RequestException as exc:
            os.remove(path)
            raise RepositoryConnectionError(f"Download of {target} interrupted: {exc}") from exc
        except OSError:
            os.remove(path)
            raise
        return path, sha.hexdigest(), size
