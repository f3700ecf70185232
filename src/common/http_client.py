"""Shared HTTP helpers used by the metadata source and archive fetcher.

Encapsulates common request/timeout error handling so callers avoid
duplicating try/except blocks. Transport failures are raised as
``RepositoryConnectionError``; HTTP status handling is left to callers.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from repository.errors import RepositoryConnectionError

logger = logging.getLogger(__name__)


def compat_headers(grafana_version: str, os_name: str, arch: str) -> Dict[str, str]:
    """Headers the registry uses to filter versions for the caller."""
    return {
        "grafana-version": grafana_version,
        "grafana-os": os_name,
        "grafana-arch": arch,
        "User-Agent": f"grafana {grafana_version}",
    }


def safe_get(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "metadata").
        session: Optional session to issue the request on.
        timeout: Seconds before giving up; defaults to Constants.REQUEST_TIMEOUT.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        RepositoryConnectionError: On timeout or connection failure.
    """
    safe_target = safe_url(url)
    timeout = Constants.REQUEST_TIMEOUT if timeout is None else timeout
    getter = session.get if session is not None else requests.get
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = getter(url, timeout=timeout, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                timeout,
            )
            raise RepositoryConnectionError(
                f"{context} request to {safe_target} timed out after {timeout} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise RepositoryConnectionError(
                f"{context} request to {safe_target} failed: {exc}"
            ) from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def error_message(res: requests.Response) -> str:
    """Extract the registry's ``message`` field from an error response, if any."""
    try:
        data = res.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str):
            return message
    return ""
