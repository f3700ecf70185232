"""Runtime configuration for the CLI.

Settings are layered onto Constants in increasing precedence: built-in
defaults, the YAML config file, PLUGFETCH_* environment variables, then
CLI flags.
"""

from __future__ import annotations

import logging
import os

from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def apply_env_overrides() -> None:
    """Apply PLUGFETCH_* environment variables onto Constants.

    Raises:
        ValueError: If PLUGFETCH_REQUEST_TIMEOUT is not a number.
    """
    repo_url = os.environ.get(Constants.ENV_REPO_URL)
    if repo_url and repo_url.strip():
        Constants.REPO_URL = repo_url.strip()
    grafana_version = os.environ.get(Constants.ENV_GRAFANA_VERSION)
    if grafana_version and grafana_version.strip():
        Constants.GRAFANA_VERSION = grafana_version.strip()
    timeout = os.environ.get(Constants.ENV_REQUEST_TIMEOUT)
    if timeout and timeout.strip():
        Constants.REQUEST_TIMEOUT = float(timeout)


def apply_cli_overrides(args) -> None:
    """Apply CLI flags onto Constants; flags that were not given are ignored."""
    if getattr(args, "REPO_URL", None):
        Constants.REPO_URL = args.REPO_URL
    if getattr(args, "GRAFANA_VERSION", None):
        Constants.GRAFANA_VERSION = args.GRAFANA_VERSION
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.REQUEST_TIMEOUT = args.TIMEOUT
    if getattr(args, "SKIP_TLS_VERIFY", False):
        Constants.SKIP_TLS_VERIFY = True


def load_configuration(args) -> None:
    """Load config file, environment and CLI overrides in precedence order.

    Raises:
        FileNotFoundError: An explicit --config path does not exist.
        ValueError: The config file or an override is malformed.
        yaml.YAMLError: The config file is not valid YAML.
    """
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    if cfg:
        apply_config(cfg)
    apply_env_overrides()
    apply_cli_overrides(args)
    if Constants.SKIP_TLS_VERIFY:
        logger.warning("TLS certificate verification is disabled for plugin repository requests.")
