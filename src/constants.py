"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3
    INTEGRITY_ERROR = 4


class OutputFormats(Enum):
    """Output formats supported by the CLI.

    Args:
        Enum (string): Output formats supported by the CLI.
    """

    TEXT = "text"
    JSON = "json"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Registry endpoints
    REPO_URL = "https://grafana.com/api/plugins"
    DOWNLOAD_BASE_URL = "https://grafana.com/api/plugins"
    ARCHIVE_PATH_TEMPLATE = "{base}/{plugin_id}/versions/{version}/download"

    # Compatibility context sent to the registry
    GRAFANA_VERSION = "10.0.0"

    # HTTP
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    SKIP_TLS_VERIFY = False

    # Logging
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "PLUGFETCH_LOG_LEVEL"

    # Configuration
    ENV_CONFIG = "PLUGFETCH_CONFIG"
    ENV_REPO_URL = "PLUGFETCH_REPO_URL"
    ENV_GRAFANA_VERSION = "PLUGFETCH_GRAFANA_VERSION"
    ENV_REQUEST_TIMEOUT = "PLUGFETCH_REQUEST_TIMEOUT"
    DEFAULT_CONFIG_PATHS = [
        "plugfetch.yml",
        "plugfetch.yaml",
        os.path.join("~", ".config", "plugfetch", "config.yml"),
    ]


# Mapping of YAML config keys to Constants attributes.
_CONFIG_KEYS = {
    "repository": {
        "url": "REPO_URL",
        "download_base_url": "DOWNLOAD_BASE_URL",
        "timeout": "REQUEST_TIMEOUT",
        "skip_tls_verify": "SKIP_TLS_VERIFY",
    },
    "grafana": {
        "version": "GRAFANA_VERSION",
    },
}


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML (or JSON) configuration file.

    When no path is given, the PLUGFETCH_CONFIG environment variable and then
    the default locations are tried in order. A missing file yields an empty
    dict; an unreadable or malformed file raises.

    Args:
        path: Optional explicit config path.

    Returns:
        dict: Parsed configuration mapping.
    """
    candidates = [path] if path else [os.environ.get(Constants.ENV_CONFIG)] + Constants.DEFAULT_CONFIG_PATHS
    for candidate in candidates:
        if not candidate:
            continue
        expanded = os.path.expanduser(candidate)
        if not os.path.isfile(expanded):
            if path:
                raise FileNotFoundError(expanded)
            continue
        with open(expanded, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {expanded}")
        logger.debug("Loaded configuration from %s", expanded)
        return data
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply a parsed configuration mapping onto Constants.

    Unknown sections and keys are ignored.
    """
    for section, keys in _CONFIG_KEYS.items():
        values = cfg.get(section)
        if not isinstance(values, dict):
            continue
        for key, attr in keys.items():
            if key in values and values[key] is not None:
                setattr(Constants, attr, values[key])
