"""Shared fixtures for plugfetch tests."""

import pytest

from constants import Constants
from versioning.models import PluginCatalog, VersionEntry

LINUX = "linux-amd64"
WINDOWS = "windows-amd64"


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch):
    """Snapshot Constants so config overrides do not leak between tests."""
    for name in dir(Constants):
        if name.isupper():
            monkeypatch.setattr(Constants, name, getattr(Constants, name))
    for var in ("PLUGFETCH_CONFIG", "PLUGFETCH_REPO_URL",
                "PLUGFETCH_GRAFANA_VERSION", "PLUGFETCH_REQUEST_TIMEOUT",
                "PLUGFETCH_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    yield


def make_catalog(plugin_id, *entries):
    """Build a catalog from (version, checksums-or-None) pairs."""
    return PluginCatalog(
        id=plugin_id,
        versions=tuple(VersionEntry(version=v, platform_checksums=c) for v, c in entries),
    )


@pytest.fixture
def mixed_catalog():
    """3.0 is Windows only, 2.0 and 1.0 run anywhere."""
    return make_catalog(
        "test-panel",
        ("3.0", {WINDOWS: "win-sha"}),
        ("2.0", {"any": "any-sha-2"}),
        ("1.0", {"any": "any-sha-1"}),
    )
