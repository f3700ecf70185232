"""Parsing utilities for requested versions and registry catalog payloads."""

from typing import Any, Dict, Optional

from repository.errors import MetadataParseError
from .models import PluginCatalog, VersionEntry


def normalize_version(version: Optional[str]) -> str:
    """Normalize a caller-supplied version string.

    All whitespace is removed, then a single leading ``^`` or ``v`` is
    dropped. An empty result means no specific version was requested.
    """
    if not version:
        return ""
    normalized = "".join(version.split())
    if normalized.startswith(("^", "v")):
        return normalized[1:]
    return normalized


def _parse_arch(plugin_id: str, version: str, arch: Any) -> Optional[Dict[str, str]]:
    """Map the registry ``arch`` object to PlatformKey -> checksum."""
    if arch is None:
        return None
    if not isinstance(arch, dict):
        raise MetadataParseError(
            f"Invalid arch metadata for {plugin_id} v{version}: expected object"
        )
    checksums: Dict[str, str] = {}
    for key, meta in arch.items():
        sha = ""
        if isinstance(meta, dict):
            sha = meta.get("sha256") or ""
        elif meta is not None:
            raise MetadataParseError(
                f"Invalid arch entry {key!r} for {plugin_id} v{version}"
            )
        checksums[str(key)] = str(sha)
    return checksums


def parse_plugin_catalog(payload: Any) -> PluginCatalog:
    """Build a PluginCatalog from the registry's JSON document.

    Version order and version strings are kept exactly as published.

    Raises:
        MetadataParseError: If the payload does not have the expected shape.
    """
    if not isinstance(payload, dict):
        raise MetadataParseError("Plugin metadata must be a JSON object")
    plugin_id = payload.get("id")
    if not isinstance(plugin_id, str) or not plugin_id:
        raise MetadataParseError("Plugin metadata is missing an id")
    raw_versions = payload.get("versions", [])
    if raw_versions is None:
        raw_versions = []
    if not isinstance(raw_versions, list):
        raise MetadataParseError(f"Versions for {plugin_id} must be a list")

    entries = []
    for item in raw_versions:
        if not isinstance(item, dict) or not isinstance(item.get("version"), str):
            raise MetadataParseError(f"Invalid version entry for {plugin_id}: {item!r}")
        version = item["version"]
        entries.append(
            VersionEntry(
                version=version,
                platform_checksums=_parse_arch(plugin_id, version, item.get("arch")),
            )
        )
    return PluginCatalog(id=plugin_id, versions=tuple(entries))
