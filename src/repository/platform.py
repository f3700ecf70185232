"""Platform detection for plugin archive selection.

Platform keys follow the registry's ``<os>-<arch>`` naming, which uses Go's
GOOS/GOARCH vocabulary (``linux-amd64``, ``darwin-arm64``, ...).
"""

import platform
from dataclasses import dataclass
from typing import Optional, Tuple

_OS_NAMES = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
    "freebsd": "freebsd",
}

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


def current_os() -> str:
    """Return the running OS in registry naming."""
    system = platform.system().lower()
    return _OS_NAMES.get(system, system)


def current_arch() -> str:
    """Return the running CPU architecture in registry naming."""
    machine = platform.machine().lower()
    return _ARCH_NAMES.get(machine, machine)


def os_and_arch_string() -> str:
    """Return the PlatformKey of the running system, e.g. ``linux-amd64``."""
    return f"{current_os()}-{current_arch()}"


def split_platform_key(platform_key: str) -> Tuple[str, str]:
    """Split ``<os>-<arch>`` into its parts; a key without a dash has no arch."""
    os_name, _, arch = platform_key.partition("-")
    return os_name, arch


@dataclass(frozen=True)
class SystemInfo:
    """Diagnostic description of the caller's environment."""

    grafana_version: str
    platform_key: str

    @classmethod
    def detect(cls, grafana_version: str, platform_key: Optional[str] = None) -> "SystemInfo":
        """Describe the environment, using platform_key in place of the detected one if given."""
        return cls(grafana_version=grafana_version, platform_key=platform_key or os_and_arch_string())

    def __str__(self) -> str:
        return f"Grafana v{self.grafana_version} {self.platform_key}"
