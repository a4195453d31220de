"""Host platform and architecture resolution."""

import logging
import platform as _platform
from dataclasses import dataclass
from enum import Enum

from .errors import UnsupportedTargetError
from .execution import run_command_async

_logging = logging.getLogger(__name__)


class Platform(str, Enum):
    LINUX = "linux"
    ALPINE = "alpine"
    DARWIN = "darwin"
    WIN32 = "win32"


class Architecture(str, Enum):
    AMD64 = "amd64"
    ARM64 = "arm64"


@dataclass(frozen=True)
class PlatformTarget:
    platform: Platform
    architecture: Architecture

    @property
    def extension(self) -> str:
        return "zip" if self.platform == Platform.WIN32 else "tar.gz"

    @property
    def binary_suffix(self) -> str:
        return ".exe" if self.platform == Platform.WIN32 else ""


def resolve_platform(os_name: str) -> Platform:
    """Map a host OS name to a release platform.

    Raises:
        UnsupportedTargetError: If the name matches no known platform
    """
    name = os_name.strip().lower()
    if name in ("linux", "alpine"):
        return Platform(name)
    if name == "darwin" or name.startswith("mac"):
        return Platform.DARWIN
    if name.startswith("mingw") or name.startswith("win"):
        return Platform.WIN32
    raise UnsupportedTargetError(f"unsupported platform: {name}")


def resolve_architecture(machine: str, translated: bool = False) -> Architecture:
    """Map a machine name to a release architecture.

    An x86_64 process running under translation (Rosetta) is really on arm64.
    """
    name = machine.strip().lower()
    if name == "x86_64":
        return Architecture.ARM64 if translated else Architecture.AMD64
    if name in ("arm64", "aarch64"):
        return Architecture.ARM64
    return Architecture.AMD64


async def is_translated() -> bool:
    """True when ``sysctl.proc_translated`` reports emulation (macOS only)."""
    output, returncode = await run_command_async(
        ["sysctl", "-n", "sysctl.proc_translated"]
    )
    return returncode == 0 and output.strip() == "1"


async def detect_target(
    platform_override: str | None = None,
    arch_override: str | None = None,
) -> PlatformTarget:
    """Resolve the target for this host, honouring explicit overrides."""
    os_name = platform_override or _platform.system()
    resolved_platform = resolve_platform(os_name)

    machine = arch_override or _platform.machine()
    translated = False
    if not arch_override and machine.lower() == "x86_64":
        translated = await is_translated()
    resolved_arch = resolve_architecture(machine, translated)

    _logging.debug(
        f"Resolved target {resolved_platform.value}/{resolved_arch.value} "
        f"(os={os_name}, machine={machine}, translated={translated})"
    )
    return PlatformTarget(resolved_platform, resolved_arch)


__all__ = [
    "Platform",
    "Architecture",
    "PlatformTarget",
    "resolve_platform",
    "resolve_architecture",
    "is_translated",
    "detect_target",
]
