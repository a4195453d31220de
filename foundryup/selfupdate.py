"""Self-update: replace the installer when a newer one is published."""

import logging
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .capabilities import Downloader
from .errors import FoundryupError
from .fetcher import ArtifactFetcher
from .store import make_executable
from .versions import version_gt

INSTALLER_URL = "https://raw.githubusercontent.com/foundry-rs/foundry/HEAD/foundryup/foundryup"
VERSION_PATTERN = re.compile(
    r"""FOUNDRYUP_INSTALLER_VERSION\s*=\s*["']([^"']+)["']"""
)

_logging = logging.getLogger(__name__)


@dataclass
class SelfUpdateResult:
    current: str
    remote: str
    updated: bool


def extract_installer_version(source: str) -> str | None:
    match = VERSION_PATTERN.search(source)
    return match.group(1) if match else None


async def self_update(
    downloader: Downloader,
    target: Path,
    current: str,
    url: str = INSTALLER_URL,
) -> SelfUpdateResult:
    """Overwrite ``target`` with the remote installer if it is strictly newer."""
    with tempfile.TemporaryDirectory(prefix="foundryup-") as scratch:
        fetcher = ArtifactFetcher(downloader, Path(scratch))
        source = await fetcher.fetch_text(url, "foundryup", "downloading installer")

    remote = extract_installer_version(source)
    if remote is None:
        raise FoundryupError(f"could not determine installer version from {url}")

    if not version_gt(remote, current):
        _logging.debug(f"Installer {current} is up to date (remote {remote})")
        return SelfUpdateResult(current, remote, False)

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(source, encoding="utf-8")
    make_executable(target)
    _logging.info(f"Updated installer {current} -> {remote} at {target}")
    return SelfUpdateResult(current, remote, True)


__all__ = [
    "INSTALLER_URL",
    "SelfUpdateResult",
    "extract_installer_version",
    "self_update",
]
