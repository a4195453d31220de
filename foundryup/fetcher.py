"""Release artifact URLs and downloads."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .capabilities import DownloadResult, Downloader
from .errors import NetworkError
from .platforms import PlatformTarget

ARTIFACT_PREFIX = "foundry"

_logging = logging.getLogger(__name__)


class AttestationStatus(str, Enum):
    FOUND = "found"
    MISSING = "missing"


@dataclass(frozen=True)
class ReleaseUrls:
    archive: str
    attestation: str
    manpages: str

    @classmethod
    def build(
        cls, repo: str, tag: str, version: str, target: PlatformTarget
    ) -> "ReleaseUrls":
        base = f"https://github.com/{repo}/releases/download/{tag}/"
        stem = (
            f"{ARTIFACT_PREFIX}_{version}_"
            f"{target.platform.value}_{target.architecture.value}"
        )
        return cls(
            archive=f"{base}{stem}.{target.extension}",
            attestation=f"{base}{stem}.attestation.txt",
            manpages=f"{base}{ARTIFACT_PREFIX}_man_{version}.tar.gz",
        )


@dataclass(frozen=True)
class FetchedAttestation:
    status: AttestationStatus
    document: str = ""
    link: str = ""


def read_attestation_link(pointer: str) -> str:
    """Return the first non-empty line of an attestation pointer file."""
    for line in pointer.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


class ArtifactFetcher:
    """Fetch release artifacts into a scratch directory.

    Every fetch is a single request. Apart from a missing attestation, any
    failure is fatal for the install.
    """

    def __init__(self, downloader: Downloader, scratch_dir: Path):
        self.downloader = downloader
        self.scratch_dir = scratch_dir

    async def _download(self, url: str, dest: Path, operation: str) -> DownloadResult:
        _logging.debug(f"{operation}: {url} -> {dest}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        return await self.downloader.download(url, dest)

    async def fetch(self, url: str, dest: Path, operation: str) -> Path:
        result = await self._download(url, dest, operation)
        if not result.ok:
            raise NetworkError(operation, url, result.detail)
        return dest

    async def fetch_text(self, url: str, name: str, operation: str) -> str:
        path = await self.fetch(url, self.scratch_dir / name, operation)
        return path.read_text(encoding="utf-8", errors="replace")

    async def fetch_archive(self, urls: ReleaseUrls) -> Path:
        name = urls.archive.rsplit("/", 1)[-1]
        return await self.fetch(
            urls.archive, self.scratch_dir / name, "downloading release archive"
        )

    async def fetch_manpages(self, urls: ReleaseUrls) -> Path:
        name = urls.manpages.rsplit("/", 1)[-1]
        return await self.fetch(
            urls.manpages, self.scratch_dir / name, "downloading manpages"
        )

    async def fetch_attestation(self, urls: ReleaseUrls) -> FetchedAttestation:
        """Follow the attestation pointer to the attestation artifact.

        A 404 for the pointer, an empty pointer, or one that reports
        "Not Found" means the release carries no attestation. Any other
        failure is fatal.
        """
        operation = "downloading attestation pointer"
        dest = self.scratch_dir / "attestation.txt"
        result = await self._download(urls.attestation, dest, operation)
        if result.not_found:
            _logging.debug(f"No attestation published at {urls.attestation}")
            return FetchedAttestation(AttestationStatus.MISSING)
        if not result.ok:
            raise NetworkError(operation, urls.attestation, result.detail)

        link = read_attestation_link(dest.read_text(encoding="utf-8", errors="replace"))
        if not link or "Not Found" in link:
            _logging.debug(f"No attestation published at {urls.attestation}")
            return FetchedAttestation(AttestationStatus.MISSING)

        document = await self.fetch_text(
            f"{link.rstrip('/')}/download",
            "attestation.json",
            "downloading attestation artifact",
        )
        return FetchedAttestation(AttestationStatus.FOUND, document, link)


__all__ = [
    "AttestationStatus",
    "ReleaseUrls",
    "FetchedAttestation",
    "read_attestation_link",
    "ArtifactFetcher",
]
