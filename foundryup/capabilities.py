"""External tool capabilities used by the install engine.

Each primitive the engine needs from the outside world (downloading,
hashing, extracting, compiling, listing processes, asking a binary for its
version) is described by a small Protocol. The default implementations shell
out to the usual tools; tests pass in fakes.
"""

import csv
import hashlib
import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, Tuple

from .execution import (
    BUILD_TIMEOUT,
    DOWNLOAD_TIMEOUT,
    has_command,
    run_command_async,
)
from .versions import get_binary_version

HTTP_NOT_FOUND = 404
HTTP_STATUS_PATTERN = re.compile(r"HTTP/[\d.]+\s+(\d{3})")

_logging = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    ok: bool
    detail: str = ""
    status: int | None = None

    @property
    def not_found(self) -> bool:
        return self.status == HTTP_NOT_FOUND


class Downloader(Protocol):
    async def download(self, url: str, dest: Path) -> DownloadResult: ...


class ContentHasher(Protocol):
    def hash_file(self, path: Path) -> str: ...


class ArchiveExtractor(Protocol):
    async def extract(self, archive: Path, dest: Path) -> Tuple[bool, str]: ...


class NativeBuilder(Protocol):
    async def build(self, source_dir: Path, jobs: int | None = None) -> Tuple[bool, str]: ...


class ProcessLister(Protocol):
    async def running(self, names: Iterable[str]) -> list[str] | None:
        """Return the subset of ``names`` that are running, or None if unknown."""
        ...


class VersionReporter(Protocol):
    async def report(self, binary: Path) -> str | None: ...


def _parse_status(tool: str, output: str) -> int | None:
    """HTTP status from curl's ``-w %{http_code}`` or wget's ``-S`` headers."""
    if tool == "curl":
        code = output.strip()
        return int(code) if code.isdigit() and int(code) > 0 else None
    matches = HTTP_STATUS_PATTERN.findall(output)
    return int(matches[-1]) if matches else None


class CurlDownloader:
    """Download with curl, falling back to wget.

    HTTP errors are not masked by ``-f``: the response status is captured so
    callers can tell a missing artifact (404) from any other failure.
    """

    def __init__(self, timeout: int = DOWNLOAD_TIMEOUT):
        self.timeout = timeout

    async def download(self, url: str, dest: Path) -> DownloadResult:
        if has_command("curl"):
            tool = "curl"
            args = ["curl", "-sSL", "-w", "%{http_code}", "-o", str(dest), url]
        elif has_command("wget"):
            tool = "wget"
            args = ["wget", "-q", "-S", "-O", str(dest), url]
        else:
            return DownloadResult(False, "neither curl nor wget is available")

        output, returncode = await run_command_async(
            args, timeout=self.timeout, merge_stderr=(tool == "wget")
        )
        status = _parse_status(tool, output)
        if status is not None and status >= 400:
            result = DownloadResult(False, f"HTTP {status}", status)
        elif returncode != 0:
            result = DownloadResult(False, f"{tool} exited with status {returncode}", status)
        else:
            return DownloadResult(True, "", status)
        dest.unlink(missing_ok=True)
        return result


class Sha256Hasher:
    chunk_size = 1 << 20

    def hash_file(self, path: Path) -> str:
        digest = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(self.chunk_size), b""):
                digest.update(chunk)
        return digest.hexdigest()


class TarExtractor:
    """Extract ``.tar.gz`` with tar and ``.zip`` with unzip."""

    async def extract(self, archive: Path, dest: Path) -> Tuple[bool, str]:
        dest.mkdir(parents=True, exist_ok=True)
        if archive.name.endswith(".zip"):
            args = ["unzip", "-o", str(archive), "-d", str(dest)]
        else:
            args = ["tar", "-xzf", str(archive), "-C", str(dest)]
        output, returncode = await run_command_async(args, timeout=DOWNLOAD_TIMEOUT)
        return returncode == 0, output


class CargoBuilder:
    async def build(self, source_dir: Path, jobs: int | None = None) -> Tuple[bool, str]:
        args = ["cargo", "build", "--bins", "--release"]
        if jobs:
            args += ["-j", str(jobs)]
        output, returncode = await run_command_async(
            args, timeout=BUILD_TIMEOUT, cwd=source_dir
        )
        return returncode == 0, output


class SystemProcessLister:
    """Look processes up with pgrep, or tasklist on Windows."""

    async def running(self, names: Iterable[str]) -> list[str] | None:
        names = list(names)
        if sys.platform == "win32" or os.name == "nt":
            return await self._tasklist(names)

        if not has_command("pgrep"):
            return None
        found = []
        for name in names:
            _, returncode = await run_command_async(["pgrep", "-x", name])
            if returncode == 0:
                found.append(name)
            elif returncode != 1:
                # 2 and 3 are pgrep usage and fatal errors
                _logging.debug(f"pgrep exited with status {returncode}")
                return None
        return found

    async def _tasklist(self, names: list[str]) -> list[str] | None:
        if not has_command("tasklist"):
            return None
        output, returncode = await run_command_async(["tasklist", "/FO", "CSV", "/NH"])
        if returncode != 0:
            return None
        images = {row[0].lower() for row in csv.reader(output.splitlines()) if row}
        return [n for n in names if f"{n}.exe".lower() in images]


class BinaryVersionReporter:
    async def report(self, binary: Path) -> str | None:
        version, status = await get_binary_version(binary)
        if status != "success":
            _logging.debug(f"{binary} did not report a version: {status}")
        return version


__all__ = [
    "HTTP_NOT_FOUND",
    "DownloadResult",
    "Downloader",
    "ContentHasher",
    "ArchiveExtractor",
    "NativeBuilder",
    "ProcessLister",
    "VersionReporter",
    "CurlDownloader",
    "Sha256Hasher",
    "TarExtractor",
    "CargoBuilder",
    "SystemProcessLister",
    "BinaryVersionReporter",
]
