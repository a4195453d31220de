"""Pytest fixtures and fakes for foundryup tests."""

import base64
import hashlib
import json
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from foundryup.capabilities import HTTP_NOT_FOUND, DownloadResult, Sha256Hasher
from foundryup.installer import Toolkit
from foundryup.paths import FoundryPaths
from foundryup.store import BINARIES


BINARY_CONTENTS = {
    name: f"#!/bin/sh\necho '{name} Version: 1.0.0-stable'\n".encode()
    for name in BINARIES
}


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_attestation(hashes: dict[str, str]) -> str:
    """Build a sigstore-style bundle listing ``hashes`` as subjects."""
    statement = {
        "_type": "https://in-toto.io/Statement/v1",
        "subject": [
            {"name": name, "digest": {"sha256": digest}}
            for name, digest in hashes.items()
        ],
    }
    payload = base64.b64encode(json.dumps(statement).encode()).decode()
    return json.dumps(
        {
            "mediaType": "application/vnd.dev.sigstore.bundle.v0.3+json",
            "dsseEnvelope": {
                "payload": payload,
                "payloadType": "application/vnd.in-toto+json",
                "signatures": [{"sig": "MEUCIQ"}],
            },
        }
    )


def write_binaries(directory: Path, contents: dict[str, bytes] | None = None) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name, data in (contents or BINARY_CONTENTS).items():
        path = directory / name
        path.write_bytes(data)
        path.chmod(0o755)


class FakeDownloader:
    """Serve canned responses by URL and record every request.

    Unknown URLs answer 404; ``statuses`` forces other HTTP failures.
    """

    def __init__(
        self,
        responses: dict[str, bytes | str] | None = None,
        statuses: dict[str, int] | None = None,
    ):
        self.responses = dict(responses or {})
        self.statuses = dict(statuses or {})
        self.requests: list[str] = []

    async def download(self, url: str, dest: Path) -> DownloadResult:
        self.requests.append(url)
        if url in self.statuses:
            status = self.statuses[url]
            return DownloadResult(False, f"HTTP {status}", status)
        if url not in self.responses:
            return DownloadResult(False, "HTTP 404", HTTP_NOT_FOUND)
        data = self.responses[url]
        if isinstance(data, str):
            data = data.encode()
        dest.write_bytes(data)
        return DownloadResult(True, "", 200)


class FakeExtractor:
    """Pretend to unpack an archive by writing a fixed set of files."""

    def __init__(self, files: dict[str, bytes] | None = None, ok: bool = True):
        self.files = BINARY_CONTENTS if files is None else files
        self.ok = ok
        self.calls: list[tuple[Path, Path]] = []

    async def extract(self, archive: Path, dest: Path) -> tuple[bool, str]:
        self.calls.append((archive, dest))
        if not self.ok:
            return False, "gzip: stdin: not in gzip format"
        if archive.name.startswith("foundry_man_"):
            dest.mkdir(parents=True, exist_ok=True)
            (dest / "forge.1").write_text(".TH FORGE 1\n")
            return True, ""
        write_binaries(dest, self.files)
        return True, ""


class FakeBuilder:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.calls: list[tuple[Path, int | None]] = []

    async def build(self, source_dir: Path, jobs: int | None = None) -> tuple[bool, str]:
        self.calls.append((source_dir, jobs))
        if not self.ok:
            return False, "error[E0425]: cannot find value"
        write_binaries(source_dir / "target" / "release")
        return True, ""


class FakeProcessLister:
    def __init__(self, running: list[str] | None = None):
        self._running = [] if running is None else running

    async def running(self, names) -> list[str] | None:
        return [n for n in names if n in self._running]


class UnavailableProcessLister:
    async def running(self, names) -> list[str] | None:
        return None


class FakeReporter:
    async def report(self, binary: Path) -> str | None:
        name = binary.name.removesuffix(".exe")
        return f"{name} Version: 1.0.0-stable"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def foundry_paths(temp_dir: Path, monkeypatch) -> FoundryPaths:
    """Point FOUNDRY_DIR at a scratch directory."""
    root = temp_dir / ".foundry"
    monkeypatch.setenv("FOUNDRY_DIR", str(root))
    monkeypatch.delenv("FOUNDRYUP_CONFIG", raising=False)
    for var in ("FOUNDRYUP_REPO", "FOUNDRYUP_JOBS", "FOUNDRYUP_ARCH",
                "FOUNDRYUP_PLATFORM", "FOUNDRYUP_IGNORE_VERIFICATION"):
        monkeypatch.delenv(var, raising=False)
    return FoundryPaths(root)


@pytest.fixture
def attestation_hashes() -> dict[str, str]:
    return {name: sha256(data) for name, data in BINARY_CONTENTS.items()}


@pytest.fixture
def make_toolkit():
    """Factory for a Toolkit built entirely from fakes."""

    def _make(
        downloader: FakeDownloader | None = None,
        extractor: FakeExtractor | None = None,
        builder: FakeBuilder | None = None,
        process_lister=None,
        which=None,
    ) -> Toolkit:
        return Toolkit(
            downloader=downloader or FakeDownloader(),
            hasher=Sha256Hasher(),
            extractor=extractor or FakeExtractor(),
            builder=builder or FakeBuilder(),
            process_lister=process_lister or FakeProcessLister(),
            reporter=FakeReporter(),
            which=which or (lambda name: None),
            check_commands=False,
        )

    return _make
