"""On-disk cache of installed versions, one directory per tag."""

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Sequence

from .capabilities import VersionReporter

BINARIES: tuple[str, ...] = ("forge", "cast", "anvil", "chisel")

_logging = logging.getLogger(__name__)


def make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class VersionStore:
    """Installed versions under ``versions_dir/<tag>/<binary>``.

    A directory only counts as installed for reuse when every binary of the
    set is present. Partial directories are left alone.
    """

    def __init__(
        self,
        versions_dir: Path,
        binaries: Sequence[str] = BINARIES,
        suffix: str = "",
    ):
        self.versions_dir = versions_dir
        self.binaries = tuple(binaries)
        self.suffix = suffix

    def path_for(self, tag: str) -> Path:
        return self.versions_dir / tag

    def binary_path(self, tag: str, binary: str) -> Path:
        return self.path_for(tag) / f"{binary}{self.suffix}"

    def exists(self, tag: str) -> bool:
        return self.path_for(tag).is_dir()

    def missing(self, tag: str) -> list[str]:
        return [b for b in self.binaries if not self.binary_path(tag, b).is_file()]

    def is_complete(self, tag: str) -> bool:
        return not self.missing(tag)

    def tags(self) -> list[str]:
        """Tags with at least one binary of the set installed, sorted."""
        if not self.versions_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.versions_dir.iterdir()
            if entry.is_dir()
            and any((entry / f"{b}{self.suffix}").is_file() for b in self.binaries)
        )

    def prepare(self, tag: str) -> Path:
        """Create the directory for ``tag`` (idempotent) and return it."""
        path = self.path_for(tag)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def write(self, tag: str, source_dir: Path, move: bool = False) -> Path:
        """Place the binary set found in ``source_dir`` under ``tag``.

        Existing files for the tag are overwritten. Binaries missing from
        ``source_dir`` are logged and skipped.
        """
        target = self.prepare(tag)
        for binary in self.binaries:
            name = f"{binary}{self.suffix}"
            src = source_dir / name
            if not src.is_file():
                _logging.warning(f"{name} not found in {source_dir}")
                continue
            dest = target / name
            if dest.exists() or dest.is_symlink():
                dest.unlink()
            if move:
                shutil.move(str(src), str(dest))
            else:
                shutil.copy2(src, dest)
            make_executable(dest)
        return target

    async def list(self, reporter: VersionReporter) -> list[tuple[str, dict[str, str | None]]]:
        """Report the self-declared version of each binary, per installed tag."""
        entries = []
        for tag in self.tags():
            reported: dict[str, str | None] = {}
            for binary in self.binaries:
                path = self.binary_path(tag, binary)
                if path.is_file() and os.access(path, os.X_OK):
                    reported[binary] = await reporter.report(path)
                else:
                    reported[binary] = None
            entries.append((tag, reported))
        return entries


__all__ = ["BINARIES", "VersionStore", "make_executable"]
