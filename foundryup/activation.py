"""Switching the active binary set.

Two strategies place binaries into the active directory:

- ``ActivationManager.use`` copies a version store entry. The store keeps its
  copy, so switching back later needs no download.
- ``ActivationManager.link_local`` symlinks the build output of a local
  checkout, so rebuilding the checkout updates the active binaries in place.

Both refuse to touch the active directory while a managed binary is running.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from .capabilities import ProcessLister, VersionReporter
from .errors import ConflictError, NotInstalledError
from .store import VersionStore, make_executable

_logging = logging.getLogger(__name__)


class ActivationState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


@dataclass
class ActivatedBinary:
    binary: str
    path: Path
    version: str | None
    shadowed_by: Path | None = None


@dataclass
class ActivationResult:
    tag: str
    binaries: list[ActivatedBinary] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.resolve() == b.resolve()
    except OSError:
        return False


class ActivationManager:
    def __init__(
        self,
        store: VersionStore,
        bin_dir: Path,
        process_lister: ProcessLister,
        reporter: VersionReporter,
        which: Callable[[str], str | None] = shutil.which,
    ):
        self.store = store
        self.bin_dir = bin_dir
        self.process_lister = process_lister
        self.reporter = reporter
        self.which = which
        self.state = ActivationState.INACTIVE

    async def ensure_not_running(self) -> list[str]:
        """Raise ``ConflictError`` if any managed binary is running.

        Returns warnings to show when the process lookup is unavailable.
        """
        running = await self.process_lister.running(self.store.binaries)
        if running is None:
            return ["unable to check for running binaries, proceeding anyway"]
        if running:
            raise ConflictError(running)
        return []

    def find_shadow(self, binary: str, placed: Path) -> Path | None:
        """Return the file PATH resolves ``binary`` to, if it is not ``placed``."""
        found = self.which(f"{binary}{self.store.suffix}")
        if found and not _same_file(Path(found), placed):
            return Path(found)
        return None

    async def _finish(self, result: ActivationResult, binary: str, placed: Path) -> None:
        version = await self.reporter.report(placed)
        shadow = self.find_shadow(binary, placed)
        if shadow is not None:
            message = (
                f"there's another {binary} at {shadow} that shadows {placed}; "
                f"make sure {self.bin_dir} comes first in your PATH"
            )
            result.warnings.append(message)
        result.binaries.append(ActivatedBinary(binary, placed, version, shadow))

    async def use(self, tag: str) -> ActivationResult:
        """Copy the binaries of ``tag`` into the active directory."""
        if not self.store.exists(tag) or not self.store.is_complete(tag):
            raise NotInstalledError(tag)

        result = ActivationResult(tag)
        result.warnings.extend(await self.ensure_not_running())

        self.bin_dir.mkdir(parents=True, exist_ok=True)
        for binary in self.store.binaries:
            src = self.store.binary_path(tag, binary)
            dest = self.bin_dir / src.name
            if dest.exists() or dest.is_symlink():
                dest.unlink()
            shutil.copy2(src, dest)
            make_executable(dest)
            _logging.debug(f"Activated {src} -> {dest}")
            await self._finish(result, binary, dest)

        self.state = ActivationState.ACTIVE
        return result

    async def link_local(self, build_dir: Path) -> ActivationResult:
        """Replace the active binaries with symlinks into ``build_dir``."""
        result = ActivationResult("local")
        result.warnings.extend(await self.ensure_not_running())

        self.bin_dir.mkdir(parents=True, exist_ok=True)
        for binary in self.store.binaries:
            name = f"{binary}{self.store.suffix}"
            dest = self.bin_dir / name
            if dest.exists() or dest.is_symlink():
                dest.unlink()
            target = build_dir / name
            os.symlink(target, dest)
            _logging.debug(f"Linked {dest} -> {target}")
            await self._finish(result, binary, dest)

        self.state = ActivationState.ACTIVE
        return result


__all__ = [
    "ActivationState",
    "ActivatedBinary",
    "ActivationResult",
    "ActivationManager",
]
