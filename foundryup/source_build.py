"""Building the toolkit from source.

Used whenever no prebuilt release applies: a local checkout, or a branch,
pull request or commit of some GitHub repository. Source builds are not
attested; the caller chose the code being compiled.
"""

import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Sequence, Tuple

from .activation import ActivationManager, ActivationResult
from .capabilities import NativeBuilder
from .errors import BuildError
from .execution import DOWNLOAD_TIMEOUT, require_command, run_command_async
from .specifier import ResolvedVersion
from .store import VersionStore

RELEASE_DIR = Path("target") / "release"

GitRunner = Callable[[Sequence[str], Path], Awaitable[Tuple[str, int]]]

_logging = logging.getLogger(__name__)


async def run_git(args: Sequence[str], cwd: Path) -> Tuple[str, int]:
    return await run_command_async(["git", *args], timeout=DOWNLOAD_TIMEOUT, cwd=cwd)


def default_jobs() -> int:
    return os.cpu_count() or 1


class SourceBuilder:
    def __init__(
        self,
        store: VersionStore,
        activation: ActivationManager,
        builder: NativeBuilder,
        checkout_root: Path,
        git: GitRunner = run_git,
    ):
        self.store = store
        self.activation = activation
        self.builder = builder
        self.checkout_root = checkout_root
        self.git = git

    async def _git(self, args: Sequence[str], cwd: Path, step: str) -> str:
        output, returncode = await self.git(args, cwd)
        if returncode != 0:
            raise BuildError(f"{step} failed: {output}")
        return output

    async def _build(self, source_dir: Path, jobs: int | None) -> Path:
        ok, output = await self.builder.build(source_dir, jobs)
        if not ok:
            raise BuildError(f"build in {source_dir} failed: {output}")
        return source_dir / RELEASE_DIR

    async def install_local(self, resolved: ResolvedVersion, jobs: int | None = None) -> ActivationResult:
        """Build a local checkout and symlink its binaries into place."""
        if resolved.local_path is None:
            raise BuildError("no local path given")
        source_dir = resolved.local_path.expanduser().resolve()
        if not source_dir.is_dir():
            raise BuildError(f"{source_dir} is not a directory")

        _logging.info(f"Building local repository {source_dir}")
        build_dir = await self._build(source_dir, jobs)
        return await self.activation.link_local(build_dir)

    def checkout_dir(self, resolved: ResolvedVersion) -> Path:
        return self.checkout_root / resolved.author

    async def checkout(self, resolved: ResolvedVersion) -> Path:
        """Clone (once) and force the checkout to the requested revision."""
        repo_dir = self.checkout_dir(resolved)
        branch = resolved.branch or "master"
        if not repo_dir.is_dir():
            self.checkout_root.mkdir(parents=True, exist_ok=True)
            await self._git(
                ["clone", f"https://github.com/{resolved.repo}", str(repo_dir)],
                self.checkout_root,
                "git clone",
            )

        await self._git(
            ["fetch", "origin", f"{branch}:remotes/origin/{branch}"],
            repo_dir,
            "git fetch",
        )
        await self._git(["checkout", "-f", f"origin/{branch}"], repo_dir, "git checkout")
        if resolved.commit:
            await self._git(["checkout", "-f", resolved.commit], repo_dir, "git checkout")
        return repo_dir

    async def install_remote(self, resolved: ResolvedVersion, jobs: int | None = None) -> ActivationResult:
        """Build a remote revision into a new store entry and activate it."""
        repo_dir = await self.checkout(resolved)
        build_dir = await self._build(repo_dir, jobs or default_jobs())
        self.store.write(resolved.tag, build_dir, move=True)
        if not self.store.is_complete(resolved.tag):
            raise BuildError(f"build of {resolved.tag} did not produce every binary")
        return await self.activation.use(resolved.tag)


def require_build_tools() -> None:
    require_command("git")
    require_command("cargo")


__all__ = [
    "RELEASE_DIR",
    "GitRunner",
    "SourceBuilder",
    "default_jobs",
    "require_build_tools",
    "run_git",
]
