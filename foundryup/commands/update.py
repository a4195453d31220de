"""Self-update command implementation."""

from foundryup import FOUNDRYUP_INSTALLER_VERSION
from foundryup.installer import Toolkit
from foundryup.paths import FoundryPaths
from foundryup.selfupdate import SelfUpdateResult, self_update

from .utils import say


async def run_update(paths: FoundryPaths, toolkit: Toolkit) -> SelfUpdateResult:
    say("updating foundryup...")
    result = await self_update(
        toolkit.downloader, paths.installer_path, FOUNDRYUP_INSTALLER_VERSION
    )
    if result.updated:
        say(f"successfully updated foundryup: {result.current} -> {result.remote}")
    else:
        say(f"foundryup is already up to date (installed: {result.current}, remote: {result.remote})")
    return result
