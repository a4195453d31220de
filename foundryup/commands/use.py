"""Use command implementation."""

from foundryup.activation import ActivationManager, ActivationResult
from foundryup.installer import Toolkit
from foundryup.paths import FoundryPaths

from .utils import echo_activation, echo_warnings, host_store


async def run_use(tag: str, paths: FoundryPaths, toolkit: Toolkit) -> ActivationResult:
    """Switch the active binaries to an installed version."""
    store = host_store(paths)
    manager = ActivationManager(
        store,
        paths.bin_dir,
        toolkit.process_lister,
        toolkit.reporter,
        toolkit.which,
    )
    result = await manager.use(tag)
    echo_warnings(result.warnings)
    echo_activation(result)
    return result
