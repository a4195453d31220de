"""Install command implementation."""

import logging

from foundryup.config import Settings
from foundryup.fetcher import AttestationStatus
from foundryup.installer import Installer, InstallOutcome, Toolkit
from foundryup.paths import FoundryPaths
from foundryup.specifier import ChannelResolver, InstallKind

from .utils import echo_activation, echo_warnings, say


_logging = logging.getLogger(__name__)


async def run_install(
    settings: Settings,
    paths: FoundryPaths,
    toolkit: Toolkit,
    channel_resolver: ChannelResolver | None = None,
) -> InstallOutcome:
    installer = Installer(settings, paths, toolkit, channel_resolver)
    outcome = await installer.run()
    resolved = outcome.resolved

    if resolved.kind == InstallKind.LOCAL_SOURCE:
        say(f"installed from local repository {resolved.local_path}")
    elif resolved.kind == InstallKind.REMOTE_SOURCE:
        say(f"installed {resolved.repo} at {resolved.tag}")
    elif outcome.reused:
        say(f"version {resolved.tag} already installed and verified, activating...")
    else:
        say(f"installed foundry (version {resolved.version}, tag {resolved.tag})")
        if settings.force:
            say("skipped SHA verification (--force)")
        elif outcome.attestation == AttestationStatus.FOUND:
            say("binaries verified against attestation")

    echo_warnings(outcome.warnings)
    echo_activation(outcome.activation, verb="installed")
    say("done!")
    return outcome
