"""List command implementation."""

import click

from foundryup.installer import Toolkit
from foundryup.paths import FoundryPaths

from .utils import host_store, say


async def run_list(paths: FoundryPaths, toolkit: Toolkit) -> list[tuple[str, dict[str, str | None]]]:
    """Print every installed version and what each of its binaries reports."""
    store = host_store(paths)
    entries = await store.list(toolkit.reporter)

    if not entries:
        say(f"no versions installed in {paths.versions_dir}")
        return entries

    for tag, reported in entries:
        click.echo(tag)
        for binary, version in reported.items():
            click.echo(f"- {version or f'{binary} (not installed)'}")
        click.echo("")
    return entries
