"""CLI definition for foundryup."""

import asyncio
import logging
import sys

import click

from foundryup import FOUNDRYUP_INSTALLER_VERSION, setup_logging
from foundryup.config import ConfigError, build_settings, load_settings_file
from foundryup.errors import FoundryupError, format_error, render_error
from foundryup.paths import FoundryPaths

from .install import run_install
from .list import run_list
from .update import run_update
from .use import run_use
from .utils import get_toolkit


_logging = logging.getLogger(__name__)


class FoundryupCommand(click.Command):
    """Report bad flags with exit status 1 like every other fatal error."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.command(
    cls=FoundryupCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", "show_version", is_flag=True, help="Print the installer version")
@click.option("--update", "-U", is_flag=True, help="Update foundryup to the latest version")
@click.option("--install", "-i", metavar="VERSION", help="Install a version (stable, nightly, 1.0.0, nightly-<sha>)")
@click.option("--use", "-u", metavar="TAG", help="Activate an installed version")
@click.option("--list", "-l", "list_versions", is_flag=True, help="List installed versions")
@click.option("--branch", "-b", help="Build and install a branch")
@click.option("--pr", "-P", type=int, help="Build and install a pull request")
@click.option("--commit", "-C", help="Build and install a commit")
@click.option("--repo", "-r", help="Build and install from a GitHub repository (owner/name)")
@click.option("--path", "-p", type=click.Path(file_okay=False), help="Build and install a local repository")
@click.option("--jobs", "-j", type=click.IntRange(min=1), help="Number of CPUs to use for building")
@click.option("--force", "-f", is_flag=True, help="Skip SHA verification of downloaded binaries")
@click.option("--arch", help="Install a specific architecture (amd64, arm64)")
@click.option("--platform", help="Install a specific platform (linux, darwin, win32, alpine)")
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.pass_context
def cli(ctx, show_version: bool, update: bool, debug: bool, **flags):
    """Install, update and switch between Foundry toolchain versions."""
    setup_logging(debug)

    if show_version:
        click.echo(f"foundryup: {FOUNDRYUP_INSTALLER_VERSION}")
        return

    toolkit = get_toolkit(ctx)
    channel_resolver = (ctx.obj or {}).get("channel_resolver")
    try:
        paths = FoundryPaths.default()
        settings = build_settings(
            dict(flags, debug=debug), load_settings_file(paths.settings_path)
        )
        _logging.debug(f"Settings: {settings}")

        if update:
            asyncio.run(run_update(paths, toolkit))
        elif settings.list_versions:
            asyncio.run(run_list(paths, toolkit))
        elif settings.use:
            asyncio.run(run_use(settings.use, paths, toolkit))
        else:
            asyncio.run(run_install(settings, paths, toolkit, channel_resolver))
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except FoundryupError as e:
        click.echo(render_error(e), err=True)
        sys.exit(1)


def main() -> None:
    cli(prog_name="foundryup")


__all__ = ["cli", "main"]


if __name__ == "__main__":
    main()
