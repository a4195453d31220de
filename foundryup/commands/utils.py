"""Shared output helpers for commands."""

import sys

import click

from foundryup.activation import ActivationResult
from foundryup.installer import Toolkit
from foundryup.paths import FoundryPaths
from foundryup.store import BINARIES, VersionStore


def say(message: str) -> None:
    click.echo(f"foundryup: {message}")


def warn(message: str) -> None:
    click.secho(f"foundryup: warning: {message}", fg="yellow", err=True)


def echo_warnings(warnings: list[str]) -> None:
    for message in warnings:
        warn(message)


def echo_activation(result: ActivationResult, verb: str = "use") -> None:
    """Print one line per activated binary with its reported version."""
    for activated in result.binaries:
        version = activated.version or "unknown version"
        say(f"{verb} - {activated.binary} {version}")


def host_suffix() -> str:
    return ".exe" if sys.platform == "win32" else ""


def host_store(paths: FoundryPaths) -> VersionStore:
    return VersionStore(paths.versions_dir, BINARIES, host_suffix())


def get_toolkit(ctx: click.Context) -> Toolkit:
    """Toolkit passed in through ``ctx.obj`` (tests), else the real one."""
    obj = ctx.obj or {}
    return obj.get("toolkit") or Toolkit()
