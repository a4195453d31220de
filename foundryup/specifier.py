"""Version specifier normalization.

Turns what the user asked for (a channel, a version, a branch, a pull
request, a commit or a local checkout) into the tag that keys the version
store and the way that tag gets installed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from .errors import UsageError

DEFAULT_REPO = "foundry-rs/foundry"
DEFAULT_CHANNEL = "stable"
DEFAULT_BRANCH = "master"
NIGHTLY_PREFIX = "nightly"

ChannelResolver = Callable[[str], str]

_logging = logging.getLogger(__name__)


class InstallKind(str, Enum):
    PREBUILT = "prebuilt-release"
    REMOTE_SOURCE = "remote-source-build"
    LOCAL_SOURCE = "local-source-build"


@dataclass(frozen=True)
class VersionSpecifier:
    version: str | None = None
    branch: str | None = None
    pull_request: int | None = None
    commit: str | None = None
    local_path: Path | None = None
    repo: str = DEFAULT_REPO


@dataclass(frozen=True)
class ResolvedVersion:
    tag: str
    version: str
    kind: InstallKind
    repo: str = DEFAULT_REPO
    branch: str | None = None
    commit: str | None = None
    pull_request: int | None = None
    local_path: Path | None = None
    ignored: tuple[str, ...] = ()

    @property
    def author(self) -> str:
        return self.repo.split("/", 1)[0]


def normalize_release_version(raw: str) -> tuple[str, str]:
    """Return ``(tag, version)`` for a release specifier.

    ``nightly-<sha>`` keeps its tag but downloads the ``nightly`` artifacts;
    a bare number gains a ``v`` prefix.
    """
    if raw.startswith(NIGHTLY_PREFIX):
        return raw, NIGHTLY_PREFIX
    if raw[:1].isdigit():
        prefixed = f"v{raw}"
        return prefixed, prefixed
    return raw, raw


def custom_tag(author: str, commit: str | None, pull_request: int | None, branch: str) -> str:
    if commit:
        return f"{author}-commit-{commit}"
    if pull_request is not None:
        return f"{author}-pr-{pull_request}"
    return f"{author}-branch-{branch.replace('/', '-')}"


def resolve_specifier(
    spec: VersionSpecifier, channel_resolver: ChannelResolver | None = None
) -> ResolvedVersion:
    """Resolve a specifier to a tag and install kind.

    Args:
        spec: What the user asked for
        channel_resolver: Optional hook mapping a channel or version to the
            concrete version it currently points at

    Raises:
        UsageError: If both a pull request and a branch were given
    """
    if spec.local_path is not None:
        flags = []
        if spec.repo != DEFAULT_REPO:
            flags.append("repo")
        if spec.branch:
            flags.append("branch")
        if spec.version:
            flags.append("install")
        for name in flags:
            _logging.warning(f"--{name} option ignored. Using local repository")
        path = Path(spec.local_path)
        return ResolvedVersion(
            tag="local",
            version="local",
            kind=InstallKind.LOCAL_SOURCE,
            repo=spec.repo,
            local_path=path,
            ignored=tuple(flags),
        )

    branch = spec.branch
    if spec.pull_request is not None:
        if branch:
            raise UsageError("can't use --pr and --branch at the same time")
        branch = f"refs/pull/{spec.pull_request}/head"

    if spec.repo == DEFAULT_REPO and not branch and not spec.commit:
        raw = spec.version or DEFAULT_CHANNEL
        if channel_resolver is not None:
            raw = channel_resolver(raw)
        tag, version = normalize_release_version(raw)
        return ResolvedVersion(
            tag=tag, version=version, kind=InstallKind.PREBUILT, repo=spec.repo
        )

    ignored: tuple[str, ...] = ()
    if spec.version:
        _logging.warning("--install option ignored when building from source")
        ignored = ("install",)
    branch = branch or DEFAULT_BRANCH
    author = spec.repo.split("/", 1)[0]
    tag = custom_tag(author, spec.commit, spec.pull_request, branch)
    return ResolvedVersion(
        tag=tag,
        version=tag,
        kind=InstallKind.REMOTE_SOURCE,
        repo=spec.repo,
        branch=branch,
        commit=spec.commit,
        pull_request=spec.pull_request,
        ignored=ignored,
    )


__all__ = [
    "DEFAULT_REPO",
    "DEFAULT_CHANNEL",
    "DEFAULT_BRANCH",
    "ChannelResolver",
    "InstallKind",
    "VersionSpecifier",
    "ResolvedVersion",
    "normalize_release_version",
    "custom_tag",
    "resolve_specifier",
]
