"""Tests for version specifier resolution."""

import logging
from pathlib import Path

import pytest

from foundryup.errors import UsageError
from foundryup.specifier import (
    DEFAULT_REPO,
    InstallKind,
    VersionSpecifier,
    normalize_release_version,
    resolve_specifier,
)


class TestReleaseResolution:
    def test_defaults_to_stable(self):
        resolved = resolve_specifier(VersionSpecifier())
        assert resolved.kind == InstallKind.PREBUILT
        assert resolved.tag == "stable"
        assert resolved.version == "stable"

    def test_numeric_version_gains_prefix(self):
        resolved = resolve_specifier(VersionSpecifier(version="1.2.3"))
        assert resolved.tag == "v1.2.3"
        assert resolved.version == "v1.2.3"

    def test_nightly_with_sha_keeps_tag(self):
        resolved = resolve_specifier(VersionSpecifier(version="nightly-3c3d0b2"))
        assert resolved.tag == "nightly-3c3d0b2"
        assert resolved.version == "nightly"

    def test_channel_resolver_applies_before_normalization(self):
        resolved = resolve_specifier(
            VersionSpecifier(), channel_resolver=lambda v: "1.0.0" if v == "stable" else v
        )
        assert resolved.tag == "v1.0.0"
        assert resolved.version == "v1.0.0"

    def test_normalize_leaves_tags_alone(self):
        assert normalize_release_version("v1.0.0") == ("v1.0.0", "v1.0.0")


class TestSourceResolution:
    def test_branch_build(self):
        resolved = resolve_specifier(VersionSpecifier(branch="feat/cheatcodes"))
        assert resolved.kind == InstallKind.REMOTE_SOURCE
        assert resolved.tag == "foundry-rs-branch-feat-cheatcodes"
        assert resolved.branch == "feat/cheatcodes"

    def test_custom_repo_defaults_to_master(self):
        resolved = resolve_specifier(VersionSpecifier(repo="alice/foundry"))
        assert resolved.kind == InstallKind.REMOTE_SOURCE
        assert resolved.branch == "master"
        assert resolved.tag == "alice-branch-master"
        assert resolved.author == "alice"

    def test_pull_request(self):
        resolved = resolve_specifier(VersionSpecifier(pull_request=1234))
        assert resolved.kind == InstallKind.REMOTE_SOURCE
        assert resolved.branch == "refs/pull/1234/head"
        assert resolved.tag == "foundry-rs-pr-1234"

    def test_commit_wins_tag(self):
        resolved = resolve_specifier(
            VersionSpecifier(repo="alice/foundry", branch="dev", commit="abc123")
        )
        assert resolved.tag == "alice-commit-abc123"
        assert resolved.commit == "abc123"
        assert resolved.branch == "dev"

    def test_pr_and_branch_conflict(self):
        with pytest.raises(UsageError, match="--pr and --branch"):
            resolve_specifier(VersionSpecifier(pull_request=1, branch="dev"))

    def test_version_ignored_for_source_build(self):
        resolved = resolve_specifier(
            VersionSpecifier(version="1.0.0", repo="alice/foundry")
        )
        assert resolved.ignored == ("install",)


class TestLocalResolution:
    def test_local_path_overrides_everything(self, caplog):
        spec = VersionSpecifier(
            version="1.0.0",
            branch="dev",
            local_path=Path("/src/foundry"),
            repo="alice/foundry",
        )
        with caplog.at_level(logging.WARNING):
            resolved = resolve_specifier(spec)

        assert resolved.kind == InstallKind.LOCAL_SOURCE
        assert resolved.local_path == Path("/src/foundry")
        assert set(resolved.ignored) == {"repo", "branch", "install"}
        assert "--branch option ignored" in caplog.text

    def test_local_path_wins_over_pr_branch_conflict(self):
        resolved = resolve_specifier(
            VersionSpecifier(local_path=Path("."), pull_request=1, branch="dev")
        )
        assert resolved.kind == InstallKind.LOCAL_SOURCE

    def test_default_repo_not_reported_as_ignored(self):
        resolved = resolve_specifier(
            VersionSpecifier(local_path=Path("."), repo=DEFAULT_REPO)
        )
        assert resolved.ignored == ()
