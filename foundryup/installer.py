"""Install flow: resolve, fetch, verify, store, activate."""

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .activation import ActivationManager, ActivationResult
from .attestation import (
    AttestationRecord,
    VerificationResult,
    check_reuse,
    parse_attestation,
    verify_binaries,
)
from .capabilities import (
    ArchiveExtractor,
    BinaryVersionReporter,
    CargoBuilder,
    ContentHasher,
    CurlDownloader,
    Downloader,
    NativeBuilder,
    ProcessLister,
    Sha256Hasher,
    SystemProcessLister,
    TarExtractor,
    VersionReporter,
)
from .config import Settings
from .errors import ArchiveError, FoundryupError, MissingCommandError
from .execution import has_command, require_command
from .fetcher import ArtifactFetcher, AttestationStatus, FetchedAttestation, ReleaseUrls
from .paths import FoundryPaths
from .platforms import PlatformTarget, detect_target
from .source_build import SourceBuilder, require_build_tools
from .specifier import ChannelResolver, InstallKind, ResolvedVersion, resolve_specifier
from .store import BINARIES, VersionStore, make_executable

_logging = logging.getLogger(__name__)


def _unique(messages: list[str]) -> list[str]:
    return list(dict.fromkeys(messages))


@dataclass
class Toolkit:
    """The external capabilities one install run uses."""

    downloader: Downloader = field(default_factory=CurlDownloader)
    hasher: ContentHasher = field(default_factory=Sha256Hasher)
    extractor: ArchiveExtractor = field(default_factory=TarExtractor)
    builder: NativeBuilder = field(default_factory=CargoBuilder)
    process_lister: ProcessLister = field(default_factory=SystemProcessLister)
    reporter: VersionReporter = field(default_factory=BinaryVersionReporter)
    which: Callable[[str], str | None] = shutil.which
    check_commands: bool = True

    def preflight(self, kind: InstallKind) -> None:
        """Fail before any mutation if a required tool is missing."""
        if not self.check_commands:
            return
        if kind == InstallKind.PREBUILT:
            if not (has_command("curl") or has_command("wget")):
                raise MissingCommandError("curl")
        elif kind == InstallKind.REMOTE_SOURCE:
            require_build_tools()
        else:
            require_command("cargo")


@dataclass
class InstallOutcome:
    resolved: ResolvedVersion
    activation: ActivationResult
    reused: bool = False
    attestation: AttestationStatus | None = None
    verification: VerificationResult | None = None
    warnings: list[str] = field(default_factory=list)


class Installer:
    def __init__(
        self,
        settings: Settings,
        paths: FoundryPaths,
        toolkit: Toolkit | None = None,
        channel_resolver: ChannelResolver | None = None,
    ):
        self.settings = settings
        self.paths = paths
        self.toolkit = toolkit or Toolkit()
        self.channel_resolver = channel_resolver

    def store_for(self, target: PlatformTarget | None = None) -> VersionStore:
        suffix = target.binary_suffix if target else ""
        return VersionStore(self.paths.versions_dir, BINARIES, suffix)

    def activation_for(self, store: VersionStore) -> ActivationManager:
        return ActivationManager(
            store,
            self.paths.bin_dir,
            self.toolkit.process_lister,
            self.toolkit.reporter,
            self.toolkit.which,
        )

    async def run(self) -> InstallOutcome:
        resolved = resolve_specifier(self.settings.specifier(), self.channel_resolver)
        _logging.debug(f"Resolved {self.settings.specifier()} to {resolved}")
        self.toolkit.preflight(resolved.kind)

        if resolved.kind == InstallKind.PREBUILT:
            return await self.install_release(resolved)

        store = self.store_for()
        activation = self.activation_for(store)
        source = SourceBuilder(
            store, activation, self.toolkit.builder, self.paths.root
        )
        self.paths.ensure()
        if resolved.kind == InstallKind.LOCAL_SOURCE:
            result = await source.install_local(resolved, self.settings.jobs)
        else:
            result = await source.install_remote(resolved, self.settings.jobs)
        return InstallOutcome(resolved, result, warnings=list(result.warnings))

    async def install_release(self, resolved: ResolvedVersion) -> InstallOutcome:
        target = await detect_target(self.settings.platform, self.settings.arch)
        store = self.store_for(target)
        activation = self.activation_for(store)
        urls = ReleaseUrls.build(resolved.repo, resolved.tag, resolved.version, target)
        warnings = await activation.ensure_not_running()

        self.paths.ensure()
        with tempfile.TemporaryDirectory(prefix="foundryup-") as scratch:
            fetcher = ArtifactFetcher(self.toolkit.downloader, Path(scratch))

            if self.settings.force:
                _logging.info("Skipping attestation verification (--force)")
                fetched = FetchedAttestation(AttestationStatus.MISSING)
            else:
                fetched = await fetcher.fetch_attestation(urls)

            record = AttestationRecord()
            if fetched.status == AttestationStatus.FOUND:
                record = parse_attestation(fetched.document)
                reuse = check_reuse(
                    store.path_for(resolved.tag),
                    store.binaries,
                    record,
                    self.toolkit.hasher,
                    store.suffix,
                )
                if reuse.reusable:
                    _logging.info(f"{resolved.tag} already installed and verified")
                    result = await activation.use(resolved.tag)
                    return InstallOutcome(
                        resolved,
                        result,
                        reused=True,
                        attestation=fetched.status,
                        warnings=_unique(warnings + result.warnings),
                    )
                _logging.debug(f"Not reusing {resolved.tag}: {reuse.reason}")
            elif not self.settings.force:
                message = "no attestation found for this release, skipping verification"
                warnings.append(message)

            version_dir = store.prepare(resolved.tag)
            archive = await fetcher.fetch_archive(urls)
            ok, detail = await self.toolkit.extractor.extract(archive, version_dir)
            if not ok:
                raise ArchiveError(f"extracting {archive.name} failed: {detail}")
            missing = store.missing(resolved.tag)
            if missing:
                raise ArchiveError(
                    f"{archive.name} does not contain: {', '.join(missing)}"
                )
            for binary in store.binaries:
                make_executable(store.binary_path(resolved.tag, binary))

            verification = VerificationResult(skipped=True)
            if fetched.status == AttestationStatus.FOUND:
                # A failed check leaves version_dir in place for --force.
                verification = verify_binaries(
                    version_dir,
                    store.binaries,
                    record,
                    self.toolkit.hasher,
                    store.suffix,
                )
                verification.raise_for_failures()

            warnings.extend(await self.install_manpages(fetcher, urls))

        result = await activation.use(resolved.tag)
        return InstallOutcome(
            resolved,
            result,
            attestation=fetched.status,
            verification=verification,
            warnings=_unique(warnings + result.warnings),
        )

    async def install_manpages(self, fetcher: ArtifactFetcher, urls: ReleaseUrls) -> list[str]:
        """Man pages are optional; failures become warnings."""
        try:
            archive = await fetcher.fetch_manpages(urls)
            ok, detail = await self.toolkit.extractor.extract(archive, self.paths.man_dir)
            if not ok:
                raise ArchiveError(f"extracting {archive.name} failed: {detail}")
        except FoundryupError as e:
            return [f"skipping manpage download: {e}"]
        return []


__all__ = ["Toolkit", "InstallOutcome", "Installer"]
