"""Attestation parsing and binary verification.

A release attestation is a sigstore bundle. Its DSSE envelope carries a
base64 encoded in-toto statement whose ``subject`` list names each released
binary together with its sha256 digest:

    {"dsseEnvelope": {"payload": "<base64>", ...}, ...}
      -> {"subject": [{"name": "forge", "digest": {"sha256": "..."}}, ...]}

Verification compares those digests with hashes computed from the files on
disk. Two checks use this:

- ``check_reuse`` decides whether an already present version directory can be
  activated as is, skipping the download.
- ``verify_binaries`` runs after extraction and reports every binary that
  does not match, so a single error can name all of them.
"""

import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from .capabilities import ContentHasher
from .errors import VerificationError

WINDOWS_SUFFIX = ".exe"

_logging = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttestationRecord:
    """Expected sha256 per binary name, as published by the release."""

    hashes: Mapping[str, str] = field(default_factory=dict)

    def expected_hash(self, binary: str) -> str | None:
        """Look ``binary`` up by its bare name, then with ``.exe`` appended."""
        expected = self.hashes.get(binary)
        if expected is None:
            expected = self.hashes.get(f"{binary}{WINDOWS_SUFFIX}")
        return expected

    def __len__(self) -> int:
        return len(self.hashes)


def _decode_payload(document: Mapping[str, Any]) -> Any:
    envelope = document.get("dsseEnvelope")
    if not isinstance(envelope, dict):
        envelope = document
    payload = envelope.get("payload")
    if not isinstance(payload, str):
        return None
    try:
        return json.loads(base64.b64decode(payload, validate=False))
    except (binascii.Error, ValueError):
        return None


def _subject_pairs(statement: Any) -> Iterator[tuple[str, str]]:
    if not isinstance(statement, dict):
        return
    subjects = statement.get("subject")
    if not isinstance(subjects, list):
        return
    for subject in subjects:
        if not isinstance(subject, dict):
            continue
        name = subject.get("name")
        digest = subject.get("digest")
        sha256 = digest.get("sha256") if isinstance(digest, dict) else None
        if isinstance(name, str) and name and isinstance(sha256, str) and sha256:
            yield name, sha256.strip().lower()


def parse_attestation(document: str) -> AttestationRecord:
    """Build an ``AttestationRecord`` from an attestation artifact.

    Records lacking a name or a sha256 digest are dropped. A document that
    cannot be decoded at all yields an empty record, which fails every
    binary at verification time.
    """
    try:
        bundle = json.loads(document)
    except ValueError:
        _logging.warning("attestation artifact is not valid JSON")
        return AttestationRecord()
    if not isinstance(bundle, dict):
        return AttestationRecord()

    hashes = dict(_subject_pairs(_decode_payload(bundle)))
    _logging.debug(f"Attestation lists {len(hashes)} binaries: {sorted(hashes)}")
    return AttestationRecord(hashes)


@dataclass
class BinaryCheck:
    binary: str
    path: Path
    expected: str | None
    actual: str | None

    @property
    def ok(self) -> bool:
        return self.expected is not None and self.actual == self.expected


@dataclass
class ReuseCheck:
    reusable: bool
    checks: list[BinaryCheck] = field(default_factory=list)
    reason: str = ""


@dataclass
class VerificationResult:
    checks: list[BinaryCheck] = field(default_factory=list)
    skipped: bool = False

    @property
    def failed(self) -> list[str]:
        return [c.binary for c in self.checks if not c.ok]

    @property
    def passed(self) -> bool:
        return self.skipped or not self.failed

    def raise_for_failures(self) -> None:
        if not self.passed:
            raise VerificationError(self.failed)


def _hash_if_present(path: Path, hasher: ContentHasher) -> str | None:
    if not path.is_file():
        return None
    return hasher.hash_file(path).lower()


def check_reuse(
    version_dir: Path,
    binaries: Sequence[str],
    record: AttestationRecord,
    hasher: ContentHasher,
    suffix: str = "",
) -> ReuseCheck:
    """Decide whether ``version_dir`` already holds the attested binaries.

    Reuse requires every binary to exist, be executable, have an expected
    hash and match it. Stops at the first binary that does not qualify.
    """
    if not version_dir.is_dir():
        return ReuseCheck(False, reason="version directory does not exist")

    checks = []
    for binary in binaries:
        path = version_dir / f"{binary}{suffix}"
        if not path.is_file() or not os.access(path, os.X_OK):
            return ReuseCheck(False, checks, f"{binary} is missing or not executable")
        expected = record.expected_hash(binary)
        if expected is None:
            return ReuseCheck(False, checks, f"no attested hash for {binary}")
        check = BinaryCheck(binary, path, expected, _hash_if_present(path, hasher))
        checks.append(check)
        if not check.ok:
            return ReuseCheck(False, checks, f"{binary} does not match its attestation")
    return ReuseCheck(True, checks)


def verify_binaries(
    version_dir: Path,
    binaries: Sequence[str],
    record: AttestationRecord,
    hasher: ContentHasher,
    suffix: str = "",
) -> VerificationResult:
    """Hash every installed binary and compare it with the attestation."""
    result = VerificationResult()
    for binary in binaries:
        path = version_dir / f"{binary}{suffix}"
        expected = record.expected_hash(binary)
        actual = _hash_if_present(path, hasher)
        check = BinaryCheck(binary, path, expected, actual)
        if expected is None:
            _logging.warning(f"no expected hash for {binary}")
        elif actual is None:
            _logging.warning(f"{binary} is missing from {version_dir}")
        elif not check.ok:
            _logging.warning(f"{binary} hash mismatch: expected {expected}, got {actual}")
        result.checks.append(check)
    return result


__all__ = [
    "AttestationRecord",
    "BinaryCheck",
    "ReuseCheck",
    "VerificationResult",
    "parse_attestation",
    "check_reuse",
    "verify_binaries",
]
