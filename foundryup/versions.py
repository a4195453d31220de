"""Version comparison and retrieval utilities."""

import re
from pathlib import Path
from typing import Tuple

from .execution import run_command_async

NUMBER_PATTERN = re.compile(r"v?(\d+(?:\.\d+)*)")


def extract_version_number(version_str: str) -> str:
    """Return the first dotted number in ``version_str``, without a ``v``."""
    match = NUMBER_PATTERN.search(version_str or "")
    return match.group(1) if match else ""


def compare_versions(version1: str, version2: str) -> int:
    """Compare two version strings. Returns -1, 0, or 1.

    Strings without a number compare as plain text.
    """
    n1, n2 = extract_version_number(version1), extract_version_number(version2)
    if n1 and n2:
        v1: Tuple = tuple(int(part) for part in n1.split("."))
        v2: Tuple = tuple(int(part) for part in n2.split("."))
    else:
        v1, v2 = (version1,), (version2,)
    return (v1 > v2) - (v1 < v2)


def version_gt(version1: str, version2: str) -> bool:
    """Return True only if ``version1`` is strictly newer than ``version2``."""
    return compare_versions(version1, version2) > 0


async def get_binary_version(binary: Path) -> Tuple[str | None, str]:
    """Ask an installed binary for its own version string (``<bin> -V``)."""
    output, returncode = await run_command_async([str(binary), "-V"])
    if returncode == 0:
        return output, "success"
    return None, output or "Command failed"


__all__ = [
    "extract_version_number",
    "compare_versions",
    "version_gt",
    "get_binary_version",
]
