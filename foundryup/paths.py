"""Directory layout helpers for foundryup."""

import os
from dataclasses import dataclass
from pathlib import Path


def get_config_root() -> Path:
    """Return the base directory: $XDG_CONFIG_HOME, falling back to $HOME."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home()


def get_foundry_dir() -> Path:
    """Return the foundry directory.

    Priority:
    1. FOUNDRY_DIR environment variable (if set)
    2. {config_root}/.foundry
    """
    if os.environ.get("FOUNDRY_DIR"):
        return Path(os.environ["FOUNDRY_DIR"])
    return get_config_root() / ".foundry"


@dataclass(frozen=True)
class FoundryPaths:
    """Resolved on-disk layout for one run."""

    root: Path

    @property
    def versions_dir(self) -> Path:
        return self.root / "versions"

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def man_dir(self) -> Path:
        return self.root / "share" / "man" / "man1"

    @property
    def installer_path(self) -> Path:
        return self.bin_dir / "foundryup"

    @property
    def settings_path(self) -> Path:
        if "FOUNDRYUP_CONFIG" in os.environ:
            return Path(os.environ["FOUNDRYUP_CONFIG"])
        return self.root / "foundryup.yaml"

    def ensure(self) -> None:
        """Create the directories every install flow writes into."""
        for directory in (self.versions_dir, self.bin_dir, self.man_dir):
            directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def default(cls) -> "FoundryPaths":
        return cls(get_foundry_dir())
