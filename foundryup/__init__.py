"""Install, verify and switch between versions of the Foundry toolchain."""

import logging

FOUNDRYUP_INSTALLER_VERSION = "1.3.0"
__version__ = FOUNDRYUP_INSTALLER_VERSION


def setup_logging(debug: bool = False) -> None:
    """Configure the root logger once per invocation."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="foundryup: %(levelname)s: %(message)s",
        force=True,
    )


from .config import ConfigError, Settings, build_settings, load_settings_file  # noqa: E402
from .errors import (  # noqa: E402
    ConflictError,
    FoundryupError,
    NetworkError,
    NotInstalledError,
    UnsupportedTargetError,
    UsageError,
    VerificationError,
    format_error,
    render_error,
)
from .paths import FoundryPaths, get_foundry_dir  # noqa: E402
from .versions import compare_versions, version_gt  # noqa: E402

__all__ = [
    "FOUNDRYUP_INSTALLER_VERSION",
    "__version__",
    "setup_logging",
    "ConfigError",
    "Settings",
    "build_settings",
    "load_settings_file",
    "FoundryupError",
    "UsageError",
    "UnsupportedTargetError",
    "NetworkError",
    "VerificationError",
    "ConflictError",
    "NotInstalledError",
    "format_error",
    "render_error",
    "FoundryPaths",
    "get_foundry_dir",
    "compare_versions",
    "version_gt",
]
