"""Run configuration: CLI flags layered over a settings file and environment."""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .specifier import DEFAULT_REPO, VersionSpecifier

_logging = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the settings file cannot be read or is invalid."""
    pass


# Settings file key -> accepted type
FILE_KEYS: dict[str, type] = {
    "repo": str,
    "jobs": int,
    "arch": str,
    "platform": str,
    "force": bool,
}

ENV_KEYS = {
    "FOUNDRYUP_REPO": "repo",
    "FOUNDRYUP_JOBS": "jobs",
    "FOUNDRYUP_ARCH": "arch",
    "FOUNDRYUP_PLATFORM": "platform",
    "FOUNDRYUP_IGNORE_VERIFICATION": "force",
}


@dataclass(frozen=True)
class Settings:
    """Everything one invocation needs, fixed once flags are parsed."""

    install: str | None = None
    use: str | None = None
    list_versions: bool = False
    branch: str | None = None
    pr: int | None = None
    commit: str | None = None
    repo: str = DEFAULT_REPO
    path: Path | None = None
    jobs: int | None = None
    force: bool = False
    arch: str | None = None
    platform: str | None = None
    debug: bool = False

    def specifier(self) -> VersionSpecifier:
        return VersionSpecifier(
            version=self.install,
            branch=self.branch,
            pull_request=self.pr,
            commit=self.commit,
            local_path=self.path,
            repo=self.repo,
        )


def _validate_file_data(data: Any, source: Path) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Settings file {source} must contain a mapping, got {type(data).__name__}"
        )
    values = {}
    for key, value in data.items():
        if key not in FILE_KEYS:
            allowed = ", ".join(sorted(FILE_KEYS))
            raise ConfigError(
                f"Settings file {source} has unknown key '{key}'. Must be one of: {allowed}"
            )
        expected = FILE_KEYS[key]
        if value is None:
            continue
        # bool is an int subclass; reject it where a count is expected
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(
                f"Settings file {source} field '{key}' must be a {expected.__name__}"
            )
        values[key] = value
    return values


def load_settings_file(path: Path) -> dict[str, Any]:
    """Load settings defaults from a YAML file.

    A missing file is not an error and yields no values.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Settings file {path} is not valid YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading settings file {path}: {e}") from e
    _logging.debug(f"Loaded settings from {path}")
    return _validate_file_data(data, path)


def _parse_env_value(key: str, raw: str) -> Any:
    expected = FILE_KEYS[key]
    if expected is bool:
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if expected is int:
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{key} must be an integer, got '{raw}'")
    return raw


def env_settings(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    environ = os.environ if environ is None else environ
    values = {}
    for var, key in ENV_KEYS.items():
        raw = environ.get(var)
        if raw:
            values[key] = _parse_env_value(key, raw)
    return values


def build_settings(
    flags: Mapping[str, Any],
    file_values: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Combine defaults, environment, settings file and CLI flags.

    Later sources win; a flag left at ``None`` (or ``False``) does not
    override an earlier source.
    """
    settings = Settings()
    known = {f.name for f in fields(Settings)}
    for layer in (env_settings(environ), file_values or {}, flags):
        updates = {
            key: value
            for key, value in layer.items()
            if key in known and value is not None and value is not False
        }
        settings = replace(settings, **updates)
    if settings.path is not None and not isinstance(settings.path, Path):
        settings = replace(settings, path=Path(settings.path))
    return settings


__all__ = [
    "ConfigError",
    "Settings",
    "load_settings_file",
    "env_settings",
    "build_settings",
]
