"""Tests for settings loading and layering."""

from pathlib import Path

import pytest

from foundryup.config import (
    ConfigError,
    Settings,
    build_settings,
    env_settings,
    load_settings_file,
)
from foundryup.paths import FoundryPaths, get_foundry_dir
from foundryup.specifier import DEFAULT_REPO


class TestLoadSettingsFile:
    def test_missing_file(self, temp_dir):
        assert load_settings_file(temp_dir / "foundryup.yaml") == {}

    def test_valid_file(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("repo: alice/foundry\njobs: 4\nforce: true\n")
        assert load_settings_file(path) == {"repo": "alice/foundry", "jobs": 4, "force": True}

    def test_empty_file(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("")
        assert load_settings_file(path) == {}

    def test_unknown_key(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("colour: blue\n")
        with pytest.raises(ConfigError, match="unknown key 'colour'"):
            load_settings_file(path)

    def test_wrong_type(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("jobs: many\n")
        with pytest.raises(ConfigError, match="field 'jobs' must be a int"):
            load_settings_file(path)

    def test_bool_is_not_a_job_count(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("jobs: true\n")
        with pytest.raises(ConfigError):
            load_settings_file(path)

    def test_not_a_mapping(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_settings_file(path)

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "foundryup.yaml"
        path.write_text("repo: [unclosed\n")
        with pytest.raises(ConfigError, match="not valid YAML"):
            load_settings_file(path)


class TestEnvSettings:
    def test_reads_known_variables(self):
        values = env_settings(
            {"FOUNDRYUP_REPO": "bob/foundry", "FOUNDRYUP_JOBS": "2",
             "FOUNDRYUP_IGNORE_VERIFICATION": "1"}
        )
        assert values == {"repo": "bob/foundry", "jobs": 2, "force": True}

    def test_bad_integer(self):
        with pytest.raises(ConfigError, match="jobs must be an integer"):
            env_settings({"FOUNDRYUP_JOBS": "lots"})


class TestBuildSettings:
    def test_defaults(self):
        settings = build_settings({}, {}, {})
        assert settings == Settings()
        assert settings.repo == DEFAULT_REPO

    def test_flags_override_file_override_env(self):
        settings = build_settings(
            {"repo": "flag/foundry", "jobs": None},
            {"repo": "file/foundry", "jobs": 8},
            {"FOUNDRYUP_REPO": "env/foundry", "FOUNDRYUP_ARCH": "arm64"},
        )
        assert settings.repo == "flag/foundry"
        assert settings.jobs == 8
        assert settings.arch == "arm64"

    def test_false_flag_does_not_clear_file_force(self):
        settings = build_settings({"force": False}, {"force": True}, {})
        assert settings.force is True

    def test_path_becomes_path(self):
        settings = build_settings({"path": "/src/foundry"}, {}, {})
        assert settings.path == Path("/src/foundry")
        assert settings.specifier().local_path == Path("/src/foundry")

    def test_settings_are_frozen(self):
        with pytest.raises(AttributeError):
            Settings().force = True  # type: ignore[misc]


class TestPaths:
    def test_foundry_dir_env(self, monkeypatch, temp_dir):
        monkeypatch.setenv("FOUNDRY_DIR", str(temp_dir / "custom"))
        assert get_foundry_dir() == temp_dir / "custom"

    def test_xdg_config_home(self, monkeypatch, temp_dir):
        monkeypatch.delenv("FOUNDRY_DIR", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
        assert get_foundry_dir() == temp_dir / ".foundry"

    def test_layout(self, temp_dir, monkeypatch):
        monkeypatch.delenv("FOUNDRYUP_CONFIG", raising=False)
        paths = FoundryPaths(temp_dir)
        assert paths.versions_dir == temp_dir / "versions"
        assert paths.bin_dir == temp_dir / "bin"
        assert paths.man_dir == temp_dir / "share" / "man" / "man1"
        assert paths.settings_path == temp_dir / "foundryup.yaml"
        paths.ensure()
        assert paths.man_dir.is_dir()
