"""Tests for settings and project list discovery."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from shepherd.core.config import DEFAULT_OLD_BRANCH_AGE, ShepherdSettings, find_config_file
from shepherd.exceptions import ConfigError


class TestShepherdSettings:
    def test_defaults(self):
        settings = ShepherdSettings()
        assert settings.config_file is None
        assert settings.log_level == "INFO"
        assert settings.log_dir is None
        assert settings.old_branch_age == DEFAULT_OLD_BRANCH_AGE

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHEPHERD_CONFIG_FILE", str(tmp_path / "p.yaml"))
        monkeypatch.setenv("SHEPHERD_OLD_BRANCH_AGE", "90")
        settings = ShepherdSettings()
        assert settings.config_file == tmp_path / "p.yaml"
        assert settings.old_branch_age == 90

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("debug", "DEBUG"), ("Info", "INFO"), ("warn", "WARNING"), ("ERROR", "ERROR")],
    )
    def test_log_level_normalized(self, raw, expected):
        assert ShepherdSettings(log_level=raw).log_level == expected

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError, match="unknown log level"):
            ShepherdSettings(log_level="chatty")

    def test_home_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        settings = ShepherdSettings(config_file=Path("~/p.yaml"), log_dir=Path("~/logs"))
        assert settings.config_file == tmp_path / "p.yaml"
        assert settings.log_dir == tmp_path / "logs"


class TestFindConfigFile:
    def test_option_wins(self, tmp_path):
        option = tmp_path / "option.yaml"
        option.write_text("projects: []\n")
        (tmp_path / ".shepherd.yaml").write_text("projects: []\n")
        assert find_config_file(option, ShepherdSettings(), home=tmp_path) == option

    def test_settings_before_home(self, tmp_path):
        configured = tmp_path / "configured.yaml"
        configured.write_text("projects: []\n")
        (tmp_path / ".shepherd.yaml").write_text("projects: []\n")
        settings = ShepherdSettings(config_file=configured)
        assert find_config_file(None, settings, home=tmp_path) == configured

    def test_hidden_home_file_before_plain(self, tmp_path):
        (tmp_path / ".shepherd.yaml").write_text("projects: []\n")
        (tmp_path / "shepherd.yaml").write_text("projects: []\n")
        found = find_config_file(None, ShepherdSettings(), home=tmp_path)
        assert found == tmp_path / ".shepherd.yaml"

    def test_plain_home_file(self, tmp_path):
        (tmp_path / "shepherd.yaml").write_text("projects: []\n")
        found = find_config_file(None, ShepherdSettings(), home=tmp_path)
        assert found == tmp_path / "shepherd.yaml"

    def test_missing_option_falls_through(self, tmp_path):
        (tmp_path / "shepherd.yaml").write_text("projects: []\n")
        found = find_config_file(tmp_path / "nope.yaml", ShepherdSettings(), home=tmp_path)
        assert found == tmp_path / "shepherd.yaml"

    def test_nothing_found(self, tmp_path):
        with pytest.raises(ConfigError, match="Unable to find a project list"):
            find_config_file(None, ShepherdSettings(), home=tmp_path)
