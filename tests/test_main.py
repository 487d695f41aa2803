"""Tests for the shepherd CLI entry point."""

from unittest.mock import AsyncMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from shepherd import __version__
from shepherd.actions.guided_remove import GuidedBranchRemovalAction
from shepherd.actions.old_branches import OldBranchesReportAction
from shepherd.actions.report import LocalReportAction
from shepherd.core.selector import SelectorConfig
from shepherd.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    with patch("shepherd.main.configure_logging"):
        yield


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "projects.yaml"
    path.write_text(
        yaml.dump(
            {
                "root": str(tmp_path / "src"),
                "projects": [{"separator": "Group"}, "alpha", {"name": "beta", "marks": ["x"]}],
            }
        )
    )
    return path


@pytest.fixture
def mock_execute():
    with patch("shepherd.main.execute", new_callable=AsyncMock, return_value=[]) as m:
        yield m


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_level(self, config_file):
        result = runner.invoke(app, ["--level", "chatty", "--config", str(config_file), "report"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_selector_options_forwarded(self, config_file, mock_execute):
        result = runner.invoke(
            app, ["--config", str(config_file), "--project", "alpha", "--project", "beta", "sync"]
        )
        assert result.exit_code == 0
        selector = mock_execute.await_args.args[1]
        assert selector == SelectorConfig(projects=["alpha", "beta"])

    def test_project_list_loaded(self, config_file, mock_execute):
        runner.invoke(app, ["--config", str(config_file), "report"])
        action, _, items = mock_execute.await_args.args
        assert isinstance(action, LocalReportAction)
        assert [getattr(i, "name", None) for i in items] == [None, "alpha", "beta"]


class TestCommands:
    def test_report_renders_failures(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "report"])
        assert result.exit_code == 0
        assert "alpha" in result.output
        assert "Group" in result.output
        assert "Failures:" in result.output

    def test_missing_config(self):
        result = runner.invoke(app, ["report"])
        assert result.exit_code == 1
        assert "Unable to find a project list" in result.output

    def test_conflicting_selectors(self, config_file):
        result = runner.invoke(
            app, ["--config", str(config_file), "--project", "alpha", "--mark", "x", "sync"]
        )
        assert result.exit_code == 1
        assert "Conflicting selectors" in result.output

    def test_nothing_selected(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "--mark", "none", "sync"])
        assert result.exit_code == 1
        assert "No projects meet selection criteria" in result.output

    def test_guided_remove_missing_report(self, config_file, tmp_path, mock_execute):
        result = runner.invoke(
            app, ["--config", str(config_file), "guided-remove", str(tmp_path / "r.json")]
        )
        assert result.exit_code == 1
        mock_execute.assert_not_awaited()

    def test_guided_remove_builds_action(self, config_file, tmp_path, mock_execute):
        report = tmp_path / "r.json"
        report.write_text("[]")
        result = runner.invoke(app, ["--config", str(config_file), "guided-remove", str(report)])
        assert result.exit_code == 0
        assert isinstance(mock_execute.await_args.args[0], GuidedBranchRemovalAction)

    @pytest.mark.parametrize(("extra", "expected"), [([], 60), (["45"], 45), (["zero"], 60)])
    def test_old_branches_age(self, config_file, tmp_path, mock_execute, extra, expected):
        args = ["--config", str(config_file), "old-branches", str(tmp_path / "r.json"), *extra]
        result = runner.invoke(app, args)
        assert result.exit_code == 0
        action = mock_execute.await_args.args[0]
        assert isinstance(action, OldBranchesReportAction)
        assert action.age == expected

    def test_old_branches_age_from_env(self, config_file, tmp_path, mock_execute, monkeypatch):
        monkeypatch.setenv("SHEPHERD_OLD_BRANCH_AGE", "90")
        runner.invoke(app, ["--config", str(config_file), "old-branches", str(tmp_path / "r.json")])
        assert mock_execute.await_args.args[0].age == 90
