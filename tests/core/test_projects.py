"""Tests for the project model and YAML project list loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from shepherd.core.projects import (
    DEFAULT_BRANCH,
    Project,
    ReportSeparator,
    load_projects,
    parse_projects,
)
from shepherd.exceptions import ConfigError


def _write(tmp_path, data, name="projects.yaml"):
    path = tmp_path / name
    path.write_text(yaml.dump(data))
    return path


class TestProjectModel:
    def test_defaults(self):
        project = Project(name="p", path=Path("/src/p"))
        assert project.default_branch == DEFAULT_BRANCH
        assert project.safe_branches == ["master"]
        assert project.safe_patterns == []
        assert project.commit_prefix == 12
        assert project.prune_on_fetch is False
        assert project.marks == []

    def test_default_branch_always_safe(self):
        project = Project(
            name="p", path=Path("/src/p"), default_branch="main", safe_branches=["dev"]
        )
        assert project.safe_branches == ["dev", "main"]

    def test_default_branch_not_duplicated(self):
        project = Project(
            name="p", path=Path("/src/p"), default_branch="main", safe_branches=["main"]
        )
        assert project.safe_branches == ["main"]

    def test_invalid_safe_branch_pattern(self):
        with pytest.raises(ValidationError, match="invalid safe branch pattern"):
            Project(name="p", path=Path("/src/p"), safe_branches=["release/("])

    def test_safe_patterns_compiled(self):
        project = Project(name="p", path=Path("/src/p"), safe_patterns=["^origin/keep"])
        assert project.safe_patterns[0].search("origin/keep-me")

    def test_frozen(self):
        project = Project(name="p", path=Path("/src/p"))
        with pytest.raises(ValidationError, match="frozen"):
            project.name = "other"

    def test_repository_carries_settings(self, tmp_path):
        project = Project(name="p", path=tmp_path, commit_prefix=7, prune_on_fetch=True)
        repository = project.repository()
        assert repository.path == tmp_path
        assert repository.commit_prefix == 7
        assert repository.prune_on_fetch is True


class TestParseProjects:
    def test_root_and_names(self, tmp_path):
        items = parse_projects(
            {"root": "src", "projects": ["alpha", {"name": "beta"}]}, base=tmp_path
        )
        assert [p.name for p in items] == ["alpha", "beta"]
        assert items[0].path == tmp_path / "src" / "alpha"
        assert items[1].path == tmp_path / "src" / "beta"

    def test_absolute_root(self, tmp_path):
        items = parse_projects({"root": str(tmp_path), "projects": ["a"]}, base=Path("/x"))
        assert items[0].path == tmp_path / "a"

    def test_path_override(self, tmp_path):
        items = parse_projects(
            {
                "root": str(tmp_path),
                "projects": [
                    {"name": "rel", "path": "elsewhere/rel-repo"},
                    {"name": "abs", "path": "/opt/abs-repo"},
                ],
            },
            base=tmp_path,
        )
        assert items[0].path == tmp_path / "elsewhere" / "rel-repo"
        assert items[1].path == Path("/opt/abs-repo")

    def test_shared_settings_and_overrides(self, tmp_path):
        items = parse_projects(
            {
                "root": str(tmp_path),
                "default_branch": "main",
                "commit_prefix": 8,
                "safe_branches": ["release/.*"],
                "projects": [
                    "a",
                    {"name": "b", "default_branch": "trunk", "marks": ["web"]},
                ],
            },
            base=tmp_path,
        )
        a, b = items
        assert a.default_branch == "main"
        assert a.commit_prefix == 8
        assert a.safe_branches == ["release/.*", "main"]
        assert b.default_branch == "trunk"
        assert b.safe_branches == ["release/.*", "trunk"]
        assert b.marks == ["web"]

    def test_separators(self, tmp_path):
        items = parse_projects(
            {
                "root": str(tmp_path),
                "projects": [{"separator": "Backend"}, "api", {"separator": None}, "ui"],
            },
            base=tmp_path,
        )
        assert items[0] == ReportSeparator(label="Backend")
        assert isinstance(items[1], Project)
        assert items[2] == ReportSeparator(label="")
        assert items[3].name == "ui"

    def test_invalid_entries_skipped(self, tmp_path):
        items = parse_projects(
            {
                "root": str(tmp_path),
                "projects": [
                    {"path": "no-name"},
                    42,
                    {"name": "bad", "commit_prefix": "not-a-number"},
                    "good",
                ],
            },
            base=tmp_path,
        )
        assert [p.name for p in items] == ["good"]

    def test_duplicates_skipped(self, tmp_path):
        items = parse_projects(
            {
                "root": str(tmp_path),
                "projects": [{"name": "a", "marks": ["first"]}, {"name": "a"}],
            },
            base=tmp_path,
        )
        assert len(items) == 1
        assert items[0].marks == ["first"]

    def test_projects_must_be_list(self, tmp_path):
        with pytest.raises(ConfigError, match="must be a list"):
            parse_projects({"projects": {"a": {}}}, base=tmp_path)

    def test_projects_missing(self, tmp_path):
        with pytest.raises(ConfigError):
            parse_projects({}, base=tmp_path)


class TestLoadProjects:
    def test_valid_yaml(self, tmp_path):
        path = _write(tmp_path, {"root": "repos", "projects": ["one", "two"]})
        items = load_projects(path)
        assert [p.name for p in items] == ["one", "two"]
        assert items[0].path == tmp_path / "repos" / "one"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Unable to read"):
            load_projects(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "projects.yaml"
        path.write_text("projects: [unclosed\n")
        with pytest.raises(ConfigError, match="Unable to read"):
            load_projects(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "projects.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_projects(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "projects.yaml"
        path.write_text("")
        with pytest.raises(ConfigError):
            load_projects(path)
