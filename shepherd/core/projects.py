"""Project model and YAML loader for the managed repository list."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from shepherd.exceptions import ConfigError
from shepherd.git.repository import DEFAULT_COMMIT_PREFIX, GitRepository
from shepherd.git.shell import ShellRunner

logger = structlog.get_logger()

DEFAULT_BRANCH = "master"

_SHARED_KEYS = (
    "default_branch",
    "safe_branches",
    "safe_patterns",
    "commit_prefix",
    "prune_on_fetch",
)


class Project(BaseModel):
    """One managed repository and its branch policy."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    default_branch: str = DEFAULT_BRANCH
    # Validated with the default so the default branch is always present
    safe_branches: list[str] = Field(default_factory=list, validate_default=True)
    safe_patterns: list[re.Pattern[str]] = []
    commit_prefix: int = DEFAULT_COMMIT_PREFIX
    prune_on_fetch: bool = False
    marks: list[str] = []

    @field_validator("safe_branches")
    @classmethod
    def include_default_branch(cls, v: list[str], info: ValidationInfo) -> list[str]:
        for name in v:
            try:
                re.compile(f"origin/{name}")
            except re.error as e:
                raise ValueError(f"invalid safe branch pattern {name!r}: {e}") from e
        default_branch = info.data.get("default_branch")
        if default_branch and default_branch not in v:
            return [*v, default_branch]
        return v

    def repository(self, runner: ShellRunner | None = None) -> GitRepository:
        return GitRepository(
            self.path,
            runner,
            commit_prefix=self.commit_prefix,
            prune_on_fetch=self.prune_on_fetch,
        )


class ReportSeparator(BaseModel):
    """A labelled divider between groups of projects."""

    model_config = ConfigDict(frozen=True)

    label: str = ""


ProjectItem = Project | ReportSeparator


def load_projects(path: Path) -> list[ProjectItem]:
    """Load the project list from a YAML file.

    Raises ConfigError if the file cannot be read or is not a mapping with a
    ``projects`` list. Individual invalid entries are skipped with a warning.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to read project list {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Project list {path} must be a mapping")

    items = parse_projects(raw, base=path.parent)
    logger.info(
        "projects_loaded",
        path=str(path),
        count=sum(1 for item in items if isinstance(item, Project)),
    )
    return items


def parse_projects(raw: dict[str, Any], base: Path) -> list[ProjectItem]:
    entries = raw.get("projects")
    if not isinstance(entries, list):
        raise ConfigError("'projects' must be a list")

    root = _resolve_against(Path(str(raw.get("root", "."))).expanduser(), base)
    shared = {key: raw[key] for key in _SHARED_KEYS if key in raw}

    items: list[ProjectItem] = []
    seen: set[str] = set()
    for entry in entries:
        if isinstance(entry, dict) and "separator" in entry:
            items.append(ReportSeparator(label=str(entry["separator"] or "")))
            continue

        project = _parse_project(entry, root, shared)
        if project is None:
            continue
        if project.name in seen:
            logger.warning("project_duplicate", project=project.name)
            continue
        seen.add(project.name)
        items.append(project)

    return items


def _parse_project(
    entry: Any, root: Path, shared: dict[str, Any]
) -> Project | None:
    if isinstance(entry, str):
        entry = {"name": entry}
    if not isinstance(entry, dict) or not entry.get("name"):
        logger.warning("project_invalid_entry", entry=entry)
        return None

    name = str(entry["name"])
    values = {**shared, **entry, "name": name}
    if "path" in entry:
        values["path"] = _resolve_against(Path(str(entry["path"])).expanduser(), root)
    else:
        values["path"] = root / name

    try:
        return Project.model_validate(values)
    except ValidationError as exc:
        logger.warning("project_invalid", project=name, error=str(exc))
        return None


def _resolve_against(path: Path, base: Path) -> Path:
    """Return *path* unchanged if absolute, otherwise resolve it against *base*."""
    return path if path.is_absolute() else base / path
