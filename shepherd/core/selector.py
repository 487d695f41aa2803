"""Choose which configured projects an action runs against."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict

from shepherd.core.projects import Project, ProjectItem
from shepherd.exceptions import SelectionError, ShellError
from shepherd.git.repository import GitRepository

logger = structlog.get_logger()

RepositoryFactory = Callable[[Project], GitRepository]


class SelectorConfig(BaseModel):
    """At most one of these criteria may be set."""

    model_config = ConfigDict(frozen=True)

    projects: list[str] = []
    paths: list[Path] = []
    branch: str = ""
    mark: str = ""


@dataclass(frozen=True)
class SelectedItem:
    item: ProjectItem
    selected: bool


class Selector:
    criteria = "All projects"

    async def matches(self, project: Project) -> bool:  # noqa: ARG002
        return True

    async def __call__(self, item: ProjectItem) -> SelectedItem:
        if not isinstance(item, Project):
            return SelectedItem(item=item, selected=False)
        return SelectedItem(item=item, selected=await self.matches(item))


class ProjectListSelector(Selector):
    def __init__(self, names: list[str]) -> None:
        self._names = set(names)
        self.criteria = f"in list: {', '.join(names)}"

    async def matches(self, project: Project) -> bool:
        return project.name in self._names


class ProjectPathSelector(Selector):
    def __init__(self, paths: list[Path]) -> None:
        self._paths = [p.expanduser().resolve() for p in paths]
        self.criteria = f"in path list: {', '.join(str(p) for p in paths)}"

    async def matches(self, project: Project) -> bool:
        project_path = project.path.expanduser().resolve()
        return any(project_path.is_relative_to(p) for p in self._paths)


class BranchSelector(Selector):
    def __init__(self, branch: str, repository_for: RepositoryFactory) -> None:
        self._branch = branch
        self._repository_for = repository_for
        self.criteria = f"active branch = {branch}"

    async def matches(self, project: Project) -> bool:
        try:
            branch = await self._repository_for(project).branch()
        except ShellError as e:
            logger.warning("branch_lookup_failed", project=project.name, error=str(e))
            return False
        logger.debug("branch_selector", project=project.name, branch=branch)
        return branch == self._branch


class MarkSelector(Selector):
    def __init__(self, mark: str) -> None:
        self._mark = mark
        self.criteria = f"project mark = {mark}"

    async def matches(self, project: Project) -> bool:
        return self._mark in project.marks


def build_selector(
    config: SelectorConfig, repository_for: RepositoryFactory = Project.repository
) -> Selector:
    """Build the selector for *config*; raises SelectionError on conflicts."""
    branch = config.branch.strip()
    mark = config.mark.strip()
    chosen = [bool(config.projects), bool(config.paths), bool(branch), bool(mark)]

    if sum(chosen) > 1:
        raise SelectionError(
            "Conflicting selectors: "
            f"projects={config.projects} paths={[str(p) for p in config.paths]} "
            f"branch={branch!r} mark={mark!r}"
        )
    if config.paths:
        return ProjectPathSelector(config.paths)
    if config.projects:
        return ProjectListSelector(config.projects)
    if branch:
        return BranchSelector(branch, repository_for)
    if mark:
        return MarkSelector(mark)
    return Selector()


async def select_items(
    config: SelectorConfig,
    items: list[ProjectItem],
    repository_for: RepositoryFactory = Project.repository,
) -> list[SelectedItem]:
    """Apply the selection criteria to every item, keeping order."""
    selector = build_selector(config, repository_for)
    selected_items = await asyncio.gather(*(selector(item) for item in items))

    count = sum(1 for s in selected_items if s.selected)
    logger.debug("projects_selected", count=count, criteria=selector.criteria)
    if count == 0:
        raise SelectionError(
            f"No projects meet selection criteria: {selector.criteria}"
        )
    return list(selected_items)
