"""Action interface: one per-repository workflow plus an optional post step."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from shepherd.core.projects import Project
    from shepherd.git.repository import GitRepository


class Outcome(StrEnum):
    """How a result should be highlighted when rendered."""

    SUCCESS = "success"
    FAILURE = "failure"
    ATTENTION = "attention"
    NEUTRAL = "neutral"


class ActionResult(BaseModel):
    """Flat, display-ready outcome of one workflow on one repository."""

    model_config = ConfigDict(frozen=True)

    project: str
    selected: bool = True
    error: str = ""

    @property
    def outcome(self) -> Outcome:
        return Outcome.FAILURE if self.error else Outcome.NEUTRAL

    def row(self) -> dict[str, str]:
        """Column title -> display value, scalar fields only.

        Subclasses extend this with their own columns.
        """
        return {"Project": self.project}


class Action(ABC):
    name: str
    description: str
    columns: tuple[str, ...]

    @abstractmethod
    async def act(self, project: Project, repository: GitRepository) -> ActionResult:
        """Run the workflow on one repository; failures become the result."""

    @abstractmethod
    def skip_report(self, project: Project) -> ActionResult:
        """Placeholder result for a project that was not selected."""

    def post(self, results: Sequence[ActionResult]) -> None:  # noqa: B027
        """Called once after every project has finished."""
