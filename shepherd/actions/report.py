"""Local report: branch, pending changes and commit, without network access."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shepherd.actions.base import Action, ActionResult
from shepherd.exceptions import GitError

if TYPE_CHECKING:
    from shepherd.core.projects import Project
    from shepherd.git.repository import GitRepository

logger = structlog.get_logger()


class LocalReportResult(ActionResult):
    branch: str = ""
    modified: int = 0
    commit: str = ""

    def row(self) -> dict[str, str]:
        return {
            "Project": self.project,
            "Branch": self.branch,
            "# Mod": str(self.modified),
            "Commit": self.commit,
        }


class LocalReportAction(Action):
    name = "report"
    description = "Local repository report (no network interaction)"
    columns = ("Project", "Branch", "# Mod", "Commit")

    async def act(
        self, project: Project, repository: GitRepository
    ) -> LocalReportResult:
        try:
            status = await repository.status()
        except GitError as e:
            logger.error("report_failed", project=project.name, error=str(e))
            return LocalReportResult(project=project.name, error=str(e))
        except Exception as e:
            logger.exception("report_error", project=project.name)
            return LocalReportResult(project=project.name, error=str(e))

        return LocalReportResult(
            project=project.name,
            branch=status.branch,
            modified=len(status.modified_files),
            commit=status.commit,
        )

    def skip_report(self, project: Project) -> LocalReportResult:
        return LocalReportResult(project=project.name, selected=False)
