"""Fast-forward every clean repository."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from shepherd.actions.base import Action, ActionResult, Outcome
from shepherd.exceptions import GitError

if TYPE_CHECKING:
    from shepherd.core.projects import Project
    from shepherd.git.repository import GitRepository

logger = structlog.get_logger()


class SyncStatus(StrEnum):
    SUCCESS = "sync-success"
    FAILURE = "sync-fail"
    DIRTY = "sync-dirty"
    SKIPPED = "sync-skipped"


class SyncResult(ActionResult):
    branch: str = ""
    updated: int = 0
    status: SyncStatus

    @property
    def outcome(self) -> Outcome:
        return {
            SyncStatus.SUCCESS: Outcome.SUCCESS,
            SyncStatus.FAILURE: Outcome.FAILURE,
            SyncStatus.DIRTY: Outcome.ATTENTION,
        }.get(self.status, Outcome.NEUTRAL)

    def row(self) -> dict[str, str]:
        return {
            "Project": self.project,
            "Branch": self.branch,
            "Updated": str(self.updated),
            "Status": self.status.value,
        }


class SyncAction(Action):
    name = "sync"
    description = "Sync all projects"
    columns = ("Project", "Branch", "Updated", "Status")

    async def act(self, project: Project, repository: GitRepository) -> SyncResult:
        branch = ""
        try:
            status = await repository.status()
            branch = status.branch
            if status.modified_files:
                return SyncResult(
                    project=project.name, branch=branch, status=SyncStatus.DIRTY
                )

            pull = await repository.pull()
        except Exception as e:
            if isinstance(e, GitError):
                logger.error("sync_failed", project=project.name, error=str(e))
            else:
                logger.exception("sync_error", project=project.name)
            return SyncResult(
                project=project.name,
                branch=branch,
                status=SyncStatus.FAILURE,
                error=str(e),
            )

        logger.info(
            "sync_complete", project=project.name, updated=len(pull.updated_files)
        )
        return SyncResult(
            project=project.name,
            branch=branch,
            updated=len(pull.updated_files),
            status=SyncStatus.SUCCESS,
        )

    def skip_report(self, project: Project) -> SyncResult:
        return SyncResult(
            project=project.name, status=SyncStatus.SKIPPED, selected=False
        )
