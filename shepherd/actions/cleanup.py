"""Retire the working branch once it is no longer needed locally."""

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

CLEANUP_REMOTE = "origin"


class CleanupStatus(StrEnum):
    SKIPPED = "clean-skip"
    DIRTY = "clean-dirty"
    SUCCESS = "clean-success"
    FAILURE = "clean-failure"


class CleanupResult(ActionResult):
    branch: str = ""
    status: CleanupStatus

    @property
    def outcome(self) -> Outcome:
        return {
            CleanupStatus.SUCCESS: Outcome.SUCCESS,
            CleanupStatus.FAILURE: Outcome.FAILURE,
            CleanupStatus.DIRTY: Outcome.ATTENTION,
        }.get(self.status, Outcome.NEUTRAL)

    def row(self) -> dict[str, str]:
        return {
            "Project": self.project,
            "Branch": self.branch,
            "Status": self.status.value,
        }


class CleanupAction(Action):
    """Switch back to the default branch and delete the one that was checked out.

    The mutating steps run strictly in order; a failure part way through
    leaves the earlier steps in place.
    """

    name = "cleanup"
    description = "Retire unused branches"
    columns = ("Project", "Branch", "Status")

    async def act(self, project: Project, repository: GitRepository) -> CleanupResult:
        branch = ""

        def finish(status: CleanupStatus, error: str = "") -> CleanupResult:
            return CleanupResult(
                project=project.name, branch=branch, status=status, error=error
            )

        try:
            status = await repository.status()
            branch = status.branch
            if branch == project.default_branch:
                return finish(CleanupStatus.SKIPPED)
            if status.modified_files:
                return finish(CleanupStatus.DIRTY)

            await repository.select_branch(project.default_branch)
            await repository.pull()
            await repository.delete_local_branch(branch)
            pruned = await repository.prune(CLEANUP_REMOTE)
        except GitError as e:
            logger.error(
                "cleanup_failed", project=project.name, branch=branch, error=str(e)
            )
            return finish(CleanupStatus.FAILURE, str(e))
        except Exception as e:
            logger.exception("cleanup_error", project=project.name, branch=branch)
            return finish(CleanupStatus.FAILURE, str(e))

        logger.info(
            "cleanup_complete", project=project.name, branch=branch, pruned=pruned
        )
        return finish(CleanupStatus.SUCCESS)

    def skip_report(self, project: Project) -> CleanupResult:
        return CleanupResult(
            project=project.name, status=CleanupStatus.SKIPPED, selected=False
        )
