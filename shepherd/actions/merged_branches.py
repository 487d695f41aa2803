"""Report remote branches already merged into the current branch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shepherd.actions.branch_reports import (
    BranchReportAction,
    BranchReportResult,
    BranchReportStatus,
)
from shepherd.exceptions import GitError
from shepherd.git.models import RemoteBranch
from shepherd.git.reconcile import SafeBranches

if TYPE_CHECKING:
    from shepherd.core.projects import Project
    from shepherd.git.repository import GitRepository

logger = structlog.get_logger()


class MergedBranchesReportAction(BranchReportAction):
    """List merged, non-safe remote branches; never modifies the repository."""

    name = "merged-report"
    description = "Generate a merged branches report"

    async def act(
        self, project: Project, repository: GitRepository
    ) -> BranchReportResult:
        try:
            await repository.fetch()
            merged = await repository.remote_branches(merged=True)
        except Exception as e:
            if isinstance(e, GitError):
                logger.error("merged_report_failed", project=project.name, error=str(e))
            else:
                logger.exception("merged_report_error", project=project.name)
            return BranchReportResult(
                project=project.name, status=BranchReportStatus.FAILURE, error=str(e)
            )

        candidates = SafeBranches.for_project(project).filter(merged)
        for branch in candidates:
            remote_branch = RemoteBranch.from_branch_name(branch)
            logger.info(
                "merged_candidate",
                project=project.name,
                remote=remote_branch.remote,
                branch=remote_branch.branch,
            )
        return BranchReportResult(
            project=project.name,
            status=BranchReportStatus.SUCCESS,
            candidates=tuple(candidates),
        )
