"""Guided removal: delete the remote branches a reviewed report marks for removal."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shepherd.actions.base import Action, ActionResult, Outcome
from shepherd.actions.branch_reports import BranchReportDetails, load_branch_report
from shepherd.exceptions import GitError
from shepherd.git.models import RemoteBranch
from shepherd.git.reconcile import BranchReconciler, SafeBranches

if TYPE_CHECKING:
    from shepherd.core.projects import Project
    from shepherd.git.repository import GitRepository

logger = structlog.get_logger()


class GuidedRemovalStatus(StrEnum):
    SUCCESS = "guided-merge-success"
    FAILURE = "guided-merge-failure"
    SKIPPED = "guided-merge-skip"
    DIRTY = "guided-merge-dirty"
    WORKING = "guided-merge-working"


class GuidedRemovalResult(ActionResult):
    branch: str = ""
    status: GuidedRemovalStatus
    kept: int = 0
    removed: int = 0
    failed: int = 0

    @property
    def outcome(self) -> Outcome:
        return {
            GuidedRemovalStatus.SUCCESS: Outcome.SUCCESS,
            GuidedRemovalStatus.FAILURE: Outcome.FAILURE,
            GuidedRemovalStatus.DIRTY: Outcome.ATTENTION,
            GuidedRemovalStatus.WORKING: Outcome.ATTENTION,
        }.get(self.status, Outcome.NEUTRAL)

    def row(self) -> dict[str, str]:
        return {
            "Project": self.project,
            "Branch": self.branch,
            "Status": self.status.value,
            "# Kept": str(self.kept),
            "# Removed": str(self.removed),
            "# Failed": str(self.failed),
        }


class RemovalPlan:
    """Branches one project keeps and the ones it will try to delete."""

    def __init__(self, kept: list[str], to_remove: list[RemoteBranch]) -> None:
        self.kept = kept
        self.to_remove = to_remove

    @classmethod
    def for_project(
        cls, project: Project, instructions: list[BranchReportDetails]
    ) -> RemovalPlan:
        # Safe branches are recomputed; the config may have changed since the report
        safe = SafeBranches.for_project(project)
        kept: list[str] = []
        to_remove: list[RemoteBranch] = []
        for instruction in instructions:
            if instruction.project != project.name:
                continue
            if instruction.keep:
                kept.append(instruction.branch)
                logger.info(
                    "guided_keep", project=project.name, branch=instruction.branch
                )
            elif not safe.is_safe(instruction.branch):
                to_remove.append(RemoteBranch.from_branch_name(instruction.branch))
                logger.info(
                    "guided_remove_planned",
                    project=project.name,
                    branch=instruction.branch,
                )
        return cls(kept, to_remove)


class GuidedBranchRemovalAction(Action):
    """Remove remote branches listed in a branch report.

    The report is read once, when the action is built, so a missing or broken
    file stops the run before any repository is touched.
    """

    name = "guided-remove"
    description = "Remove branches based on a branch report"
    columns = ("Project", "Branch", "Status", "# Kept", "# Removed", "# Failed")

    def __init__(self, report_file: Path) -> None:
        self.report_file = Path(report_file)
        self.instructions = load_branch_report(self.report_file)

    async def act(
        self, project: Project, repository: GitRepository
    ) -> GuidedRemovalResult:
        plan = RemovalPlan.for_project(project, self.instructions)
        branch = ""

        def finish(
            status: GuidedRemovalStatus,
            kept: int = 0,
            removed: int = 0,
            failed: int = 0,
            error: str = "",
        ) -> GuidedRemovalResult:
            return GuidedRemovalResult(
                project=project.name,
                branch=branch,
                status=status,
                kept=kept,
                removed=removed,
                failed=failed,
                error=error,
            )

        try:
            status = await repository.status()
            branch = status.branch
            if status.modified_files:
                return finish(GuidedRemovalStatus.DIRTY)
            if branch != project.default_branch:
                return finish(GuidedRemovalStatus.WORKING)
            if not plan.to_remove:
                logger.debug("guided_nothing_to_remove", project=project.name)
                return finish(GuidedRemovalStatus.SKIPPED)

            reconciler = BranchReconciler.from_fetch(await repository.fetch())
            targets = [reconciler.resolve(b) for b in plan.to_remove]
            for target in targets:
                logger.debug("guided_delete", project=project.name, branch=str(target))
            responses = await asyncio.gather(
                *(repository.remove_remote_branch(t.remote, t.branch) for t in targets)
            )
        except GitError as e:
            logger.error("guided_remove_failed", project=project.name, error=str(e))
            return finish(GuidedRemovalStatus.FAILURE, error=str(e))
        except Exception as e:
            logger.exception("guided_remove_error", project=project.name)
            return finish(GuidedRemovalStatus.FAILURE, error=str(e))

        removed = [r for r in responses if r.deleted]
        failed = [r for r in responses if not r.deleted]
        for response in removed:
            logger.info("guided_deleted", project=project.name, branch=str(response))
        for response in failed:
            logger.warning(
                "guided_not_deleted", project=project.name, branch=str(response)
            )
        return finish(
            GuidedRemovalStatus.SUCCESS, len(plan.kept), len(removed), len(failed)
        )

    def skip_report(self, project: Project) -> GuidedRemovalResult:
        return GuidedRemovalResult(
            project=project.name, status=GuidedRemovalStatus.SKIPPED, selected=False
        )
