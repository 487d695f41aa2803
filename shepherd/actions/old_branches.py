"""Report remote branches whose latest commit is past an age limit."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shepherd.actions.branch_reports import (
    BranchReportAction,
    BranchReportResult,
    BranchReportStatus,
)
from shepherd.core.config import DEFAULT_OLD_BRANCH_AGE
from shepherd.exceptions import GitError
from shepherd.git.models import RemoteBranch

if TYPE_CHECKING:
    from shepherd.core.projects import Project
    from shepherd.git.repository import GitRepository

logger = structlog.get_logger()

_ONE_DAY = timedelta(days=1)


def parse_age(age: int | str | None, default: int = DEFAULT_OLD_BRANCH_AGE) -> int:
    """Accept a positive whole number of days, otherwise warn and use *default*."""
    if age is None:
        return default
    try:
        days = int(str(age).strip())
    except ValueError:
        days = 0
    if days < 1:
        logger.warning("old_branch_age_invalid", age=age, default=default)
        return default
    return days


def age_in_days(now: datetime, committed: datetime) -> int:
    """Whole days between two instants, rounded down."""
    return (now - committed) // _ONE_DAY


class OldBranchesReportAction(BranchReportAction):
    name = "old-branches"
    description = "Generate a list of branches older than a certain age"

    def __init__(
        self,
        report_file: Path,
        age: int | str | None = None,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        super().__init__(report_file)
        self.age = parse_age(age)
        self._clock = clock
        logger.debug("old_branch_report", age=self.age)

    async def act(
        self, project: Project, repository: GitRepository
    ) -> BranchReportResult:
        try:
            await repository.fetch()
            tracking = await repository.remote_branches()
            # Read-only queries, safe to overlap within one repository
            dates = await asyncio.gather(
                *(repository.committer_date(branch) for branch in tracking)
            )
        except Exception as e:
            if isinstance(e, GitError):
                logger.error(
                    "old_branch_report_failed", project=project.name, error=str(e)
                )
            else:
                logger.exception("old_branch_report_error", project=project.name)
            return BranchReportResult(
                project=project.name, status=BranchReportStatus.FAILURE, error=str(e)
            )

        now = self._clock()
        candidates: list[str] = []
        for branch, committed in zip(tracking, dates, strict=True):
            days = age_in_days(now, committed)
            if days >= self.age:
                remote_branch = RemoteBranch.from_branch_name(branch)
                logger.info(
                    "old_branch_candidate",
                    project=project.name,
                    remote=remote_branch.remote,
                    branch=remote_branch.branch,
                    days=days,
                )
                candidates.append(branch)

        return BranchReportResult(
            project=project.name,
            status=BranchReportStatus.SUCCESS,
            candidates=tuple(candidates),
        )
