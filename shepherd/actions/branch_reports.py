"""Branch report records shared by the report actions and guided removal.

A report pass writes one ``{project, branch, keep}`` record per candidate
branch to a JSON file. A person edits ``keep`` before guided removal reads the
file back.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from shepherd.actions.base import Action, ActionResult, Outcome
from shepherd.exceptions import ReportFileError

if TYPE_CHECKING:
    from shepherd.core.projects import Project

logger = structlog.get_logger()


class BranchReportDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    project: str
    branch: str
    keep: bool = False


_DETAILS_LIST = TypeAdapter(list[BranchReportDetails])


class BranchReportStatus(StrEnum):
    SUCCESS = "report-success"
    FAILURE = "report-failure"
    SKIPPED = "report-skip"


class BranchReportResult(ActionResult):
    status: BranchReportStatus
    candidates: tuple[str, ...] = ()

    @property
    def outcome(self) -> Outcome:
        return {
            BranchReportStatus.SUCCESS: Outcome.SUCCESS,
            BranchReportStatus.FAILURE: Outcome.FAILURE,
        }.get(self.status, Outcome.NEUTRAL)

    def row(self) -> dict[str, str]:
        return {
            "Project": self.project,
            "Status": self.status.value,
            "# Candidates": str(len(self.candidates)),
        }


def write_branch_report(results: Sequence[ActionResult], report_file: Path) -> int:
    """Write every candidate branch as a ``keep: false`` record; returns the count."""
    details = [
        BranchReportDetails(project=result.project, branch=branch, keep=False)
        for result in results
        if isinstance(result, BranchReportResult)
        for branch in result.candidates
    ]
    text = json.dumps([d.model_dump() for d in details], indent=1)

    logger.info("branch_report_writing", path=str(report_file), count=len(details))
    report_file.write_text(text + "\n", encoding="utf-8")
    return len(details)


def load_branch_report(report_file: Path) -> list[BranchReportDetails]:
    """Read a branch report; a missing file or malformed content is fatal."""
    try:
        raw = report_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ReportFileError(f"Unable to read branch report {report_file}: {e}") from e

    try:
        return _DETAILS_LIST.validate_json(raw)
    except ValidationError as e:
        raise ReportFileError(f"Malformed branch report {report_file}: {e}") from e


class BranchReportAction(Action):
    """Common columns, skip row and report writing for branch report actions."""

    columns = ("Project", "Status", "# Candidates")

    def __init__(self, report_file: Path) -> None:
        self.report_file = Path(report_file)

    def skip_report(self, project: Project) -> BranchReportResult:
        return BranchReportResult(
            project=project.name, status=BranchReportStatus.SKIPPED, selected=False
        )

    def post(self, results: Sequence[ActionResult]) -> None:
        write_branch_report(results, self.report_file)
