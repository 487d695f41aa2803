"""CLI entry point for shepherd."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

from shepherd import __version__
from shepherd.actions.base import Action
from shepherd.actions.cleanup import CleanupAction
from shepherd.actions.guided_remove import GuidedBranchRemovalAction
from shepherd.actions.merged_branches import MergedBranchesReportAction
from shepherd.actions.old_branches import OldBranchesReportAction
from shepherd.actions.report import LocalReportAction
from shepherd.actions.sync import SyncAction
from shepherd.app import configure_logging, execute, load_project_list
from shepherd.core.config import ShepherdSettings
from shepherd.core.selector import SelectorConfig
from shepherd.exceptions import ConfigError
from shepherd.formatter import ReportFormatter

logger = structlog.get_logger()

app = typer.Typer(
    name="shepherd",
    help="Manage a fleet of local Git repositories.",
    no_args_is_help=True,
)

err_console = Console(stderr=True)


@dataclass(frozen=True)
class Invocation:
    settings: ShepherdSettings
    config: Path | None
    selector: SelectorConfig


def version_callback(value: bool) -> None:
    if value:
        print(f"shepherd {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(None, "--config", help="Project list (YAML)"),
    project: list[str] = typer.Option(
        None, "--project", help="Select a project by name (repeatable)"
    ),
    project_dir: list[Path] = typer.Option(
        None, "--project-dir", help="Select projects under this folder (repeatable)"
    ),
    active_branch: str = typer.Option(
        "", "--active-branch", help="Select projects with this active branch"
    ),
    mark: str = typer.Option("", "--mark", help="Select projects with this mark"),
    level: str = typer.Option(
        None, "--level", help="Log level: debug, info, warn or error"
    ),
    version: bool = typer.Option(  # noqa: ARG001
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """shepherd: status, sync and branch retirement across many repositories."""
    overrides = {"log_level": level} if level else {}
    try:
        settings = ShepherdSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        err_console.print(f"[red]Configuration error:[/] {e}")
        raise typer.Exit(1) from e

    configure_logging(settings)
    logger.debug("log_level", level=settings.log_level)

    ctx.obj = Invocation(
        settings=settings,
        config=config,
        selector=SelectorConfig(
            projects=project or [],
            paths=project_dir or [],
            branch=active_branch,
            mark=mark,
        ),
    )


def _execute(ctx: typer.Context, build_action: Callable[[], Action]) -> None:
    invocation: Invocation = ctx.obj
    try:
        action = build_action()
        items = load_project_list(invocation.config, invocation.settings)
        results = asyncio.run(execute(action, invocation.selector, items))
    except ConfigError as e:
        logger.error("run_aborted", error=str(e))
        err_console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1) from e

    ReportFormatter().print_report(action, results)


@app.command()
def sync(ctx: typer.Context) -> None:
    """Pull every clean repository (fast-forward only)."""
    _execute(ctx, SyncAction)


@app.command()
def report(ctx: typer.Context) -> None:
    """Local repository report (no network interaction)."""
    _execute(ctx, LocalReportAction)


@app.command()
def cleanup(ctx: typer.Context) -> None:
    """Retire the checked-out branch and return to the default branch."""
    _execute(ctx, CleanupAction)


@app.command("merged-report")
def merged_report(
    ctx: typer.Context,
    report_file: Path = typer.Argument(..., help="Branch report to generate"),
) -> None:
    """Generate a merged branches report."""
    _execute(ctx, lambda: MergedBranchesReportAction(report_file))


@app.command("guided-remove")
def guided_remove(
    ctx: typer.Context,
    report_file: Path = typer.Argument(..., help="Branch report to consume"),
) -> None:
    """Remove remote branches based on a reviewed branch report."""
    _execute(ctx, lambda: GuidedBranchRemovalAction(report_file))


@app.command("old-branches")
def old_branches(
    ctx: typer.Context,
    report_file: Path = typer.Argument(..., help="Branch report to generate"),
    age: str = typer.Argument(None, help="Age of the latest commit, in days"),
) -> None:
    """Generate a list of branches older than a certain age."""
    invocation: Invocation = ctx.obj
    threshold = age if age is not None else invocation.settings.old_branch_age
    _execute(ctx, lambda: OldBranchesReportAction(report_file, threshold))


def run() -> None:
    app()
