"""Bootstrap: logging, project list loading, and running an action end to end."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shepherd.core.config import ShepherdSettings, find_config_file
from shepherd.core.instigator import Instigator
from shepherd.core.projects import Project, ProjectItem, load_projects
from shepherd.core.selector import select_items

if TYPE_CHECKING:
    from shepherd.actions.base import Action, ActionResult
    from shepherd.core.projects import ReportSeparator
    from shepherd.core.selector import RepositoryFactory, SelectorConfig

logger = structlog.get_logger()


def configure_logging(settings: ShepherdSettings) -> None:
    """Set up structlog with console output and optional rotating JSON file handler."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()

    # Console handler on stderr; stdout carries the report table
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(),
        )
    )
    root_logger.addHandler(console_handler)

    # JSON lines file handler
    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            settings.log_dir / "shepherd.log",
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        root_logger.addHandler(file_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_project_list(
    config_option: Path | None, settings: ShepherdSettings
) -> list[ProjectItem]:
    """Find and parse the project list; raises ConfigError when unusable."""
    config_path = find_config_file(config_option, settings)
    logger.info("config_found", path=str(config_path))
    return load_projects(config_path)


async def execute(
    action: Action,
    selector: SelectorConfig,
    items: list[ProjectItem],
    repository_for: RepositoryFactory = Project.repository,
) -> list[ActionResult | ReportSeparator]:
    """Select projects, run *action* on them, and return every report item."""
    selected = await select_items(selector, items, repository_for)
    return await Instigator(selected, repository_for).run(action)
