"""Run one action across every selected project concurrently."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from shepherd.core.projects import Project, ReportSeparator

if TYPE_CHECKING:
    from shepherd.actions.base import Action, ActionResult
    from shepherd.core.selector import RepositoryFactory, SelectedItem

logger = structlog.get_logger()


class Instigator:
    def __init__(
        self,
        selected_items: list[SelectedItem],
        repository_for: RepositoryFactory = Project.repository,
    ) -> None:
        self._selected_items = selected_items
        self._repository_for = repository_for

    async def run(self, action: Action) -> list[ActionResult | ReportSeparator]:
        """Act on selected projects, skip the rest, then run the action's post step.

        Returns one entry per configured item, in configuration order.
        """
        start = time.monotonic()
        items = await asyncio.gather(
            *(self._act(action, selected) for selected in self._selected_items)
        )

        results = [item for item in items if not isinstance(item, ReportSeparator)]
        action.post(results)

        logger.info(
            "action_complete",
            action=action.name,
            projects=len(results),
            elapsed_seconds=round(time.monotonic() - start, 3),
        )
        return list(items)

    async def _act(
        self, action: Action, selected: SelectedItem
    ) -> ActionResult | ReportSeparator:
        item = selected.item
        if isinstance(item, ReportSeparator):
            return item
        if not selected.selected:
            return action.skip_report(item)
        return await action.act(item, self._repository_for(item))
