"""Reconcile pending branch deletions with what the remote actually holds.

On case-insensitive filesystems a remote branch ``Feature/Test`` that is
re-fetched as ``feature/test`` shows up as a pruned ref plus a new ref
rather than a rename. A deletion recorded under the old casing has to be
redirected to the new name before it is pushed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from shepherd.git.models import FetchFlag, FetchResult, RemoteBranch

if TYPE_CHECKING:
    from shepherd.core.projects import Project

logger = structlog.get_logger()

# remote name -> recorded branch name -> branch name as now seen on the remote
BranchNameMap = dict[str, dict[str, str]]


@dataclass(frozen=True)
class FetchInfo:
    added: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @classmethod
    def from_fetch(cls, result: FetchResult) -> FetchInfo:
        added: list[str] = []
        deleted: list[str] = []
        for item in result.updated_branches:
            if item.flag is FetchFlag.PRUNED:
                deleted.append(item.tracking_branch)
            elif item.flag is FetchFlag.NEW_REF:
                added.append(item.tracking_branch)
        return cls(added=added, deleted=deleted)


def build_branch_name_map(info: FetchInfo) -> BranchNameMap:
    """Pair each deleted tracking ref with an added one differing only in case."""
    name_map: BranchNameMap = {}
    for deleted in info.deleted:
        lowered = deleted.lower()
        added = next((a for a in info.added if a.lower() == lowered), None)
        if added is None:
            continue
        renamed = RemoteBranch.from_branch_name(added)
        original = RemoteBranch.from_branch_name(deleted)
        name_map.setdefault(renamed.remote, {})[original.branch] = renamed.branch
        logger.debug("branch_case_matched", deleted=deleted, added=added)
    return name_map


class BranchReconciler:
    """Resolves recorded remote branches to their current remote-side names."""

    def __init__(self, name_map: BranchNameMap | None = None) -> None:
        self._name_map = name_map or {}

    @classmethod
    def from_fetch(cls, result: FetchResult) -> BranchReconciler:
        return cls(build_branch_name_map(FetchInfo.from_fetch(result)))

    @property
    def name_map(self) -> BranchNameMap:
        return {remote: dict(names) for remote, names in self._name_map.items()}

    def resolve(self, branch: RemoteBranch) -> RemoteBranch:
        """Return *branch* with its name corrected, or unchanged if unknown."""
        renamed = self._name_map.get(branch.remote, {}).get(branch.branch)
        if renamed is None:
            return branch
        return RemoteBranch(remote=branch.remote, branch=renamed)


class SafeBranches:
    """Predicate for branches that must never be offered for deletion.

    Plain entries are treated as patterns over the branch name and anchored to
    ``origin/<name>``; compiled patterns are searched against the full
    ``remote/branch`` string unchanged.
    """

    def __init__(
        self, names: Iterable[str], patterns: Iterable[re.Pattern[str]] = ()
    ) -> None:
        self._res = [re.compile(f"origin/{name}") for name in names]
        self._patterns = list(patterns)

    @classmethod
    def for_project(cls, project: Project) -> SafeBranches:
        return cls(project.safe_branches, project.safe_patterns)

    def is_safe(self, branch: str) -> bool:
        if any(r.fullmatch(branch) for r in self._res):
            return True
        return any(p.search(branch) for p in self._patterns)

    def filter(self, branches: Iterable[str]) -> list[str]:
        """Drop safe branches, keeping order."""
        return [b for b in branches if not self.is_safe(b)]
