"""Async reader and mutator for one local git repository."""

from datetime import datetime
from pathlib import Path

import structlog

from shepherd.exceptions import ShellError
from shepherd.git import parsers
from shepherd.git.models import (
    BranchListing,
    FetchResult,
    GitResult,
    PullResult,
    RemoveRemoteBranchResult,
    StatusResult,
)
from shepherd.git.shell import ShellRunner

logger = structlog.get_logger()

DEFAULT_COMMIT_PREFIX = 12


class GitRepository:
    """Issues git commands in one working tree and parses their output.

    Query methods return parsed models. Any command that exits non-zero raises
    ShellError, except remove_remote_branch which reports the failure in its
    result.
    """

    def __init__(
        self,
        path: Path,
        runner: ShellRunner | None = None,
        *,
        commit_prefix: int = DEFAULT_COMMIT_PREFIX,
        prune_on_fetch: bool = False,
    ) -> None:
        self.path = Path(path)
        self._runner = runner or ShellRunner(self.path)
        self.commit_prefix = commit_prefix
        self.prune_on_fetch = prune_on_fetch

    async def status(self) -> StatusResult:
        out = await self._runner.run("status", "--porcelain=2", "-b")
        return parsers.parse_status(out.stdout, self.commit_prefix)

    async def commit(self) -> str:
        out = await self._runner.run("rev-parse", "HEAD")
        return parsers.shorten_commit(out.stdout.strip(), self.commit_prefix)

    async def branch(self) -> str:
        out = await self._runner.run("rev-parse", "--abbrev-ref", "HEAD")
        return out.stdout.strip()

    async def pull(self) -> PullResult:
        """Fast-forward-only pull; fails rather than creating a merge commit."""
        args = ["pull", "--ff-only"]
        if self.prune_on_fetch:
            args.append("--prune")
        out = await self._runner.run(*args)
        return parsers.parse_pull(out.stdout)

    async def fetch(self) -> FetchResult:
        out = await self._runner.run("fetch", "--prune")
        result = parsers.parse_fetch(out.stderr)
        logger.debug(
            "fetch_parsed",
            path=str(self.path),
            items=[item.model_dump(mode="json") for item in result.updated_branches],
        )
        return result

    async def remote_branches(self, *, merged: bool = False) -> list[str]:
        args = ["branch", "-r"]
        if merged:
            args.append("--merged")
        out = await self._runner.run(*args)
        return parsers.parse_branch_list(out.stdout)

    async def all_branches(self) -> BranchListing:
        out = await self._runner.run("branch", "-a")
        return parsers.parse_all_branches(out.stdout)

    async def committer_date(self, branch: str) -> datetime:
        """Committer timestamp of the newest commit reachable from *branch*."""
        out = await self._runner.run("log", "-n", "1", "--pretty=format:%cI", branch)
        return parsers.parse_committer_date(out.stdout, branch)

    async def select_branch(self, branch: str) -> GitResult:
        out = await self._runner.run("checkout", branch)
        return GitResult(
            success=True,
            message=f"Switched to branch '{branch}'",
            details=out.stdout.strip() or out.stderr.strip(),
        )

    async def delete_local_branch(self, branch: str) -> GitResult:
        out = await self._runner.run("branch", "-d", branch)
        return GitResult(
            success=True,
            message=f"Deleted branch '{branch}'",
            details=out.stdout.strip() or out.stderr.strip(),
        )

    async def prune(self, remote: str) -> list[str]:
        """Drop stale tracking refs for *remote*; returns the pruned names."""
        out = await self._runner.run("remote", "prune", remote)
        return parsers.parse_prune(out.stdout)

    async def remove_remote_branch(
        self, remote: str, branch: str
    ) -> RemoveRemoteBranchResult:
        try:
            await self._runner.run("push", "--delete", remote, branch)
        except ShellError as e:
            logger.warning(
                "remote_branch_delete_failed",
                path=str(self.path),
                remote=remote,
                branch=branch,
                error=e.output.strip(),
            )
            return RemoveRemoteBranchResult(remote=remote, branch=branch, deleted=False)
        return RemoveRemoteBranchResult(remote=remote, branch=branch, deleted=True)
