"""Line-oriented parsers for git's human and porcelain output.

Every parser is best-effort: a line that matches no known shape is skipped,
and a missing header leaves the corresponding field at its default.
"""

import re
from datetime import datetime

from shepherd.exceptions import GitOutputError
from shepherd.git.models import (
    BranchListing,
    FetchFlag,
    FetchItem,
    FetchResult,
    PullResult,
    RemoteBranch,
    StatusResult,
)

_AHEAD_BEHIND_RE = re.compile(r"^\+(\d+) -(\d+)$")
_DIFFSTAT_RE = re.compile(r"^ (?P<path>\S.*?)\s+\|\s")
_FETCH_RE = re.compile(
    r"^ (?P<flag>.) (?:\[(?P<label>[^\]]+)\]|(?P<range>\S+))\s+"
    r"(?P<source>\S+)\s+->\s+(?P<target>\S+)(?:\s+\(.*\))?$"
)
_PRUNED_RE = re.compile(r"^\s*\* \[pruned\] (?P<name>\S.*)$")

# Field counts (split limits) for porcelain v2 entry lines
_ORDINARY_FIELDS = 8
_RENAME_FIELDS = 9
_UNMERGED_FIELDS = 10


def shorten_commit(commit: str, prefix: int) -> str:
    """Abbreviate a commit id to *prefix* characters; negative disables it."""
    if prefix < 0:
        return commit
    return commit[:prefix]


def parse_status(stdout: str, commit_prefix: int) -> StatusResult:
    """Parse ``git status --porcelain=2 -b`` output."""
    commit = ""
    branch = ""
    remote_branch = ""
    ahead = 0
    behind = 0
    modified: list[str] = []

    for line in stdout.splitlines():
        if line.startswith("# "):
            key, _, value = line[2:].partition(" ")
            value = value.strip()
            if key == "branch.oid":
                if value != "(initial)":
                    commit = shorten_commit(value, commit_prefix)
            elif key == "branch.head":
                branch = value
            elif key == "branch.upstream":
                remote_branch = value
            elif key == "branch.ab":
                match = _AHEAD_BEHIND_RE.match(value)
                if match:
                    ahead = int(match.group(1))
                    behind = int(match.group(2))
            continue

        path = _status_entry_path(line)
        if path is not None:
            modified.append(path)

    return StatusResult(
        modified_files=modified,
        branch=branch,
        remote_branch=remote_branch,
        commit=commit,
        ahead=ahead,
        behind=behind,
    )


def _status_entry_path(line: str) -> str | None:
    """Return the path reported by one porcelain v2 entry line, if any."""
    if line.startswith("1 "):
        parts = line.split(" ", _ORDINARY_FIELDS)
        return parts[-1] if len(parts) == _ORDINARY_FIELDS + 1 else None
    if line.startswith("2 "):
        # Rename/copy: the last field is a tab-separated path pair
        parts = line.split(" ", _RENAME_FIELDS)
        if len(parts) != _RENAME_FIELDS + 1:
            return None
        return parts[-1].split("\t", 1)[0]
    if line.startswith("u "):
        parts = line.split(" ", _UNMERGED_FIELDS)
        return parts[-1] if len(parts) == _UNMERGED_FIELDS + 1 else None
    if line.startswith("? "):
        return line[2:] or None
    return None


def parse_pull(stdout: str) -> PullResult:
    """Collect the paths listed in a merge diffstat."""
    files: list[str] = []
    for line in stdout.splitlines():
        match = _DIFFSTAT_RE.match(line)
        if match:
            files.append(match.group("path"))
    return PullResult(updated_files=files)


def parse_fetch(stderr: str) -> FetchResult:
    """Classify each ref update git fetch reports on stderr, preserving order."""
    items: list[FetchItem] = []
    for line in stderr.splitlines():
        match = _FETCH_RE.match(line.rstrip())
        if not match:
            continue
        items.append(
            FetchItem(
                flag=FetchFlag.from_symbol(match.group("flag")),
                action=match.group("label") or match.group("range"),
                remote_branch=match.group("source"),
                tracking_branch=match.group("target"),
            )
        )
    return FetchResult(updated_branches=items)


def parse_prune(stdout: str) -> list[str]:
    pruned: list[str] = []
    for line in stdout.splitlines():
        match = _PRUNED_RE.match(line.rstrip())
        if match:
            pruned.append(match.group("name"))
    return pruned


def parse_branch_list(stdout: str) -> list[str]:
    """Parse ``git branch -r`` output, dropping the ``HEAD ->`` alias."""
    branches: list[str] = []
    for line in stdout.splitlines():
        name = line.strip().removeprefix("* ").removeprefix("+ ")
        if not name or " -> " in name or name.startswith("("):
            continue
        branches.append(name)
    return branches


def parse_all_branches(stdout: str) -> BranchListing:
    """Partition ``git branch -a`` output into local and remote branches."""
    local: list[str] = []
    remote: list[RemoteBranch] = []
    for name in parse_branch_list(stdout):
        if name.startswith("remotes/"):
            remote.append(RemoteBranch.from_branch_name(name))
        else:
            local.append(name)
    return BranchListing(local=local, remote=remote)


def parse_committer_date(stdout: str, branch: str) -> datetime:
    text = stdout.strip()
    if not text:
        raise GitOutputError(f"No commits found for {branch}")
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise GitOutputError(f"Unparseable committer date for {branch}: {text}") from e
