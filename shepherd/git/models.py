"""Data models for parsed git command results."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

NO_REF = "(none)"


class FetchFlag(StrEnum):
    """Classification of the one-character flag git prints per fetched ref."""

    FAST_FORWARD = "fast-forward"
    FORCED_UPDATE = "forced-update"
    PRUNED = "pruned"
    TAG_UPDATE = "tag-update"
    NEW_REF = "new-ref"
    REJECTED = "rejected"
    UP_TO_DATE = "up-to-date"
    UNKNOWN = "unknown"

    @classmethod
    def from_symbol(cls, symbol: str) -> "FetchFlag":
        return _FLAG_SYMBOLS.get(symbol, cls.UNKNOWN)


_FLAG_SYMBOLS = {
    " ": FetchFlag.FAST_FORWARD,
    "+": FetchFlag.FORCED_UPDATE,
    "-": FetchFlag.PRUNED,
    "t": FetchFlag.TAG_UPDATE,
    "*": FetchFlag.NEW_REF,
    "!": FetchFlag.REJECTED,
    "=": FetchFlag.UP_TO_DATE,
}


class StatusResult(BaseModel):
    """Parsed output of git status --porcelain=2 -b."""

    model_config = ConfigDict(frozen=True)

    modified_files: list[str] = []
    branch: str = ""
    remote_branch: str = ""
    commit: str = ""
    ahead: int = 0
    behind: int = 0


class PullResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    updated_files: list[str] = []


class FetchItem(BaseModel):
    """One ref update line from the fetch diagnostic stream."""

    model_config = ConfigDict(frozen=True)

    flag: FetchFlag
    action: str
    remote_branch: str
    tracking_branch: str


class FetchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    updated_branches: list[FetchItem] = []


class RemoteBranch(BaseModel):
    """A branch on a named remote, e.g. ``origin/feature/login``."""

    model_config = ConfigDict(frozen=True)

    remote: str
    branch: str

    @classmethod
    def from_branch_name(cls, branch_name: str) -> "RemoteBranch":
        """Split ``remotes/<remote>/<branch>`` or ``<remote>/<branch>``."""
        normalized = branch_name.removeprefix("remotes/")
        remote, _, branch = normalized.partition("/")
        return cls(remote=remote, branch=branch)

    def __str__(self) -> str:
        return f"{self.remote}/{self.branch}"


class BranchListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    local: list[str] = []
    remote: list[RemoteBranch] = []


class GitResult(BaseModel):
    """Generic result from a git mutation operation."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    details: str = ""


class RemoveRemoteBranchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    remote: str
    branch: str
    deleted: bool

    def __str__(self) -> str:
        return f"{self.remote}/{self.branch}"
