"""Shared exception types for shepherd."""


class ShepherdError(Exception):
    """Base exception for all shepherd errors."""


class ConfigError(ShepherdError):
    """Configuration is invalid or missing."""


class ReportFileError(ConfigError):
    """A branch report file is missing or malformed."""


class SelectionError(ConfigError):
    """Project selection criteria conflict or select nothing."""


class GitError(ShepherdError):
    """A git command could not produce a usable result."""


class ShellError(GitError):
    """A git command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        detail = output.strip() or "no output"
        super().__init__(f"{command} exited with {returncode}: {detail}")


class GitOutputError(GitError):
    """A git command succeeded but its output was missing a required value."""
