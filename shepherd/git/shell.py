"""Async runner for git subprocesses in a fixed working directory."""

import asyncio
import shlex
from pathlib import Path
from typing import NamedTuple

import structlog

from shepherd.exceptions import ShellError

logger = structlog.get_logger()


class ProcessResult(NamedTuple):
    stdout: str
    stderr: str


class ShellRunner:
    """Run git commands inside one repository directory.

    No timeout is applied; a hung command blocks only the workflow awaiting it.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def run(self, *args: str) -> ProcessResult:
        """Execute ``git <args>`` and return its captured output.

        Raises ShellError when git exits non-zero or cannot be started.
        """
        cmd = ("git", *args)
        command = shlex.join(cmd)
        logger.debug("git_exec", command=command, cwd=str(self.path))

        if not self.path.is_dir():
            raise ShellError(command, 1, f"Directory does not exist: {self.path}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=self.path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout_bytes, stderr_bytes = await proc.communicate()
        except FileNotFoundError as e:
            raise ShellError(command, 127, "git is not installed or not in PATH") from e
        except OSError as e:
            logger.error("git_exec_error", command=command, error=str(e))
            raise ShellError(command, 1, str(e)) from e

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        logger.debug(
            "git_output",
            command=command,
            cwd=str(self.path),
            stdout=_summarize(stdout),
            stderr=_summarize(stderr),
        )

        returncode = proc.returncode or 0
        if returncode != 0:
            logger.warning(
                "git_exec_failed",
                command=command,
                cwd=str(self.path),
                returncode=returncode,
            )
            raise ShellError(command, returncode, _combine(stdout, stderr))
        return ProcessResult(stdout, stderr)


def _summarize(out: str) -> str:
    normalized = out.strip()
    return normalized if normalized else "<EMPTY>"


def _combine(stdout: str, stderr: str) -> str:
    return "\n".join(part for part in (stdout.strip(), stderr.strip()) if part)
