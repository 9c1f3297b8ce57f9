"""Argument-vector git invocation.

Every git call goes through :class:`GitClient`, which passes arguments as
discrete tokens to ``subprocess.run`` and never through a shell.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

__all__ = ["GitCommandResult", "GitClient", "format_command", "first_line"]

logger = logging.getLogger(__name__)


@dataclass
class GitCommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stderr/stdout text, as git printed it."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)


def format_command(args: list[str]) -> str:
    return shlex.join(args)


def first_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


class GitClient:
    """Run git subcommands inside a repository.

    No timeout is applied: a hanging git process indicates a repository
    problem the user has to look at.
    """

    def __init__(self, repo_root: Path, executable: str = "git") -> None:
        self.repo_root = repo_root
        self.executable = executable

    def run(self, args: list[str]) -> GitCommandResult:
        argv = [self.executable, *args]
        logger.debug("Running %s (cwd=%s)", format_command(argv), self.repo_root)
        try:
            completed = subprocess.run(
                argv,
                cwd=str(self.repo_root),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError:
            return GitCommandResult(
                args=argv,
                returncode=127,
                stdout="",
                stderr=f"{self.executable} executable not found on PATH",
            )
        return GitCommandResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def status_porcelain(self) -> GitCommandResult:
        return self.run(["status", "--porcelain"])
