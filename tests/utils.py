from __future__ import annotations

import subprocess
from pathlib import Path

from forge_cli.core.git_ops import GitClient, GitCommandResult


def run(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True)


def commit_all(repo: Path, message: str) -> str:
    run(["git", "add", "-A"], cwd=repo)
    run(["git", "commit", "-m", message], cwd=repo)
    return run(["git", "rev-parse", "HEAD"], cwd=repo).stdout.strip()


def git_log_subjects(repo: Path) -> list[str]:
    return run(["git", "log", "--format=%s"], cwd=repo).stdout.splitlines()


class RecordingGitClient(GitClient):
    """GitClient that records argv and replays scripted results instead of running git."""

    def __init__(self, repo_root: Path, responses: dict[tuple[str, ...], GitCommandResult] | None = None):
        super().__init__(repo_root)
        self.calls: list[list[str]] = []
        self.responses = dict(responses or {})

    def script(self, prefix: tuple[str, ...], *, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[prefix] = GitCommandResult(
            args=["git", *prefix], returncode=returncode, stdout=stdout, stderr=stderr
        )

    def run(self, args: list[str]) -> GitCommandResult:
        self.calls.append(list(args))
        best: tuple[str, ...] | None = None
        for prefix in self.responses:
            if tuple(args[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is not None:
            return self.responses[best]
        return GitCommandResult(args=["git", *args], returncode=0, stdout="", stderr="")

    def subcommands(self) -> list[str]:
        return [call[0] for call in self.calls]
