from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from forge_cli.core.config import ForgeConfig
from tests.utils import RecordingGitClient, commit_all, run


@pytest.fixture()
def recording_git(tmp_path: Path) -> RecordingGitClient:
    return RecordingGitClient(tmp_path)


@pytest.fixture()
def forge_config(tmp_path: Path) -> ForgeConfig:
    return ForgeConfig(project_root=tmp_path, issue_tracker=None)


@pytest.fixture()
def temp_repo(tmp_path: Path) -> Iterator[Path]:
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    run(["git", "init"], cwd=repo_dir)
    run(["git", "config", "user.name", "Forge"], cwd=repo_dir)
    run(["git", "config", "user.email", "forge@example.com"], cwd=repo_dir)
    run(["git", "config", "commit.gpgsign", "false"], cwd=repo_dir)
    yield repo_dir


@pytest.fixture()
def agents_repo(temp_repo: Path) -> Path:
    """Repository whose AGENTS.md holds one anonymous and one named USER section."""
    (temp_repo / "AGENTS.md").write_text(
        "# Workflow v1\n"
        "<!-- USER:START -->\n"
        "original notes\n"
        "<!-- USER:END -->\n"
        "<!-- USER:START:conventions -->\n"
        "tabs\n"
        "<!-- USER:END:conventions -->\n",
        encoding="utf-8",
    )
    (temp_repo / "a.js").write_text("one\n", encoding="utf-8")
    commit_all(temp_repo, "Initial commit")
    return temp_repo
