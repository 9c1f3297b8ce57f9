"""CLI tests for ``forge rollback`` and ``forge config``."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from forge_cli import app
from forge_cli.cli import SelectionCancelled
from forge_cli.cli.commands import rollback as rollback_module
from tests.utils import commit_all, git_log_subjects, run

runner = CliRunner()


@pytest.fixture()
def in_repo(agents_repo: Path, monkeypatch) -> Path:
    monkeypatch.chdir(agents_repo)
    monkeypatch.setenv("FORGE_PROJECT_ROOT", str(agents_repo))
    (agents_repo / ".forge").mkdir()
    (agents_repo / ".forge" / "config.yaml").write_text("rollback:\n  issue_tracker: ''\n", encoding="utf-8")
    commit_all(agents_repo, "Add forge config")
    return agents_repo


def test_invalid_method_exits_1(in_repo: Path):
    result = runner.invoke(app, ["rollback", "reset", "HEAD"])

    assert result.exit_code == 1
    assert "Invalid method" in result.output


def test_injection_attempt_exits_1_without_git_changes(in_repo: Path):
    before = git_log_subjects(in_repo)

    result = runner.invoke(app, ["rollback", "commit", "HEAD;touch pwned"])

    assert result.exit_code == 1
    assert "Invalid commit hash format" in result.output
    assert git_log_subjects(in_repo) == before
    assert not (in_repo / "pwned").exists()


def test_dirty_tree_exits_1(in_repo: Path):
    (in_repo / "wip.txt").write_text("wip", encoding="utf-8")

    result = runner.invoke(app, ["rollback", "commit", "HEAD"])

    assert result.exit_code == 1
    assert "uncommitted changes" in result.output
    assert "git stash" in result.output


def test_commit_rollback_succeeds(in_repo: Path):
    (in_repo / "a.js").write_text("two\n", encoding="utf-8")
    commit_all(in_repo, "Change a")

    result = runner.invoke(app, ["rollback", "commit"])

    assert result.exit_code == 0, result.output
    assert "Rollback complete" in result.output
    assert (in_repo / "a.js").read_text(encoding="utf-8") == "one\n"
    assert git_log_subjects(in_repo)[0] == 'Revert "Change a"'


def test_dry_run_prints_plan_without_mutation(in_repo: Path):
    head = run(["git", "rev-parse", "HEAD"], cwd=in_repo).stdout.strip()

    result = runner.invoke(app, ["rollback", "commit", head[:8], "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert "git revert --no-edit" in result.output
    assert run(["git", "rev-parse", "HEAD"], cwd=in_repo).stdout.strip() == head


def test_git_failure_reports_output_and_recovery(in_repo: Path):
    result = runner.invoke(app, ["rollback", "commit", "deadbeef"])

    assert result.exit_code == 1
    assert "Git output" in result.output
    assert "git revert deadbeef" in result.output


def test_interactive_cancel_exits_0(in_repo: Path, monkeypatch):
    def _cancel(*args, **kwargs):
        raise SelectionCancelled()

    monkeypatch.setattr(rollback_module, "select_with_arrows", _cancel)

    result = runner.invoke(app, ["rollback"])

    assert result.exit_code == 0
    assert "cancelled" in result.output


def test_interactive_partial_prompts_for_files(in_repo: Path, monkeypatch):
    (in_repo / "a.js").write_text("two\n", encoding="utf-8")
    commit_all(in_repo, "Change a")
    monkeypatch.setattr(rollback_module, "select_with_arrows", lambda *args, **kwargs: "4")

    result = runner.invoke(app, ["rollback"], input="a.js\n")

    assert result.exit_code == 0, result.output
    assert (in_repo / "a.js").read_text(encoding="utf-8") == "one\n"
    assert git_log_subjects(in_repo)[0] == "chore: rollback a.js"


def test_interactive_preview_uses_second_menu(in_repo: Path, monkeypatch):
    choices = iter(["6", "1"])
    monkeypatch.setattr(rollback_module, "select_with_arrows", lambda *args, **kwargs: next(choices))
    head = run(["git", "rev-parse", "HEAD"], cwd=in_repo).stdout.strip()

    result = runner.invoke(app, ["rollback"])

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert run(["git", "rev-parse", "HEAD"], cwd=in_repo).stdout.strip() == head


def test_config_command_shows_resolved_values(in_repo: Path):
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0, result.output
    assert "AGENTS.md" in result.output
    assert "disabled" in result.output


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("forge ")
