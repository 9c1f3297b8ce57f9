"""Git operation sequences for each rollback method.

All functions expect a request that already passed
:func:`forge_cli.rollback.validation.validate_rollback_input`.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from forge_cli.core.git_ops import GitClient, GitCommandResult, first_line, format_command
from forge_cli.rollback.errors import ExecutionError, PreconditionError
from forge_cli.rollback.models import RollbackMethod, RollbackRequest

__all__ = [
    "ExecutionOutcome",
    "check_clean_tree",
    "preview_rollback",
    "execute_rollback",
    "amend_rollback_commit",
    "mutating_commands",
    "manual_recovery_commands",
    "find_issue_reference",
]

logger = logging.getLogger(__name__)

_ISSUE_REF_RE = re.compile(r"#(\d+)")


@dataclass
class ExecutionOutcome:
    commands: list[list[str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    summary: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


def mutating_commands(request: RollbackRequest) -> list[list[str]]:
    """Git argv lists (without the executable) that perform the rollback."""
    method = request.method
    if method == RollbackMethod.COMMIT.value:
        return [["revert", "--no-edit", request.target]]
    if method == RollbackMethod.PR.value:
        return [["revert", "-m", "1", "--no-edit", request.target]]
    if method == RollbackMethod.PARTIAL.value:
        paths = request.file_paths()
        commands = [["checkout", "HEAD~1", "--", path] for path in paths]
        commands.append(["commit", "-m", f"chore: rollback {', '.join(paths)}"])
        return commands
    if method == RollbackMethod.BRANCH.value:
        start, end = request.range_bounds()
        return [["revert", "--no-edit", f"{start}..{end}"]]
    raise ValueError(f"Unsupported rollback method: {method}")


def manual_recovery_commands(request: RollbackRequest) -> list[str]:
    """Commands the user can run by hand after a failed rollback."""
    commands = ["git status", "git log -3 --oneline"]
    method = request.method
    if method == RollbackMethod.COMMIT.value:
        commands.append(f"git revert {request.target}")
    elif method == RollbackMethod.PR.value:
        commands.append(f"git revert -m 1 {request.target}")
    elif method == RollbackMethod.PARTIAL.value:
        commands.append(format_command(["git", "checkout", "HEAD~1", "--", *request.file_paths()]))
    elif method == RollbackMethod.BRANCH.value:
        commands.append(f"git revert {request.target}")
    return commands


def check_clean_tree(git: GitClient) -> None:
    """Refuse to continue unless ``git status --porcelain`` is empty."""
    result = git.status_porcelain()
    if not result.ok:
        detail = first_line(result.stderr) or "git status failed"
        raise PreconditionError(
            f"Unable to inspect working tree: {detail}",
            remediation=["git status"],
        )
    if result.stdout.strip():
        changed = [line for line in result.stdout.splitlines() if line.strip()]
        raise PreconditionError(
            f"Working tree has uncommitted changes ({len(changed)} path(s)). "
            "Commit or stash them before rolling back.",
            remediation=["git status", "git stash"],
        )


def _read_lines(git: GitClient, args: list[str], lines: list[str], warnings: list[str]) -> None:
    result = git.run(args)
    if not result.ok:
        warnings.append(f"{format_command(['git', *args])} failed: {first_line(result.output)}")
        return
    lines.extend(line for line in result.stdout.splitlines() if line.strip())


def preview_rollback(request: RollbackRequest, git: GitClient) -> ExecutionOutcome:
    """Describe what a rollback would do using read-only git commands only.

    Returns an outcome whose ``commands`` are the mutations that would run
    (not executed) and whose ``warnings`` hold read failures.
    """
    outcome = ExecutionOutcome(commands=mutating_commands(request))
    summary = outcome.summary
    files = outcome.files
    method = request.method
    target = request.target

    if method == RollbackMethod.COMMIT.value:
        _read_lines(git, ["log", "-1", "--oneline", target], summary, outcome.warnings)
        _read_lines(
            git, ["diff-tree", "--no-commit-id", "--name-only", "-r", target], files, outcome.warnings
        )
    elif method == RollbackMethod.PR.value:
        _read_lines(git, ["log", "-1", "--oneline", target], summary, outcome.warnings)
        _read_lines(
            git,
            ["diff-tree", "--no-commit-id", "--name-only", "-r", f"{target}^1", target],
            files,
            outcome.warnings,
        )
    elif method == RollbackMethod.PARTIAL.value:
        _read_lines(
            git,
            ["diff-tree", "--no-commit-id", "--name-only", "-r", "HEAD~1", "HEAD", "--", *request.file_paths()],
            files,
            outcome.warnings,
        )
    elif method == RollbackMethod.BRANCH.value:
        start, end = request.range_bounds()
        _read_lines(git, ["log", "--oneline", f"{start}..{end}"], summary, outcome.warnings)
        _read_lines(
            git, ["diff-tree", "--no-commit-id", "--name-only", "-r", start, end], files, outcome.warnings
        )

    return outcome


def _run_mutation(git: GitClient, args: list[str], request: RollbackRequest) -> GitCommandResult:
    result = git.run(args)
    if not result.ok:
        raise ExecutionError(
            f"{format_command(['git', *args])} failed (exit {result.returncode})",
            command=["git", *args],
            git_output=result.output,
            remediation=manual_recovery_commands(request),
        )
    return result


def find_issue_reference(message: str) -> str | None:
    match = _ISSUE_REF_RE.search(message)
    return match.group(1) if match else None


def _update_linked_issue(log: GitCommandResult, request: RollbackRequest, issue_tracker: str) -> list[str]:
    """Best-effort: reopen the issue referenced by the reverted merge commit.

    ``log`` is the merge commit message, read before the revert ran.
    """
    if not log.ok:
        return [f"Could not read commit message for {request.target}: {first_line(log.output)}"]

    issue_id = find_issue_reference(log.stdout)
    if issue_id is None:
        logger.debug("No issue reference found in %s", request.target)
        return []

    executable = shutil.which(issue_tracker)
    if executable is None:
        message = f"Issue tracker '{issue_tracker}' not found on PATH; issue #{issue_id} not updated"
        logger.warning(message)
        return [message]

    argv = [executable, "update", issue_id, "--status", "open"]
    try:
        completed = subprocess.run(argv, capture_output=True, text=True, check=False)
    except OSError as exc:
        message = f"Issue tracker update for #{issue_id} failed: {exc}"
        logger.warning(message)
        return [message]

    if completed.returncode != 0:
        detail = first_line(completed.stderr or completed.stdout) or f"exit {completed.returncode}"
        message = f"Issue tracker update for #{issue_id} failed: {detail}"
        logger.warning(message)
        return [message]

    logger.info("Reopened issue #%s via %s", issue_id, issue_tracker)
    return []


def execute_rollback(
    request: RollbackRequest,
    git: GitClient,
    *,
    issue_tracker: str | None = None,
) -> ExecutionOutcome:
    """Run the mutating git sequence for ``request``.

    Raises:
        ExecutionError: a git command exited non-zero. Already-applied steps
            are left in place for the user to inspect.
    """
    outcome = ExecutionOutcome()
    merge_message: GitCommandResult | None = None
    if request.method == RollbackMethod.PR.value and issue_tracker:
        # Once the revert lands, a symbolic target such as HEAD names the revert commit.
        merge_message = git.run(["log", "-1", "--format=%B", request.target])

    for args in mutating_commands(request):
        _run_mutation(git, args, request)
        outcome.commands.append(["git", *args])

    if merge_message is not None and issue_tracker:
        outcome.warnings.extend(_update_linked_issue(merge_message, request, issue_tracker))

    return outcome


def amend_rollback_commit(git: GitClient, request: RollbackRequest, document_path: Path) -> list[str] | None:
    """Fold the restored instructions document into the rollback commit.

    Returns the amend argv, or ``None`` when the document does not exist.
    """
    if not document_path.exists():
        return None

    try:
        relative = document_path.resolve().relative_to(Path(git.repo_root).resolve())
    except ValueError:
        relative = document_path

    _run_mutation(git, ["add", "--", str(relative)], request)
    _run_mutation(git, ["commit", "--amend", "--no-edit"], request)
    return ["git", "commit", "--amend", "--no-edit"]
