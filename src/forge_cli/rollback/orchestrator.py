"""Rollback orchestration.

Sequence: validate, check the working tree is clean, snapshot USER content,
run the git operation, restore USER content, then amend the rollback commit
so the restored content lands in the same commit. A dry run stops after
validation and only reads from git.
"""

from __future__ import annotations

import logging

from forge_cli.cli.ui import StepTracker
from forge_cli.core.config import ForgeConfig
from forge_cli.core.git_ops import GitClient
from forge_cli.rollback.errors import ExecutionError, PreconditionError, RollbackValidationError
from forge_cli.rollback.executor import (
    amend_rollback_commit,
    check_clean_tree,
    execute_rollback,
    manual_recovery_commands,
    preview_rollback,
)
from forge_cli.rollback.models import RollbackRequest, RollbackResult
from forge_cli.rollback.preserve import extract_user_sections, restore_user_sections
from forge_cli.rollback.validation import validate_rollback_input

__all__ = ["ROLLBACK_STEPS", "build_tracker", "run_rollback"]

logger = logging.getLogger(__name__)

ROLLBACK_STEPS: tuple[tuple[str, str], ...] = (
    ("validate", "Validate input"),
    ("precondition", "Check working tree is clean"),
    ("snapshot", "Snapshot USER sections"),
    ("execute", "Run git rollback"),
    ("restore", "Restore USER sections"),
    ("amend", "Amend rollback commit"),
)
PREVIEW_STEPS: tuple[tuple[str, str], ...] = (
    ("validate", "Validate input"),
    ("preview", "Inspect affected commits and files"),
)


def build_tracker(request: RollbackRequest) -> StepTracker:
    title = "Rollback Preview" if request.dry_run else "Rollback"
    tracker = StepTracker(title)
    for key, label in PREVIEW_STEPS if request.dry_run else ROLLBACK_STEPS:
        tracker.add(key, label)
    return tracker


def run_rollback(
    request: RollbackRequest,
    config: ForgeConfig,
    *,
    git: GitClient | None = None,
    tracker: StepTracker | None = None,
) -> RollbackResult:
    """Run one rollback end to end.

    Raises:
        RollbackValidationError: the request was rejected; git was never called.
        PreconditionError: the working tree is dirty; nothing was changed.
        ExecutionError: a git command failed, or USER content could not be
            written back after the git operation succeeded.
    """
    git = git or GitClient(config.project_root)
    tracker = tracker or build_tracker(request)
    result = RollbackResult(request=request, dry_run=request.dry_run)

    tracker.start("validate")
    validation = validate_rollback_input(request.method, request.target, config.project_root)
    if not validation.valid:
        tracker.error("validate", validation.error or "invalid input")
        raise RollbackValidationError(validation.error or "Invalid rollback input")
    tracker.complete("validate", f"{request.method} {request.target}")

    if request.dry_run:
        tracker.start("preview")
        outcome = preview_rollback(request, git)
        result.commands = [["git", *args] for args in outcome.commands]
        result.preview = [*outcome.summary, *(f"file: {name}" for name in outcome.files)]
        result.warnings.extend(outcome.warnings)
        tracker.complete("preview", f"{len(outcome.files)} file(s) affected")
        result.success = True
        return result

    tracker.start("precondition")
    try:
        check_clean_tree(git)
    except PreconditionError:
        tracker.error("precondition", "working tree not clean")
        raise
    tracker.complete("precondition", "clean")

    document = config.instructions_path
    commands_dir = config.custom_commands_path

    tracker.start("snapshot")
    bundle = extract_user_sections(document, commands_dir)
    for warning in bundle.warnings:
        logger.warning("%s: %s", document, warning)
    result.warnings.extend(bundle.warnings)
    if document.exists():
        tracker.complete(
            "snapshot",
            f"{len(bundle.sections)} section(s), {len(bundle.custom_commands)} custom command(s)",
        )
    else:
        tracker.skip("snapshot", f"{config.instructions_file} not found")

    tracker.start("execute")
    try:
        outcome = execute_rollback(request, git, issue_tracker=config.issue_tracker)
    except ExecutionError as exc:
        tracker.error("execute", str(exc))
        tracker.skip("restore", "git operation failed")
        tracker.skip("amend", "git operation failed")
        raise
    result.commands.extend(outcome.commands)
    result.warnings.extend(outcome.warnings)
    tracker.complete("execute", f"{len(outcome.commands)} git command(s)")

    if not document.exists():
        tracker.skip("restore", f"{config.instructions_file} not found")
        tracker.skip("amend", f"{config.instructions_file} not found")
        result.success = True
        return result

    tracker.start("restore")
    try:
        result.restored_sections = restore_user_sections(document, bundle, commands_dir)
    except OSError as exc:
        tracker.error("restore", str(exc))
        tracker.skip("amend", "restore failed")
        raise ExecutionError(
            f"Git rollback succeeded but restoring USER content failed: {exc}",
            remediation=manual_recovery_commands(request),
        ) from exc
    result.restored_commands = len(bundle.custom_commands)
    lost = len(bundle.sections) - result.restored_sections
    if lost > 0:
        result.warnings.append(
            f"{lost} USER section(s) were not restored because their markers no longer exist"
        )
    tracker.complete("restore", f"{result.restored_sections} section(s)")

    tracker.start("amend")
    try:
        amend = amend_rollback_commit(git, request, document)
    except ExecutionError as exc:
        tracker.error("amend", str(exc))
        raise
    if amend is not None:
        result.commands.append(amend)
        result.amended = True
    tracker.complete("amend", "restored content folded into rollback commit")

    result.success = True
    return result
