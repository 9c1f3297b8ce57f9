"""Input validation for rollback requests.

Validation is the trust boundary between user input and git argv. Anything
that cannot be proven safe is rejected, never sanitized. The functions here
are pure: no filesystem access, no subprocesses.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from forge_cli.rollback.models import RollbackMethod, ValidationResult

__all__ = ["validate_rollback_input", "is_commit_ref", "is_commit_hash"]

_HASH_RE = re.compile(r"[0-9a-f]{4,40}", re.IGNORECASE)
_SHELL_META_RE = re.compile(r"[;|&$`()<>\r\n]")
_URL_ENCODED_RE = re.compile(r"%(2e|2f|5c)", re.IGNORECASE)
_PRINTABLE_ASCII_RE = re.compile(r"[\x20-\x7e]+")


def is_commit_hash(value: str) -> bool:
    """True for 4-40 hex characters, case-insensitive."""
    return bool(_HASH_RE.fullmatch(value))


def is_commit_ref(value: str) -> bool:
    """True for the literal ``HEAD`` or an abbreviated/full commit hash."""
    return value == "HEAD" or is_commit_hash(value)


def _is_within(root: str, candidate: str) -> bool:
    return candidate == root or candidate.startswith(root.rstrip(os.sep) + os.sep)


def _validate_path(path: str, root: str) -> str | None:
    if not path:
        return "Empty path in file list"
    if _SHELL_META_RE.search(path):
        return f"Invalid characters in path: {path}"
    if _URL_ENCODED_RE.search(path):
        return f"URL-encoded characters not allowed: {path}"
    if not _PRINTABLE_ASCII_RE.fullmatch(path):
        return f"Only ASCII characters allowed in path: {path!r}"
    # Backslashes are treated as separators so Windows-style traversal is caught on POSIX too.
    normalized = path.replace("\\", "/")
    resolved = os.path.normpath(os.path.join(root, normalized))
    if not _is_within(root, resolved):
        return f"Path outside project: {path}"
    return None


def validate_rollback_input(
    method: object,
    target: object,
    project_root: Path | str | None = None,
) -> ValidationResult:
    """Validate a (method, target) pair before any git command runs.

    Rules are checked in order and the first failure wins.

    Args:
        method: One of ``commit``, ``pr``, ``partial`` or ``branch`` (case-sensitive).
        target: Commit ref, comma-separated file list, or ``start..end`` range.
        project_root: Root that ``partial`` paths must stay inside. Defaults to cwd.

    Returns:
        ValidationResult with ``valid`` and, when rejected, an ``error`` reason.
    """
    if not isinstance(method, str) or method not in RollbackMethod.values():
        return ValidationResult.reject("Invalid method")
    if not isinstance(target, str):
        return ValidationResult.reject("Target is required")

    if method in (RollbackMethod.COMMIT.value, RollbackMethod.PR.value):
        if not is_commit_ref(target):
            return ValidationResult.reject("Invalid commit hash format")

    elif method == RollbackMethod.PARTIAL.value:
        root = os.path.normpath(os.path.abspath(str(project_root or Path.cwd())))
        for path in (part.strip() for part in target.split(",")):
            error = _validate_path(path, root)
            if error:
                return ValidationResult.reject(error)

    elif method == RollbackMethod.BRANCH.value:
        parts = target.split("..")
        if len(parts) != 2:
            return ValidationResult.reject("Branch range must use format: start..end")
        start, end = parts
        if not is_commit_hash(start) or not is_commit_hash(end):
            return ValidationResult.reject("Invalid commit hashes in range")

    return ValidationResult.ok()
