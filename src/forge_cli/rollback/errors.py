"""Error taxonomy for rollback operations."""

from __future__ import annotations

__all__ = [
    "RollbackError",
    "RollbackValidationError",
    "PreconditionError",
    "ExecutionError",
]


class RollbackError(RuntimeError):
    """Base class for user-facing rollback failures."""

    def __init__(self, message: str, *, remediation: list[str] | None = None) -> None:
        super().__init__(message)
        self.remediation: list[str] = list(remediation or [])


class RollbackValidationError(RollbackError):
    """User input failed validation. No git command was issued."""


class PreconditionError(RollbackError):
    """The repository is not in a state where rollback may run."""


class ExecutionError(RollbackError):
    """A git command failed after mutation began. Nothing is undone automatically."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        git_output: str = "",
        remediation: list[str] | None = None,
    ) -> None:
        super().__init__(message, remediation=remediation)
        self.command = list(command or [])
        self.git_output = git_output
