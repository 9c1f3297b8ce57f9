"""Rollback engine: validate, preserve USER content, run git, restore."""

from forge_cli.rollback.errors import (
    ExecutionError,
    PreconditionError,
    RollbackError,
    RollbackValidationError,
)
from forge_cli.rollback.models import (
    CustomCommandSnapshot,
    PreservedBundle,
    PreservedSection,
    RollbackMethod,
    RollbackRequest,
    RollbackResult,
    ValidationResult,
)
from forge_cli.rollback.orchestrator import build_tracker, run_rollback
from forge_cli.rollback.preserve import extract_user_sections, restore_user_sections
from forge_cli.rollback.validation import validate_rollback_input

__all__ = [
    "CustomCommandSnapshot",
    "ExecutionError",
    "PreconditionError",
    "PreservedBundle",
    "PreservedSection",
    "RollbackError",
    "RollbackMethod",
    "RollbackRequest",
    "RollbackResult",
    "RollbackValidationError",
    "ValidationResult",
    "build_tracker",
    "extract_user_sections",
    "restore_user_sections",
    "run_rollback",
    "validate_rollback_input",
]
