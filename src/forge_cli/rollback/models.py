"""Data model for the rollback engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

__all__ = [
    "RollbackMethod",
    "RollbackRequest",
    "ValidationResult",
    "PreservedSection",
    "CustomCommandSnapshot",
    "PreservedBundle",
    "RollbackResult",
    "SectionKey",
]

# Anonymous pairs are keyed by position (int), named pairs by their name (str).
SectionKey = Union[int, str]


class RollbackMethod(str, Enum):
    """Supported rollback strategies."""

    COMMIT = "commit"
    PR = "pr"
    PARTIAL = "partial"
    BRANCH = "branch"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class RollbackRequest:
    """A single rollback invocation as entered by the user."""

    method: str
    target: str
    dry_run: bool = False

    def file_paths(self) -> list[str]:
        """Split a ``partial`` target into its trimmed file paths."""
        return [part.strip() for part in self.target.split(",")]

    def range_bounds(self) -> tuple[str, str]:
        """Split a ``branch`` target into (start, end)."""
        start, end = self.target.split("..")
        return start, end


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def reject(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)


@dataclass(frozen=True)
class PreservedSection:
    """User-owned text between a matched pair of USER markers."""

    key: SectionKey
    body: str


@dataclass(frozen=True)
class CustomCommandSnapshot:
    name: str
    content: str


@dataclass
class PreservedBundle:
    """In-memory snapshot of user content taken before a destructive git operation.

    The bundle is never written to disk. It must be restored in the same
    process that captured it.
    """

    sections: dict[SectionKey, str] = field(default_factory=dict)
    custom_commands: list[CustomCommandSnapshot] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.sections and not self.custom_commands

    def add(self, section: PreservedSection) -> None:
        self.sections[section.key] = section.body


@dataclass
class RollbackResult:
    """Outcome of an orchestrated rollback."""

    request: RollbackRequest
    success: bool = False
    dry_run: bool = False
    commands: list[list[str]] = field(default_factory=list)
    preview: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    restored_sections: int = 0
    restored_commands: int = 0
    amended: bool = False
