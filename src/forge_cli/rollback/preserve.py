"""Preservation of user-owned content across destructive git operations.

The instructions document (``AGENTS.md`` by default) may contain regions the
user owns::

    <!-- USER:START -->
    anything here survives a rollback
    <!-- USER:END -->

    <!-- USER:START:conventions -->
    so does this, keyed by name
    <!-- USER:END:conventions -->

``extract_user_sections`` snapshots those regions (plus any custom command
files) into a :class:`PreservedBundle`; ``restore_user_sections`` writes them
back into the rewritten document. The snapshot lives only in memory.

A pair whose markers were deleted by the git operation cannot be restored:
there is no anchor left to reinsert it at.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from pathlib import Path

from forge_cli.rollback.models import CustomCommandSnapshot, PreservedBundle, PreservedSection

__all__ = [
    "extract_user_sections",
    "restore_user_sections",
    "find_marker_imbalances",
]

logger = logging.getLogger(__name__)

_ANON_PAIR_RE = re.compile(
    r"(?P<start><!--\s*USER:START\s*-->)(?P<body>.*?)(?P<end><!--\s*USER:END\s*-->)",
    re.DOTALL,
)
_NAMED_PAIR_RE = re.compile(
    r"(?P<start><!--\s*USER:START:(?P<name>\w+)\s*-->)(?P<body>.*?)"
    r"(?P<end><!--\s*USER:END:(?P=name)\s*-->)",
    re.DOTALL,
)
_ANON_START_RE = re.compile(r"<!--\s*USER:START\s*-->")
_ANON_END_RE = re.compile(r"<!--\s*USER:END\s*-->")
_NAMED_START_RE = re.compile(r"<!--\s*USER:START:(\w+)\s*-->")
_NAMED_END_RE = re.compile(r"<!--\s*USER:END:(\w+)\s*-->")

# Byte-level IO keeps line endings exactly as they are on disk.
_ENCODING = "utf-8"


def _read(path: Path) -> str:
    return path.read_bytes().decode(_ENCODING)


def _write(path: Path, content: str) -> None:
    path.write_bytes(content.encode(_ENCODING))


def find_marker_imbalances(content: str) -> list[str]:
    """Report USER markers that have no partner.

    Returns one message per imbalance; an empty list means every start marker
    has exactly one matching end marker.
    """
    problems: list[str] = []

    anon_starts = len(_ANON_START_RE.findall(content))
    anon_ends = len(_ANON_END_RE.findall(content))
    if anon_starts != anon_ends:
        problems.append(
            f"Unbalanced USER markers: {anon_starts} USER:START vs {anon_ends} USER:END"
        )

    named_starts = Counter(_NAMED_START_RE.findall(content))
    named_ends = Counter(_NAMED_END_RE.findall(content))
    for name in sorted(set(named_starts) | set(named_ends)):
        if named_starts[name] != named_ends[name]:
            problems.append(
                f"Unbalanced USER markers for '{name}': "
                f"{named_starts[name]} start vs {named_ends[name]} end"
            )
        elif named_starts[name] > 1:
            problems.append(
                f"Duplicate USER section '{name}': only the first occurrence is preserved"
            )
    return problems


def _snapshot_custom_commands(commands_dir: Path) -> list[CustomCommandSnapshot]:
    snapshots = []
    for entry in sorted(commands_dir.iterdir()):
        if entry.is_file():
            content = entry.read_bytes().decode(_ENCODING, errors="surrogateescape")
            snapshots.append(CustomCommandSnapshot(name=entry.name, content=content))
    return snapshots


def extract_user_sections(
    document_path: Path,
    custom_commands_dir: Path | None = None,
) -> PreservedBundle:
    """Snapshot USER sections and custom command files before a rollback."""
    bundle = PreservedBundle()
    if not document_path.exists():
        return bundle

    if custom_commands_dir is not None and custom_commands_dir.is_dir():
        bundle.custom_commands = _snapshot_custom_commands(custom_commands_dir)

    content = _read(document_path)
    bundle.warnings.extend(find_marker_imbalances(content))

    for index, match in enumerate(_ANON_PAIR_RE.finditer(content)):
        bundle.add(PreservedSection(key=index, body=match.group("body")))

    for match in _NAMED_PAIR_RE.finditer(content):
        name = match.group("name")
        if name not in bundle.sections:
            bundle.add(PreservedSection(key=name, body=match.group("body")))

    logger.debug(
        "Extracted %d USER section(s) and %d custom command(s) from %s",
        len(bundle.sections),
        len(bundle.custom_commands),
        document_path,
    )
    return bundle


def _restore_document(content: str, bundle: PreservedBundle) -> tuple[str, int]:
    restored = 0
    position = 0

    def _anon(match: re.Match[str]) -> str:
        nonlocal position, restored
        key = position
        position += 1
        if key not in bundle.sections:
            return match.group(0)
        restored += 1
        return f"{match.group('start')}{bundle.sections[key]}{match.group('end')}"

    content = _ANON_PAIR_RE.sub(_anon, content)

    seen: set[str] = set()

    def _named(match: re.Match[str]) -> str:
        nonlocal restored
        name = match.group("name")
        if name in seen or name not in bundle.sections:
            return match.group(0)
        seen.add(name)
        restored += 1
        return f"{match.group('start')}{bundle.sections[name]}{match.group('end')}"

    content = _NAMED_PAIR_RE.sub(_named, content)
    return content, restored


def restore_user_sections(
    document_path: Path,
    bundle: PreservedBundle,
    custom_commands_dir: Path | None = None,
) -> int:
    """Write a bundle back after the git operation.

    Returns the number of USER sections that were re-populated.
    """
    if not document_path.exists() or bundle.is_empty:
        return 0

    restored = 0
    if bundle.sections:
        original = _read(document_path)
        updated, restored = _restore_document(original, bundle)
        if updated != original:
            _write(document_path, updated)
        missing = len(bundle.sections) - restored
        if missing > 0:
            logger.warning(
                "%d USER section(s) could not be restored because their markers were removed",
                missing,
            )

    if bundle.custom_commands and custom_commands_dir is not None:
        custom_commands_dir.mkdir(parents=True, exist_ok=True)
        for snapshot in bundle.custom_commands:
            target = custom_commands_dir / snapshot.name
            target.write_bytes(snapshot.content.encode(_ENCODING, errors="surrogateescape"))

    return restored
