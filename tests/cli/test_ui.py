"""Tests for StepTracker and the arrow-key selector."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from forge_cli.cli import ui
from forge_cli.cli.ui import SelectionCancelled, StepTracker, select_with_arrows


def _console() -> Console:
    return Console(file=io.StringIO(), width=100)


def test_step_tracker_transitions():
    tracker = StepTracker("Rollback")
    tracker.add("validate", "Validate input")
    tracker.add("validate", "duplicate ignored")
    tracker.start("validate")
    tracker.complete("validate", "commit HEAD")

    assert tracker.status_of("validate") == "done"
    assert len(tracker.steps) == 1
    assert tracker.steps[0]["detail"] == "commit HEAD"


def test_step_tracker_unknown_key_is_appended():
    tracker = StepTracker("Rollback")
    tracker.error("amend", "boom")
    assert tracker.status_of("amend") == "error"


def test_render_escapes_user_text():
    tracker = StepTracker("Rollback")
    tracker.add("validate", "Validate input")
    tracker.error("validate", "path [bold]x[/bold]")
    console = _console()

    console.print(tracker.render())

    assert "[bold]x[/bold]" in console.file.getvalue()


def test_select_moves_and_confirms(monkeypatch):
    keys = iter(["down", "down", "enter"])
    monkeypatch.setattr(ui, "get_key", lambda: next(keys))

    choice = select_with_arrows({"1": "one", "2": "two", "3": "three"}, console=_console())

    assert choice == "3"


def test_select_number_key_jumps(monkeypatch):
    monkeypatch.setattr(ui, "get_key", lambda: "2")
    assert select_with_arrows({"1": "one", "2": "two"}, console=_console()) == "2"


@pytest.mark.parametrize("key", ["escape", KeyboardInterrupt])
def test_select_cancel(monkeypatch, key):
    def _press():
        if key is KeyboardInterrupt:
            raise KeyboardInterrupt
        return key

    monkeypatch.setattr(ui, "get_key", _press)

    with pytest.raises(SelectionCancelled):
        select_with_arrows({"1": "one"}, console=_console())
