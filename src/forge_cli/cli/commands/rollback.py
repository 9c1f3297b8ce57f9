"""Rollback command implementation.

Undoes a commit, merged PR, individual files or a commit range while keeping
the USER sections of the instructions document intact.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from forge_cli.cli import SelectionCancelled, StepTracker, select_with_arrows
from forge_cli.cli.helpers import configure_logging, console
from forge_cli.core.config import ConfigError, ForgeConfig, load_forge_config
from forge_cli.core.git_ops import format_command
from forge_cli.rollback import (
    ExecutionError,
    RollbackError,
    RollbackMethod,
    RollbackRequest,
    RollbackResult,
    build_tracker,
    run_rollback,
)

__all__ = ["rollback", "MENU_OPTIONS", "prompt_for_request"]

MENU_OPTIONS: dict[str, str] = {
    "1": "Rollback last commit",
    "2": "Rollback specific commit",
    "3": "Rollback merged PR",
    "4": "Rollback specific files only",
    "5": "Rollback entire branch range",
    "6": "Preview rollback (dry run)",
}

# Menu choice -> (method, fixed target or None, prompt text)
_MENU_METHODS: dict[str, tuple[str, Optional[str], str]] = {
    "1": (RollbackMethod.COMMIT.value, "HEAD", ""),
    "2": (RollbackMethod.COMMIT.value, None, "Commit hash"),
    "3": (RollbackMethod.PR.value, None, "Merge commit hash"),
    "4": (RollbackMethod.PARTIAL.value, None, "File paths (comma-separated)"),
    "5": (RollbackMethod.BRANCH.value, None, "Commit range (start..end)"),
}


def _request_for_choice(choice: str, dry_run: bool) -> RollbackRequest:
    method, fixed_target, prompt_text = _MENU_METHODS[choice]
    target = fixed_target if fixed_target is not None else typer.prompt(prompt_text)
    # Input is passed through untouched; validation happens in the orchestrator.
    return RollbackRequest(method=method, target=target, dry_run=dry_run)


def prompt_for_request(out: Console) -> RollbackRequest:
    """Run the interactive rollback menu.

    Raises:
        SelectionCancelled: the user backed out of a menu or prompt.
    """
    try:
        choice = select_with_arrows(MENU_OPTIONS, "Choose a rollback method", "1", console=out)
        if choice != "6":
            return _request_for_choice(choice, dry_run=False)

        preview_options = {key: MENU_OPTIONS[key] for key in _MENU_METHODS}
        preview_choice = select_with_arrows(preview_options, "Preview which rollback?", "1", console=out)
        return _request_for_choice(preview_choice, dry_run=True)
    except typer.Abort:
        raise SelectionCancelled() from None


def _print_failure(tracker: StepTracker, exc: RollbackError) -> None:
    console.print(tracker.render())
    console.print(f"\n[red]Error:[/red] {escape(str(exc))}")
    if isinstance(exc, ExecutionError) and exc.git_output:
        console.print("[red]Git output:[/red]")
        console.print(exc.git_output, markup=False, highlight=False)
    if exc.remediation:
        console.print("\n[yellow]Suggested next steps:[/yellow]")
        for command in exc.remediation:
            console.print(f"  {command}", markup=False, highlight=False)


def _print_result(tracker: StepTracker, result: RollbackResult) -> None:
    console.print(tracker.render())

    if result.dry_run:
        console.print("\n[bold]Dry run:[/bold] no changes were made.")
        if result.preview:
            console.print("\n[cyan]Affected:[/cyan]")
            for line in result.preview:
                console.print(f"  {line}", markup=False, highlight=False)
        console.print("\n[cyan]Would run:[/cyan]")
        for command in result.commands:
            console.print(f"  {format_command(command)}", markup=False, highlight=False)
    else:
        console.print(
            f"\n[green]✓[/green] Rollback complete ({escape(result.request.method)} {escape(result.request.target)})"
        )
        if result.restored_sections:
            console.print(f"[green]✓[/green] Restored {result.restored_sections} USER section(s)")
        if result.restored_commands:
            console.print(f"[green]✓[/green] Restored {result.restored_commands} custom command file(s)")

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}", highlight=False)


def rollback(
    method: Optional[str] = typer.Argument(
        None, help="Rollback method: commit, pr, partial or branch (omit for interactive menu)"
    ),
    target: Optional[str] = typer.Argument(
        None, help="Commit hash/HEAD, comma-separated file paths, or start..end range"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without executing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git command"),
) -> None:
    """Undo a commit, merged PR, files or commit range while preserving USER sections."""
    configure_logging(verbose)

    try:
        config: ForgeConfig = load_forge_config()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if method is None:
        try:
            request = prompt_for_request(console)
        except SelectionCancelled:
            console.print("\n[yellow]Rollback cancelled[/yellow]")
            raise typer.Exit(0)
        if dry_run:
            request = RollbackRequest(method=request.method, target=request.target, dry_run=True)
    else:
        if target is None:
            target = "HEAD" if method == RollbackMethod.COMMIT.value else typer.prompt("Target")
        request = RollbackRequest(method=method, target=target, dry_run=dry_run)

    tracker = build_tracker(request)
    try:
        result = run_rollback(request, config, tracker=tracker)
    except RollbackError as exc:
        _print_failure(tracker, exc)
        raise typer.Exit(1)

    _print_result(tracker, result)
