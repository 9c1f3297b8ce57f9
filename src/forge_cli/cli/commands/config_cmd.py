"""Top-level ``forge config`` command."""

from __future__ import annotations

import typer
from rich.table import Table

from forge_cli.cli.helpers import console
from forge_cli.core.config import ConfigError, load_forge_config


def config() -> None:
    """Display the resolved project configuration."""
    try:
        resolved = load_forge_config()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    source = str(resolved.config_path) if resolved.config_path.exists() else "defaults"

    table = Table(title="Forge Configuration", show_lines=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Project root", str(resolved.project_root))
    table.add_row("Config source", source)
    table.add_row("Package manager", resolved.package_manager)
    table.add_row("Instructions file", _with_presence(resolved.instructions_path, resolved.instructions_file))
    table.add_row(
        "Custom commands",
        _with_presence(resolved.custom_commands_path, resolved.custom_commands_dir),
    )
    table.add_row("Issue tracker", resolved.issue_tracker or "[dim]disabled[/dim]")

    console.print(table)


def _with_presence(path, label: str) -> str:
    if path.exists():
        return label
    return f"{label} [dim](missing)[/dim]"


__all__ = ["config"]
