"""
Forge CLI - workflow scaffolding for AI coding agents.

Usage:
    forge rollback
    forge rollback commit HEAD
    forge rollback partial "src/a.js, src/b.js" --dry-run
"""

from __future__ import annotations

import sys
from importlib.metadata import PackageNotFoundError, version as package_version

import typer
from rich.align import Align
from typer.core import TyperGroup

from forge_cli.cli.commands import register_commands
from forge_cli.cli.helpers import console, show_banner

try:
    __version__ = package_version("forge-workflow")
except PackageNotFoundError:
    __version__ = "0.0.0"


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="forge",
    help="Workflow scaffolding for AI coding agents",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"forge {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Show banner when no subcommand is provided."""
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'forge --help' for usage information[/dim]"))
        console.print()


register_commands(app)


def main():
    app()


if __name__ == "__main__":
    main()
