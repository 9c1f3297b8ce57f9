"""CLI command modules for forge."""

from __future__ import annotations

import typer

from . import config_cmd as config_module
from . import rollback as rollback_module


def register_commands(app: typer.Typer) -> None:
    """Attach forge subcommands to the root Typer application."""
    app.command(name="rollback")(rollback_module.rollback)
    app.command(name="config")(config_module.config)


__all__ = ["register_commands"]
