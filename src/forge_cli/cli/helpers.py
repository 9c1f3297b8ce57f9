"""Shared console and banner helpers for forge commands."""

from __future__ import annotations

import logging

from rich.align import Align
from rich.console import Console
from rich.text import Text

__all__ = ["BANNER", "TAGLINE", "console", "show_banner", "configure_logging"]

BANNER = r"""
  ___  ___   ___   ___  ___
 | __|/ _ \ | _ \ / __|| __|
 | _|| (_) ||   /| (_ || _|
 |_|  \___/ |_|_\ \___||___|
"""

TAGLINE = "Forge - workflow scaffolding for AI coding agents"

console = Console()


def show_banner() -> None:
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip("\n").split("\n")
    colors = ["bright_blue", "blue", "cyan", "bright_cyan"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        styled_banner.append(line + "\n", style=colors[i % len(colors)])

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


def configure_logging(verbose: bool) -> None:
    """Route forge_cli log records to stderr; DEBUG shows every git argv."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("forge_cli").setLevel(level)
