"""Subcommand modules for feeld.

register_commands() imports the groups when the root CLI is built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``rules`` and ``form`` groups on the root CLI group."""
    from feeld.commands.form import form
    from feeld.commands.rules import rules

    cli.add_command(rules)
    cli.add_command(form)
