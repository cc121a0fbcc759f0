"""Command group: rule-spec translation and the constraint catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from feeld.commands._base import FeeldGroup

if TYPE_CHECKING:
    from feeld.commands._context import AppContext

_RULES_EXAMPLES = """\
  feeld rules translate 'required|min_len,5'
  feeld rules translate 'required|min_length[5]'
  feeld rules catalog"""


@click.group(cls=FeeldGroup, examples=_RULES_EXAMPLES)
def rules() -> None:
    """Translate rule specs between the server and client dialects."""


@rules.command(
    examples="""\
  feeld rules translate 'required|valid_email'
  feeld rules translate 'required|matches[password]'
  feeld -v rules translate 'numeric|greater_than,3'
  feeld --json rules translate 'min_len,2|max_len,40'"""
)
@click.argument("spec")
@click.pass_obj
def translate(app: AppContext, spec: str) -> None:
    """Parse SPEC (either dialect) and print it in both."""
    from feeld.services.rules import RuleService

    app.emit(RuleService(app.settings, app.plugins).translate(spec))


@rules.command(
    examples="""\
  feeld rules catalog
  feeld --json rules catalog"""
)
@click.pass_obj
def catalog(app: AppContext) -> None:
    """List every supported constraint."""
    from feeld.services.rules import RuleService

    app.emit(RuleService(app.settings, app.plugins).catalog())
