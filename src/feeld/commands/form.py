"""Command group: check, render and validate form definitions."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from feeld.commands._base import FeeldGroup

if TYPE_CHECKING:
    from feeld.commands._context import AppContext
    from feeld.services.forms import FormService

_FORM_EXAMPLES = """\
  feeld form check signup.yaml
  feeld form render signup.yaml first-name room-type
  feeld form script-data signup.yaml
  feeld form validate signup.yaml --data submitted.json"""

_definition_arg = click.argument(
    "definition",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


def _service(app: AppContext) -> FormService:
    from feeld.services.forms import FormService

    return FormService(app.settings, app.plugins)


@click.group(cls=FeeldGroup, examples=_FORM_EXAMPLES)
def form() -> None:
    """Work with form definition files (YAML, JSON or TOML)."""


@form.command(
    examples="""\
  feeld form check signup.yaml
  feeld -v form check signup.toml"""
)
@_definition_arg
@click.pass_obj
def check(app: AppContext, definition: Path) -> None:
    """Register every field of DEFINITION and show its rules."""
    app.emit(_service(app).check(definition))


@form.command(
    examples="""\
  feeld form render signup.yaml
  feeld form render signup.yaml first-name
  feeld -q form render signup.yaml > fields.html"""
)
@_definition_arg
@click.argument("names", nargs=-1)
@click.pass_obj
def render(app: AppContext, definition: Path, names: tuple[str, ...]) -> None:
    """Render HTML for the NAMES fields (all fields by default)."""
    app.emit(_service(app).render(definition, names))


@form.command(
    "script-data",
    examples="""\
  feeld form script-data signup.yaml
  feeld -q form script-data signup.yaml > rules.json""",
)
@_definition_arg
@click.pass_obj
def script_data(app: AppContext, definition: Path) -> None:
    """Print client-side validation data as JSON."""
    app.emit(_service(app).script_data(definition))


@form.command(
    examples="""\
  feeld form validate signup.yaml --data submitted.json
  feeld --json form validate signup.yaml --data submitted.yaml"""
)
@_definition_arg
@click.option(
    "--data",
    "data_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML/JSON/TOML mapping of submitted values keyed by field name.",
)
@click.pass_obj
def validate(app: AppContext, definition: Path, data_path: Path) -> None:
    """Sanitize and validate submitted values; exit 1 when any field fails."""
    app.emit(_service(app).validate(definition, data_path))
