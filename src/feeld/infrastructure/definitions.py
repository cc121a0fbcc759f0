"""Form definition and submitted-value files.

A form definition lists fields in registration order::

    fields:
      - name: first-name
        label: First name
        type: text
        rules: required|min_len,5
        sanitize: trim
      - name: room-type
        label: Room type
        type: radio
        rules: required
        options:
          smoking: Smoking
          non-smoking: Non-Smoking

YAML (``.yaml``/``.yml``/``.json``) is read with ruamel.yaml's safe loader,
TOML (``.toml``) with :mod:`tomllib` using ``[[fields]]`` tables.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from feeld.domain.errors import FormDefinitionError

TOML_SUFFIXES = frozenset({".toml"})


class FieldDefinition(BaseModel):
    """One ``fields`` entry of a form definition."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    label: str
    type: str
    rules: str = ""
    sanitize: str = ""
    options: dict[str, str] = Field(default_factory=dict)

    @field_validator("rules", "sanitize", mode="before")
    @classmethod
    def _blank_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value


class FormDefinition(BaseModel):
    """A whole form: its fields in registration order."""

    model_config = {"frozen": True}

    name: str = "form"
    fields: list[FieldDefinition] = Field(default_factory=list)


def _new_yaml() -> YAML:
    """A fresh safe loader per call; ruamel's YAML object is stateful."""
    return YAML(typ="safe", pure=True)


def read_mapping(path: Path) -> dict[str, Any]:
    """Read a YAML/JSON or TOML file whose top level is a mapping.

    Raises:
        FormDefinitionError: The file is missing, unparsable or not a mapping.
    """
    if not path.is_file():
        raise FormDefinitionError(f"No such file: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in TOML_SUFFIXES:
            data: Any = tomllib.loads(raw)
        else:
            data = _new_yaml().load(raw)
    except (tomllib.TOMLDecodeError, YAMLError) as exc:
        raise FormDefinitionError(f"Cannot parse {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FormDefinitionError(f"{path} must contain a mapping at the top level")
    return data


def load_form_definition(path: Path) -> FormDefinition:
    """Load and validate a form definition file."""
    data = read_mapping(path)
    data.setdefault("name", path.stem)
    try:
        return FormDefinition.model_validate(data)
    except ValidationError as exc:
        raise FormDefinitionError(f"Invalid form definition {path}: {exc}") from exc


def load_values(path: Path) -> dict[str, Any]:
    """Load submitted values (``{field_name: value}``) from a file."""
    return read_mapping(path)
