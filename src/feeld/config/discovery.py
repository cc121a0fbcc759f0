"""Locate and read the feeld configuration.

A project configures feeld either in its own ``feeld.toml`` or in a
``[tool.feeld]`` table of ``pyproject.toml``. The nearest directory holding
either file wins; within one directory ``feeld.toml`` takes precedence.
``FEELD_CONFIG`` (or ``--config``) names a file explicitly and disables the
search.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from feeld.config.models import FeeldConfig

CONFIG_FILENAME = "feeld.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "FEELD_CONFIG"


def _has_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return isinstance(data.get("tool", {}).get("feeld"), dict)


def _candidates(directory: Path) -> list[Path]:
    found = []
    config = directory / CONFIG_FILENAME
    if config.is_file():
        found.append(config)
    pyproject = directory / PYPROJECT_FILENAME
    if pyproject.is_file() and _has_tool_table(pyproject):
        found.append(pyproject)
    return found


def find_config(start: Path | None = None) -> Path | None:
    """The config file for a project containing *start* (default: cwd).

    An explicit ``FEELD_CONFIG`` path is returned only if it exists.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for current in (directory, *directory.parents):
        found = _candidates(current)
        if found:
            return found[0]
    return None


def read_config_table(path: Path) -> dict[str, Any]:
    """Raw configuration mapping stored in *path*.

    For ``pyproject.toml`` this is the ``[tool.feeld]`` table (empty when
    absent). Raises :class:`tomllib.TOMLDecodeError` on malformed TOML.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        table = data.get("tool", {}).get("feeld", {})
        return dict(table) if isinstance(table, dict) else {}
    return data


def load_config(path: Path | None = None, cwd: Path | None = None) -> FeeldConfig:
    """Validated configuration from *path*, or from the discovered file.

    Defaults apply when no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return FeeldConfig()
    return FeeldConfig.model_validate(read_config_table(path))
