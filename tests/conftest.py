"""Shared pytest fixtures and fake collaborators for feeld tests."""

from __future__ import annotations

import logging
import re
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from feeld.config.settings import FeeldSettings
from feeld.domain.registry import FieldRegistry

_EMAIL = re.compile(r"\A[^@\s]+@[^@\s]+\.[a-z]{2,}\Z", re.IGNORECASE)


class RecordingEvaluator:
    """Checks a handful of server-dialect rules and records every call.

    Only what the tests need: ``required``, ``alpha``, ``numeric``,
    ``valid_email``, ``min_len``, ``max_len``. Anything else passes.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[Any], list[str]]] = []

    def validate(self, values: list[Any], rules: list[str]) -> bool | list[dict[str, str]]:
        self.calls.append((list(values), list(rules)))
        value = "" if values[0] is None else str(values[0])
        for token in rules[0].split("|"):
            name, _, param = token.partition(",")
            if not self._passes(name, param, value):
                return [{"field": "0", "value": value, "rule": f"validate_{name}", "param": param}]
        return True

    @staticmethod
    def _passes(name: str, param: str, value: str) -> bool:
        if name == "required":
            return value != ""
        if value == "":
            return True
        if name == "alpha":
            return value.isalpha()
        if name == "numeric":
            return value.isdigit()
        if name == "valid_email":
            return bool(_EMAIL.match(value))
        if name == "min_len":
            return len(value) >= int(param)
        if name == "max_len":
            return len(value) <= int(param)
        return True


class RecordingSanitizer:
    """Applies ``trim``/``lower``/``upper`` filters and records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[dict[str, Any], dict[str, str]]] = []

    def sanitize(self, values: dict[str, Any], filters: dict[str, str]) -> dict[str, Any]:
        self.calls.append((dict(values), dict(filters)))
        cleaned: dict[str, Any] = {}
        for name, value in values.items():
            for step in filters.get(name, "").split("|"):
                if not isinstance(value, str):
                    break
                if step == "trim":
                    value = value.strip()
                elif step == "lower":
                    value = value.lower()
                elif step == "upper":
                    value = value.upper()
            cleaned[name] = value
        return cleaned


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def evaluator() -> RecordingEvaluator:
    return RecordingEvaluator()


@pytest.fixture
def sanitizer() -> RecordingSanitizer:
    return RecordingSanitizer()


@pytest.fixture
def registry(evaluator: RecordingEvaluator, sanitizer: RecordingSanitizer) -> FieldRegistry:
    """An empty registry wired to the recording collaborators."""
    return FieldRegistry(evaluator=evaluator, sanitizer=sanitizer)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() calls made by CLI and logging tests."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    feeld_level = logging.getLogger("feeld").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("feeld").setLevel(feeld_level)
    structlog.contextvars.clear_contextvars()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's feeld.toml or FEELD_* variables out of every test."""
    monkeypatch.delenv("FEELD_CONFIG", raising=False)
    for key in ("FEELD_VERBOSE", "FEELD_QUIET", "FEELD_JSON_OUTPUT", "FEELD_LOG_JSON"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> FeeldSettings:
    """Settings rooted at the temporary directory with plugins disabled."""
    return FeeldSettings(project_root=tmp_path, plugins={"enabled": False})


SIGNUP_FORM = """\
name: signup
fields:
  - name: first-name
    label: First name
    type: text
    rules: required|min_len,5
    sanitize: trim
  - name: email
    label: Email
    type: text-field
    rules: required|valid_email
    sanitize: trim|lower
  - name: password
    label: Password
    type: password
    rules: required|min_length[8]
  - name: password-confirm
    label: Password confirmation
    type: password
    rules: required|matches[password]
  - name: room-type
    label: Room type
    type: radio
    options:
      smoking: Smoking
      non-smoking: Non-Smoking
  - name: country
    label: Country
    type: dropmenu
    options:
      nz: New Zealand
      au: Australia
  - name: newsletter
    label: Newsletter
    type: checkbox
  - name: notes
    label: Notes
    type: textarea
"""


@pytest.fixture
def signup_form(tmp_path: Path) -> Path:
    """A YAML form definition exercising every common field kind."""
    path = tmp_path / "signup.yaml"
    path.write_text(SIGNUP_FORM, encoding="utf-8")
    return path
