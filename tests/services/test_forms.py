"""Tests for FormService over definition files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from feeld.config.settings import FeeldSettings
from feeld.plugins import PluginManager, hookimpl
from feeld.services.forms import VALIDATION_FAILED, FormService


@pytest.fixture
def service(settings: FeeldSettings, evaluator, sanitizer) -> FormService:
    return FormService(settings, evaluator=evaluator, sanitizer=sanitizer)


def _values(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "submitted.yaml"
    path.write_text(text, encoding="utf-8")
    return path


_VALID = """\
first-name: "  Grace "
email: " Grace@Navy.MIL"
password: correct-horse
password-confirm: correct-horse
room-type: smoking
"""

_INVALID = """\
first-name: Ada
email: ada@engine.org
password: correct-horse
password-confirm: incorrect-horse
"""


class TestCheck:
    def test_reports_fields(self, service: FormService, signup_form: Path) -> None:
        result = service.check(signup_form)
        assert result.ok
        assert result.data["form"] == "signup"
        assert result.meta == {"field_count": 8}
        first, email = result.data["fields"][:2]
        assert first == {
            "name": "first-name",
            "label": "First name",
            "kind": "text",
            "server_rules": "required|min_len,5",
            "client_rules": "required|min_length[5]",
            "sanitize": "trim",
            "options": {},
        }
        assert email["kind"] == "text"
        kinds = [f["kind"] for f in result.data["fields"]]
        assert kinds[4:6] == ["radio_series", "select_menu"]

    def test_bad_rule_in_definition(self, service: FormService, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            "fields:\n  - {name: a, label: A, type: text, rules: 'required|bogus_rule'}\n",
            encoding="utf-8",
        )
        result = service.check(path)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "UNRECOGNIZED_RULE"

    def test_duplicate_field(self, service: FormService, tmp_path: Path) -> None:
        path = tmp_path / "dup.yaml"
        path.write_text(
            "fields:\n  - {name: a, label: A, type: text}\n  - {name: a, label: B, type: text}\n",
            encoding="utf-8",
        )
        result = service.check(path)
        assert result.error is not None
        assert result.error.code == "DUPLICATE_FIELD"

    def test_unknown_type(self, service: FormService, tmp_path: Path) -> None:
        path = tmp_path / "type.yaml"
        path.write_text("fields:\n  - {name: a, label: A, type: hologram}\n", encoding="utf-8")
        result = service.check(path)
        assert result.error is not None
        assert result.error.code == "UNRESOLVED_FIELD_TYPE"

    def test_missing_file(self, service: FormService, tmp_path: Path) -> None:
        result = service.check(tmp_path / "nope.yaml")
        assert result.error is not None
        assert result.error.code == "INVALID_FORM_DEFINITION"

    def test_message_override_is_validated(self, tmp_path: Path, signup_form: Path) -> None:
        settings = FeeldSettings(
            project_root=tmp_path,
            plugins={"enabled": False},
            messages={"overrides": {"is_teapot": "{label}"}},
        )
        result = FormService(settings).check(signup_form)
        assert result.error is not None
        assert result.error.code == "INVALID_TEMPLATE"


class TestRender:
    def test_all_fields(self, service: FormService, signup_form: Path) -> None:
        result = service.render(signup_form)
        assert result.ok
        markup = result.data["fields"]
        assert list(markup)[0] == "first-name"
        assert len(markup) == 8
        assert markup["notes"] == '<textarea id="notes" name="notes"></textarea>'

    def test_named_fields(self, service: FormService, signup_form: Path) -> None:
        result = service.render(signup_form, ["country", "newsletter"])
        assert list(result.data["fields"]) == ["country", "newsletter"]
        assert result.data["fields"]["newsletter"] == (
            '<input type="checkbox" id="newsletter" name="newsletter" />'
        )

    def test_unknown_field(self, service: FormService, signup_form: Path) -> None:
        result = service.render(signup_form, ["phone"])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "FIELD_NOT_FOUND"

    def test_configured_classes(self, tmp_path: Path, signup_form: Path) -> None:
        settings = FeeldSettings(
            project_root=tmp_path,
            plugins={"enabled": False},
            render={"radio_container_class": "pair"},
        )
        result = FormService(settings).render(signup_form, ["room-type"])
        assert result.data["fields"]["room-type"].startswith('<div class="pair">')


class TestScriptData:
    def test_client_dialect(self, service: FormService, signup_form: Path) -> None:
        result = service.script_data(signup_form)
        assert result.ok
        fields = result.data["fields"]
        assert fields[0] == {
            "name": "first-name",
            "display": "First name",
            "rules": "required|min_length[5]",
        }
        assert fields[3]["rules"] == "required|matches[password]"


class TestValidate:
    def test_valid_submission(
        self, service: FormService, signup_form: Path, tmp_path: Path
    ) -> None:
        result = service.validate(signup_form, _values(tmp_path, _VALID))
        assert result.ok, result.error
        assert result.data["valid"] is True
        assert result.data["errors"] == []
        assert "error_block" not in result.data
        assert result.data["values"]["first-name"] == "Grace"
        assert result.data["values"]["email"] == "grace@navy.mil"
        assert result.meta == {"field_count": 8, "error_count": 0}

    def test_invalid_submission(
        self, service: FormService, signup_form: Path, tmp_path: Path
    ) -> None:
        result = service.validate(signup_form, _values(tmp_path, _INVALID))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == VALIDATION_FAILED
        assert result.error.message == "2 field(s) failed validation"
        errors = result.data["errors"]
        assert [e["field"] for e in errors] == ["first-name", "password-confirm"]
        assert errors[0]["message"] == "The First name field must be at least 5 characters long"
        assert errors[1]["rule"] == "matches"
        assert result.data["error_block"].startswith('<div class="feeld-errors"><ul><li>')

    def test_without_collaborators(
        self, settings: FeeldSettings, signup_form: Path, tmp_path: Path
    ) -> None:
        result = FormService(settings).validate(signup_form, _values(tmp_path, _VALID))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "MISSING_COLLABORATOR"

    def test_collaborators_from_plugins(
        self, settings: FeeldSettings, evaluator, sanitizer, signup_form: Path, tmp_path: Path
    ) -> None:
        class Collaborators:
            @hookimpl
            def feeld_evaluator(self) -> Any:
                return evaluator

            @hookimpl
            def feeld_sanitizer(self) -> Any:
                return sanitizer

        manager = PluginManager()
        manager.register_plugin(Collaborators())
        result = FormService(settings, manager).validate(signup_form, _values(tmp_path, _VALID))
        assert result.ok, result.error
        assert evaluator.calls
        assert sanitizer.calls

    def test_post_validate_event(
        self, settings: FeeldSettings, evaluator, sanitizer, signup_form: Path, tmp_path: Path
    ) -> None:
        seen: list[tuple[str, int, int]] = []

        class Recorder:
            @hookimpl
            def post_validate(self, form: str, field_count: int, errors: list) -> None:
                seen.append((form, field_count, len(errors)))

        manager = PluginManager()
        manager.register_plugin(Recorder())
        service = FormService(settings, manager, evaluator=evaluator, sanitizer=sanitizer)
        service.validate(signup_form, _values(tmp_path, _INVALID))
        assert seen == [("signup", 8, 2)]

    def test_failing_post_validate_hook_is_a_warning(
        self, settings: FeeldSettings, evaluator, sanitizer, signup_form: Path, tmp_path: Path
    ) -> None:
        class Broken:
            @hookimpl
            def post_validate(self, form: str, field_count: int, errors: list) -> None:
                raise RuntimeError("boom")

        manager = PluginManager()
        manager.register_plugin(Broken())
        service = FormService(settings, manager, evaluator=evaluator, sanitizer=sanitizer)
        result = service.validate(signup_form, _values(tmp_path, _VALID))
        assert result.ok
        assert result.warnings == ["post_validate plugin hook failed for signup"]

    def test_unreadable_values(
        self, service: FormService, signup_form: Path, tmp_path: Path
    ) -> None:
        result = service.validate(signup_form, tmp_path / "missing.yaml")
        assert result.error is not None
        assert result.error.code == "INVALID_FORM_DEFINITION"
