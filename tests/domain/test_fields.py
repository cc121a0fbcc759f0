"""Tests for field kinds: type resolution, rendering and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from feeld.domain.errors import (
    FieldNotFoundError,
    FormDefinitionError,
    MissingCollaboratorError,
    UnrecognizedRuleError,
    UnresolvedFieldTypeError,
)
from feeld.domain.fields import (
    FIELD_TYPE_ALIASES,
    FieldDescriptor,
    RenderOptions,
    ValidationOutcome,
    body_renderer,
    build_field,
    is_truthy,
    option_matches,
    resolve_field_kind,
)
from feeld.domain.types import FieldKind

ROOMS = {"smoking": "Smoking", "non-smoking": "Non-Smoking"}


# ---------------------------------------------------------------------------
# Type resolution
# ---------------------------------------------------------------------------


class TestResolveFieldKind:
    @pytest.mark.parametrize("token", ["text", "text-field", "text_field"])
    def test_text_aliases(self, token: str) -> None:
        assert resolve_field_kind(token).unwrap() is FieldKind.TEXT

    @pytest.mark.parametrize(
        ("token", "kind"),
        [
            ("feeld.SelectMenu", FieldKind.SELECT_MENU),
            ("RadioSeries", FieldKind.RADIO_SERIES),
            ("dropmenu", FieldKind.SELECT_MENU),
            ("drop-menu", FieldKind.SELECT_MENU),
            ("password_field", FieldKind.PASSWORD),
            ("upload", FieldKind.FILE_UPLOAD),
            ("file", FieldKind.FILE_UPLOAD),
            ("radio_series", FieldKind.RADIO_SERIES),
            (FieldKind.TEXTAREA, FieldKind.TEXTAREA),
        ],
    )
    def test_resolution_paths(self, token: str | FieldKind, kind: FieldKind) -> None:
        resolution = resolve_field_kind(token)
        assert resolution.resolved
        assert resolution.kind is kind

    def test_every_alias_resolves(self) -> None:
        for alias, kind in FIELD_TYPE_ALIASES.items():
            assert resolve_field_kind(alias).kind is kind

    def test_unresolvable_token(self) -> None:
        resolution = resolve_field_kind("colour-picker")
        assert not resolution.resolved
        with pytest.raises(UnresolvedFieldTypeError) as exc_info:
            resolution.unwrap()
        assert exc_info.value.token == "colour-picker"

    def test_build_field_rejects_unknown_type(self) -> None:
        with pytest.raises(UnresolvedFieldTypeError):
            build_field("x", "X", "colour-picker")

    def test_build_field_rejects_unknown_rule(self) -> None:
        with pytest.raises(UnrecognizedRuleError):
            build_field("x", "X", "text", "required|bogus_rule")


# ---------------------------------------------------------------------------
# Descriptor and helpers
# ---------------------------------------------------------------------------


class TestFieldDescriptor:
    def test_options_mapping_keeps_order(self) -> None:
        descriptor = FieldDescriptor(
            name="r", label="R", kind=FieldKind.RADIO_SERIES, options=ROOMS
        )
        assert descriptor.options == (("smoking", "Smoking"), ("non-smoking", "Non-Smoking"))

    def test_option_keys_become_strings(self) -> None:
        descriptor = FieldDescriptor(
            name="n", label="N", kind=FieldKind.SELECT_MENU, options={1: "One", 2: "Two"}
        )
        assert descriptor.options == (("1", "One"), ("2", "Two"))

    def test_none_rules_become_empty(self) -> None:
        descriptor = FieldDescriptor(name="n", label="N", kind=FieldKind.TEXT, rules=None)
        assert descriptor.rules == ""

    def test_name_required(self) -> None:
        with pytest.raises(ValueError):
            FieldDescriptor(name="", label="N", kind=FieldKind.TEXT)


class TestHelpers:
    @pytest.mark.parametrize("value", ["", "0", "false", "OFF", "no", None, 0, False])
    def test_falsy(self, value: Any) -> None:
        assert not is_truthy(value)

    @pytest.mark.parametrize("value", ["on", "1", "yes", "true", 1, True])
    def test_truthy(self, value: Any) -> None:
        assert is_truthy(value)

    def test_option_matches(self) -> None:
        assert option_matches("1", 1)
        assert option_matches("au", "au")
        assert not option_matches("au", "AU")
        assert not option_matches("1", True)
        assert not option_matches("None", None)

    def test_every_kind_has_a_body_renderer(self) -> None:
        for kind in FieldKind:
            assert callable(body_renderer(kind))

    def test_outcome(self) -> None:
        assert ValidationOutcome.passed()
        failed = ValidationOutcome.failed("validate_required")
        assert not failed
        assert failed.broken_rule == "validate_required"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_text(self) -> None:
        field = build_field("first-name", "First name", "text", "required")
        assert field.render() == (
            '<input type="text" id="first-name" name="first-name" value="" />'
        )

    def test_text_with_value_classes_and_attributes(self) -> None:
        field = build_field("first-name", "First name", "text")
        field.set_value("Grace")
        html = field.render("wide input", {"placeholder": "Your name"})
        assert html == (
            '<input type="text" id="first-name" name="first-name" class="wide input"'
            ' placeholder="Your name" value="Grace" />'
        )

    def test_values_are_escaped(self) -> None:
        field = build_field("bio", "Bio", "text")
        field.set_value('<b>"bold"</b>')
        html = field.render()
        assert "<b>" not in html
        assert "&lt;b&gt;" in html

    def test_password(self) -> None:
        field = build_field("pw", "Password", "password")
        assert field.render() == '<input type="password" id="pw" name="pw" value="" />'

    def test_checkbox_checked(self) -> None:
        field = build_field("newsletter", "Newsletter", "checkbox")
        field.set_value("on")
        assert field.render() == (
            '<input type="checkbox" id="newsletter" name="newsletter" checked />'
        )

    @pytest.mark.parametrize("value", ["0", "off", ""])
    def test_checkbox_unchecked(self, value: str) -> None:
        field = build_field("newsletter", "Newsletter", "checkbox")
        field.set_value(value)
        assert "checked" not in field.render()

    def test_select_marks_selected_option(self) -> None:
        field = build_field("country", "Country", "select", options={"nz": "NZ", "au": "AU"})
        field.set_value("au")
        assert field.render() == (
            '<select id="country" name="country">'
            '<option value="nz">NZ</option>'
            '<option value="au" selected>AU</option>'
            "</select>"
        )

    def test_select_without_match(self) -> None:
        field = build_field("country", "Country", "select", options={"nz": "NZ"})
        field.set_value("fr")
        assert "selected" not in field.render()

    def test_radio_series(self) -> None:
        field = build_field("room-type", "Room type", "radio", options=ROOMS)
        field.set_value("non-smoking")
        assert field.render() == (
            '<div class="radio-pair"><label class="radio-pair-label">'
            '<input type="radio" id="room-type-smoking" name="room-type" value="smoking" />'
            " Smoking</label></div>"
            '<div class="radio-pair"><label class="radio-pair-label">'
            '<input type="radio" id="room-type-non-smoking" name="room-type"'
            ' value="non-smoking" checked /> Non-Smoking</label></div>'
        )

    def test_radio_none_checked_without_value(self) -> None:
        field = build_field("room-type", "Room type", "radio", options=ROOMS)
        assert "checked" not in field.render()

    def test_radio_custom_classes(self) -> None:
        options = RenderOptions(radio_container_class="choice", radio_label_class="choice-label")
        field = build_field("r", "R", "radio", options={"a": "A"}, render_options=options)
        html = field.render()
        assert html.startswith('<div class="choice"><label class="choice-label">')

    def test_numeric_option_keys_match_values(self) -> None:
        field = build_field("stars", "Stars", "select", options={1: "One", 2: "Two"})
        field.set_value(2)
        assert '<option value="2" selected>Two</option>' in field.render()

    def test_textarea(self) -> None:
        field = build_field("notes", "Notes", "textarea")
        field.set_value("hello")
        assert field.render() == '<textarea id="notes" name="notes">hello</textarea>'

    def test_file_upload_never_echoes_value(self) -> None:
        field = build_field("avatar", "Avatar", "upload")
        field.set_value("secret.png")
        assert field.render() == '<input type="file" id="avatar" name="avatar" />'

    def test_template_override(self, tmp_path: Path) -> None:
        (tmp_path / "fields").mkdir()
        (tmp_path / "fields" / "text.html").write_text(
            '<input data-custom{{ attributes|xmlattr }} value="{{ value }}">', encoding="utf-8"
        )
        field = build_field(
            "city", "City", "text", render_options=RenderOptions(template_dir=tmp_path)
        )
        assert field.render() == '<input data-custom id="city" name="city" value="">'

    def test_set_value_ignores_none(self) -> None:
        field = build_field("city", "City", "text")
        field.set_value("Oslo")
        field.set_value(None)
        assert field.value == "Oslo"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidate:
    def test_empty_rules_pass_without_evaluator_call(self, evaluator) -> None:
        field = build_field("notes", "Notes", "textarea", evaluator=evaluator)
        assert field.validate().ok
        assert evaluator.calls == []

    def test_evaluator_receives_value_and_server_rules(self, evaluator) -> None:
        field = build_field("name", "Name", "text", "required|min_length[5]", evaluator=evaluator)
        field.set_value("Grace")
        assert field.validate().ok
        assert evaluator.calls == [(["Grace"], ["required|min_len,5"])]

    def test_failure_carries_first_broken_rule(self, evaluator) -> None:
        field = build_field("name", "Name", "text", "required|min_len,5", evaluator=evaluator)
        field.set_value("Ada")
        outcome = field.validate()
        assert not outcome.ok
        assert outcome.broken_rule == "validate_min_len"

    def test_bare_false_result_fails(self) -> None:
        class Rejecting:
            def validate(self, values: list[Any], rules: list[str]) -> bool:
                return False

        field = build_field("name", "Name", "text", "required", evaluator=Rejecting())
        assert field.validate().broken_rule == "validate_unspecified"

    def test_missing_evaluator(self) -> None:
        field = build_field("name", "Name", "text", "required")
        with pytest.raises(MissingCollaboratorError) as exc_info:
            field.validate()
        assert exc_info.value.role == "evaluator"

    def test_matches_only_rules_need_no_evaluator(self) -> None:
        field = build_field("confirm", "Confirm", "password", "matches[password]")
        field.set_value("s3cret")
        assert field.validate({"password": "s3cret", "confirm": "s3cret"}).ok
        outcome = field.validate({"password": "other", "confirm": "s3cret"})
        assert outcome.broken_rule == "validate_matches"

    def test_matches_unknown_target(self) -> None:
        field = build_field("confirm", "Confirm", "password", "matches[password]")
        with pytest.raises(FieldNotFoundError):
            field.validate({"confirm": "x"})


class FixedResultEvaluator:
    """Returns the same result for every call."""

    def __init__(self, result: Any) -> None:
        self.result = result

    def validate(self, values: list[Any], rules: list[str]) -> Any:
        return self.result


class TestEvaluatorResults:
    @pytest.mark.parametrize("result", [True, None, [], (), {}, ""])
    def test_empty_results_pass(self, result: Any) -> None:
        evaluator = FixedResultEvaluator(result)
        field = build_field("name", "Name", "text", "required", evaluator=evaluator)
        assert field.validate().ok

    @pytest.mark.parametrize(
        "result",
        [
            False,
            0,
            [{"field": "0", "value": "x"}],
            [{"rule": ""}],
            [{"rule": None}],
            [None],
            [True],
            {"field": "0"},
            object(),
        ],
    )
    def test_non_empty_results_without_rule_fail_unspecified(self, result: Any) -> None:
        evaluator = FixedResultEvaluator(result)
        field = build_field("name", "Name", "text", "required", evaluator=evaluator)
        outcome = field.validate()
        assert not outcome.ok
        assert outcome.broken_rule == "validate_unspecified"

    @pytest.mark.parametrize(
        "result",
        [
            [{"rule": "validate_required"}, {"rule": "validate_alpha"}],
            {"rule": "validate_required"},
            ["validate_required"],
            "validate_required",
        ],
    )
    def test_named_rule_is_reported(self, result: Any) -> None:
        evaluator = FixedResultEvaluator(result)
        field = build_field("name", "Name", "text", "required", evaluator=evaluator)
        assert field.validate().broken_rule == "validate_required"


def test_malformed_descriptor_is_a_form_definition_error() -> None:
    with pytest.raises(FormDefinitionError, match="Invalid field ''"):
        build_field("", "Empty", "text")
