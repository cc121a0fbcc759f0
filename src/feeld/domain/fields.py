"""Fields: one shared record, one body renderer per kind.

A :class:`Field` carries identity (name, label), the bound value, the
parsed :class:`~feeld.domain.rules.RuleSet` and, for choice kinds, the
ordered options. The kind is a discriminant: :meth:`Field.render` builds the
shared attribute set and hands it to the kind's render function, which
fills the matching packaged Jinja2 template.

Type tokens given at registration are resolved through
:func:`resolve_field_kind`, which returns a checked result instead of a
"not found" sentinel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field as PydanticField, ValidationError, field_validator

from feeld.domain.collaborators import Evaluator, broken_rule_from
from feeld.domain.errors import (
    FieldNotFoundError,
    FormDefinitionError,
    MissingCollaboratorError,
    UnresolvedFieldTypeError,
)
from feeld.domain.rules import RuleSet, translate_rules
from feeld.domain.types import CHOICE_KINDS, ConstraintKind, FieldKind
from feeld.infrastructure.templates import build_template_environment

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Type-token resolution
# ---------------------------------------------------------------------------

FIELD_NAMESPACE = "feeld."

QUALIFIED_FIELD_TYPES: Mapping[str, FieldKind] = MappingProxyType(
    {
        f"{FIELD_NAMESPACE}Text": FieldKind.TEXT,
        f"{FIELD_NAMESPACE}Password": FieldKind.PASSWORD,
        f"{FIELD_NAMESPACE}Checkbox": FieldKind.CHECKBOX,
        f"{FIELD_NAMESPACE}SelectMenu": FieldKind.SELECT_MENU,
        f"{FIELD_NAMESPACE}RadioSeries": FieldKind.RADIO_SERIES,
        f"{FIELD_NAMESPACE}Textarea": FieldKind.TEXTAREA,
        f"{FIELD_NAMESPACE}FileUpload": FieldKind.FILE_UPLOAD,
    }
)

FIELD_TYPE_ALIASES: Mapping[str, FieldKind] = MappingProxyType(
    {
        "text": FieldKind.TEXT,
        "text-field": FieldKind.TEXT,
        "text_field": FieldKind.TEXT,
        "password": FieldKind.PASSWORD,
        "password-field": FieldKind.PASSWORD,
        "password_field": FieldKind.PASSWORD,
        "checkbox": FieldKind.CHECKBOX,
        "select": FieldKind.SELECT_MENU,
        "select-menu": FieldKind.SELECT_MENU,
        "select_menu": FieldKind.SELECT_MENU,
        "dropmenu": FieldKind.SELECT_MENU,
        "drop-menu": FieldKind.SELECT_MENU,
        "drop_menu": FieldKind.SELECT_MENU,
        "radio": FieldKind.RADIO_SERIES,
        "textarea": FieldKind.TEXTAREA,
        "upload": FieldKind.FILE_UPLOAD,
        "file": FieldKind.FILE_UPLOAD,
    }
)


@dataclass(frozen=True)
class FieldKindResolution:
    """Outcome of resolving a type token: a kind, or a failure."""

    token: str
    kind: FieldKind | None = None

    @property
    def resolved(self) -> bool:
        return self.kind is not None

    def unwrap(self) -> FieldKind:
        """Return the kind, raising if resolution failed."""
        if self.kind is None:
            raise UnresolvedFieldTypeError(self.token)
        return self.kind


def resolve_field_kind(token: str | FieldKind) -> FieldKindResolution:
    """Resolve a caller-supplied type token.

    Tried in order: a :class:`FieldKind` member, an exact qualified name
    (``feeld.SelectMenu``), the qualified name after prefixing the namespace
    (``SelectMenu``), the alias table (``dropmenu``), then a
    :class:`FieldKind` value (``radio_series``).
    """
    if isinstance(token, FieldKind):
        return FieldKindResolution(str(token), token)
    if token in QUALIFIED_FIELD_TYPES:
        return FieldKindResolution(token, QUALIFIED_FIELD_TYPES[token])
    if f"{FIELD_NAMESPACE}{token}" in QUALIFIED_FIELD_TYPES:
        return FieldKindResolution(token, QUALIFIED_FIELD_TYPES[f"{FIELD_NAMESPACE}{token}"])
    if token in FIELD_TYPE_ALIASES:
        return FieldKindResolution(token, FIELD_TYPE_ALIASES[token])
    try:
        return FieldKindResolution(token, FieldKind(token))
    except ValueError:
        return FieldKindResolution(token)


# ---------------------------------------------------------------------------
# Descriptor and outcome
# ---------------------------------------------------------------------------


class FieldDescriptor(BaseModel):
    """Everything supplied when a field is registered."""

    model_config = {"frozen": True}

    name: str = PydanticField(min_length=1)
    label: str
    kind: FieldKind
    rules: str = ""
    sanitize: str = ""
    options: tuple[tuple[str, str], ...] = ()

    @field_validator("rules", "sanitize", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> Any:
        if not value:
            return ()
        pairs: Iterable[Any] = value.items() if isinstance(value, Mapping) else value
        return tuple((str(key), str(label)) for key, label in pairs)


@dataclass(frozen=True)
class ValidationOutcome:
    """Pass, or failure carrying one broken-rule identifier."""

    broken_rule: str | None = None

    @property
    def ok(self) -> bool:
        return self.broken_rule is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def passed(cls) -> ValidationOutcome:
        return cls()

    @classmethod
    def failed(cls, broken_rule: str) -> ValidationOutcome:
        return cls(broken_rule)


@dataclass(frozen=True)
class RenderOptions:
    """Markup settings shared by every field of a registry."""

    template_dir: Path | None = None
    radio_container_class: str = "radio-pair"
    radio_label_class: str = "radio-pair-label"
    error_container_class: str = "feeld-errors"


DEFAULT_RENDER_OPTIONS = RenderOptions()

_FALSY_STRINGS = frozenset({"", "0", "false", "off", "no"})


def is_truthy(value: object) -> bool:
    """Form-submission truthiness: ``"0"``, ``"off"`` and friends are false."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return bool(value)


def option_matches(key: str, value: object) -> bool:
    """Whether an options entry *key* is the bound *value*."""
    if value is None:
        return False
    if isinstance(value, bool):
        return False
    return key == str(value)


# ---------------------------------------------------------------------------
# Field
# ---------------------------------------------------------------------------


class Field:
    """A registered field: descriptor, parsed rules and the bound value.

    The rule spec is translated once here; an unrecognized token raises
    :class:`~feeld.domain.errors.UnrecognizedRuleError` and no field is built.
    """

    def __init__(
        self,
        descriptor: FieldDescriptor,
        *,
        evaluator: Evaluator | None = None,
        render_options: RenderOptions = DEFAULT_RENDER_OPTIONS,
    ) -> None:
        self.descriptor = descriptor
        self.rule_set: RuleSet = translate_rules(descriptor.rules)
        self.value: Any = None
        self.render_options = render_options
        self._evaluator = evaluator
        if descriptor.options and descriptor.kind not in CHOICE_KINDS:
            logger.debug("Options given to %s field %r are ignored", descriptor.kind, self.name)

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, kind={self.kind!s}, rules={self.server_rules!r})"

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def label(self) -> str:
        return self.descriptor.label

    @property
    def kind(self) -> FieldKind:
        return self.descriptor.kind

    @property
    def sanitize(self) -> str:
        return self.descriptor.sanitize

    @property
    def options(self) -> tuple[tuple[str, str], ...]:
        return self.descriptor.options

    @property
    def server_rules(self) -> str:
        return self.rule_set.server_rules

    @property
    def client_rules(self) -> str:
        return self.rule_set.client_rules

    @property
    def display_value(self) -> str:
        return "" if self.value is None else str(self.value)

    def set_value(self, value: Any) -> None:
        """Bind *value*. ``None`` means "not submitted" and is ignored."""
        if value is not None:
            self.value = value

    def render(
        self,
        css_classes: str | None = None,
        attributes: Mapping[str, object] | None = None,
    ) -> str:
        """Return the HTML markup for this field.

        Args:
            css_classes: Value of the ``class`` attribute, if any.
            attributes: Extra attributes appended after ``id``/``name``/``class``.
        """
        base: dict[str, object] = {"id": self.name, "name": self.name}
        if css_classes:
            base["class"] = css_classes
        if attributes:
            base.update(attributes)
        return _BODY_RENDERERS[self.kind](self, base)

    def validate(self, peer_values: Mapping[str, Any] | None = None) -> ValidationOutcome:
        """Validate the bound value against this field's rules.

        Constraints the evaluator can check go to it in the server dialect.
        Cross-field ``matches`` constraints are checked against *peer_values*.
        """
        if self.rule_set.is_empty:
            return ValidationOutcome.passed()

        evaluator_rules = self.rule_set.evaluator_rules
        if evaluator_rules:
            if self._evaluator is None:
                raise MissingCollaboratorError("evaluator")
            result = self._evaluator.validate([self.value], [evaluator_rules])
            broken = broken_rule_from(result)
            if broken:
                return ValidationOutcome.failed(broken)

        for entry in self.rule_set.registry_enforced():
            if entry.kind == ConstraintKind.MATCHES:
                target = str(entry.parameter)
                if peer_values is None or target not in peer_values:
                    raise FieldNotFoundError(target)
                if self.value != peer_values[target]:
                    return ValidationOutcome.failed(f"validate_{ConstraintKind.MATCHES}")
        return ValidationOutcome.passed()


# ---------------------------------------------------------------------------
# Body renderers (one per kind)
# ---------------------------------------------------------------------------


def _render_template(field: Field, name: str, **context: Any) -> str:
    env = build_template_environment("fields", template_dir=field.render_options.template_dir)
    return env.get_template(f"{name}.html").render(**context)


def render_text(field: Field, attributes: dict[str, object]) -> str:
    return _render_template(field, "text", attributes=attributes, value=field.display_value)


def render_password(field: Field, attributes: dict[str, object]) -> str:
    return _render_template(field, "password", attributes=attributes, value=field.display_value)


def render_checkbox(field: Field, attributes: dict[str, object]) -> str:
    return _render_template(
        field, "checkbox", attributes=attributes, checked=is_truthy(field.value)
    )


def render_select_menu(field: Field, attributes: dict[str, object]) -> str:
    options = [
        {"key": key, "label": label, "selected": option_matches(key, field.value)}
        for key, label in field.options
    ]
    return _render_template(field, "select_menu", attributes=attributes, options=options)


def render_radio_series(field: Field, attributes: dict[str, object]) -> str:
    """Each radio gets its own ``id`` (``<name>-<key>``); the rest is shared."""
    options = [
        {
            "key": key,
            "label": label,
            "selected": option_matches(key, field.value),
            "attributes": {**attributes, "id": f"{field.name}-{key}"},
        }
        for key, label in field.options
    ]
    return _render_template(
        field,
        "radio_series",
        options=options,
        container_class=field.render_options.radio_container_class,
        label_class=field.render_options.radio_label_class,
    )


def render_textarea(field: Field, attributes: dict[str, object]) -> str:
    return _render_template(field, "textarea", attributes=attributes, value=field.display_value)


def render_file_upload(field: Field, attributes: dict[str, object]) -> str:
    return _render_template(field, "file_upload", attributes=attributes)


_BODY_RENDERERS: Mapping[FieldKind, Callable[[Field, dict[str, object]], str]] = (
    MappingProxyType(
        {
            FieldKind.TEXT: render_text,
            FieldKind.PASSWORD: render_password,
            FieldKind.CHECKBOX: render_checkbox,
            FieldKind.SELECT_MENU: render_select_menu,
            FieldKind.RADIO_SERIES: render_radio_series,
            FieldKind.TEXTAREA: render_textarea,
            FieldKind.FILE_UPLOAD: render_file_upload,
        }
    )
)

if set(_BODY_RENDERERS) != set(FieldKind):
    raise RuntimeError("Every FieldKind needs a body renderer")


def body_renderer(kind: FieldKind) -> Callable[[Field, dict[str, object]], str]:
    """Return the body render function registered for *kind*."""
    return _BODY_RENDERERS[kind]


def build_field(
    name: str,
    label: str,
    type_token: str | FieldKind,
    rules: str | None = None,
    sanitize: str | None = None,
    options: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    *,
    evaluator: Evaluator | None = None,
    render_options: RenderOptions = DEFAULT_RENDER_OPTIONS,
) -> Field:
    """Resolve *type_token* and construct a :class:`Field`.

    Raises:
        UnresolvedFieldTypeError: The token names no field kind.
        UnrecognizedRuleError: A rule token is outside the catalog.
        FormDefinitionError: The name, label or options are malformed.
    """
    kind = resolve_field_kind(type_token).unwrap()
    try:
        descriptor = FieldDescriptor(
            name=name,
            label=label,
            kind=kind,
            rules=rules,
            sanitize=sanitize,
            options=options,
        )
    except ValidationError as exc:
        raise FormDefinitionError(f"Invalid field {name!r}: {exc}") from exc
    return Field(descriptor, evaluator=evaluator, render_options=render_options)
