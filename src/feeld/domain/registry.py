"""FieldRegistry: registers, fills, validates and renders a form's fields.

One registry serves one request. Fields are kept in registration order and
keyed by their unique name. Validation runs batch sanitization through the
configured :class:`~feeld.domain.collaborators.Sanitizer`, then validates
each field in order and records one :class:`ErrorRecord` per failing field.

INVARIANT: The error log is readable only once a validation pass has
completed (state ``validated``). A pass either completes and replaces the
log, or raises and leaves the log, the state and every bound value as they
were before it started.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from feeld.domain.collaborators import Evaluator, Sanitizer
from feeld.domain.errors import (
    DuplicateFieldError,
    FieldNotFoundError,
    FormDefinitionError,
    MissingCollaboratorError,
    PrematureErrorAccessError,
)
from feeld.domain.fields import (
    DEFAULT_RENDER_OPTIONS,
    Field,
    RenderOptions,
    ValidationOutcome,
    build_field,
)
from feeld.domain.lifecycle import ValidationState, can_read_errors, is_valid_transition
from feeld.domain.messages import ErrorFormatter
from feeld.domain.types import ConstraintKind, FieldKind
from feeld.infrastructure.templates import build_template_environment

logger = logging.getLogger(__name__)

BULK_ENTRY_KEYS = ("name", "label", "type", "rules", "sanitize", "options")
REQUIRED_BULK_KEYS = BULK_ENTRY_KEYS[:3]


@dataclass(frozen=True)
class ErrorRecord:
    """One failing field from the latest validation pass."""

    field: Field
    identifier: str
    rule: str
    parameter: int | str | None
    message: str

    @property
    def field_name(self) -> str:
        return self.field.name

    @property
    def label(self) -> str:
        return self.field.label

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field_name,
            "label": self.label,
            "rule": self.rule,
            "identifier": self.identifier,
            "parameter": self.parameter,
            "message": self.message,
        }


class ValidationScriptEntry(BaseModel):
    """Client-side validation data for one field (client dialect rules)."""

    model_config = {"frozen": True}

    name: str
    display: str
    rules: str


def _bulk_arguments(position: int, entry: Sequence[Any] | Mapping[str, Any]) -> list[Any]:
    """Positional ``register()`` arguments for one bulk entry."""
    if isinstance(entry, Mapping):
        args = [entry.get(key) for key in BULK_ENTRY_KEYS]
    else:
        args = list(entry)
        if len(args) > len(BULK_ENTRY_KEYS):
            raise FormDefinitionError(
                f"Field entry {position} has {len(args)} values; at most "
                f"{len(BULK_ENTRY_KEYS)} are allowed"
            )
        args += [None] * (len(BULK_ENTRY_KEYS) - len(args))
    missing = [key for key, value in zip(REQUIRED_BULK_KEYS, args) if value is None]
    if missing:
        raise FormDefinitionError(f"Field entry {position} is missing {', '.join(missing)}")
    return args


class FieldRegistry:
    """Owns every field of one form.

    Args:
        evaluator: Single-field constraint evaluator, required once any
            field with evaluator-checked rules is validated.
        sanitizer: Batch sanitizer, required once any field declares a
            sanitize spec and validation runs.
        formatter: Error message formatter; defaults to the built-in table.
        render_options: Template directory and CSS class names for markup.
    """

    def __init__(
        self,
        *,
        evaluator: Evaluator | None = None,
        sanitizer: Sanitizer | None = None,
        formatter: ErrorFormatter | None = None,
        render_options: RenderOptions = DEFAULT_RENDER_OPTIONS,
    ) -> None:
        self._evaluator = evaluator
        self._sanitizer = sanitizer
        self._formatter = formatter or ErrorFormatter()
        self._render_options = render_options
        self._fields: dict[str, Field] = {}
        self._errors: list[ErrorRecord] = []
        self._state = ValidationState.UNVALIDATED

    # ------------------------------------------------------------------
    # Collection access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    @property
    def fields(self) -> list[Field]:
        return list(self._fields.values())

    @property
    def state(self) -> ValidationState:
        return self._state

    def get(self, name: str) -> Field:
        """Return the field called *name*.

        Raises:
            FieldNotFoundError: No such field is registered.
        """
        try:
            return self._fields[name]
        except KeyError:
            raise FieldNotFoundError(name) from None

    def values(self) -> dict[str, Any]:
        """Current bound values keyed by field name."""
        return {name: f.value for name, f in self._fields.items()}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        label: str,
        type_token: str | FieldKind,
        rules: str | None = None,
        sanitize: str | None = None,
        options: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> Field:
        """Register one field.

        The type token is resolved and the rule spec translated before the
        field joins the registry; if either fails nothing is registered.

        Raises:
            DuplicateFieldError: *name* is already registered.
            UnresolvedFieldTypeError: *type_token* names no field kind.
            UnrecognizedRuleError: A rule token is outside the catalog.
        """
        if name in self._fields:
            raise DuplicateFieldError(name)
        field = build_field(
            name,
            label,
            type_token,
            rules,
            sanitize,
            options,
            evaluator=self._evaluator,
            render_options=self._render_options,
        )
        self._fields[name] = field
        logger.debug("Registered %s field %r with rules %r", field.kind, name, field.server_rules)
        return field

    def register_bulk(
        self,
        entries: Iterable[Sequence[Any] | Mapping[str, Any]],
    ) -> list[Field]:
        """Register many fields.

        Each entry is ``(name, label, type[, rules[, sanitize[, options]]])``
        or a mapping with those keys. Missing trailing values default to
        empty.

        Raises:
            FormDefinitionError: An entry lacks a name, label or type, or
                has more than six positional values.
        """
        registered: list[Field] = []
        for position, entry in enumerate(entries):
            args = _bulk_arguments(position, entry)
            name, label, type_token, rules, sanitize, options = args
            registered.append(
                self.register(name, label, type_token, rules or "", sanitize or "", options)
            )
        return registered

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def pass_value(self, name: str, value: Any) -> None:
        """Bind *value* to the field called *name*; unknown names are ignored."""
        field = self._fields.get(name)
        if field is None:
            logger.debug("Ignoring value for unregistered field %r", name)
            return
        field.set_value(value)

    def pass_values(self, data: Mapping[str, Any]) -> None:
        """Bind values from a submitted mapping, indexed by field name."""
        for name, field in self._fields.items():
            if name in data:
                field.set_value(data[name])

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        """Sanitize, then validate every field in registration order.

        Replaces the previous error log and returns True when no field
        failed. If the pass raises, sanitized values are rolled back and the
        previous log and state are kept.

        Raises:
            FieldNotFoundError: A ``matches`` rule names an unregistered field.
            MissingCollaboratorError: The sanitizer or evaluator is needed but absent.
        """
        self._check_match_targets()
        snapshot = {name: f.value for name, f in self._fields.items()}
        try:
            self._sanitize()
            peers = self.values()
            errors: list[ErrorRecord] = []
            for field in self._fields.values():
                outcome = field.validate(peers)
                if not outcome.ok:
                    errors.append(self._record(field, outcome))
        except Exception:
            for name, value in snapshot.items():
                self._fields[name].value = value
            raise

        self._transition(ValidationState.VALIDATED)
        self._errors = errors
        logger.debug("Validated %d fields, %d failed", len(self._fields), len(errors))
        return not errors

    def validate_field(self, name: str) -> ValidationOutcome:
        """Validate a single field without touching the error log."""
        return self.get(name).validate(self.values())

    def _check_match_targets(self) -> None:
        for field in self._fields.values():
            for entry in field.rule_set.registry_enforced():
                if entry.kind == ConstraintKind.MATCHES and entry.parameter not in self._fields:
                    raise FieldNotFoundError(str(entry.parameter))

    def _sanitize(self) -> None:
        targets = {name: f for name, f in self._fields.items() if f.sanitize}
        if not targets:
            return
        if self._sanitizer is None:
            raise MissingCollaboratorError("sanitizer")

        values = {name: f.value for name, f in targets.items()}
        filters = {name: f.sanitize for name, f in targets.items()}
        sanitized = self._sanitizer.sanitize(values, filters)
        for name, value in sanitized.items():
            if name in targets:
                targets[name].set_value(value)

    def _record(self, field: Field, outcome: ValidationOutcome) -> ErrorRecord:
        identifier = outcome.broken_rule or ""
        formatted = self._formatter.format(field.label, field.rule_set, identifier)
        return ErrorRecord(
            field=field,
            identifier=identifier,
            rule=formatted.rule,
            parameter=formatted.parameter,
            message=formatted.message,
        )

    def _transition(self, target: ValidationState) -> None:
        if not is_valid_transition(self._state, target):
            raise RuntimeError(f"Invalid registry transition {self._state} -> {target}")
        self._state = target

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _require_validated(self) -> None:
        if not can_read_errors(self._state):
            raise PrematureErrorAccessError()

    def get_errors(self) -> list[ErrorRecord]:
        """Error records of the latest validation pass, in field order."""
        self._require_validated()
        return list(self._errors)

    def has_errors(self) -> bool:
        self._require_validated()
        return bool(self._errors)

    def errors_by_field(self) -> dict[str, str]:
        """Map each failing field's name to its rendered message."""
        self._require_validated()
        return {record.field_name: record.message for record in self._errors}

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(
        self,
        name: str,
        classes: str | None = None,
        attributes: Mapping[str, object] | None = None,
    ) -> str:
        """Return the markup for the field called *name*."""
        return self.get(name).render(classes, attributes)

    def render_errors(self) -> str:
        """Return the error block: an unordered list in a classed container."""
        self._require_validated()
        env = build_template_environment(
            "errors", template_dir=self._render_options.template_dir
        )
        return env.get_template("error_block.html").render(
            records=self._errors,
            container_class=self._render_options.error_container_class,
        )

    def get_validation_script_data(self) -> list[dict[str, str]]:
        """One ``{name, display, rules}`` entry per field, client dialect."""
        return [
            ValidationScriptEntry(name=f.name, display=f.label, rules=f.client_rules).model_dump()
            for f in self._fields.values()
        ]

    def validation_script_json(self) -> str:
        return json.dumps(self.get_validation_script_data())
