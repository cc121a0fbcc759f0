"""Error message templates and the ErrorFormatter.

Evaluators report a broken rule as ``validate_<kind>`` (for example
``validate_min_len``). The formatter strips that prefix, picks the template
for the bare kind, reads the constraint's parameter straight from the
field's :class:`~feeld.domain.rules.RuleSet` and substitutes the field label
and parameter into named placeholders.

INVARIANT: Every template declares its placeholders, the declaration must
match the placeholders in its text, and the default table covers every
:class:`~feeld.domain.types.ConstraintKind`. Both are checked at import.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from string import Formatter
from types import MappingProxyType

from feeld.domain.errors import InvalidTemplateError
from feeld.domain.rules import CONSTRAINT_CATALOG, RuleSet
from feeld.domain.types import ConstraintKind, ParameterStyle

logger = logging.getLogger(__name__)

RULE_IDENTIFIER_PREFIX = "validate_"
LABEL = "label"
PARAM = "param"

FALLBACK_TEXT = "The {label} field is invalid"


def parse_placeholders(text: str) -> tuple[str, ...]:
    """Return the named placeholders of *text* in order of appearance."""
    try:
        names = [name for _, name, _, _ in Formatter().parse(text) if name is not None]
    except ValueError as exc:
        raise InvalidTemplateError(f"Malformed message template {text!r}: {exc}") from exc
    if any(not name or name.isdigit() for name in names):
        raise InvalidTemplateError(f"Message template {text!r} uses positional placeholders")
    return tuple(names)


def allowed_placeholders(kind: ConstraintKind) -> frozenset[str]:
    """Placeholders a template for *kind* may use."""
    if CONSTRAINT_CATALOG[kind].parameter is ParameterStyle.NONE:
        return frozenset({LABEL})
    return frozenset({LABEL, PARAM})


@dataclass(frozen=True)
class MessageTemplate:
    """Fixed message text with an explicit, checked placeholder declaration."""

    kind: ConstraintKind
    text: str
    placeholders: tuple[str, ...] = (LABEL,)

    def __post_init__(self) -> None:
        found = parse_placeholders(self.text)
        if set(found) != set(self.placeholders):
            raise InvalidTemplateError(
                f"Template for {self.kind!s} declares {self.placeholders} "
                f"but its text uses {found}"
            )
        extra = set(found) - allowed_placeholders(self.kind)
        if extra:
            raise InvalidTemplateError(
                f"Template for {self.kind!s} uses unsupported placeholders {sorted(extra)}"
            )

    def render(self, *, label: str, param: object = None) -> str:
        values: dict[str, object] = {LABEL: label}
        if PARAM in self.placeholders:
            values[PARAM] = param
        return self.text.format(**values)


_P = (LABEL, PARAM)

_DEFAULT_TEMPLATES: tuple[MessageTemplate, ...] = (
    MessageTemplate(ConstraintKind.REQUIRED, "The {label} field is required"),
    MessageTemplate(ConstraintKind.ALPHA, "The {label} field may only contain letters"),
    MessageTemplate(
        ConstraintKind.ALPHA_NUMERIC,
        "The {label} field may only contain letters and numbers",
    ),
    MessageTemplate(
        ConstraintKind.ALPHA_DASH,
        "The {label} field may only contain letters, dashes and underscores",
    ),
    MessageTemplate(ConstraintKind.NUMERIC, "The {label} field may only contain numbers"),
    MessageTemplate(ConstraintKind.INTEGER, "The {label} field must be a whole number"),
    MessageTemplate(ConstraintKind.BOOLEAN, "The {label} field must be true or false"),
    MessageTemplate(ConstraintKind.FLOAT, "The {label} field must be a decimal number"),
    MessageTemplate(
        ConstraintKind.VALID_EMAIL,
        "The {label} field must be a valid email address",
    ),
    MessageTemplate(
        ConstraintKind.VALID_EMAILS,
        "The {label} field must be a list of valid email addresses",
    ),
    MessageTemplate(
        ConstraintKind.IS_NATURAL,
        "The {label} field must be zero or a positive whole number",
    ),
    MessageTemplate(
        ConstraintKind.IS_NATURAL_NO_ZERO,
        "The {label} field must be a positive whole number",
    ),
    MessageTemplate(ConstraintKind.VALID_IP, "The {label} field must be a valid IP address"),
    MessageTemplate(ConstraintKind.VALID_BASE64, "The {label} field must be valid base64"),
    MessageTemplate(
        ConstraintKind.VALID_CC,
        "The {label} field must be a valid credit card number",
    ),
    MessageTemplate(ConstraintKind.VALID_URL, "The {label} field must be a valid URL"),
    MessageTemplate(ConstraintKind.VALID_NAME, "The {label} field must be a valid name"),
    MessageTemplate(ConstraintKind.URL_EXISTS, "The {label} field must be a reachable URL"),
    MessageTemplate(
        ConstraintKind.MIN_LENGTH,
        "The {label} field must be at least {param} characters long",
        _P,
    ),
    MessageTemplate(
        ConstraintKind.MAX_LENGTH,
        "The {label} field must be at most {param} characters long",
        _P,
    ),
    MessageTemplate(
        ConstraintKind.EXACT_LENGTH,
        "The {label} field must be exactly {param} characters long",
        _P,
    ),
    MessageTemplate(
        ConstraintKind.GREATER_THAN,
        "The {label} field must be greater than {param}",
        _P,
    ),
    MessageTemplate(ConstraintKind.LESS_THAN, "The {label} field must be less than {param}", _P),
    MessageTemplate(ConstraintKind.MATCHES, "The {label} field must match the {param} field", _P),
)

DEFAULT_TEMPLATES: Mapping[ConstraintKind, MessageTemplate] = MappingProxyType(
    {template.kind: template for template in _DEFAULT_TEMPLATES}
)

_missing = set(ConstraintKind) - set(DEFAULT_TEMPLATES)
if _missing:
    raise InvalidTemplateError(f"No message template for {sorted(_missing)}")


def strip_rule_prefix(identifier: str) -> str:
    """``validate_min_len`` -> ``min_len``. Unprefixed identifiers pass through."""
    return identifier.removeprefix(RULE_IDENTIFIER_PREFIX)


@dataclass(frozen=True)
class FormattedMessage:
    """What the formatter recovered from one broken-rule identifier."""

    rule: str
    parameter: int | str | None
    message: str


class ErrorFormatter:
    """Turn broken-rule identifiers into human-readable messages.

    The template table is immutable; *overrides* produce a new table for
    this formatter only and are validated like the defaults.
    """

    def __init__(
        self,
        templates: Mapping[ConstraintKind, MessageTemplate] = DEFAULT_TEMPLATES,
        *,
        overrides: Mapping[str, str] | None = None,
    ) -> None:
        table = dict(templates)
        for raw_kind, text in (overrides or {}).items():
            try:
                kind = ConstraintKind(raw_kind)
            except ValueError as exc:
                raise InvalidTemplateError(
                    f"Cannot override message for unknown rule {raw_kind!r}"
                ) from exc
            table[kind] = MessageTemplate(kind, text, parse_placeholders(text))
        self._templates: Mapping[ConstraintKind, MessageTemplate] = MappingProxyType(table)

    @property
    def templates(self) -> Mapping[ConstraintKind, MessageTemplate]:
        return self._templates

    def format(self, label: str, rule_set: RuleSet, identifier: str) -> FormattedMessage:
        """Render the message for *identifier* raised by a field.

        Args:
            label: The owning field's label.
            rule_set: The owning field's parsed rules, used to recover the
                parameter of the broken constraint.
            identifier: The evaluator's broken-rule identifier.
        """
        bare = strip_rule_prefix(identifier)
        try:
            kind = ConstraintKind(bare)
        except ValueError:
            logger.debug("No message template for broken rule %r", identifier)
            return FormattedMessage(bare, None, FALLBACK_TEXT.format(label=label))

        entry = rule_set.find(kind)
        parameter = entry.parameter if entry is not None else None
        template = self._templates.get(kind)
        if template is None or (PARAM in template.placeholders and parameter is None):
            return FormattedMessage(bare, parameter, FALLBACK_TEXT.format(label=label))
        return FormattedMessage(bare, parameter, template.render(label=label, param=parameter))
