"""Field kinds, constraint kinds and rule dialects.

Constraint kind values are the server-dialect spellings, which is also how
the evaluator reports broken rules (``validate_<kind>``).
"""

from __future__ import annotations

from enum import StrEnum


class FieldKind(StrEnum):
    """The closed set of renderable field kinds."""

    TEXT = "text"
    PASSWORD = "password"
    CHECKBOX = "checkbox"
    SELECT_MENU = "select_menu"
    RADIO_SERIES = "radio_series"
    TEXTAREA = "textarea"
    FILE_UPLOAD = "file_upload"


CHOICE_KINDS: frozenset[FieldKind] = frozenset({FieldKind.SELECT_MENU, FieldKind.RADIO_SERIES})


class ConstraintKind(StrEnum):
    """Every constraint the rule translator understands."""

    REQUIRED = "required"
    ALPHA = "alpha"
    ALPHA_NUMERIC = "alpha_numeric"
    ALPHA_DASH = "alpha_dash"
    NUMERIC = "numeric"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT = "float"
    VALID_EMAIL = "valid_email"
    VALID_EMAILS = "valid_emails"
    IS_NATURAL = "is_natural"
    IS_NATURAL_NO_ZERO = "is_natural_no_zero"
    VALID_IP = "valid_ip"
    VALID_BASE64 = "valid_base64"
    VALID_CC = "valid_cc"
    VALID_URL = "valid_url"
    VALID_NAME = "valid_name"
    URL_EXISTS = "url_exists"
    MIN_LENGTH = "min_len"
    MAX_LENGTH = "max_len"
    EXACT_LENGTH = "exact_len"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    MATCHES = "matches"


class ParameterStyle(StrEnum):
    """What kind of parameter a constraint carries."""

    NONE = "none"
    NUMBER = "number"
    FIELD = "field"


class Dialect(StrEnum):
    """The two rule dialects produced from one raw rule spec."""

    SERVER = "server"
    CLIENT = "client"
