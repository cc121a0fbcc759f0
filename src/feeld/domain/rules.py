"""Rule translation: one raw rule spec, two aligned rule dialects.

A raw rule spec is a ``|``-separated list of tokens such as
``required|min_len,5|valid_email``. Each token may be written in either
dialect:

- server (GUMP-style): ``min_len,5``, ``float``
- client (validate.js-style): ``min_length[5]``, ``decimal``

The raw spec is parsed exactly once into an ordered tuple of
:class:`ConstraintEntry` values. Both dialect strings are derived from that
tuple on demand, so they always split into the same number of index-aligned
tokens, and the parameter of any constraint is available without re-parsing
a serialized string.

INVARIANT: An unrecognized token is fatal. Nothing is silently dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from feeld.domain.errors import UnrecognizedRuleError
from feeld.domain.types import ConstraintKind, Dialect, ParameterStyle

logger = logging.getLogger(__name__)

RULE_SEPARATOR = "|"
NO_CONSTRAINTS = ""


@dataclass(frozen=True)
class ConstraintSpec:
    """Catalog entry: how one constraint is spelled in each dialect."""

    kind: ConstraintKind
    server_name: str
    client_name: str
    parameter: ParameterStyle = ParameterStyle.NONE
    registry_enforced: bool = False


_BARE_KINDS = (
    ConstraintKind.REQUIRED,
    ConstraintKind.ALPHA,
    ConstraintKind.ALPHA_NUMERIC,
    ConstraintKind.ALPHA_DASH,
    ConstraintKind.NUMERIC,
    ConstraintKind.INTEGER,
    ConstraintKind.BOOLEAN,
    ConstraintKind.VALID_EMAIL,
    ConstraintKind.VALID_EMAILS,
    ConstraintKind.IS_NATURAL,
    ConstraintKind.IS_NATURAL_NO_ZERO,
    ConstraintKind.VALID_IP,
    ConstraintKind.VALID_BASE64,
    ConstraintKind.VALID_CC,
    ConstraintKind.VALID_URL,
    ConstraintKind.VALID_NAME,
    ConstraintKind.URL_EXISTS,
)

_SPECS: list[ConstraintSpec] = [
    ConstraintSpec(kind, kind.value, kind.value) for kind in _BARE_KINDS
]
_SPECS += [
    ConstraintSpec(ConstraintKind.FLOAT, "float", "decimal"),
    ConstraintSpec(ConstraintKind.MIN_LENGTH, "min_len", "min_length", ParameterStyle.NUMBER),
    ConstraintSpec(ConstraintKind.MAX_LENGTH, "max_len", "max_length", ParameterStyle.NUMBER),
    ConstraintSpec(ConstraintKind.EXACT_LENGTH, "exact_len", "exact_length", ParameterStyle.NUMBER),
    ConstraintSpec(
        ConstraintKind.GREATER_THAN, "greater_than", "greater_than", ParameterStyle.NUMBER
    ),
    ConstraintSpec(ConstraintKind.LESS_THAN, "less_than", "less_than", ParameterStyle.NUMBER),
    # Cross-field equality: the single-field evaluator cannot see peer values.
    ConstraintSpec(
        ConstraintKind.MATCHES,
        "matches",
        "matches",
        ParameterStyle.FIELD,
        registry_enforced=True,
    ),
]

CONSTRAINT_CATALOG: Mapping[ConstraintKind, ConstraintSpec] = MappingProxyType(
    {spec.kind: spec for spec in _SPECS}
)

# Surface spelling (either dialect) -> constraint kind.
_SURFACE_NAMES: Mapping[str, ConstraintKind] = MappingProxyType(
    {
        **{spec.server_name: spec.kind for spec in _SPECS},
        **{spec.client_name: spec.kind for spec in _SPECS},
    }
)

_TOKEN_PATTERN = re.compile(
    r"\A(?P<name>[a-z_]+)(?:,(?P<comma>[^,\[\]|]+)|\[(?P<bracket>[^,\[\]|]+)\])?\Z"
)
_NUMBER_PATTERN = re.compile(r"\A\d+\Z")
_FIELD_NAME_PATTERN = re.compile(r"\A[A-Za-z0-9_\-]+\Z")

if set(CONSTRAINT_CATALOG) != set(ConstraintKind):
    raise RuntimeError("Constraint catalog does not cover every ConstraintKind")


@dataclass(frozen=True)
class ConstraintEntry:
    """One parsed constraint with its optional parameter."""

    kind: ConstraintKind
    parameter: int | str | None = None

    @property
    def spec(self) -> ConstraintSpec:
        return CONSTRAINT_CATALOG[self.kind]

    def render(self, dialect: Dialect) -> str:
        """Spell this constraint in *dialect*."""
        if dialect == Dialect.SERVER:
            name = self.spec.server_name
            return name if self.parameter is None else f"{name},{self.parameter}"
        name = self.spec.client_name
        return name if self.parameter is None else f"{name}[{self.parameter}]"


@dataclass(frozen=True)
class RuleSet:
    """The parsed, immutable constraints of one field.

    Attributes:
        raw: The rule spec exactly as the caller supplied it.
        entries: Parsed constraints in the caller's order.
    """

    raw: str
    entries: tuple[ConstraintEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ConstraintEntry]:
        return iter(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dialect(self, dialect: Dialect) -> str:
        """Join every entry spelled in *dialect*, or the empty sentinel."""
        if not self.entries:
            return NO_CONSTRAINTS
        return RULE_SEPARATOR.join(entry.render(dialect) for entry in self.entries)

    @property
    def server_rules(self) -> str:
        return self.to_dialect(Dialect.SERVER)

    @property
    def client_rules(self) -> str:
        return self.to_dialect(Dialect.CLIENT)

    @property
    def evaluator_rules(self) -> str:
        """Server dialect without the constraints the registry enforces itself."""
        return RULE_SEPARATOR.join(
            entry.render(Dialect.SERVER)
            for entry in self.entries
            if not entry.spec.registry_enforced
        )

    def registry_enforced(self) -> tuple[ConstraintEntry, ...]:
        return tuple(entry for entry in self.entries if entry.spec.registry_enforced)

    def find(self, kind: ConstraintKind) -> ConstraintEntry | None:
        """Return the first entry of *kind*, or None."""
        for entry in self.entries:
            if entry.kind == kind:
                return entry
        return None


def parse_rule_token(token: str) -> ConstraintEntry:
    """Parse a single rule token written in either dialect.

    Raises:
        UnrecognizedRuleError: If the token is not in the catalog, or its
            parameter is missing, unexpected or malformed.
    """
    match = _TOKEN_PATTERN.match(token)
    if match is None:
        raise UnrecognizedRuleError(token)

    kind = _SURFACE_NAMES.get(match["name"])
    if kind is None:
        raise UnrecognizedRuleError(token)

    spec = CONSTRAINT_CATALOG[kind]
    raw_param = match["comma"] if match["comma"] is not None else match["bracket"]

    if spec.parameter is ParameterStyle.NONE:
        if raw_param is not None:
            raise UnrecognizedRuleError(token)
        return ConstraintEntry(kind)

    if raw_param is None:
        raise UnrecognizedRuleError(token)
    if spec.parameter is ParameterStyle.NUMBER:
        if not _NUMBER_PATTERN.match(raw_param):
            raise UnrecognizedRuleError(token)
        return ConstraintEntry(kind, int(raw_param))
    if not _FIELD_NAME_PATTERN.match(raw_param):
        raise UnrecognizedRuleError(token)
    return ConstraintEntry(kind, raw_param)


def translate_rules(raw: str | None) -> RuleSet:
    """Parse a raw rule spec into a :class:`RuleSet`.

    Absent, empty or whitespace-only specs produce an empty rule set whose
    dialect strings are both :data:`NO_CONSTRAINTS`.
    """
    if raw is None or not raw.strip():
        return RuleSet(raw=raw or "")

    entries = tuple(parse_rule_token(token.strip()) for token in raw.split(RULE_SEPARATOR))
    rule_set = RuleSet(raw=raw, entries=entries)
    logger.debug(
        "Translated rules %r -> server=%r client=%r",
        raw,
        rule_set.server_rules,
        rule_set.client_rules,
    )
    return rule_set


def constraint_catalog() -> list[ConstraintSpec]:
    """Return the catalog in declaration order."""
    return list(CONSTRAINT_CATALOG.values())
