"""Protocols for the external evaluator and sanitizer.

feeld never executes constraints itself. A registry hands values and
server-dialect rule strings to an :class:`Evaluator`, and batches of values
and filter specs to a :class:`Sanitizer`. Implementations are injected
directly or supplied by plugins (see :mod:`feeld.plugins`).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Evaluator(Protocol):
    """Single-field constraint evaluation.

    ``validate([value], [rules])`` returns ``True`` on success, or a list of
    ``{"rule": "validate_<kind>"}`` mappings naming the broken rules.
    """

    def validate(self, values: list[Any], rules: list[str]) -> bool | list[dict[str, str]]: ...


@runtime_checkable
class Sanitizer(Protocol):
    """Batch sanitization of submitted values.

    ``sanitize({name: value}, {name: filter_spec})`` returns the sanitized
    ``{name: value}`` mapping.
    """

    def sanitize(self, values: dict[str, Any], filters: dict[str, str]) -> dict[str, Any]: ...


UNSPECIFIED_RULE = "validate_unspecified"


def broken_rule_from(result: object) -> str | None:
    """Extract the first broken-rule identifier from an evaluator result.

    ``True``, ``None`` and empty results mean the value passed. Any other
    result is a failure. A failure that names no rule, such as a bare
    ``False`` or a record without ``rule``, is reported as
    :data:`UNSPECIFIED_RULE`.
    """
    if result is None or result is True:
        return None
    if isinstance(result, str):
        return result or None
    if isinstance(result, Mapping):
        if not result:
            return None
        rule = result.get("rule")
        return rule if isinstance(rule, str) and rule else UNSPECIFIED_RULE
    if isinstance(result, Sequence):
        if not result:
            return None
        return broken_rule_from(result[0]) or UNSPECIFIED_RULE
    return UNSPECIFIED_RULE
