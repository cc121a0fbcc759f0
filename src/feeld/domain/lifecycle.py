"""Registry validation lifecycle.

A registry starts Unvalidated. The first completed validation pass moves
it to Validated, and further passes keep it there. The error log may only
be read in the Validated state.
"""

from __future__ import annotations

from enum import StrEnum


class ValidationState(StrEnum):
    """Whether a registry has completed a validation pass."""

    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"


VALIDATION_TRANSITIONS: dict[str, list[str]] = {
    "unvalidated": ["validated"],
    "validated": ["validated"],  # re-validation replaces the error log
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = VALIDATION_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


def can_read_errors(state: str) -> bool:
    """Only a completed validation pass makes the error log meaningful."""
    return state == ValidationState.VALIDATED
