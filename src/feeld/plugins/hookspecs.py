"""Pluggy hook specifications for feeld.

Two setup hooks supply the external collaborators a registry validates
with; the first plugin returning a non-None value wins. One event hook
reports each completed validation pass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from feeld.domain.collaborators import Evaluator, Sanitizer

PROJECT_NAME = "feeld"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FeeldHookSpec:
    """Hook specifications for the feeld plugin system."""

    @hookspec(firstresult=True)
    def feeld_evaluator(self) -> Evaluator | None:
        """Return the single-field constraint evaluator to validate with."""

    @hookspec(firstresult=True)
    def feeld_sanitizer(self) -> Sanitizer | None:
        """Return the batch sanitizer to run before validation."""

    @hookspec
    def post_validate(
        self,
        form: str,
        field_count: int,
        errors: list[dict[str, Any]],
    ) -> None:
        """Called after a form's validation pass completes."""
