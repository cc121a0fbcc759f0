"""FormService: load a form definition and drive a registry over it.

Each operation builds a fresh :class:`FieldRegistry` from the definition
file; nothing is shared between calls. Collaborators for validation come
from plugins (``feeld_evaluator`` / ``feeld_sanitizer``) unless injected.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from feeld.config.logging import form_log_context
from feeld.domain.errors import FeeldError
from feeld.domain.messages import ErrorFormatter
from feeld.domain.registry import FieldRegistry
from feeld.infrastructure.definitions import FormDefinition, load_form_definition, load_values
from feeld.services.base import BaseService
from feeld.services.result import ServiceError, ServiceResult, failure

if TYPE_CHECKING:
    from feeld.config.settings import FeeldSettings
    from feeld.domain.collaborators import Evaluator, Sanitizer
    from feeld.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

VALIDATION_FAILED = "VALIDATION_FAILED"


class FormService(BaseService):
    """Check, render and validate forms described in definition files.

    Args:
        settings: Resolved settings (render options, message overrides).
        plugins: Plugin manager supplying collaborators.
        evaluator: Used instead of any plugin-provided evaluator.
        sanitizer: Used instead of any plugin-provided sanitizer.
    """

    def __init__(
        self,
        settings: FeeldSettings,
        plugins: PluginManager | None = None,
        *,
        evaluator: Evaluator | None = None,
        sanitizer: Sanitizer | None = None,
    ) -> None:
        super().__init__(settings, plugins)
        self._evaluator = evaluator
        self._sanitizer = sanitizer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(self, path: Path) -> ServiceResult:
        """Load *path*, register every field, and report the parsed rules."""
        op = "check_form"
        try:
            definition, registry = self._load(path)
        except FeeldError as exc:
            return failure(op, exc, path=str(path))

        fields = [
            {
                "name": f.name,
                "label": f.label,
                "kind": str(f.kind),
                "server_rules": f.server_rules,
                "client_rules": f.client_rules,
                "sanitize": f.sanitize,
                "options": dict(f.options),
            }
            for f in registry
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"form": definition.name, "fields": fields},
            meta={"field_count": len(fields)},
        )

    def render(self, path: Path, names: Sequence[str] = ()) -> ServiceResult:
        """Render the named fields (all fields when *names* is empty)."""
        op = "render_form"
        try:
            definition, registry = self._load(path)
            with form_log_context(definition.name):
                targets = list(names) or [f.name for f in registry]
                markup = {name: registry.render(name) for name in targets}
        except FeeldError as exc:
            return failure(op, exc, path=str(path))

        return ServiceResult(ok=True, op=op, data={"form": definition.name, "fields": markup})

    def script_data(self, path: Path) -> ServiceResult:
        """Client-side validation data in the client dialect."""
        op = "script_data"
        try:
            definition, registry = self._load(path)
        except FeeldError as exc:
            return failure(op, exc, path=str(path))

        return ServiceResult(
            ok=True,
            op=op,
            data={"form": definition.name, "fields": registry.get_validation_script_data()},
        )

    def validate(self, path: Path, data_path: Path) -> ServiceResult:
        """Run a full sanitize-and-validate pass over submitted values.

        Failing fields make the result not ok with code
        ``VALIDATION_FAILED``; their records are in ``data["errors"]``.
        """
        op = "validate_form"
        warnings: list[str] = []
        try:
            values = load_values(data_path)
            definition, registry = self._load(
                path,
                evaluator=self._resolve_evaluator(),
                sanitizer=self._resolve_sanitizer(),
            )
            with form_log_context(definition.name):
                registry.pass_values(values)
                valid = registry.validate()
                errors = [record.to_dict() for record in registry.get_errors()]
                data: dict[str, Any] = {
                    "form": definition.name,
                    "valid": valid,
                    "errors": errors,
                    "values": registry.values(),
                }
                if errors:
                    data["error_block"] = registry.render_errors()
        except FeeldError as exc:
            return failure(op, exc, path=str(path))

        if self._plugins is not None:
            self._plugins.notify_validated(definition.name, len(registry), errors, warnings)

        meta = {"field_count": len(registry), "error_count": len(errors)}
        if valid:
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings, meta=meta)
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            warnings=warnings,
            meta=meta,
            error=ServiceError(
                code=VALIDATION_FAILED,
                message=f"{len(errors)} field(s) failed validation",
            ),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_evaluator(self) -> Evaluator | None:
        if self._evaluator is None:
            self._evaluator = self.plugins.evaluator()
        return self._evaluator

    def _resolve_sanitizer(self) -> Sanitizer | None:
        if self._sanitizer is None:
            self._sanitizer = self.plugins.sanitizer()
        return self._sanitizer

    def _formatter(self) -> ErrorFormatter:
        return ErrorFormatter(overrides=self._settings.messages.overrides)

    def _load(
        self,
        path: Path,
        *,
        evaluator: Evaluator | None = None,
        sanitizer: Sanitizer | None = None,
    ) -> tuple[FormDefinition, FieldRegistry]:
        definition = load_form_definition(path)
        registry = FieldRegistry(
            evaluator=evaluator,
            sanitizer=sanitizer,
            formatter=self._formatter(),
            render_options=self._settings.render_options(),
        )
        with form_log_context(definition.name):
            registry.register_bulk(field.model_dump() for field in definition.fields)
        logger.debug("Loaded form %s with %d fields", definition.name, len(registry))
        return definition, registry
