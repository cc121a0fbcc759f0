"""Fatal error types raised by the domain layer.

Per-field validation failures are never raised; they are collected as
:class:`~feeld.domain.registry.ErrorRecord` instances instead.
"""

from __future__ import annotations


class FeeldError(Exception):
    """Base class for every fatal feeld error."""

    code = "FEELD_ERROR"


class UnrecognizedRuleError(FeeldError, ValueError):
    """A rule token matched no entry of the constraint catalog."""

    code = "UNRECOGNIZED_RULE"

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"The rule {token!r} is not recognized in either rule dialect")


class UnresolvedFieldTypeError(FeeldError, ValueError):
    """A type token resolved to no field kind."""

    code = "UNRESOLVED_FIELD_TYPE"

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unknown field type {token!r}")


class DuplicateFieldError(FeeldError, ValueError):
    """A field name was registered twice."""

    code = "DUPLICATE_FIELD"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A field named {name!r} is already registered")


class FieldNotFoundError(FeeldError, KeyError):
    """No registered field carries the requested name."""

    code = "FIELD_NOT_FOUND"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No field named {name!r} is registered")

    def __str__(self) -> str:
        return str(self.args[0])


class PrematureErrorAccessError(FeeldError, RuntimeError):
    """The error log was read before any validation pass ran."""

    code = "PREMATURE_ERROR_ACCESS"

    def __init__(self) -> None:
        super().__init__("Errors are only available after validate() has run")


class MissingCollaboratorError(FeeldError, RuntimeError):
    """An evaluator or sanitizer was needed but none was configured."""

    code = "MISSING_COLLABORATOR"

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"No {role} is configured")


class InvalidTemplateError(FeeldError, ValueError):
    """A message template's placeholders do not match its declaration."""

    code = "INVALID_TEMPLATE"


class FormDefinitionError(FeeldError, ValueError):
    """A form definition file could not be read or failed validation."""

    code = "INVALID_FORM_DEFINITION"
