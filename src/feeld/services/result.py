"""ServiceResult and ServiceError: what every service operation returns.

INVARIANT: Service methods never raise a :class:`FeeldError` to the caller;
they report it as ``ok=False`` with the error's ``code``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from feeld.domain.errors import FeeldError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Envelope for one service operation.

    Attributes:
        ok: Whether the operation succeeded. A validation pass that found
            failing fields is not ok; its records stay in ``data``.
        op: Name of the operation (e.g. ``"validate_form"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues (plugin hook failures and the like).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (form name, field counts).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(
    op: str,
    exc: FeeldError,
    *,
    warnings: list[str] | None = None,
    **detail: Any,
) -> ServiceResult:
    """Wrap a fatal :class:`FeeldError` raised while running *op*."""
    return ServiceResult(
        ok=False,
        op=op,
        warnings=warnings or [],
        error=ServiceError(code=exc.code, message=str(exc), detail=detail),
    )
