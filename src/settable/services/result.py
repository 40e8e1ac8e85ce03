"""Service-layer return types.

INVARIANT: every BindService method returns a ServiceResult. The CLI only
ever renders ServiceResult; the engine underneath returns BindingResult.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation failed. ``code`` is an ErrorKind value or ``BATCH_PARTIAL``."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``ok`` is False only for failures that produced nothing usable (no
    instance, unknown type). Keys rejected during binding are listed in
    ``warnings`` and leave ``ok`` True.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
