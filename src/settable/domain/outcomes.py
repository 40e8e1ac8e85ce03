"""Per-key outcomes and the result of one binding request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from settable.domain.errors import ErrorKind
from settable.domain.types import MemberKind


class OutcomeStatus(StrEnum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class Outcome(BaseModel):
    """What happened to one key of a request.

    Attributes:
        key: The request key.
        status: Applied, skipped, or failed.
        kind: Failure kind when ``status`` is FAILED.
        detail: Human-readable reason for a skip or failure.
        via: Whether an applied value went through a field or an accessor.
    """

    model_config = {"frozen": True}

    key: str
    status: OutcomeStatus
    kind: ErrorKind | None = None
    detail: str = ""
    via: MemberKind | None = None

    @classmethod
    def applied(cls, key: str, via: MemberKind) -> Outcome:
        return cls(key=key, status=OutcomeStatus.APPLIED, via=via)

    @classmethod
    def skipped(cls, key: str, reason: str) -> Outcome:
        return cls(key=key, status=OutcomeStatus.SKIPPED, detail=reason)

    @classmethod
    def failed(cls, key: str, kind: ErrorKind, detail: str) -> Outcome:
        return cls(key=key, status=OutcomeStatus.FAILED, kind=kind, detail=detail)


@dataclass
class BindingResult:
    """The constructed instance (or None) plus ordered per-key outcomes.

    INVARIANT: ``instance`` is None exactly when ``error`` is set. A
    partially bound instance is still returned; failed keys are listed in
    ``outcomes``.
    """

    instance: Any = None
    outcomes: list[Outcome] = field(default_factory=list)
    type_name: str | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        """Whether the instance was constructed (per-key failures aside)."""
        return self.error is None

    @property
    def applied(self) -> list[str]:
        return [o.key for o in self.outcomes if o.status is OutcomeStatus.APPLIED]

    @property
    def failures(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]

    def outcome_for(self, key: str) -> Outcome | None:
        return next((o for o in self.outcomes if o.key == key), None)
