"""Binding error taxonomy.

Fatal kinds abort a whole request (no instance is returned). Per-key kinds
are raised inside the engine and captured by the binder as that key's
Outcome; they never escape the key loop.
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class ErrorKind(StrEnum):
    """Stable codes for every binding failure."""

    # fatal
    TYPE_NOT_FOUND = "type_not_found"
    TYPE_NOT_APPROVED = "type_not_approved"
    CONSTRUCTION_ERROR = "construction_error"
    # per key
    MEMBER_NOT_FOUND = "member_not_found"
    AMBIGUOUS_MEMBER = "ambiguous_member"
    PERMISSION_DENIED = "permission_denied"
    COERCION_ERROR = "coercion_error"
    INVOCATION_ERROR = "invocation_error"
    # raised to registering code, never to binding callers
    REGISTRATION_ERROR = "registration_error"


FATAL_KINDS: frozenset[ErrorKind] = frozenset(
    {ErrorKind.TYPE_NOT_FOUND, ErrorKind.TYPE_NOT_APPROVED, ErrorKind.CONSTRUCTION_ERROR}
)


class SettableError(Exception):
    """Base class for all binding errors. ``kind`` identifies the failure."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key

    @property
    def fatal(self) -> bool:
        return self.kind in FATAL_KINDS


class TypeNotFoundError(SettableError):
    kind = ErrorKind.TYPE_NOT_FOUND


class TypeNotApprovedError(SettableError):
    kind = ErrorKind.TYPE_NOT_APPROVED


class ConstructionError(SettableError):
    kind = ErrorKind.CONSTRUCTION_ERROR


class MemberNotFoundError(SettableError):
    kind = ErrorKind.MEMBER_NOT_FOUND


class AmbiguousMemberError(SettableError):
    kind = ErrorKind.AMBIGUOUS_MEMBER


class PermissionDeniedError(SettableError):
    kind = ErrorKind.PERMISSION_DENIED


class CoercionError(SettableError):
    kind = ErrorKind.COERCION_ERROR


class InvocationError(SettableError):
    kind = ErrorKind.INVOCATION_ERROR


class RegistrationError(SettableError):
    kind = ErrorKind.REGISTRATION_ERROR
