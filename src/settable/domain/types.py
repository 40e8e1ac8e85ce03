"""Declared value types and member kinds.

A member's Python annotation is classified once into a :class:`DeclaredType`.
The coercer dispatches on its :class:`ValueKind`; the resolver compares two
declared types for equality when matching an accessor against a field.

Python's ``int`` is unbounded, so 32-bit members opt in via :data:`Int32`.
Plain ``int`` is treated as 64-bit.
"""

from __future__ import annotations

import inspect
import types
from dataclasses import dataclass
from datetime import date
from enum import Enum, StrEnum
from typing import Annotated, Any, Union, get_args, get_origin


class ValueKind(StrEnum):
    """Coercion families for declared member types."""

    INT32 = "int32"
    INT64 = "int64"
    BOOL = "bool"
    OPTIONAL_BOOL = "optional_bool"
    FLOAT32 = "float32"
    TEXT = "text"
    ENUM = "enum"
    DATE = "date"
    UNSUPPORTED = "unsupported"


class MemberKind(StrEnum):
    """How a resolved target receives its value."""

    FIELD = "field"
    ACCESSOR = "accessor"


@dataclass(frozen=True)
class IntBits:
    """``Annotated`` metadata fixing the width of an integer member."""

    bits: int


Int32 = Annotated[int, IntBits(32)]
Int64 = Annotated[int, IntBits(64)]
Float32 = float


@dataclass(frozen=True)
class DeclaredType:
    """Classified member type: a coercion kind plus the Python type behind it."""

    kind: ValueKind
    target: Any = None

    @property
    def label(self) -> str:
        """Short human-readable name (e.g. ``int32``, ``enum Color``)."""
        if self.kind is ValueKind.ENUM:
            return f"enum {self.target.__name__}"
        if self.kind is ValueKind.UNSUPPORTED:
            if self.target is inspect.Parameter.empty:
                return "unsupported (unannotated)"
            name = getattr(self.target, "__name__", None) or repr(self.target)
            return f"unsupported ({name})"
        return self.kind.value


TEXT = DeclaredType(ValueKind.TEXT, str)


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *meta]`` into ``(T, meta)``; other hints pass through."""
    if get_origin(annotation) is Annotated:
        return annotation.__origin__, tuple(annotation.__metadata__)
    return annotation, ()


def is_union(annotation: Any) -> bool:
    return get_origin(annotation) in (Union, types.UnionType)


def classify(annotation: Any) -> DeclaredType:
    """Classify a type hint into a :class:`DeclaredType`.

    ``Optional[X]`` unwraps to ``X`` except for ``bool``, which becomes the
    nullable boolean kind. Anything not listed below is ``UNSUPPORTED``:

    - ``Int32`` -> INT32, ``int`` / ``Int64`` -> INT64
    - ``bool`` -> BOOL, ``bool | None`` -> OPTIONAL_BOOL
    - ``float`` -> FLOAT32, ``str`` -> TEXT
    - ``Enum`` subclasses -> ENUM, ``datetime.date`` -> DATE
    """
    hint, metadata = strip_annotated(annotation)

    if is_union(hint):
        args = get_args(hint)
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(args) == 2:
            inner = classify(members[0])
            if inner.kind is ValueKind.BOOL:
                return DeclaredType(ValueKind.OPTIONAL_BOOL, bool)
            return inner
        return DeclaredType(ValueKind.UNSUPPORTED, annotation)

    if hint is bool:
        return DeclaredType(ValueKind.BOOL, bool)
    if hint is int:
        bits = next((m.bits for m in metadata if isinstance(m, IntBits)), 64)
        return DeclaredType(ValueKind.INT32 if bits == 32 else ValueKind.INT64, int)
    if hint is float:
        return DeclaredType(ValueKind.FLOAT32, float)
    if hint is str:
        return TEXT
    if hint is date:
        return DeclaredType(ValueKind.DATE, date)
    if isinstance(hint, type) and get_origin(hint) is None and issubclass(hint, Enum):
        return DeclaredType(ValueKind.ENUM, hint)
    # datetime subclasses date but is matched by identity, so it lands here
    return DeclaredType(ValueKind.UNSUPPORTED, annotation)
