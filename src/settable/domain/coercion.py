"""TypeCoercer — text to declared member type, and back.

Parse rules are fixed and locale-independent:

| Kind          | Rule                                                  |
|---------------|-------------------------------------------------------|
| INT32 / INT64 | ASCII ``[+-]?[0-9]+`` within the signed range         |
| BOOL          | fuzzy parse, ambiguous -> ``False``                   |
| OPTIONAL_BOOL | fuzzy parse, ambiguous -> ``None`` (unset)            |
| FLOAT32       | decimal literal, ``NaN``, ``Infinity``; single precision |
| TEXT          | passthrough                                           |
| ENUM          | upper-cased input matched against member names        |
| DATE          | exactly ``YYYY-MM-DD``                                |

Every other declared type is unsupported and raises :class:`CoercionError`
for that key only.
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Callable
from datetime import date, datetime
from enum import Enum
from typing import Any

from settable.domain.errors import CoercionError
from settable.domain.fuzzy import parse_fuzzy_bool
from settable.domain.types import DeclaredType, ValueKind

DATE_FORMAT = "%Y-%m-%d"

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_FLOAT_SPECIALS: dict[str, float] = {
    "NaN": math.nan,
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
}


def to_float32(value: float) -> float:
    """Round *value* to the nearest IEEE-754 single-precision float.

    Raises OverflowError when *value* is finite but outside single range.
    """
    return struct.unpack("<f", struct.pack("<f", value))[0]


def format_float32(value: float) -> str:
    """Shortest decimal text that round-trips through single precision."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if to_float32(candidate) == value:
            return repr(candidate)
    return repr(value)


class TypeCoercer:
    """Converts one text value to one declared type."""

    def __init__(self) -> None:
        self._parsers: dict[ValueKind, Callable[[str, DeclaredType], Any]] = {
            ValueKind.INT32: self._parse_int,
            ValueKind.INT64: self._parse_int,
            ValueKind.BOOL: lambda text, _d: parse_fuzzy_bool(text, False),
            ValueKind.OPTIONAL_BOOL: lambda text, _d: parse_fuzzy_bool(text, None),
            ValueKind.FLOAT32: self._parse_float32,
            ValueKind.TEXT: lambda text, _d: text,
            ValueKind.ENUM: self._parse_enum,
            ValueKind.DATE: self._parse_date,
        }

    def coerce(self, text: str, declared: DeclaredType) -> Any:
        """Parse *text* into a value of *declared* type.

        Raises:
            CoercionError: *text* does not parse, or the type is unsupported.
        """
        if not isinstance(text, str):
            msg = f"Expected text input, got {type(text).__name__}"
            raise CoercionError(msg)
        parser = self._parsers.get(declared.kind)
        if parser is None:
            msg = f"Couldn't cast the input to {declared.label}"
            raise CoercionError(msg)
        return parser(text, declared)

    def format(self, value: Any, declared: DeclaredType) -> str:
        """Render a coerced value back to its text form.

        The inverse of :meth:`coerce` for every supported kind: dates use
        ``YYYY-MM-DD``, enums their member name, booleans ``true``/``false``,
        and the unset boolean ``null``.
        """
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if declared.kind is ValueKind.FLOAT32 and isinstance(value, float):
            return format_float32(value)
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, date):
            return value.strftime(DATE_FORMAT)
        return str(value)

    # ------------------------------------------------------------------
    # Parsers
    # ------------------------------------------------------------------

    def _parse_int(self, text: str, declared: DeclaredType) -> int:
        if not _INTEGER.fullmatch(text):
            msg = f"For input string: {text!r} (not a base-10 integer)"
            raise CoercionError(msg)
        value = int(text, 10)
        low, high = INT32_RANGE if declared.kind is ValueKind.INT32 else INT64_RANGE
        if not low <= value <= high:
            msg = f"Value {text} out of range for {declared.label}"
            raise CoercionError(msg)
        return value

    def _parse_float32(self, text: str, declared: DeclaredType) -> float:
        stripped = text.strip()
        special = _FLOAT_SPECIALS.get(stripped)
        if special is not None:
            return special
        if not _DECIMAL.fullmatch(stripped):
            msg = f"For input string: {text!r} (not a decimal number)"
            raise CoercionError(msg)
        try:
            return to_float32(float(stripped))
        except OverflowError as exc:
            msg = f"Value {text} out of range for {declared.label}"
            raise CoercionError(msg) from exc

    def _parse_enum(self, text: str, declared: DeclaredType) -> Enum:
        enum_cls: type[Enum] = declared.target
        try:
            return enum_cls[text.upper()]
        except KeyError:
            names = ", ".join(enum_cls.__members__)
            msg = f"No enum constant {enum_cls.__name__}.{text.upper()} (expected one of: {names})"
            raise CoercionError(msg) from None

    def _parse_date(self, text: str, declared: DeclaredType) -> date:
        if not _DATE.fullmatch(text):
            msg = f"Unparseable date: {text!r} (expected YYYY-MM-DD)"
            raise CoercionError(msg)
        try:
            return datetime.strptime(text, DATE_FORMAT).date()
        except ValueError as exc:
            msg = f"Unparseable date: {text!r} ({exc})"
            raise CoercionError(msg) from exc
