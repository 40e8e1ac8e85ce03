"""Approval marker for externally settable types, fields, and accessors.

One marker serves all three targets::

    @user_settable
    class Sample:
        f1: float = 1.0                                # not settable
        f2: Annotated[float, user_settable] = 1.0      # settable field

        @user_settable
        def set_third(self, value: float) -> None: ...

        @user_settable(as_type=Float32)
        def set_ratio(self, value: str) -> None: ...   # validated as float, passed as text

The binding engine never inspects the marker directly. It asks an
:class:`ApprovalPolicy`, and :class:`MarkerApproval` is the policy that
reads the marker.

INVARIANT: Type-level approval is not inherited. A subclass of an approved
type must carry the marker itself.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, get_args, overload

from settable.domain.types import is_union, strip_annotated

MARKER_ATTR = "__user_settable__"
AS_TYPE_ATTR = "__user_settable_as__"
# set on the decorator returned by user_settable(...)
FACTORY_ATTR = "__user_settable_factory__"

T = TypeVar("T")


@overload
def user_settable(obj: T, /) -> T: ...


@overload
def user_settable(*, as_type: Any = None) -> Callable[[T], T]: ...


def user_settable(obj: Any = None, /, *, as_type: Any = None) -> Any:
    """Mark a type or accessor as settable from untrusted input.

    Used bare as a decorator, with ``as_type=`` to make an accessor coerce
    values to a type other than its parameter annotation, or as
    ``Annotated`` metadata on a field.
    """

    def mark(target: Any) -> Any:
        setattr(target, MARKER_ATTR, True)
        if as_type is not None:
            setattr(target, AS_TYPE_ATTR, as_type)
        return target

    if obj is None:
        setattr(mark, FACTORY_ATTR, True)
        return mark
    return mark(obj)


def is_user_settable(obj: Any) -> bool:
    """Whether *obj* carries the marker on itself (not via inheritance)."""
    if isinstance(obj, type):
        return bool(vars(obj).get(MARKER_ATTR, False))
    return bool(getattr(obj, MARKER_ATTR, False))


def coercion_override(accessor: Callable[..., Any]) -> Any | None:
    """The ``as_type`` declared on an accessor, or None."""
    return getattr(accessor, AS_TYPE_ATTR, None)


def annotation_marked(annotation: Any) -> bool:
    """Whether a field annotation carries the marker as ``Annotated`` metadata.

    ``Annotated[bool, user_settable] | None`` counts, since type-hint
    resolution moves the ``Optional`` outside the ``Annotated``. The called
    form ``user_settable()`` is accepted too; ``as_type`` has no effect on
    fields.
    """
    hint, metadata = strip_annotated(annotation)
    if any(m is user_settable or getattr(m, FACTORY_ATTR, False) for m in metadata):
        return True
    if is_union(hint):
        return any(annotation_marked(arg) for arg in get_args(hint))
    return False


class ApprovalPolicy(Protocol):
    """Queryable approval predicate consulted by the resolver and registry."""

    def type_approved(self, cls: type) -> bool: ...

    def field_approved(self, cls: type, name: str, annotation: Any) -> bool: ...

    def accessor_approved(self, cls: type, accessor: Callable[..., Any]) -> bool: ...


class MarkerApproval:
    """Approval policy backed by the :func:`user_settable` marker."""

    def type_approved(self, cls: type) -> bool:
        return is_user_settable(cls)

    def field_approved(self, cls: type, name: str, annotation: Any) -> bool:
        return annotation_marked(annotation)

    def accessor_approved(self, cls: type, accessor: Callable[..., Any]) -> bool:
        return is_user_settable(accessor)
