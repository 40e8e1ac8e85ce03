"""MemberResolver — find the unique authorized binding target for a key.

Each type's capability table (:class:`TypeDescriptor`) is derived once from
its annotations and accessor signatures, then cached for the process
lifetime. Approval and member shape are static per type, so concurrent first
population only ever re-derives an identical table (last write wins).

Resolution precedence for a key:

1. A public annotated field literally named ``key``.
2. With a field: accessors ``set<key>`` (case-insensitive, ``set_<key>``
   also accepted) whose declared type equals the field's, eligible if the
   field or the accessor is approved. An eligible accessor wins over direct
   field assignment; otherwise the field, if approved.
3. Without a field: single-parameter accessors of any type, eligible only
   if approved themselves. More than one eligible is ambiguous.
4. Nothing found: ``"body"`` is ignored, any other key is not found.
5. A target found but not approved is a permission failure, distinct from
   not found.
"""

from __future__ import annotations

import inspect
import logging
import sys
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from settable.domain.approval import ApprovalPolicy, MarkerApproval, coercion_override
from settable.domain.errors import (
    AmbiguousMemberError,
    MemberNotFoundError,
    PermissionDeniedError,
)
from settable.domain.types import DeclaredType, MemberKind, classify, strip_annotated

logger = logging.getLogger(__name__)

CLASS_KEY = "class"
BODY_KEY = "body"
SETTER_PREFIX = "set"


@dataclass(frozen=True)
class MemberDescriptor:
    """One field or accessor in a type's capability table.

    Attributes:
        key: Lower-cased request key for accessors, exact name for fields.
        kind: Field or accessor.
        name: Attribute or method name on the type.
        declared: Type the incoming text is coerced to.
        param: Type the member actually accepts. Differs from ``declared``
            only for accessors declared with ``user_settable(as_type=...)``.
        approved: Whether the member itself carries approval.
    """

    key: str
    kind: MemberKind
    name: str
    declared: DeclaredType
    param: DeclaredType
    approved: bool


@dataclass(frozen=True)
class TypeDescriptor:
    """Capability table for one type: approval plus settable members."""

    type: type
    approved: bool
    fields: Mapping[str, MemberDescriptor] = field(default_factory=dict)
    accessors: Mapping[str, tuple[MemberDescriptor, ...]] = field(default_factory=dict)

    def accessors_for(self, key: str) -> tuple[MemberDescriptor, ...]:
        return self.accessors.get(key.lower(), ())

    def ambiguous_keys(self) -> list[str]:
        """Keys with no field and more than one approved accessor."""
        return sorted(
            key
            for key, candidates in self.accessors.items()
            if key not in self.fields and sum(1 for a in candidates if a.approved) > 1
        )


@dataclass(frozen=True)
class Target:
    """Resolved binding target for one key.

    ``declared`` is the type the text is coerced to: the field's type when a
    field fixed it, otherwise the accessor's own declared type.
    """

    member: MemberDescriptor
    declared: DeclaredType


# ---------------------------------------------------------------------------
# Descriptor construction
# ---------------------------------------------------------------------------


def _resolve_annotation(
    name: str,
    annotation: Any,
    module_ns: Mapping[str, Any],
    class_ns: Mapping[str, Any] | None = None,
) -> Any:
    """Resolve one annotation with ``Annotated`` metadata kept.

    Module names shadow class attributes, as in ``typing.get_type_hints``, so
    a field named ``date`` can still be annotated ``date``. An annotation
    that can't be resolved comes back raw (usually a string) and classifies
    as unsupported; its neighbours are unaffected.
    """
    if class_ns is None:
        globalns, localns = dict(module_ns), None
    else:
        globalns, localns = dict(class_ns), dict(module_ns)
    holder = type("_Annotations", (), {"__annotations__": {name: annotation}})
    try:
        hints = typing.get_type_hints(
            holder, globalns=globalns, localns=localns, include_extras=True
        )
    except (NameError, AttributeError, SyntaxError, TypeError) as exc:
        logger.warning("Could not resolve annotation of %r: %s", name, exc)
        return annotation
    return hints[name]


def _field_hints(cls: type) -> dict[str, Any]:
    """Resolved field annotations across the MRO, subclasses winning."""
    hints: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        module = sys.modules.get(klass.__module__)
        module_ns = vars(module) if module is not None else {}
        for name, annotation in inspect.get_annotations(klass).items():
            hints[name] = _resolve_annotation(name, annotation, module_ns, vars(klass))
    return hints


def _parameter_hint(func: Callable[..., Any], param: inspect.Parameter) -> Any:
    """Resolved annotation of one accessor parameter, ignoring the rest."""
    annotation = inspect.get_annotations(func).get(param.name, param.annotation)
    if annotation is inspect.Parameter.empty:
        return annotation
    return _resolve_annotation(param.name, annotation, getattr(func, "__globals__", {}))


def _public_functions(cls: type) -> dict[str, Callable[..., Any]]:
    """Plain instance methods across the MRO, in definition order."""
    found: dict[str, Callable[..., Any]] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if name.startswith("_"):
                continue
            if inspect.isfunction(attr):
                found[name] = attr
            elif name in found:
                # shadowed by a non-method in a subclass
                del found[name]
    return found


def _accessor_keys(name: str) -> list[str]:
    """Request keys an accessor named *name* answers to."""
    lowered = name.lower()
    if not lowered.startswith(SETTER_PREFIX) or len(lowered) == len(SETTER_PREFIX):
        return []
    suffix = lowered[len(SETTER_PREFIX) :]
    keys = [suffix]
    if suffix.startswith("_") and len(suffix) > 1:
        keys.append(suffix[1:])
    return keys


def _single_parameter(func: Callable[..., Any]) -> inspect.Parameter | None:
    """The sole parameter after ``self``, or None if the arity is wrong."""
    try:
        params = list(inspect.signature(func).parameters.values())[1:]
    except (TypeError, ValueError):
        return None
    if len(params) != 1:
        return None
    param = params[0]
    if param.kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return None
    return param


def build_descriptor(cls: type, approval: ApprovalPolicy) -> TypeDescriptor:
    """Derive the capability table for *cls*."""
    fields: dict[str, MemberDescriptor] = {}
    for name, annotation in _field_hints(cls).items():
        if name.startswith("_"):
            continue
        hint, _meta = strip_annotated(annotation)
        if hint is ClassVar or typing.get_origin(hint) is ClassVar:
            continue
        declared = classify(annotation)
        fields[name] = MemberDescriptor(
            key=name,
            kind=MemberKind.FIELD,
            name=name,
            declared=declared,
            param=declared,
            approved=approval.field_approved(cls, name, annotation),
        )

    accessors: dict[str, list[MemberDescriptor]] = {}
    for name, func in _public_functions(cls).items():
        keys = _accessor_keys(name)
        if not keys:
            continue
        param = _single_parameter(func)
        if param is None:
            continue
        hint = _parameter_hint(func, param)
        param_type = classify(hint)
        override = coercion_override(func)
        declared = classify(override) if override is not None else param_type
        approved = approval.accessor_approved(cls, func)
        for key in keys:
            accessors.setdefault(key, []).append(
                MemberDescriptor(
                    key=key,
                    kind=MemberKind.ACCESSOR,
                    name=name,
                    declared=declared,
                    param=param_type,
                    approved=approved,
                )
            )

    return TypeDescriptor(
        type=cls,
        approved=approval.type_approved(cls),
        fields=fields,
        accessors={key: tuple(found) for key, found in accessors.items()},
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class MemberResolver:
    """Resolves request keys to binding targets using cached descriptors."""

    def __init__(self, approval: ApprovalPolicy | None = None) -> None:
        self._approval: ApprovalPolicy = approval or MarkerApproval()
        self._cache: dict[type, TypeDescriptor] = {}

    @property
    def approval(self) -> ApprovalPolicy:
        return self._approval

    def describe(self, cls: type) -> TypeDescriptor:
        """The capability table for *cls*, built on first use."""
        descriptor = self._cache.get(cls)
        if descriptor is None:
            descriptor = build_descriptor(cls, self._approval)
            self._cache[cls] = descriptor
            logger.debug(
                "Described %s: %d fields, %d accessor keys",
                cls.__qualname__,
                len(descriptor.fields),
                len(descriptor.accessors),
            )
        return descriptor

    def clear_cache(self) -> None:
        self._cache.clear()

    def resolve(self, cls: type, key: str) -> Target | None:
        """Find the target for *key* on *cls*.

        Returns None for the reserved ``"body"`` key when nothing matches it.

        Raises:
            MemberNotFoundError: No field or accessor answers to *key*.
            AmbiguousMemberError: Several approved accessors, no field.
            PermissionDeniedError: A target exists but isn't approved.
        """
        descriptor = self.describe(cls)
        type_name = cls.__qualname__
        fld = descriptor.fields.get(key)
        candidates = descriptor.accessors_for(key)

        if fld is not None:
            eligible = [
                a
                for a in candidates
                if a.declared == fld.declared and (fld.approved or a.approved)
            ]
            if eligible:
                # last in definition order, as with a redefined method
                return Target(member=eligible[-1], declared=fld.declared)
            if fld.approved:
                return Target(member=fld, declared=fld.declared)
            msg = (
                f"Neither the field nor any accessor for {key} in class {type_name} "
                "is marked user_settable"
            )
            raise PermissionDeniedError(msg, key=key)

        if candidates:
            eligible = [a for a in candidates if a.approved]
            if len(eligible) > 1:
                names = ", ".join(f"{a.name}({a.param.label})" for a in eligible)
                msg = f"Overloaded setters for {key} in class {type_name}: {names}"
                raise AmbiguousMemberError(msg, key=key)
            if eligible:
                return Target(member=eligible[0], declared=eligible[0].declared)
            msg = f"No accessor for {key} in class {type_name} is marked user_settable"
            raise PermissionDeniedError(msg, key=key)

        if key == BODY_KEY:
            return None
        msg = f"Couldn't find a field or setter for {key} in class {type_name}"
        raise MemberNotFoundError(msg, key=key)
