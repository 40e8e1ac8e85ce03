"""Binder — one request from raw string map to a bound instance.

Usage::

    registry = TypeRegistry()
    registry.register(Sample, name="shop.Sample")
    binder = Binder(registry)
    result = binder.instantiate({"class": "Sample", "f2": "2.0"}, default_namespace="shop")
    result.instance.f2            # 2.0
    result.outcome_for("f2")      # Outcome(status=applied, via=field)

INVARIANT: Per-key failures are outcomes, never exceptions. Once the
instance is constructed, ``instantiate`` always returns it, however many
keys failed. There is no rollback of keys already applied.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from settable.domain.coercion import TypeCoercer
from settable.domain.errors import (
    ConstructionError,
    InvocationError,
    SettableError,
    TypeNotFoundError,
)
from settable.domain.members import CLASS_KEY, Target
from settable.domain.outcomes import BindingResult, Outcome
from settable.domain.registry import TypeHandle, TypeRegistry
from settable.domain.types import MemberKind, ValueKind

logger = logging.getLogger(__name__)


class Binder:
    """Orchestrates type resolution, construction, and per-key binding.

    Parameters:
        registry: Source of constructible types. Its resolver is used for
            member lookup.
        coercer: Text-to-value converter. A default :class:`TypeCoercer` is
            created if omitted.
        default_namespace: Namespace used to qualify bare type names when a
            call doesn't pass its own.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        *,
        coercer: TypeCoercer | None = None,
        default_namespace: str | None = None,
    ) -> None:
        self._registry = registry
        self._resolver = registry.resolver
        self._coercer = coercer or TypeCoercer()
        self._default_namespace = default_namespace

    def instantiate(
        self,
        params: Mapping[str, str],
        default_type: type | str | None = None,
        default_namespace: str | None = None,
    ) -> BindingResult:
        """Resolve, construct, and bind a type from *params*.

        The ``"class"`` key names the type. When it is missing or can't be
        resolved, *default_type* is used if given; the fallback skips the
        approval check because the caller chose it explicitly.
        """
        namespace = default_namespace or self._default_namespace
        requested = params.get(CLASS_KEY)
        handle: TypeHandle | None = None
        cause: SettableError | None = None

        if requested is not None:
            try:
                handle = self._registry.resolve(requested, namespace)
            except SettableError as exc:
                cause = exc
                logger.error(
                    "Type %s rejected: %s%s",
                    requested,
                    exc,
                    "; trying the default type" if default_type is not None else "",
                )

        if handle is None and default_type is not None:
            try:
                handle = self._registry.handle_for(default_type)
            except TypeNotFoundError as exc:
                cause = exc
                logger.error("Default type rejected: %s", exc)

        if handle is None:
            if cause is None:
                cause = TypeNotFoundError(
                    "Default type not supplied, and params do not contain a type name"
                )
                logger.error(str(cause))
            return BindingResult(type_name=requested, error=cause.kind, message=str(cause))

        try:
            instance = self._registry.construct(handle)
        except ConstructionError as exc:
            logger.error("Construction failed for %s", handle.name, exc_info=exc)
            return BindingResult(type_name=handle.name, error=exc.kind, message=str(exc))

        outcomes = self.apply(instance, params)
        return BindingResult(instance=instance, outcomes=outcomes, type_name=handle.name)

    def apply(self, instance: Any, params: Mapping[str, str]) -> list[Outcome]:
        """Bind every key of *params* except ``"class"`` onto *instance*.

        Works on any instance, including ones not constructed by the binder.
        Type-level approval is not consulted; member approval still is.
        """
        cls = type(instance)
        outcomes: list[Outcome] = []
        for key, text in params.items():
            if key == CLASS_KEY:
                continue
            outcomes.append(self._bind_key(instance, cls, key, text))
        return outcomes

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _bind_key(self, instance: Any, cls: type, key: str, text: str) -> Outcome:
        try:
            target = self._resolver.resolve(cls, key)
            if target is None:
                logger.debug("Ignoring reserved key %s on %s", key, cls.__qualname__)
                return Outcome.skipped(key, "reserved key with no matching member")
            value = self._coercer.coerce(text, target.declared)
            self._invoke(instance, target, value)
        except SettableError as exc:
            logger.warning("Couldn't map key %s to %s: %s", key, cls.__qualname__, exc)
            return Outcome.failed(key, exc.kind, str(exc))
        return Outcome.applied(key, target.member.kind)

    def _invoke(self, instance: Any, target: Target, value: Any) -> None:
        member = target.member
        try:
            if member.kind is MemberKind.ACCESSOR:
                arg = value
                if member.param.kind is ValueKind.TEXT and target.declared != member.param:
                    arg = self._coercer.format(value, target.declared)
                getattr(instance, member.name)(arg)
            else:
                setattr(instance, member.name, value)
        except Exception as exc:
            msg = f"{member.kind.value} {member.name} raised {type(exc).__name__}: {exc}"
            raise InvocationError(msg, key=member.key) from exc
