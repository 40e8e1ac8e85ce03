"""BindService — binding requests and registry introspection as ServiceResults."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from settable.domain.binder import Binder
from settable.domain.coercion import TypeCoercer
from settable.domain.errors import SettableError
from settable.domain.members import TypeDescriptor
from settable.domain.outcomes import BindingResult, OutcomeStatus
from settable.domain.registry import TypeRegistry
from settable.domain.types import classify
from settable.services.result import ServiceError, ServiceResult


def stringify_params(raw: Mapping[str, Any]) -> dict[str, str]:
    """Flatten JSON scalars to the text form the binder expects.

    Booleans become ``true``/``false`` and null becomes an empty string.
    Nested values are rejected by the caller before they get here.
    """
    params: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            params[str(key)] = ""
        elif isinstance(value, bool):
            params[str(key)] = "true" if value else "false"
        else:
            params[str(key)] = str(value)
    return params


class BindService:
    """Adapter-facing wrapper around a :class:`Binder`."""

    def __init__(self, binder: Binder, registry: TypeRegistry) -> None:
        self._binder = binder
        self._registry = registry
        self._coercer = TypeCoercer()

    def bind(
        self,
        params: Mapping[str, str],
        *,
        default_type: type | str | None = None,
        default_namespace: str | None = None,
    ) -> ServiceResult:
        """Instantiate one request. Fails only when no instance was built."""
        with structlog.contextvars.bound_contextvars(requested=params.get("class")):
            result = self._binder.instantiate(params, default_type, default_namespace)
        if not result.ok:
            return ServiceResult(
                ok=False,
                op="bind",
                error=ServiceError(
                    code=str(result.error),
                    message=result.message,
                    detail={"type": result.type_name},
                ),
            )
        return ServiceResult(
            ok=True,
            op="bind",
            data=self._record(result),
            warnings=[f"{o.key}: {o.detail}" for o in result.failures],
        )

    def bind_batch(
        self,
        records: Sequence[Mapping[str, str]],
        *,
        default_type: type | str | None = None,
        default_namespace: str | None = None,
    ) -> ServiceResult:
        """Instantiate each record independently.

        A record whose type can't be resolved or constructed is reported in
        ``errors`` and doesn't stop the remaining records.
        """
        items: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        warnings: list[str] = []
        for i, params in enumerate(records):
            with structlog.contextvars.bound_contextvars(record=i, requested=params.get("class")):
                result = self._binder.instantiate(params, default_type, default_namespace)
            if result.ok:
                items.append(self._record(result))
                warnings.extend(f"[{i}] {o.key}: {o.detail}" for o in result.failures)
            else:
                errors.append({"index": i, "code": str(result.error), "error": result.message})

        all_ok = not errors
        return ServiceResult(
            ok=all_ok,
            op="bind_batch",
            data={"count": len(items), "items": items, "errors": errors},
            warnings=warnings,
            error=None
            if all_ok
            else ServiceError(
                code="BATCH_PARTIAL",
                message=f"{len(errors)} of {len(records)} records failed",
            ),
        )

    def list_types(self) -> ServiceResult:
        items = []
        for name in self._registry.names():
            descriptor = self._registry.describe(name)
            items.append(
                {
                    "id": name,
                    "type": descriptor.type.__qualname__,
                    "approved": descriptor.approved,
                    "fields": len(descriptor.fields),
                    "accessors": len({a.name for c in descriptor.accessors.values() for a in c}),
                }
            )
        return ServiceResult(ok=True, op="list_types", data={"count": len(items), "items": items})

    def describe_type(self, name: str) -> ServiceResult:
        """Capability table for *name*: every member, its kind, type, approval."""
        try:
            descriptor = self._registry.describe(name)
        except SettableError as exc:
            return ServiceResult(
                ok=False,
                op="describe_type",
                error=ServiceError(code=str(exc.kind), message=str(exc)),
            )
        return ServiceResult(
            ok=True,
            op="describe_type",
            data={
                "id": name,
                "type": descriptor.type.__qualname__,
                "approved": descriptor.approved,
                "members": _member_rows(descriptor),
                "ambiguous": descriptor.ambiguous_keys(),
            },
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, result: BindingResult) -> dict[str, Any]:
        return {
            "type": result.type_name,
            "state": self._snapshot(result.instance),
            "outcomes": [o.model_dump(mode="json") for o in result.outcomes],
            "applied": len(result.applied),
            "skipped": sum(1 for o in result.outcomes if o.status is OutcomeStatus.SKIPPED),
            "failed": len(result.failures),
        }

    def _snapshot(self, instance: Any) -> dict[str, str]:
        """Public attribute values of *instance*, rendered as text."""
        descriptor = self._registry.resolver.describe(type(instance))
        state: dict[str, str] = {}
        names = list(descriptor.fields)
        names.extend(n for n in getattr(instance, "__dict__", {}) if not n.startswith("_"))
        for name in dict.fromkeys(names):
            if not hasattr(instance, name):
                continue
            value = getattr(instance, name)
            fld = descriptor.fields.get(name)
            declared = fld.declared if fld is not None else classify(type(value))
            state[name] = self._coercer.format(value, declared)
        return state


def _member_rows(descriptor: TypeDescriptor) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for fld in descriptor.fields.values():
        rows.append(
            {
                "key": fld.key,
                "kind": fld.kind.value,
                "name": fld.name,
                "declared": fld.declared.label,
                "approved": fld.approved,
            }
        )
    for key, candidates in sorted(descriptor.accessors.items()):
        for accessor in candidates:
            declared = accessor.declared.label
            if accessor.param != accessor.declared:
                declared = f"{declared} (as {accessor.param.label})"
            rows.append(
                {
                    "key": key,
                    "kind": accessor.kind.value,
                    "name": accessor.name,
                    "declared": declared,
                    "approved": accessor.approved,
                }
            )
    return rows
