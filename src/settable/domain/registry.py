"""TypeRegistry — stable identifiers to constructible, approved types.

Types are registered explicitly at process start (directly, or through the
``register_settable_types`` plugin hook). Nothing is ever imported by name,
so a request can only name a type the process already chose to expose.

Identifiers default to ``"<module>.<qualname>"``. A bare name in a request
is qualified with a default namespace before lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from settable.domain.errors import (
    ConstructionError,
    RegistrationError,
    TypeNotApprovedError,
    TypeNotFoundError,
)
from settable.domain.members import MemberResolver, TypeDescriptor

logger = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = "."


@dataclass(frozen=True)
class TypeHandle:
    """A resolved type: identifier, class, and zero-argument factory."""

    name: str
    type: type
    factory: Callable[[], Any]
    approved: bool


def default_name(cls: type) -> str:
    return f"{cls.__module__}{NAMESPACE_SEPARATOR}{cls.__qualname__}"


class TypeRegistry:
    """Explicit identifier -> constructor registry.

    Parameters:
        resolver: Member resolver whose descriptor cache and approval policy
            the registry shares. A fresh one is created if omitted.
        strict: Raise :class:`RegistrationError` when a registered type has
            ambiguous accessors, instead of logging and rejecting those keys
            at bind time.
    """

    def __init__(self, resolver: MemberResolver | None = None, *, strict: bool = False) -> None:
        self._resolver = resolver or MemberResolver()
        self._strict = strict
        self._entries: dict[str, TypeHandle] = {}

    @property
    def resolver(self) -> MemberResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        cls: type,
        *,
        name: str | None = None,
        factory: Callable[[], Any] | None = None,
    ) -> str:
        """Register *cls* under *name* and return the identifier used.

        The type's capability table is built eagerly so that accessor
        ambiguity surfaces at registration rather than on first request.

        Raises:
            RegistrationError: *name* is taken by another type, or *strict*
                is set and the type has ambiguous accessors.
        """
        ident = name or default_name(cls)
        existing = self._entries.get(ident)
        if existing is not None and existing.type is not cls:
            msg = f"Identifier {ident!r} already registered for {default_name(existing.type)}"
            raise RegistrationError(msg)

        descriptor = self._resolver.describe(cls)
        ambiguous = descriptor.ambiguous_keys()
        if ambiguous:
            msg = (
                f"Class {default_name(cls)} has name-overloaded setters for "
                f"{', '.join(ambiguous)}; those keys will be rejected"
            )
            if self._strict:
                raise RegistrationError(msg)
            logger.error(msg)

        self._entries[ident] = TypeHandle(
            name=ident,
            type=cls,
            factory=factory or cls,
            approved=descriptor.approved,
        )
        logger.debug("Registered %s (approved=%s)", ident, descriptor.approved)
        return ident

    def register_alias(self, alias: str, name: str) -> None:
        """Make an existing entry reachable under *alias* as well."""
        handle = self._entries.get(name)
        if handle is None:
            msg = f"Cannot alias unknown type {name!r}"
            raise RegistrationError(msg)
        existing = self._entries.get(alias)
        if existing is not None and existing.type is not handle.type:
            msg = f"Identifier {alias!r} already registered for {default_name(existing.type)}"
            raise RegistrationError(msg)
        self._entries[alias] = TypeHandle(
            name=alias, type=handle.type, factory=handle.factory, approved=handle.approved
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, name: str, default_namespace: str | None = None) -> TypeHandle:
        """Resolve a request's type name to an approved handle.

        Raises:
            TypeNotFoundError: The name is unqualified with no namespace to
                qualify it, or nothing is registered under it.
            TypeNotApprovedError: The type lacks type-level approval.
        """
        ident = name
        if NAMESPACE_SEPARATOR not in name:
            if default_namespace is None:
                msg = f"Default namespace not supplied, and type name {name!r} is not qualified"
                logger.error(msg)
                raise TypeNotFoundError(msg)
            ident = f"{default_namespace}{NAMESPACE_SEPARATOR}{name}"

        handle = self._entries.get(ident)
        if handle is None:
            msg = f"Type {ident!r} could not be found"
            raise TypeNotFoundError(msg)
        if not handle.approved:
            msg = f"Type {ident} is not marked user_settable, refusing to instantiate it"
            raise TypeNotApprovedError(msg)
        return handle

    def handle_for(self, default_type: type | str) -> TypeHandle:
        """Handle for a caller-chosen fallback type. No approval check.

        Raises:
            TypeNotFoundError: *default_type* is an identifier that isn't
                registered.
        """
        if isinstance(default_type, str):
            handle = self._entries.get(default_type)
            if handle is None:
                msg = f"Default type {default_type!r} could not be found"
                raise TypeNotFoundError(msg)
            return handle
        for handle in self._entries.values():
            if handle.type is default_type:
                return handle
        return TypeHandle(
            name=default_name(default_type),
            type=default_type,
            factory=default_type,
            approved=self._resolver.describe(default_type).approved,
        )

    def construct(self, handle: TypeHandle) -> Any:
        """Instantiate via the zero-argument factory.

        Raises:
            ConstructionError: The factory needs arguments or raised.
        """
        try:
            return handle.factory()
        except Exception as exc:
            msg = f"Could not instantiate {handle.name}: {exc}"
            raise ConstructionError(msg) from exc

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def describe(self, name: str) -> TypeDescriptor:
        """Capability table for a registered identifier.

        Raises:
            TypeNotFoundError: Nothing is registered under *name*.
        """
        handle = self._entries.get(name)
        if handle is None:
            msg = f"Type {name!r} could not be found"
            raise TypeNotFoundError(msg)
        return self._resolver.describe(handle.type)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[TypeHandle]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
