"""Pluggy hook specifications for settable.

Plugins populate the type registry at process start; nothing is ever
imported by type name at request time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from settable.domain.registry import TypeRegistry

PROJECT_NAME = "settable"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class SettableHookSpec:
    """Hook specifications for the settable plugin system."""

    @hookspec
    def register_settable_types(self, registry: TypeRegistry) -> None:
        """Register the types this plugin exposes to external binding.

        Call ``registry.register(cls, name=...)`` for each type. Types still
        need the ``user_settable`` marker to be reachable via ``"class"``.
        """
