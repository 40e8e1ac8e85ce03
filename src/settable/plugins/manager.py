"""Plugin loading and registry population.

Two plugin sources feed one pluggy manager:

- distributions advertising the ``settable.plugins`` entry-point group
- single ``*.py`` files in a project's local plugin directory
  (``.settable/plugins/`` by default)

Loading only collects plugins. Types reach a :class:`TypeRegistry` when
:meth:`PluginManager.populate` runs the ``register_settable_types`` hook.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

import pluggy

from settable.plugins.hookspecs import PROJECT_NAME, SettableHookSpec

if TYPE_CHECKING:
    from settable.domain.registry import TypeRegistry

ENTRY_POINT_GROUP = "settable.plugins"
LOCAL_MODULE_PREFIX = "settable_local_plugin_"

logger = logging.getLogger(__name__)


class PluginManager:
    """Collects plugins and lets them register types."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(SettableHookSpec)
        self._loaded = False

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def is_loaded(self) -> bool:
        """Whether :meth:`discover_and_load` has run."""
        return self._loaded

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then any local single-file plugins.

        Returns the names of every registered plugin.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_class_plugins()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Registered plugin %s", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        return [self._name_of(p) for p in self._pm.get_plugins()]

    def populate(self, registry: TypeRegistry) -> int:
        """Run ``register_settable_types`` plugin by plugin.

        A plugin that raises is logged and skipped; whatever it registered
        before failing stays registered. Returns the number of identifiers
        added to *registry*.
        """
        start = len(registry)
        for plugin in self._pm.get_plugins():
            register = getattr(plugin, "register_settable_types", None)
            if register is None:
                continue
            try:
                register(registry=registry)
            except Exception:
                logger.warning(
                    "Failed to register types from plugin %s",
                    self._name_of(plugin),
                    exc_info=True,
                )
        added = len(registry) - start
        logger.debug("Plugins registered %d types", added)
        return added

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _name_of(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or type(plugin).__name__

    def _implements_hooks(self, obj: object) -> bool:
        """Whether *obj* has at least one ``@hookimpl`` method for this project."""
        return any(
            self._pm.parse_hookimpl_opts(obj, attr) is not None
            for attr in dir(obj)
            if not attr.startswith("_")
        )

    def _instantiate_class_plugins(self) -> None:
        """Swap plugin classes (as entry points may register them) for instances.

        Hooks on a bare class would be called without ``self``.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._implements_hooks(plugin):
                continue
            name = self._name_of(plugin)
            self._pm.unregister(plugin)
            try:
                self._pm.register(plugin(), name=name)
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)

    def _load_local(self, path: Path) -> None:
        """Import one local plugin file and register its hook classes.

        Failures are logged; a broken file never stops the others loading.
        """
        module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
        module = _import_file(module_name, path)
        if module is None:
            return
        for cls in _classes_defined_in(module):
            if not self._implements_hooks(cls):
                continue
            try:
                self.register_plugin(cls(), name=module_name)
            except Exception:
                logger.warning(
                    "Failed to instantiate plugin class %s from %s",
                    cls.__name__,
                    path,
                    exc_info=True,
                )


def _import_file(module_name: str, path: Path) -> ModuleType | None:
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Could not create module spec for %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        return None
    return module


def _classes_defined_in(module: ModuleType) -> Iterator[type]:
    """Classes whose home is *module* (imported names are skipped)."""
    for _name, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ == module.__name__:
            yield obj
