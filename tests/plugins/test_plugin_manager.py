"""Tests for PluginManager — registration and registry population."""

from __future__ import annotations

import logging
from typing import Annotated

import pytest

from settable import user_settable
from settable.domain.registry import TypeRegistry
from settable.plugins.hookspecs import hookimpl
from settable.plugins.manager import PluginManager


@user_settable
class Lamp:
    watts: Annotated[int, user_settable] = 40


class LampPlugin:
    @hookimpl
    def register_settable_types(self, registry: TypeRegistry) -> None:
        registry.register(Lamp, name="home.Lamp")


class BrokenPlugin:
    @hookimpl
    def register_settable_types(self, registry: TypeRegistry) -> None:
        raise RuntimeError("plugin exploded")


class TestPluginManager:
    def test_register_and_list(self) -> None:
        pm = PluginManager()
        pm.register_plugin(LampPlugin())
        assert "LampPlugin" in pm.list_plugin_names()
        assert not pm.is_loaded

    def test_custom_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(LampPlugin(), name="lamps")
        assert "lamps" in pm.list_plugin_names()

    def test_unregister(self) -> None:
        pm = PluginManager()
        plugin = LampPlugin()
        pm.register_plugin(plugin)
        pm.unregister(plugin)
        assert "LampPlugin" not in pm.list_plugin_names()

    def test_discover_marks_loaded(self) -> None:
        pm = PluginManager()
        pm.discover_and_load()
        assert pm.is_loaded

    def test_populate(self) -> None:
        pm = PluginManager()
        pm.register_plugin(LampPlugin())
        registry = TypeRegistry()
        assert pm.populate(registry) == 1
        assert "home.Lamp" in registry

    def test_hook_call(self) -> None:
        pm = PluginManager()
        pm.register_plugin(LampPlugin())
        registry = TypeRegistry()
        pm.hook.register_settable_types(registry=registry)
        assert registry.names() == ["home.Lamp"]

    def test_failing_plugin_is_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(BrokenPlugin())
        pm.register_plugin(LampPlugin())
        registry = TypeRegistry()
        with caplog.at_level(logging.WARNING, logger="settable"):
            added = pm.populate(registry)
        assert added == 1
        assert "Failed to register types from plugin BrokenPlugin" in caplog.text
