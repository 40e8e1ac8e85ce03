"""Tests for SettableSettings — flag, env, and TOML precedence."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from settable.config.discovery import CONFIG_FILENAME
from settable.config.settings import SettableSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("SETTABLE_CONFIG", "SETTABLE_VERBOSE", "SETTABLE_BINDER__DEFAULT_NAMESPACE"):
        monkeypatch.delenv(var, raising=False)


def _write(root: Path, text: str) -> Path:
    path = root / CONFIG_FILENAME
    path.write_text(text, encoding="utf-8")
    return path


class TestFromCli:
    def test_defaults(self, tmp_path: Path) -> None:
        settings = SettableSettings.from_cli(project_root=tmp_path)
        assert settings.config_path is None
        assert settings.binder.default_namespace is None
        assert settings.plugins.enabled is True
        assert settings.plugins_dir == tmp_path / ".settable" / "plugins"

    def test_toml_is_read(self, tmp_path: Path) -> None:
        path = _write(tmp_path, '[binder]\ndefault_namespace = "shop"\n')
        settings = SettableSettings.from_cli(project_root=tmp_path)
        assert settings.config_path == path
        assert settings.binder.default_namespace == "shop"

    def test_root_from_config_location(self, tmp_path: Path) -> None:
        path = _write(tmp_path, '[plugins]\nlocal_dir = "plugins"\n')
        settings = SettableSettings.from_cli(config_path=str(path))
        assert settings.project_root == tmp_path
        assert settings.plugins_dir == tmp_path / "plugins"

    def test_absolute_plugin_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        _write(tmp_path, f'[plugins]\nlocal_dir = "{target.as_posix()}"\n')
        settings = SettableSettings.from_cli(project_root=tmp_path)
        assert settings.plugins_dir == target

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write(tmp_path, '[binder]\ndefault_namespace = "shop"\n')
        monkeypatch.setenv("SETTABLE_BINDER__DEFAULT_NAMESPACE", "lab")
        settings = SettableSettings.from_cli(project_root=tmp_path)
        assert settings.binder.default_namespace == "lab"

    def test_flags_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SETTABLE_VERBOSE", "false")
        settings = SettableSettings.from_cli(project_root=tmp_path, verbose=True)
        assert settings.verbose is True

    def test_invalid_toml(self, tmp_path: Path) -> None:
        _write(tmp_path, "[binder\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            SettableSettings.from_cli(project_root=tmp_path)
