"""Tests for config discovery and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from settable.config.discovery import CONFIG_FILENAME, find_config, load_config
from settable.config.models import SettableConfig


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SETTABLE_CONFIG", raising=False)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text('[binder]\ndefault_namespace = "shop"\n')
        assert find_config(tmp_path) == config_file

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")
        monkeypatch.setenv("SETTABLE_CONFIG", str(config_file))
        assert find_config(tmp_path / "elsewhere") == config_file

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv("SETTABLE_CONFIG", str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestLoadConfig:
    def test_loads_sections(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text(
            '[binder]\ndefault_namespace = "shop"\nstrict_registration = true\n'
            "[plugins]\nenabled = false\n"
        )
        cfg = load_config(config_file)
        assert cfg.binder.default_namespace == "shop"
        assert cfg.binder.strict_registration is True
        assert cfg.plugins.enabled is False
        assert cfg.plugins.local_dir == ".settable/plugins"

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        cfg = load_config(cwd=tmp_path)
        assert cfg == SettableConfig()
        assert cfg.binder.default_type is None

    def test_discovers_from_cwd(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text('[binder]\ndefault_type = "shop.Product"\n')
        assert load_config(cwd=tmp_path).binder.default_type == "shop.Product"

    def test_rejects_bad_types(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text('[plugins]\nenabled = "sometimes"\n')
        with pytest.raises(ValidationError):
            load_config(config_file)
