"""SettableSettings — one frozen object for flags, env vars, and settable.toml.

Precedence, highest first:

1. keyword arguments (the CLI flags)
2. ``SETTABLE_*`` environment variables, ``__`` for nested sections
   (``SETTABLE_BINDER__DEFAULT_NAMESPACE=shop``)
3. the discovered ``settable.toml``
4. defaults on the section models
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from settable.config.discovery import find_config
from settable.config.models import BinderConfig, PluginsConfig

# The TOML file for the settings object currently being built.
_active_config: ContextVar[Path | None] = ContextVar("settable_active_config", default=None)


class SettableSettings(BaseSettings):
    """Resolved settings for a CLI invocation.

    Attributes:
        project_root: Directory of the config file, or the working directory
            when there is none. Relative plugin directories hang off it.
        config_path: Config file in use, if any.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="SETTABLE_",
        env_nested_delimiter="__",
    )

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    binder: BinderConfig = Field(default_factory=BinderConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlConfigSettingsSource(settings_cls, toml_file=_active_config.get())
        return init_settings, env_settings, toml

    @property
    def plugins_dir(self) -> Path:
        """Local plugin directory; relative paths resolve against ``project_root``."""
        path = Path(self.plugins.local_dir)
        if path.is_absolute():
            return path
        return self.project_root / path

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **flags: Any,
    ) -> SettableSettings:
        """Build settings for one invocation.

        An explicit *config_path* wins over walk-up discovery from
        *project_root* (or the working directory).

        Raises:
            click.ClickException: The config file is not valid TOML.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(project_root)

        if project_root is None:
            project_root = toml_path.parent if toml_path is not None else Path.cwd()

        token = _active_config.set(toml_path)
        try:
            return cls(project_root=project_root, config_path=toml_path, **flags)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _active_config.reset(token)
