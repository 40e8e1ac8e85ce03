"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, settable.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class BinderConfig(BaseModel):
    """[binder] section."""

    model_config = {"frozen": True}

    default_namespace: str | None = None
    default_type: str | None = None
    strict_registration: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".settable/plugins"


class SettableConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    binder: BinderConfig = Field(default_factory=BinderConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
