"""Shared pytest fixtures for settable tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from settable.domain.binder import Binder
from settable.domain.members import MemberResolver
from settable.domain.registry import TypeRegistry
from settable.services.bind import BindService
from tests import samples

SAMPLE_NAMESPACE = "samples"

SAMPLE_TYPES: tuple[type, ...] = (
    samples.Sample,
    samples.SampleChild,
    samples.Profile,
    samples.Thermostat,
    samples.Overloaded,
    samples.Counter,
    samples.Unmarked,
    samples.NeedsArgs,
    samples.Exploding,
    samples.Invoice,
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def resolver() -> MemberResolver:
    """Resolver with an empty descriptor cache."""
    return MemberResolver()


@pytest.fixture
def registry(resolver: MemberResolver) -> TypeRegistry:
    """Registry with every sample type under ``samples.<ClassName>``."""
    reg = TypeRegistry(resolver)
    for cls in SAMPLE_TYPES:
        reg.register(cls, name=f"{SAMPLE_NAMESPACE}.{cls.__name__}")
    return reg


@pytest.fixture
def binder(registry: TypeRegistry) -> Binder:
    return Binder(registry)


@pytest.fixture
def service(binder: Binder, registry: TypeRegistry) -> BindService:
    return BindService(binder, registry)


# ---------------------------------------------------------------------------
# CLI project layout
# ---------------------------------------------------------------------------

SHOP_PLUGIN_SRC = '''\
import enum
from datetime import date
from typing import Annotated

import pluggy

from settable import user_settable

hookimpl = pluggy.HookimplMarker("settable")


class Category(enum.Enum):
    LIGHTING = 1
    FURNITURE = 2


@user_settable
class Product:
    name: Annotated[str, user_settable] = ""
    price: Annotated[float, user_settable] = 0.0
    listed: Annotated[bool, user_settable] = False
    category: Annotated[Category, user_settable] = Category.FURNITURE
    released: Annotated[date, user_settable] = date(2020, 1, 1)
    cost: float = 0.0


class Internal:
    name: Annotated[str, user_settable] = ""


class ShopPlugin:
    @hookimpl
    def register_settable_types(self, registry):
        registry.register(Product, name="shop.Product")
        registry.register(Internal, name="shop.Internal")
'''


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project directory with a local plugin registering ``shop.*`` types."""
    plugins = tmp_path / ".settable" / "plugins"
    plugins.mkdir(parents=True)
    (plugins / "shop.py").write_text(SHOP_PLUGIN_SRC, encoding="utf-8")
    return tmp_path


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project so the CLI discovers its plugin.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.delenv("SETTABLE_CONFIG", raising=False)
    monkeypatch.chdir(project_root)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("settable")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)
