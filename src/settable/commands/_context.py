"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  The registry is populated from plugins on first use,
so ``--help`` and ``--version`` never load plugin code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from settable.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from settable.config.settings import SettableSettings
    from settable.domain.registry import TypeRegistry
    from settable.services.bind import BindService
    from settable.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: SettableSettings) -> None:
        self.settings = settings
        self._registry: TypeRegistry | None = None
        self._service: BindService | None = None

        from settable.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

    @property
    def registry(self) -> TypeRegistry:
        """The type registry, populated from plugins on first access."""
        if self._registry is None:
            from settable.domain.registry import TypeRegistry

            registry = TypeRegistry(strict=self.settings.binder.strict_registration)
            if self.settings.plugins.enabled:
                from settable.plugins.manager import PluginManager

                pm = PluginManager()
                pm.discover_and_load(local_dir=self.settings.plugins_dir)
                pm.populate(registry)
            self._registry = registry
        return self._registry

    @property
    def service(self) -> BindService:
        if self._service is None:
            from settable.domain.binder import Binder
            from settable.services.bind import BindService

            binder = Binder(
                self.registry,
                default_namespace=self.settings.binder.default_namespace,
            )
            self._service = BindService(binder, self.registry)
        return self._service

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and set the exit status.

        Successful results go to stdout, with one ``WARNING:`` line per
        rejected key on stderr (JSON and quiet output leave them out). Failed
        results go to stderr and exit with status 1.
        """
        out = self.output_settings
        text = format_result(result, settings=out)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)
        click.echo(text)
        if out.json_output or out.quiet:
            return
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
