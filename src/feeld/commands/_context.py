"""AppContext: shared Click context for all commands.

Created once by the root group and handed to subcommands through
``@click.pass_obj``. Plugins are loaded lazily so ``--help`` and
``--version`` never import plugin code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from feeld.config.logging import configure_logging
from feeld.output.formatters import format_result

if TYPE_CHECKING:
    from feeld.config.settings import FeeldSettings
    from feeld.plugins.manager import PluginManager
    from feeld.services.result import ServiceResult


class AppContext:
    """Settings, the plugin manager, and result emission."""

    def __init__(self, settings: FeeldSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (created on first access, loaded by services)."""
        if self._plugins is None:
            from feeld.plugins.manager import PluginManager

            self._plugins = PluginManager()
        return self._plugins

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; a failed result goes to stderr and exits 1."""
        output = format_result(
            result,
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
            return
        click.echo(output, err=True)
        raise SystemExit(1)
