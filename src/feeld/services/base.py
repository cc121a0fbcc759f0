"""BaseService: shared construction for feeld services.

Every service receives the resolved :class:`FeeldSettings` and an optional
:class:`PluginManager`. Plugins are discovered lazily, on the first
operation that needs a collaborator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from feeld.plugins.manager import PluginManager

if TYPE_CHECKING:
    from feeld.config.settings import FeeldSettings

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes."""

    def __init__(
        self,
        settings: FeeldSettings,
        plugins: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._plugins = plugins

    @property
    def settings(self) -> FeeldSettings:
        return self._settings

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager, loading plugins on first access when enabled."""
        if self._plugins is None:
            self._plugins = PluginManager()
        if not self._plugins.is_loaded and self._settings.plugins.enabled:
            names = self._plugins.discover_and_load(local_dir=self._settings.plugin_dir)
            logger.debug("Loaded plugins: %s", names)
        return self._plugins
