"""FeeldSettings: one frozen object for flags, environment and config file.

Sources, strongest first:

1. keyword arguments (the CLI passes its global flags here)
2. ``FEELD_*`` environment variables, ``__`` between nested keys
   (``FEELD_RENDER__ERROR_CONTAINER_CLASS``)
3. the project config file, ``feeld.toml`` or ``[tool.feeld]``
4. section model defaults
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from dataclasses import replace
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from feeld.config.discovery import find_config, read_config_table
from feeld.config.models import MessagesConfig, PluginsConfig, RenderConfig
from feeld.domain.fields import RenderOptions

# Config file for the settings object under construction.
_active_config: ContextVar[Path | None] = ContextVar("feeld_active_config", default=None)


class ConfigFileSource(PydanticBaseSettingsSource):
    """Settings read from the project config file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self._table: dict[str, Any] = {}
        if path is None:
            return
        try:
            self._table = read_config_table(path)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._table.get(field_name), field_name, field_name in self._table

    def __call__(self) -> dict[str, Any]:
        return self._table


class FeeldSettings(BaseSettings):
    """Settings shared by the CLI and the service layer.

    ``project_root`` anchors every relative path found in configuration
    (``render.template_dir``, ``plugins.local_dir``). ``config_path`` is the
    file the sections were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FEELD_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    render: RenderConfig = Field(default_factory=RenderConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
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
        return (
            init_settings,
            env_settings,
            ConfigFileSource(settings_cls, _active_config.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **flags: Any,
    ) -> FeeldSettings:
        """Build settings the way the ``feeld`` command does.

        An explicit *config_path* must exist. Otherwise the config file is
        searched for upward from *project_root* (or the working directory).
        Without an explicit *project_root* the directory holding the config
        file becomes the root.
        """
        if config_path:
            source: Path | None = Path(config_path)
            if not source.is_file():
                raise click.ClickException(f"Config file not found: {config_path}")
        else:
            source = find_config(project_root)

        if project_root is None:
            project_root = source.parent if source else Path.cwd()

        token = _active_config.set(source)
        try:
            return cls(project_root=project_root, config_path=source, **flags)
        finally:
            _active_config.reset(token)

    def resolve_path(self, path: Path) -> Path:
        """Anchor a relative *path* at the project root."""
        return path if path.is_absolute() else self.project_root / path

    def render_options(self) -> RenderOptions:
        """Render options with the template directory anchored at the root."""
        options = self.render.to_options()
        if options.template_dir is None:
            return options
        return replace(options, template_dir=self.resolve_path(options.template_dir))

    @property
    def plugin_dir(self) -> Path:
        return self.resolve_path(self.plugins.local_dir)
