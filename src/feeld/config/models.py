"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, feeld.toml only contains overrides.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from feeld.domain.fields import RenderOptions

# --- feeld.toml sections ---


class RenderConfig(BaseModel):
    """[render] section."""

    model_config = {"frozen": True}

    template_dir: Path | None = None
    error_container_class: str = "feeld-errors"
    radio_container_class: str = "radio-pair"
    radio_label_class: str = "radio-pair-label"

    def to_options(self) -> RenderOptions:
        return RenderOptions(
            template_dir=self.template_dir,
            radio_container_class=self.radio_container_class,
            radio_label_class=self.radio_label_class,
            error_container_class=self.error_container_class,
        )


class MessagesConfig(BaseModel):
    """[messages] section.

    ``overrides`` maps a constraint kind (``min_len``) to replacement text
    using the ``{label}`` and ``{param}`` placeholders.
    """

    model_config = {"frozen": True}

    overrides: dict[str, str] = Field(default_factory=dict)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: Path = Path(".feeld/plugins")


class FeeldConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    render: RenderConfig = Field(default_factory=RenderConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
