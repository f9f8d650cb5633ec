from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.forces import ForceWeights
from domain.models import GlobalStyles
from domain.services.serialize_document import TRACKING_PIXEL_PLACEHOLDER

DEFAULT_CONFIG_PATH = Path("config/editor.yaml")


class ForceSettings(BaseModel):
    grid: float = Field(default=0.3, ge=0)
    alignment: float = Field(default=0.4, ge=0)
    repulsion: float = Field(default=2.0, ge=0)
    damping: float = Field(default=0.7, ge=0, le=1)
    grid_threshold: float = Field(default=10.0, ge=0)
    alignment_tolerance: float = Field(default=15.0, ge=0)
    repulsion_margin: float = Field(default=0.0, ge=0)

    def to_weights(self) -> ForceWeights:
        return ForceWeights(
            grid=self.grid,
            alignment=self.alignment,
            repulsion=self.repulsion,
            damping=self.damping,
            grid_threshold=self.grid_threshold,
            alignment_tolerance=self.alignment_tolerance,
            repulsion_margin=self.repulsion_margin,
        )


class EditorSettings(BaseModel):
    snap_to_grid: bool = True
    default_global_styles: GlobalStyles = GlobalStyles()
    documents_dir: Path = Path("data/documents")
    html_out_dir: Path = Path("data/html")
    tracking_pixel_url: str = TRACKING_PIXEL_PLACEHOLDER
    forces: ForceSettings = ForceSettings()
    collision_passes: int = Field(default=8, ge=1)
    history_limit: int = Field(default=100, ge=1)

    @field_validator("tracking_pixel_url", mode="before")
    @classmethod
    def default_empty_pixel(cls, value: object) -> str:
        raw = str(value or "").strip()
        return raw or TRACKING_PIXEL_PLACEHOLDER


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NLC_", env_nested_delimiter="__")

    editor: EditorSettings = EditorSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("NLC_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
