"""
Configuration management for the asset pipeline.

Uses pydantic-settings to load configuration from environment variables,
.env files and the ``config.toml`` that lives at the root of the staging tree.
"""

import tomllib
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, TomlConfigSettingsSource

DEFAULT_SOURCE_DIR = Path("assets-dev")
DEFAULT_CONFIG_FILE_NAME = "config.toml"

DEFAULT_CONFIG_TEXT = """\
file_watching_rate_seconds = 0.3

[extensions]
raw = []
texture = ["jpg", "png"]
mesh = ["glb", "gltf"]
audio = ["ogg", "wav"]

[meshes]
use_meshlets = false
storage = "glb"

[textures]
filter = "linear"
"""


class MeshStorage(str, Enum):
    """Canonical container every mesh is written as."""

    GLB = "glb"
    GLTF = "gltf"


class TextureFilter(str, Enum):
    NEAREST = "nearest"
    LINEAR = "linear"


def _normalise_extensions(values: list[str]) -> list[str]:
    """Lowercase, strip leading dots and drop duplicates, keeping order."""
    seen: list[str] = []
    for value in values:
        ext = value.strip().lstrip(".").lower()
        if ext and ext not in seen:
            seen.append(ext)
    return seen


class ExtensionSettings(BaseModel):
    """Per-kind extension lists (case-insensitive, no leading dot)."""

    model_config = ConfigDict(frozen=True)

    raw: list[str] = []
    texture: list[str] = ["jpg", "png"]
    mesh: list[str] = ["glb", "gltf"]
    audio: list[str] = ["ogg", "wav"]

    @field_validator("raw", "texture", "mesh", "audio")
    @classmethod
    def _lowercase(cls, value: list[str]) -> list[str]:
        return _normalise_extensions(value)


class MeshSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    use_meshlets: bool = False  # reserved, no meshlet builder yet
    storage: MeshStorage = MeshStorage.GLB

    @field_validator("storage", mode="before")
    @classmethod
    def _lower_storage(cls, value):
        return value.lower() if isinstance(value, str) else value


class TextureSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    filter: TextureFilter = TextureFilter.LINEAR
    max_size: Optional[int] = None  # longest edge in pixels, None keeps size

    @field_validator("filter", mode="before")
    @classmethod
    def _lower_filter(cls, value):
        return value.lower() if isinstance(value, str) else value


class Settings(BaseSettings):
    """Read-only pipeline settings snapshot."""

    # Scheduling
    file_watching_rate_seconds: float = Field(default=0.3, gt=0)
    worker_threads: int = Field(default=2, ge=0)  # per processor kind, 0 runs items inline

    # Processor kinds
    extensions: ExtensionSettings = ExtensionSettings()
    meshes: MeshSettings = MeshSettings()
    textures: TextureSettings = TextureSettings()

    # Trees
    source_dir: Path = DEFAULT_SOURCE_DIR
    output_dir: Path = Path("assets")
    config_file_name: str = DEFAULT_CONFIG_FILE_NAME

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="ASSET_PIPELINE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def config_path(self) -> Path:
        """Path of the configuration file excluded from scans."""
        return self.source_dir / self.config_file_name


def read_config_file(config_path: Path) -> dict:
    """
    Read TOML values from ``config_path``.

    Args:
        config_path: Path to the configuration file

    Returns:
        Mapping of settings values, empty if the file does not exist
    """
    return dict(TomlConfigSettingsSource(Settings, toml_file=config_path)())


def write_default_config(config_path: Path) -> None:
    """Create ``config_path`` with the default settings, ignoring write errors."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")
        logger.info(f"Wrote default configuration to {config_path}")
    except OSError as e:
        logger.warning(f"Could not write default configuration {config_path}: {e}")


def load_settings(
    source_dir: Path = DEFAULT_SOURCE_DIR,
    config_file_name: str = DEFAULT_CONFIG_FILE_NAME,
    **overrides,
) -> Settings:
    """
    Load settings for the staging tree at ``source_dir``.

    Values from the config file override environment values; explicit
    ``overrides`` win over both. A missing config file is generated with the
    defaults and a corrupted one is reported and ignored.

    Args:
        source_dir: Staging tree root
        config_file_name: Name of the config file inside ``source_dir``
        **overrides: Field values that take precedence over the file

    Returns:
        Settings snapshot
    """
    config_path = source_dir / config_file_name
    base = {"source_dir": source_dir, "config_file_name": config_file_name}

    if not config_path.exists():
        write_default_config(config_path)
        return Settings(**base, **overrides)

    try:
        values = read_config_file(config_path)
        return Settings(**{**values, **base, **overrides})
    except (tomllib.TOMLDecodeError, ValidationError) as e:
        logger.error(f"Configuration appears to be corrupted ({config_path}): {e}")
        return Settings(**base, **overrides)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
