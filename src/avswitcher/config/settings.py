"""Configuration management for avswitcher.

Loads settings from a YAML configuration file with environment variable
overrides (AVSWITCHER_ prefix, '__' for nested sections). Supports .env
files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/avswitcher.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8014, ge=1, le=65535)


class ChannelConfig(BaseModel):
    device_port: int = Field(default=5000, ge=1, le=65535, description="Switcher TCP port")
    connect_timeout: float = Field(default=5.0, gt=0)
    welcome_timeout: float = Field(default=3.0, gt=0)
    response_timeout: float = Field(default=5.0, gt=0)
    idle_timeout: float = Field(default=10.0, gt=0, description="Pooled connection idle window")
    sweep_interval: float = Field(default=1.0, gt=0)
    read_chunk_size: int = Field(default=128, gt=0)


class ViaConfig(BaseModel):
    port: int = Field(default=9982, ge=1, le=65535)
    read_welcome: bool = Field(default=True)
    pooled: bool = Field(default=False)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the avswitcher service.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "AVSWITCHER_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    via: ViaConfig = Field(default_factory=ViaConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: init values (YAML) > env vars > .env file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
