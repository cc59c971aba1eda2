"""Configuration management for the receipt parser.

Loads and validates YAML configuration with defaults for the parser,
the API server, and logging.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from receipt_parser.models import Currency

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class ParserConfig(BaseModel):
    """Fallback values and limits for the deterministic extractors."""

    default_currency: Currency = Currency.RWF
    unknown_store_name: str = Field(default="Unknown Store", min_length=1)
    store_name_window: int = Field(default=10, ge=1)


class APIConfig(BaseModel):
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    parser: ParserConfig = Field(default_factory=ParserConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
