"""Application configuration using pydantic-settings."""

import logging
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables
    prefixed with MSLOGGER_ (e.g., MSLOGGER_SERIAL_PORT).
    """

    serial_port: str = "/dev/ttyUSB0"
    schema_file: str = "config/mainController.ini"
    record_size: int = Field(212, gt=0, le=0xFFFF)
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="MSLOGGER_")


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
