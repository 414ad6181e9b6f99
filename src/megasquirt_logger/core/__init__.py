"""Core application functionality."""

from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.core.config import Settings, setup_logging
from megasquirt_logger.core.models import ChannelValue, RecordSnapshot

__all__ = [
    "ChannelValue",
    "RecordCache",
    "RecordSnapshot",
    "Settings",
    "setup_logging",
]
