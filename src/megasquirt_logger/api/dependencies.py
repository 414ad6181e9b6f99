"""FastAPI dependency injection for shared application state."""

from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.core.config import Settings
from megasquirt_logger.core.consumer import RecordConsumer
from megasquirt_logger.schema.decoder import RecordDecoder
from megasquirt_logger.schema.loader import SchemaSource
from megasquirt_logger.serial.connection import SerialConnection
from megasquirt_logger.serial.session import SerialSession


class AppState:
    """Holds shared application state instances.

    Created during app startup and accessed via FastAPI dependencies.
    """

    def __init__(self) -> None:
        self.settings: Settings | None = None
        self.schema: SchemaSource | None = None
        self.decoder: RecordDecoder | None = None
        self.connection: SerialConnection | None = None
        self.session: SerialSession | None = None
        self.cache: RecordCache | None = None
        self.consumer: RecordConsumer | None = None


# Global app state singleton
app_state = AppState()


def get_cache() -> RecordCache:
    """Get the record cache instance."""
    assert app_state.cache is not None, "App not initialized"
    return app_state.cache


def get_decoder() -> RecordDecoder:
    """Get the record decoder instance."""
    assert app_state.decoder is not None, "App not initialized"
    return app_state.decoder


def get_schema() -> SchemaSource:
    """Get the loaded schema."""
    assert app_state.schema is not None, "App not initialized"
    return app_state.schema


def get_settings() -> Settings:
    """Get the settings instance."""
    assert app_state.settings is not None, "App not initialized"
    return app_state.settings
