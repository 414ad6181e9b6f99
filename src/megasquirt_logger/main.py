"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from megasquirt_logger import __version__
from megasquirt_logger.api.dependencies import app_state
from megasquirt_logger.api.routes import router as api_router
from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.core.config import Settings, setup_logging
from megasquirt_logger.core.consumer import RecordConsumer
from megasquirt_logger.core.models import HealthResponse
from megasquirt_logger.protocol.frames import hex_dump
from megasquirt_logger.schema.compiler import compile_channels
from megasquirt_logger.schema.decoder import RecordDecoder
from megasquirt_logger.schema.loader import load_schema
from megasquirt_logger.serial.connection import SerialConnection
from megasquirt_logger.serial.session import ConnectionState, SerialSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    settings = app_state.settings or Settings()
    app_state.settings = settings

    setup_logging(settings.log_level)
    logger.info(f"Starting Megasquirt logger v{__version__}")

    # Schema errors are fatal: let them abort startup
    app_state.schema = load_schema(settings.schema_file)
    app_state.decoder = RecordDecoder(compile_channels(app_state.schema.sections))
    logger.info("Datalog entries: %s", app_state.schema.datalog_entries)

    # Initialize components
    app_state.cache = RecordCache()
    app_state.connection = SerialConnection(port=settings.serial_port)
    app_state.session = SerialSession(
        connection=app_state.connection,
        record_size=settings.record_size,
    )
    app_state.consumer = RecordConsumer(app_state.session, app_state.decoder, app_state.cache)

    # Session retries open and handshake in the background
    await app_state.consumer.start()
    await app_state.session.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    if app_state.session is not None:
        await app_state.session.stop()
    if app_state.consumer is not None:
        await app_state.consumer.stop()


app = FastAPI(
    title="Megasquirt Logger",
    description="Realtime data logger for Megasquirt engine controllers",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Hex dump of the latest raw record, for debugging."""
    cache = app_state.cache
    snapshot = await cache.get() if cache is not None else None
    if snapshot is None:
        return ""
    return hex_dump(snapshot.raw)


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    session = app_state.session
    cache = app_state.cache

    if session is None or cache is None:
        return HealthResponse(
            status="unhealthy",
            state=ConnectionState.CLOSED.value,
            records_count=0,
            last_update=None,
        )

    polling = session.state == ConnectionState.POLLING
    status = "healthy" if polling and cache.count > 0 else ("degraded" if polling else "unhealthy")

    return HealthResponse(
        status=status,
        state=session.state.value,
        records_count=cache.count,
        last_update=cache.last_update,
    )


def main():
    """Run the application (for CLI entry point)."""
    import uvicorn

    settings = Settings()
    setup_logging(settings.log_level)
    app_state.settings = settings

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
