"""Drains the serial session's payload stream into the record cache."""

import asyncio
import logging

from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.schema.decoder import RecordDecoder
from megasquirt_logger.serial.session import SerialSession

logger = logging.getLogger(__name__)


class RecordConsumer:
    """Decodes every payload the session produces and publishes the result."""

    def __init__(self, session: SerialSession, decoder: RecordDecoder, cache: RecordCache):
        self._session = session
        self._decoder = decoder
        self._cache = cache
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        """Whether the consumer task is active."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start consuming payloads."""
        if self.running:
            return

        self._task = asyncio.create_task(self._consume())
        logger.info("Record consumer started")

    async def stop(self) -> None:
        """Stop consuming payloads."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Record consumer stopped")

    async def _consume(self) -> None:
        async for payload in self._session.payloads():
            snapshot = self._decoder.decode(payload)
            if snapshot.errors:
                logger.warning("Record decoded with %d failed channel(s)", len(snapshot.errors))
            await self._cache.update(snapshot)
        logger.info("Payload stream ended")
