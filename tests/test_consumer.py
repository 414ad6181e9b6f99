"""Unit tests for the record consumer."""

import asyncio

import pytest

from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.core.consumer import RecordConsumer
from megasquirt_logger.schema.compiler import compile_channels
from megasquirt_logger.schema.decoder import RecordDecoder
from megasquirt_logger.schema.loader import parse_schema

from conftest import build_record


class FakeSession:
    """Payload stream fed from a queue, ended by None."""

    def __init__(self):
        self.queue: asyncio.Queue[bytes | None] = asyncio.Queue()

    async def payloads(self):
        while True:
            payload = await self.queue.get()
            if payload is None:
                return
            yield payload


@pytest.fixture
def decoder(schema_text) -> RecordDecoder:
    return RecordDecoder(compile_channels(parse_schema(schema_text).sections))


async def wait_for_count(cache: RecordCache, count: int) -> None:
    async def poll():
        while cache.count < count:
            await asyncio.sleep(0)

    await asyncio.wait_for(poll(), timeout=2.0)


class TestRecordConsumer:
    """Tests for RecordConsumer."""

    @pytest.mark.asyncio
    async def test_publishes_decoded_records(self, decoder):
        """Each payload ends up decoded in the cache."""
        session = FakeSession()
        cache = RecordCache()
        consumer = RecordConsumer(session, decoder, cache)

        await consumer.start()
        try:
            await session.queue.put(build_record(rpm=800))
            await session.queue.put(build_record(rpm=900))
            await wait_for_count(cache, 2)
        finally:
            await consumer.stop()

        snapshot = await cache.get()
        assert snapshot.values["rpm"].value == 900.0
        assert snapshot.errors == {}

    @pytest.mark.asyncio
    async def test_partial_record_still_published(self, decoder):
        """Channel failures are carried on the snapshot, not dropped."""
        session = FakeSession()
        cache = RecordCache()
        consumer = RecordConsumer(session, decoder, cache)

        await consumer.start()
        try:
            await session.queue.put(build_record()[:16])
            await wait_for_count(cache, 1)
        finally:
            await consumer.stop()

        snapshot = await cache.get()
        assert "coolant" in snapshot.errors
        assert snapshot.values["rpm"].value == 850.0

    @pytest.mark.asyncio
    async def test_stream_end_finishes_task(self, decoder):
        """The consumer task completes when the stream ends."""
        session = FakeSession()
        consumer = RecordConsumer(session, decoder, RecordCache())

        await consumer.start()
        assert consumer.running is True

        await session.queue.put(None)
        await asyncio.wait_for(consumer._task, timeout=2.0)

        assert consumer.running is False
        await consumer.stop()

    @pytest.mark.asyncio
    async def test_start_stop(self, decoder):
        """Stop cancels a waiting consumer."""
        consumer = RecordConsumer(FakeSession(), decoder, RecordCache())

        await consumer.start()
        await consumer.start()
        await consumer.stop()

        assert consumer.running is False

    @pytest.mark.asyncio
    async def test_stop_without_start(self, decoder):
        consumer = RecordConsumer(FakeSession(), decoder, RecordCache())

        await consumer.stop()

        assert consumer.running is False
