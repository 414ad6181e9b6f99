"""Supervisory serial session: open, handshake, poll, reconnect.

The session is a single sequential state machine running in one asyncio
task. It is the only code that touches the connection. Successfully fetched
realtime records are pushed, in fetch order, onto a queue that consumers
drain through ``payloads()``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from enum import Enum

from megasquirt_logger.core.exceptions import FrameError, TransportError
from megasquirt_logger.protocol.commands import build_communication_test, build_realtime_fetch
from megasquirt_logger.protocol.constants import (
    ERROR_THRESHOLD,
    HANDSHAKE_DELAY,
    POLL_INTERVAL,
    RECORD_SIZE,
    RETRY_DELAY,
    SETTLE_DELAY,
)
from megasquirt_logger.protocol.frames import decode_frame, encode_frame, hex_dump
from megasquirt_logger.serial.connection import SerialConnection

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle states of a serial session."""

    CLOSED = "closed"
    OPENING = "opening"
    HANDSHAKE_TESTING = "handshake_testing"
    POLLING = "polling"
    FAILING = "failing"


class SerialSession:
    """Polls an ECU for realtime records and reconnects on a dead link.

    Device-open and handshake failures are retried forever. Poll failures
    are tolerated until more than ``error_threshold`` happen in a row, at
    which point the port is closed and the whole sequence starts over.
    """

    def __init__(
        self,
        connection: SerialConnection,
        record_size: int = RECORD_SIZE,
        poll_interval: float = POLL_INTERVAL,
        error_threshold: int = ERROR_THRESHOLD,
        retry_delay: float = RETRY_DELAY,
        settle_delay: float = SETTLE_DELAY,
        handshake_delay: float = HANDSHAKE_DELAY,
        queue_size: int = 0,
    ):
        """Initialize serial session.

        Args:
            connection: Serial connection to drive.
            record_size: Byte count requested by each realtime fetch.
            poll_interval: Seconds between realtime fetches.
            error_threshold: Consecutive poll failures tolerated before reconnect.
            retry_delay: Seconds to wait after an open or handshake failure.
            settle_delay: Seconds to wait after open before flushing input.
            handshake_delay: Seconds to wait between handshake and polling.
            queue_size: Output queue bound, 0 for unbounded.
        """
        self._connection = connection
        self._fetch_command = build_realtime_fetch(record_size)
        self._poll_interval = poll_interval
        self._error_threshold = error_threshold
        self._retry_delay = retry_delay
        self._settle_delay = settle_delay
        self._handshake_delay = handshake_delay

        self._state = ConnectionState.CLOSED
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue(maxsize=queue_size)
        self._task: asyncio.Task | None = None
        self._running = False
        self._stats = {
            "payloads": 0,
            "frame_errors": 0,
            "transport_errors": 0,
            "handshake_failures": 0,
            "open_failures": 0,
            "reconnects": 0,
        }

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def running(self) -> bool:
        """Whether the supervisory task is active."""
        return self._running

    @property
    def stats(self) -> dict:
        """Get session counters."""
        return self._stats.copy()

    async def start(self) -> None:
        """Start the supervisory task."""
        if self._running:
            return

        self._running = True
        # Drop leftovers of a previous run, sentinel included. The queue object
        # is kept so iterators already waiting on it see this run's payloads.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._task = asyncio.create_task(self._run())
        logger.info("Serial session started")

    async def stop(self) -> None:
        """Stop the supervisory task, close the port and end ``payloads()``."""
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        await self._connection.disconnect()
        self._set_state(ConnectionState.CLOSED)
        # Push sentinel so pending payloads() iterators finish. The producer is
        # gone, so a full queue gives up its oldest payload to make room.
        if self._queue.full():
            self._queue.get_nowait()
            logger.debug("Payload queue full on stop, dropped oldest payload")
        self._queue.put_nowait(None)
        logger.info("Serial session stopped")

    async def payloads(self) -> AsyncIterator[bytes]:
        """Yield realtime payloads in fetch order until the session stops.

        Each payload is delivered once; a second iterator only sees payloads
        fetched after the first one stopped consuming.
        """
        while True:
            payload = await self._queue.get()
            if payload is None:
                return
            yield payload

    async def communication_test(self) -> bool:
        """Send the communication test command.

        Returns:
            True if the ECU answered with a valid frame.
        """
        try:
            await self.send_command(build_communication_test())
        except (TransportError, FrameError) as e:
            logger.error("Communication test error: %s", e)
            return False
        return True

    async def fetch_realtime_data(self) -> bytes:
        """Fetch one full realtime record.

        Raises:
            TransportError: If the write fails.
            FrameError: If no valid response frame arrives.
        """
        return await self.send_command(self._fetch_command)

    async def send_command(self, payload: bytes) -> bytes:
        """Send a framed command and wait for the framed response payload."""
        request = encode_frame(payload)
        logger.debug("Sending frame:\n%s", hex_dump(request))
        await self._connection.write(request)

        response = await decode_frame(self._connection)
        logger.debug("Received payload:\n%s", hex_dump(response))
        return response

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.debug("Session state %s -> %s", self._state.value, state.value)
            self._state = state

    async def _run(self) -> None:
        """Supervisory loop: runs until cancelled."""
        while self._running:
            self._set_state(ConnectionState.OPENING)
            if not await self._connection.connect():
                self._stats["open_failures"] += 1
                self._set_state(ConnectionState.CLOSED)
                logger.error("Unable to open serial port, retrying in %ss", self._retry_delay)
                await asyncio.sleep(self._retry_delay)
                continue

            await asyncio.sleep(self._settle_delay)
            self._set_state(ConnectionState.HANDSHAKE_TESTING)
            await self._handshake()

            await asyncio.sleep(self._handshake_delay)
            self._set_state(ConnectionState.POLLING)
            await self._poll()

            self._set_state(ConnectionState.FAILING)
            logger.warning("Serial failure, resetting serial connection...")
            await self._connection.disconnect()
            self._stats["reconnects"] += 1
            self._set_state(ConnectionState.CLOSED)

    async def _handshake(self) -> None:
        """Flush stale input and retry the communication test until it passes."""
        try:
            await self._connection.flush_input()
        except TransportError as e:
            logger.error("Input flush failed: %s", e)

        while True:
            if await self.communication_test():
                logger.info("Communication test OK!")
                return

            self._stats["handshake_failures"] += 1
            logger.error("Communication test failure, retrying in %ss", self._retry_delay)
            await asyncio.sleep(self._retry_delay)

    async def _poll(self) -> None:
        """Fetch records until the consecutive error count exceeds the threshold."""
        consecutive_errors = 0

        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                payload = await self.fetch_realtime_data()
            except (TransportError, FrameError) as e:
                key = "frame_errors" if isinstance(e, FrameError) else "transport_errors"
                self._stats[key] += 1
                consecutive_errors += 1
                logger.error("Data fetch error (%d consecutive): %s", consecutive_errors, e)
                if consecutive_errors > self._error_threshold:
                    return
                continue

            consecutive_errors = 0
            self._stats["payloads"] += 1
            await self._queue.put(payload)
