"""Serial port connection management using direct pyserial.

Blocking pyserial calls run on a dedicated single-thread executor so the
port is only ever touched from one OS thread and the event loop never blocks.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

import serial
from serial import SerialException

from megasquirt_logger.core.exceptions import TransportError
from megasquirt_logger.protocol.constants import BAUD_RATE, READ_TIMEOUT

logger = logging.getLogger(__name__)


class SerialConnection:
    """Owns a single pyserial port handle.

    Reconnection policy lives in SerialSession; this class only opens,
    closes, reads and writes.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = BAUD_RATE,
        timeout: float = READ_TIMEOUT,
    ):
        """
        Initialize serial connection manager.

        Args:
            port: Serial port path (e.g., '/dev/ttyUSB0')
            baudrate: Communication speed (default: 115200)
            timeout: Per-read timeout in seconds (default: 2.0)
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout

        self._serial: serial.Serial | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="serial")
        self._stats = {
            "bytes_read": 0,
            "bytes_written": 0,
        }

    @property
    def connected(self) -> bool:
        """Check if the port is open."""
        return self._serial is not None and self._serial.is_open

    @property
    def stats(self) -> dict:
        """Get byte counters."""
        return self._stats.copy()

    async def connect(self) -> bool:
        """
        Open serial port connection.

        Returns:
            True if connection successful, False otherwise
        """
        if self.connected:
            logger.debug("Already connected to %s", self.port)
            return True

        logger.info("Opening serial port %s at %d baud", self.port, self.baudrate)
        try:
            port = serial.Serial()
            port.port = self.port
            port.baudrate = self.baudrate
            port.timeout = self.timeout
            port.write_timeout = self.timeout
            await self._run(port.open)
        except (OSError, SerialException) as e:
            logger.error("Unable to open serial port %s: %s", self.port, e)
            self._serial = None
            return False

        self._serial = port
        logger.info("Successfully opened serial port %s", self.port)
        return True

    async def disconnect(self) -> None:
        """Close serial port connection."""
        if self._serial is None:
            return

        logger.info("Closing serial port %s", self.port)
        try:
            await self._run(self._serial.close)
        except (OSError, SerialException) as e:
            logger.error("Error closing serial port: %s", e)
        finally:
            self._serial = None

    async def flush_input(self) -> None:
        """Discard any bytes waiting in the receive buffer.

        Raises:
            TransportError: If not connected or the flush fails
        """
        port = self._require_port()
        try:
            await self._run(port.reset_input_buffer)
        except (OSError, SerialException) as e:
            raise TransportError(f"Flush failed: {e}") from e

    async def read_exactly(self, n: int) -> bytes:
        """
        Read up to ``n`` bytes, blocking for at most the port timeout.

        Returns fewer than ``n`` bytes when the timeout expires first.

        Raises:
            TransportError: If not connected or the read fails
        """
        port = self._require_port()
        if n == 0:
            return b""
        try:
            data = await self._run(port.read, n)
        except (OSError, SerialException) as e:
            raise TransportError(f"Read failed: {e}") from e

        self._stats["bytes_read"] += len(data)
        if len(data) < n:
            logger.debug("Read timeout after %ss: got %d of %d bytes", self.timeout, len(data), n)
        return data

    async def write(self, data: bytes) -> None:
        """
        Write to serial port.

        Raises:
            TransportError: If not connected or the write fails
        """
        port = self._require_port()
        try:
            await self._run(port.write, data)
        except (OSError, SerialException) as e:
            raise TransportError(f"Write failed: {e}") from e

        self._stats["bytes_written"] += len(data)

    def _require_port(self) -> serial.Serial:
        if not self.connected:
            raise TransportError(f"Not connected to serial port {self.port}")
        return self._serial

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
