"""Protocol constants for Megasquirt serial communication."""

from enum import IntEnum

# ============================================================================
# Frame Structure
# ============================================================================

LENGTH_HEADER_LEN = 2  # Big-endian payload length
CRC_TRAILER_LEN = 4  # Big-endian CRC32 of payload
FRAME_OVERHEAD = LENGTH_HEADER_LEN + CRC_TRAILER_LEN
MAX_PAYLOAD_LEN = 0xFFFF

# ============================================================================
# Commands
# ============================================================================


class Command(IntEnum):
    """Single-byte command codes."""

    COMMUNICATION_TEST = ord("c")
    READ = ord("r")


REALTIME_CAN_ID = 0x00
REALTIME_TABLE = 0x07
REALTIME_OFFSET = 0x0000
RECORD_SIZE = 212  # Full realtime record for the mainController schema

# Every realtime record starts with a flag byte not addressed by schema offsets
RECORD_FLAG_BYTES = 1

# ============================================================================
# Communication Settings
# ============================================================================

BAUD_RATE = 115200
READ_TIMEOUT = 2.0  # Serial read timeout (seconds)
RETRY_DELAY = 2.0  # Delay after open or handshake failure (seconds)
SETTLE_DELAY = 0.015  # Delay between open and input flush (seconds)
HANDSHAKE_DELAY = 2.0  # Delay between handshake and first poll (seconds)
POLL_INTERVAL = 0.1  # Realtime fetch interval (seconds)
ERROR_THRESHOLD = 5  # Consecutive poll failures tolerated before reconnect
