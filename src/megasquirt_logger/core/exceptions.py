"""Exception hierarchy for the Megasquirt logger.

Transport and frame errors are transient and handled inside the serial
session. Compile errors are fatal at startup. Decode errors are scoped to a
single channel of a single record.
"""


class MegasquirtError(Exception):
    """Base class for all logger errors."""


# ============================================================================
# Transport / framing
# ============================================================================


class TransportError(MegasquirtError, ConnectionError):
    """Serial port open, read or write failure."""


class FrameTooLarge(MegasquirtError, ValueError):
    """Payload does not fit in the 16-bit length header."""

    def __init__(self, size: int):
        super().__init__(f"Payload of {size} bytes exceeds 65535 byte frame limit")
        self.size = size


class FrameError(MegasquirtError):
    """Received frame failed validation."""


class IncompleteFrame(FrameError):
    """I/O ended before the expected number of bytes arrived."""

    def __init__(self, expected: int, received: int, cause: Exception | None = None):
        message = f"Incomplete frame: expected {expected} bytes, received {received}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)
        self.expected = expected
        self.received = received
        self.cause = cause


class SizeMismatch(FrameError):
    """Payload length differs from the length header."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Invalid frame: data size expected to be {expected}, received {actual} bytes")
        self.expected = expected
        self.actual = actual


class ChecksumMismatch(FrameError):
    """CRC32 trailer does not match the payload."""

    def __init__(self, expected: int, calculated: int):
        super().__init__(f"Invalid frame: checksum 0x{calculated:08X} does not match trailer 0x{expected:08X}")
        self.expected = expected
        self.calculated = calculated


# ============================================================================
# Schema compilation
# ============================================================================


class CompileError(MegasquirtError):
    """Schema could not be compiled into a channel table."""


class UnsupportedBitRange(CompileError):
    """Bit field spans more than one bit or is not byte encoded."""

    def __init__(self, channel: str, detail: str):
        super().__init__(f"Cannot handle bit ranges or non U08 packing, field {channel}: {detail}")
        self.channel = channel


class UnknownEncoding(CompileError):
    """Scalar encoding is not one of S08/S16/S32/U08/U16/U32."""

    def __init__(self, channel: str, encoding: str):
        super().__init__(f"Invalid encoding for field {channel}: {encoding}")
        self.channel = channel
        self.encoding = encoding


class MalformedDescriptor(CompileError):
    """Descriptor has the right shape but unparseable fields."""

    def __init__(self, channel: str, detail: str):
        super().__init__(f"Malformed descriptor for field {channel}: {detail}")
        self.channel = channel


# ============================================================================
# Record decoding
# ============================================================================


class DecodeError(MegasquirtError):
    """A single channel could not be decoded from a record."""


class OffsetOutOfBounds(DecodeError):
    """Channel reads past the end of the payload."""

    def __init__(self, channel: str, offset: int, width: int, length: int):
        super().__init__(
            f"Channel {channel} reads {width} byte(s) at offset {offset}, payload is only {length} bytes"
        )
        self.channel = channel
        self.offset = offset
        self.width = width
        self.length = length
