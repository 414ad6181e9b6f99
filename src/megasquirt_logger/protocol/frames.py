"""Frame construction and parsing for the Megasquirt serial protocol.

Frame structure:
[LEN_H][LEN_L][PAYLOAD...][CRC_3][CRC_2][CRC_1][CRC_0]

The length header counts payload bytes only and the CRC-32 trailer covers
the payload only. Both are big-endian.
"""

import logging
import struct
from typing import Protocol

from megasquirt_logger.core.exceptions import (
    ChecksumMismatch,
    FrameTooLarge,
    IncompleteFrame,
    SizeMismatch,
    TransportError,
)
from megasquirt_logger.protocol.constants import CRC_TRAILER_LEN, FRAME_OVERHEAD, LENGTH_HEADER_LEN, MAX_PAYLOAD_LEN
from megasquirt_logger.protocol.crc import calculate_crc32

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Anything that can deliver an exact number of bytes."""

    async def read_exactly(self, n: int) -> bytes: ...


def encode_frame(payload: bytes) -> bytes:
    """
    Wrap a command payload in a length header and CRC-32 trailer.

    Args:
        payload: Command bytes

    Returns:
        Complete frame as bytes

    Raises:
        FrameTooLarge: If payload exceeds 65535 bytes

    Example:
        >>> encode_frame(b"c")[:3]
        b'\\x00\\x01c'
    """
    if len(payload) > MAX_PAYLOAD_LEN:
        raise FrameTooLarge(len(payload))

    return struct.pack(">H", len(payload)) + bytes(payload) + struct.pack(">I", calculate_crc32(payload))


async def decode_frame(reader: FrameSource) -> bytes:
    """
    Read and validate one frame from a byte source.

    Reads the length header, the payload and the CRC trailer in turn. Only a
    fully validated payload is returned.

    Args:
        reader: Source providing ``read_exactly(n)``

    Returns:
        Frame payload

    Raises:
        IncompleteFrame: If the source runs dry or fails mid-frame
        SizeMismatch: If the source returns more bytes than requested
        ChecksumMismatch: If the CRC trailer does not match
    """
    header = await _read_exactly(reader, LENGTH_HEADER_LEN)
    length = struct.unpack(">H", header)[0]
    payload = await _read_exactly(reader, length)
    trailer = await _read_exactly(reader, CRC_TRAILER_LEN)

    _verify_trailer(payload, trailer)

    logger.debug("Received %d payload bytes", len(payload))
    return payload


def parse_frame(data: bytes) -> bytes:
    """
    Validate a complete in-memory frame and return its payload.

    Args:
        data: Raw frame bytes

    Returns:
        Frame payload

    Raises:
        IncompleteFrame: If data ends before the frame does
        SizeMismatch: If data carries bytes beyond the frame
        ChecksumMismatch: If the CRC trailer does not match
    """
    if len(data) < LENGTH_HEADER_LEN:
        raise IncompleteFrame(LENGTH_HEADER_LEN, len(data))

    length = struct.unpack(">H", data[:LENGTH_HEADER_LEN])[0]
    frame_length = length + FRAME_OVERHEAD
    if len(data) < frame_length:
        raise IncompleteFrame(frame_length, len(data))
    if len(data) > frame_length:
        raise SizeMismatch(length, len(data) - FRAME_OVERHEAD)

    payload = bytes(data[LENGTH_HEADER_LEN : LENGTH_HEADER_LEN + length])
    _verify_trailer(payload, data[LENGTH_HEADER_LEN + length :])
    return payload


def hex_dump(data: bytes) -> str:
    """Format bytes as offset / hex / ASCII lines, 16 bytes per line."""
    lines = []
    for offset in range(0, len(data), 16):
        chunk = data[offset : offset + 16]
        left = " ".join(f"{b:02x}" for b in chunk[:8])
        right = " ".join(f"{b:02x}" for b in chunk[8:])
        text = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        lines.append(f"{offset:08x}  {left:<23}  {right:<23}  |{text}|")
    return "".join(line + "\n" for line in lines)


async def _read_exactly(reader: FrameSource, n: int) -> bytes:
    try:
        data = await reader.read_exactly(n)
    except TransportError as e:
        raise IncompleteFrame(n, 0, e) from e

    if len(data) < n:
        raise IncompleteFrame(n, len(data))
    if len(data) > n:
        raise SizeMismatch(n, len(data))
    return bytes(data)


def _verify_trailer(payload: bytes, trailer: bytes) -> None:
    expected = struct.unpack(">I", trailer)[0]
    calculated = calculate_crc32(payload)
    if expected != calculated:
        raise ChecksumMismatch(expected, calculated)
