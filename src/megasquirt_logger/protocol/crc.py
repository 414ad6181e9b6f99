"""CRC-32 calculation for Megasquirt protocol frames."""

import zlib


def calculate_crc32(data: bytes) -> int:
    """
    Calculate the IEEE CRC-32 of a frame payload.

    Args:
        data: Bytes to calculate CRC over

    Returns:
        32-bit unsigned CRC value

    Example:
        >>> hex(calculate_crc32(b"123456789"))
        '0xcbf43926'
    """
    return zlib.crc32(data) & 0xFFFFFFFF


def verify_crc32(data: bytes, expected_crc: int) -> bool:
    """
    Verify CRC-32 matches expected value.

    Args:
        data: Payload bytes (excluding length header and trailer)
        expected_crc: CRC value read from the frame trailer

    Returns:
        True if CRC matches, False otherwise
    """
    return calculate_crc32(data) == expected_crc
