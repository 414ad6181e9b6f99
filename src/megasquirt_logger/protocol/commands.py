"""Command payload builders."""

import struct

from megasquirt_logger.protocol.constants import (
    MAX_PAYLOAD_LEN,
    REALTIME_CAN_ID,
    REALTIME_OFFSET,
    REALTIME_TABLE,
    RECORD_SIZE,
    Command,
)


def build_communication_test() -> bytes:
    """Build the single-byte communication test command."""
    return bytes([Command.COMMUNICATION_TEST])


def build_read_request(can_id: int, table: int, offset: int, length: int) -> bytes:
    """Build a table read command.

    Layout: ['r'][CAN_ID][TABLE][OFFSET_H][OFFSET_L][COUNT_H][COUNT_L]

    Args:
        can_id: CAN identifier of the target controller.
        table: Table number to read from.
        offset: Byte offset within the table.
        length: Number of bytes to fetch.

    Returns:
        Command payload bytes.

    Raises:
        ValueError: If any field is out of range.
    """
    if not 0 <= can_id <= 0xFF or not 0 <= table <= 0xFF:
        raise ValueError(f"CAN id and table must fit in one byte: can_id={can_id}, table={table}")
    if not 0 <= offset <= MAX_PAYLOAD_LEN or not 0 < length <= MAX_PAYLOAD_LEN:
        raise ValueError(f"Offset/length out of range: offset={offset}, length={length}")

    return struct.pack(">BBBHH", Command.READ, can_id, table, offset, length)


def build_realtime_fetch(record_size: int = RECORD_SIZE) -> bytes:
    """Build the realtime data fetch command for a full record."""
    return build_read_request(REALTIME_CAN_ID, REALTIME_TABLE, REALTIME_OFFSET, record_size)
