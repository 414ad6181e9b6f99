"""Megasquirt serial protocol implementation."""

from megasquirt_logger.protocol.commands import build_communication_test, build_read_request, build_realtime_fetch
from megasquirt_logger.protocol.constants import ERROR_THRESHOLD, POLL_INTERVAL, RECORD_SIZE, Command
from megasquirt_logger.protocol.crc import calculate_crc32, verify_crc32
from megasquirt_logger.protocol.frames import decode_frame, encode_frame, hex_dump, parse_frame

__all__ = [
    "Command",
    "ERROR_THRESHOLD",
    "POLL_INTERVAL",
    "RECORD_SIZE",
    "build_communication_test",
    "build_read_request",
    "build_realtime_fetch",
    "calculate_crc32",
    "verify_crc32",
    "decode_frame",
    "encode_frame",
    "hex_dump",
    "parse_frame",
]
