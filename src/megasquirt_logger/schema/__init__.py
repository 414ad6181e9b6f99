"""Schema loading, channel compilation and record decoding."""

from megasquirt_logger.schema.channels import BitChannel, Channel, ScalarChannel, TimeChannel
from megasquirt_logger.schema.compiler import ChannelTable, compile_channel, compile_channels
from megasquirt_logger.schema.decoder import RecordDecoder
from megasquirt_logger.schema.loader import SchemaSource, load_schema, parse_schema

__all__ = [
    "BitChannel",
    "Channel",
    "ChannelTable",
    "RecordDecoder",
    "ScalarChannel",
    "SchemaSource",
    "TimeChannel",
    "compile_channel",
    "compile_channels",
    "load_schema",
    "parse_schema",
]
