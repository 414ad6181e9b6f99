"""Compile the OutputChannels section of a schema into a channel table.

Descriptors are parsed once here; decoding only ever touches the typed
channel models.
"""

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType

from megasquirt_logger.core.exceptions import CompileError, MalformedDescriptor, UnknownEncoding, UnsupportedBitRange
from megasquirt_logger.protocol.constants import RECORD_FLAG_BYTES
from megasquirt_logger.schema.channels import BIT_ENCODING, ENCODINGS, BitChannel, Channel, ScalarChannel, TimeChannel

logger = logging.getLogger(__name__)

OUTPUT_CHANNELS_SECTION = "OutputChannels"
TIME_CHANNEL = "time"

# Some schemas embed a units expression where the unit string belongs
UNITS_EXPRESSION = re.compile(r"\{.*bitStringValue\(.*algorithmUnits.*\}")
UNITS_EXPRESSION_REPLACEMENT = "kPa"

SCALAR_FIELD_COUNT = 6
BITS_FIELD_COUNT = 4

ChannelTable = Mapping[str, Channel]


def compile_channels(schema: Mapping[str, Mapping[str, str]]) -> ChannelTable:
    """Compile every supported output channel in a schema.

    Descriptors of other kinds are skipped. A repeated channel name replaces
    the earlier definition.

    Args:
        schema: Section name -> key -> value mapping.

    Returns:
        Read-only mapping of channel name to compiled channel.

    Raises:
        CompileError: If the OutputChannels section is missing or a
            supported descriptor is invalid.
    """
    section = schema.get(OUTPUT_CHANNELS_SECTION)
    if section is None:
        raise CompileError(f"Schema has no [{OUTPUT_CHANNELS_SECTION}] section")

    channels: dict[str, Channel] = {}
    for name, descriptor in section.items():
        channel = compile_channel(name, descriptor)
        if channel is None:
            logger.debug("Skipping unsupported channel %s: %s", name, descriptor)
            continue
        channels[name] = channel

    logger.info("Compiled %d output channels", len(channels))
    return MappingProxyType(channels)


def compile_channel(name: str, descriptor: str) -> Channel | None:
    """Compile a single descriptor.

    Returns:
        Compiled channel, or None if the descriptor is not a supported shape.

    Raises:
        CompileError: If a supported descriptor is invalid.
    """
    if name == TIME_CHANNEL:
        return TimeChannel(name=name)

    normalized = UNITS_EXPRESSION.sub(UNITS_EXPRESSION_REPLACEMENT, descriptor or "")
    fields = [field.strip() for field in normalized.split(", ")]

    if fields[0] == "scalar" and len(fields) == SCALAR_FIELD_COUNT:
        return _compile_scalar(name, fields)
    if fields[0] == "bits" and len(fields) == BITS_FIELD_COUNT:
        return _compile_bits(name, fields)
    return None


def _compile_scalar(name: str, fields: list[str]) -> ScalarChannel:
    _, encoding, offset, unit, multiplier, scale = fields

    if encoding not in ENCODINGS:
        raise UnknownEncoding(name, encoding)

    return ScalarChannel(
        name=name,
        encoding=encoding,
        offset=_parse_offset(name, offset),
        unit=unit.strip('"'),
        multiplier=_parse_float(name, multiplier, "multiplier"),
        scale=_parse_scale(name, scale),
    )


def _compile_bits(name: str, fields: list[str]) -> BitChannel:
    _, encoding, offset, bit_range = fields

    bounds = bit_range.strip("[]").split(":", 1)
    if len(bounds) != 2:
        raise MalformedDescriptor(name, f"bit range {bit_range!r}")
    first = _parse_int(name, bounds[0], "bit range")
    last = _parse_int(name, bounds[1], "bit range")

    if first != last or encoding != BIT_ENCODING:
        raise UnsupportedBitRange(name, f"{encoding} {bit_range}")
    if not 0 <= first <= 7:
        raise UnsupportedBitRange(name, f"bit {first} outside a single byte")

    return BitChannel(name=name, offset=_parse_offset(name, offset), bit=first)


def _parse_offset(name: str, text: str) -> int:
    offset = _parse_int(name, text, "offset")
    if offset < 0:
        raise MalformedDescriptor(name, f"negative offset {offset}")
    return offset + RECORD_FLAG_BYTES


def _parse_int(name: str, text: str, what: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise MalformedDescriptor(name, f"{what} {text!r} is not an integer") from None


def _parse_float(name: str, text: str, what: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise MalformedDescriptor(name, f"{what} {text!r} is not a number") from None


def _parse_scale(name: str, text: str) -> int:
    # Schemas often write integral translates as "0.0" or "-40.000"
    value = _parse_float(name, text, "scale")
    if not value.is_integer():
        raise MalformedDescriptor(name, f"scale {text!r} is not an integer")
    return int(value)
