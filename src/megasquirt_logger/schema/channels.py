"""Compiled output channel descriptors and their value extraction rules."""

import struct
import time
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from megasquirt_logger.core.exceptions import OffsetOutOfBounds, UnknownEncoding

# Big-endian struct formats keyed by schema encoding name
ENCODINGS = {
    "S08": ">b",
    "S16": ">h",
    "S32": ">i",
    "U08": ">B",
    "U16": ">H",
    "U32": ">I",
}

Encoding = Literal["S08", "S16", "S32", "U08", "U16", "U32"]

BIT_ENCODING = "U08"


def _check_bounds(name: str, payload: bytes, offset: int, width: int) -> None:
    if offset + width > len(payload):
        raise OffsetOutOfBounds(name, offset, width, len(payload))


class ScalarChannel(BaseModel):
    """Numeric field: ``(raw + scale) * multiplier``."""

    kind: Literal["scalar"] = "scalar"
    name: str = Field(..., min_length=1, description="Channel name")
    encoding: Encoding = Field(..., description="Byte encoding")
    offset: int = Field(..., ge=0, description="Byte offset within the payload, flag byte included")
    unit: str = Field("", description="Display unit")
    multiplier: float = Field(..., description="Multiplier applied after scale")
    scale: int = Field(..., description="Integer added to the raw value before multiplying")

    model_config = ConfigDict(frozen=True)

    def extract(self, payload: bytes) -> float:
        """Decode this channel's value from a realtime payload.

        Raises:
            UnknownEncoding: If the encoding is not recognized.
            OffsetOutOfBounds: If the field extends past the payload.
        """
        fmt = ENCODINGS.get(self.encoding)
        if fmt is None:
            raise UnknownEncoding(self.name, self.encoding)

        _check_bounds(self.name, payload, self.offset, struct.calcsize(fmt))
        raw = struct.unpack_from(fmt, payload, self.offset)[0]

        # Megasquirt schemas add the translate before multiplying, not after.
        return float(raw + self.scale) * self.multiplier


class BitChannel(BaseModel):
    """Single-bit flag within one byte, bit 0 being the MSB."""

    kind: Literal["bits"] = "bits"
    name: str = Field(..., min_length=1, description="Channel name")
    encoding: Literal["U08"] = Field(BIT_ENCODING, description="Always a single unsigned byte")
    offset: int = Field(..., ge=0, description="Byte offset within the payload, flag byte included")
    bit: int = Field(..., ge=0, le=7, description="Bit index counted from the MSB")
    unit: str = ""

    model_config = ConfigDict(frozen=True)

    def extract(self, payload: bytes) -> float:
        """Return 1.0 if the bit is set, 0.0 otherwise.

        Raises:
            OffsetOutOfBounds: If the byte is past the end of the payload.
        """
        _check_bounds(self.name, payload, self.offset, 1)
        return float((payload[self.offset] >> (7 - self.bit)) & 1)


class TimeChannel(BaseModel):
    """Wall-clock timestamp, independent of the payload."""

    kind: Literal["time"] = "time"
    name: str = Field("time", min_length=1)
    unit: str = ""

    model_config = ConfigDict(frozen=True)

    def extract(self, payload: bytes) -> float:
        """Return the current time in seconds since the epoch."""
        return time.time()


Channel = Annotated[ScalarChannel | BitChannel | TimeChannel, Field(discriminator="kind")]
