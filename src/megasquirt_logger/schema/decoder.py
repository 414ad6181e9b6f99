"""Apply a compiled channel table to realtime payloads."""

import logging

from megasquirt_logger.core.exceptions import DecodeError
from megasquirt_logger.core.models import ChannelValue, RecordSnapshot
from megasquirt_logger.schema.compiler import ChannelTable

logger = logging.getLogger(__name__)


class RecordDecoder:
    """Decodes every channel of a record, isolating per-channel failures."""

    def __init__(self, table: ChannelTable):
        self._table = table

    @property
    def channels(self) -> ChannelTable:
        """The compiled channel table."""
        return self._table

    def decode(self, payload: bytes) -> RecordSnapshot:
        """Decode all channels from one payload.

        Channels that fail are left out of ``values`` and reported in
        ``errors``; the rest of the record still decodes.
        """
        values: dict[str, ChannelValue] = {}
        errors: dict[str, str] = {}

        for name, channel in self._table.items():
            try:
                value = channel.extract(payload)
            except DecodeError as e:
                logger.debug("Failed to decode channel %s: %s", name, e)
                errors[name] = str(e)
                continue
            values[name] = ChannelValue(name=name, value=value, unit=channel.unit)

        return RecordSnapshot(raw=bytes(payload), values=values, errors=errors)
