"""Latest-record cell shared between the record consumer and the API."""

import asyncio
from datetime import datetime

from megasquirt_logger.core.models import RecordSnapshot


class RecordCache:
    """Async-safe holder for the most recently decoded record.

    One writer (the record consumer) replaces the snapshot; any number of
    readers get the current one. Snapshots are immutable so readers never
    see a half-updated record.
    """

    def __init__(self) -> None:
        """Initialize empty record cache."""
        self._lock = asyncio.Lock()
        self._snapshot: RecordSnapshot | None = None
        self._count = 0

    async def get(self) -> RecordSnapshot | None:
        """Get the latest snapshot, None before the first record."""
        async with self._lock:
            return self._snapshot

    async def update(self, snapshot: RecordSnapshot) -> None:
        """Replace the latest snapshot."""
        async with self._lock:
            self._snapshot = snapshot
            self._count += 1

    async def clear(self) -> None:
        """Forget the latest snapshot."""
        async with self._lock:
            self._snapshot = None

    @property
    def last_update(self) -> datetime | None:
        """Get timestamp of the latest snapshot."""
        snapshot = self._snapshot
        return snapshot.timestamp if snapshot is not None else None

    @property
    def count(self) -> int:
        """Get number of records published since startup."""
        return self._count
