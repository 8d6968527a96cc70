"""Error taxonomy for the notes database.

- CapacityExceeded: add on a full store; raised, nothing changes.
- ContentTooLong: note over the per-note limit; content is truncated and
  accepted, so this is only reported in the log.
- InvalidIndex: bad entry in a hide/unhide/delete batch; skipped silently.
- PersistenceUnavailable / CorruptRecord: the file can't be written, or can't
  be read back; the store keeps its in-memory state or starts empty.
- StorageLocationUnavailable / ConfigError: fatal at startup.
"""

from __future__ import annotations


class NotesError(Exception):
    """Base class for all notes database errors."""


class CapacityExceeded(NotesError):
    def __init__(self, capacity: int) -> None:
        super().__init__(f"note store is full ({capacity} notes)")
        self.capacity = capacity


class ContentTooLong(NotesError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"note content is {size} bytes, limit is {limit}")
        self.size = size
        self.limit = limit


class InvalidIndex(NotesError):
    pass


class PersistenceUnavailable(NotesError):
    pass


class CorruptRecord(PersistenceUnavailable):
    pass


class ConfigError(NotesError):
    pass


class StorageLocationUnavailable(ConfigError):
    pass
