"""Whole-store persistence for the notes database.

The store is always written and read as one record; there are no incremental
writes. Two layouts are supported:

- ``legacy``: the fixed-size binary record written by the legacy C notes tool.
  ``capacity`` slots, each ``max_length`` bytes of NUL-padded UTF-8 content
  followed by a little-endian int32 hidden flag, then a little-endian int32
  live count. No header, no version, no checksum.
- ``json``: a self-describing ``NoteDatabase`` document.

Loading never fails: a missing, unreadable or corrupt file yields an empty
list of notes. Saving never raises: failure is logged and reported as False.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Literal, Sequence

from pydantic import ValidationError

from note_models import MAX_NOTE_LENGTH, MAX_NOTES, Note, NoteDatabase, content_size
from note_errors import CorruptRecord

logger = logging.getLogger(__name__)

DbFormat = Literal["legacy", "json"]
DB_FORMATS: tuple[str, ...] = ("legacy", "json")

_FLAG = struct.Struct("<i")
_COUNT = struct.Struct("<i")


def _slot_struct(max_length: int) -> struct.Struct:
    return struct.Struct(f"<{max_length}si")


def record_size(capacity: int = MAX_NOTES, max_length: int = MAX_NOTE_LENGTH) -> int:
    """Byte size of a legacy record: slot array first, then the live count."""
    return capacity * (max_length + _FLAG.size) + _COUNT.size


# ---------------------------------------------------------------------------
# Legacy fixed-layout record
# ---------------------------------------------------------------------------

def encode_legacy(
    notes: Sequence[Note],
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> bytes:
    if len(notes) > capacity:
        raise ValueError(f"{len(notes)} notes do not fit in {capacity} slots")
    slot = _slot_struct(max_length)
    buf = bytearray(record_size(capacity, max_length))
    for i, note in enumerate(notes):
        raw = note.content.encode("utf-8")
        if len(raw) >= max_length:
            raise ValueError(f"note {i + 1} is {len(raw)} bytes, slot holds {max_length - 1}")
        slot.pack_into(buf, i * slot.size, raw, 1 if note.hidden else 0)
    _COUNT.pack_into(buf, capacity * slot.size, len(notes))
    return bytes(buf)


def decode_legacy(
    data: bytes,
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> list[Note]:
    """Parse a legacy record.

    Raises:
        CorruptRecord: wrong size, live count out of range, or content that
            is not valid UTF-8.
    """
    expected = record_size(capacity, max_length)
    if len(data) != expected:
        raise CorruptRecord(f"record is {len(data)} bytes, expected {expected}")

    slot = _slot_struct(max_length)
    (count,) = _COUNT.unpack_from(data, capacity * slot.size)
    if not 0 <= count <= capacity:
        raise CorruptRecord(f"live count {count} outside 0..{capacity}")

    notes: list[Note] = []
    for i in range(count):
        raw, hidden = slot.unpack_from(data, i * slot.size)
        try:
            content = raw.split(b"\x00", 1)[0].decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptRecord(f"slot {i}: content is not UTF-8 ({e})") from e
        notes.append(Note(content=content, hidden=hidden != 0))
    return notes


# ---------------------------------------------------------------------------
# JSON record
# ---------------------------------------------------------------------------

def encode_json(
    notes: Sequence[Note],
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> bytes:
    """Serialize notes as a ``NoteDatabase`` document.

    Enforces the same limits ``decode_json`` checks, so whatever is written
    can be read back.
    """
    if len(notes) > capacity:
        raise ValueError(f"{len(notes)} notes exceed capacity {capacity}")
    for i, note in enumerate(notes):
        if content_size(note.content) >= max_length:
            raise ValueError(f"note {i + 1} exceeds {max_length - 1} bytes")
    return NoteDatabase(notes=list(notes)).model_dump_json(indent=2).encode("utf-8")


def decode_json(
    data: bytes,
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> list[Note]:
    try:
        db = NoteDatabase.model_validate_json(data)
    except ValidationError as e:
        raise CorruptRecord(f"invalid notes document: {e.error_count()} error(s)") from e
    if len(db.notes) > capacity:
        raise CorruptRecord(f"{len(db.notes)} notes exceed capacity {capacity}")
    for i, note in enumerate(db.notes):
        if content_size(note.content) >= max_length:
            raise CorruptRecord(f"note {i + 1} exceeds {max_length - 1} bytes")
    return db.notes


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def encode(
    notes: Sequence[Note],
    fmt: DbFormat = "legacy",
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> bytes:
    if fmt == "json":
        return encode_json(notes, capacity, max_length)
    return encode_legacy(notes, capacity, max_length)


def decode(
    data: bytes,
    fmt: DbFormat = "legacy",
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> list[Note]:
    if fmt == "json":
        return decode_json(data, capacity, max_length)
    return decode_legacy(data, capacity, max_length)


def save(
    path: Path,
    notes: Sequence[Note],
    fmt: DbFormat = "legacy",
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> bool:
    """Overwrite ``path`` with the whole store.

    Returns False (and logs) if the notes don't fit the layout or the file
    can't be written; the caller's in-memory state is then ahead of disk.
    """
    try:
        payload = encode(notes, fmt, capacity, max_length)
    except ValueError as e:
        logger.warning("save: cannot encode notes for %s: %s", path, e)
        return False
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(payload)
    except OSError as e:
        logger.warning("save: cannot write %s: %s", path, e)
        return False
    logger.debug("save: wrote %d notes to %s (%s)", len(notes), path, fmt)
    return True


def load(
    path: Path,
    fmt: DbFormat = "legacy",
    capacity: int = MAX_NOTES,
    max_length: int = MAX_NOTE_LENGTH,
) -> list[Note]:
    """Read the whole store from ``path``.

    Returns an empty list if the file doesn't exist, can't be read, or
    doesn't hold a valid record.
    """
    if not path.exists():
        logger.info("load: %s not found, starting empty", path)
        return []
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.warning("load: cannot read %s: %s", path, e)
        return []
    try:
        notes = decode(data, fmt, capacity, max_length)
    except CorruptRecord as e:
        logger.warning("load: ignoring corrupt record in %s: %s", path, e)
        return []
    logger.debug("load: read %d notes from %s (%s)", len(notes), path, fmt)
    return notes
