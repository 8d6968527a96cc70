"""Data models (Pydantic) for the notes database.

Defines the core data structures used throughout the tool:
- Note: one stored text entry with a visibility flag
- NoteListing: a note paired with its current 1-based display index
- NoteDatabase: the self-describing JSON record of the whole store
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

MAX_NOTES = 1000
# Slot size in the on-disk record, including the NUL terminator.
MAX_NOTE_LENGTH = 4096
MAX_CONTENT_BYTES = MAX_NOTE_LENGTH - 1

ListFilter = Literal["visible", "hidden"]


class Note(BaseModel):
    content: str = ""
    hidden: bool = False


class NoteListing(BaseModel):
    """A note as shown by a listing.

    ``index`` is a snapshot handle: it is only valid until the store changes.
    """

    index: int = Field(ge=1)
    content: str
    hidden: bool


class NoteDatabase(BaseModel):
    version: int = 1
    notes: list[Note] = Field(default_factory=list)


def clean_content(text: str) -> str:
    """Return ``text`` with anything UTF-8 can't encode replaced by U+FFFD.

    Lone surrogates come from stdin under a C/POSIX locale (surrogateescape);
    the escaped bytes are recovered and decoded with replacement.
    """
    try:
        text.encode("utf-8")
        return text
    except UnicodeEncodeError:
        pass
    try:
        raw = text.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        raw = text.encode("utf-8", errors="replace")
    return raw.decode("utf-8", errors="replace")


def content_size(text: str) -> int:
    return len(text.encode("utf-8", errors="replace"))


def truncate_content(text: str, max_bytes: int = MAX_CONTENT_BYTES) -> str:
    """Cut ``text`` to at most ``max_bytes`` UTF-8 bytes.

    Never splits a multibyte character.
    """
    raw = text.encode("utf-8", errors="replace")
    if len(raw) <= max_bytes:
        return text
    return raw[:max_bytes].decode("utf-8", errors="ignore")
