"""Bounded, ordered note store with hide/unhide/delete and whole-store saves.

Notes are addressed by 1-based display indices taken from the most recent
listing. Those indices are snapshots, not identifiers: any delete shifts the
notes after it toward the front.

Every mutating operation writes the whole store to disk before returning.
Two processes sharing one file are not supported; the last save wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import note_codec
from note_models import (
    MAX_NOTE_LENGTH,
    MAX_NOTES,
    ListFilter,
    Note,
    NoteListing,
    clean_content,
    content_size,
    truncate_content,
)
from note_codec import DbFormat
from note_errors import CapacityExceeded, ContentTooLong

logger = logging.getLogger(__name__)

# What an unparsable token degrades to: never a valid 0-based index.
INVALID_INDEX = -1

Indices = Union[str, Iterable[int]]


def parse_indices(raw: str, limit: int = MAX_NOTES) -> list[int]:
    """Parse ``"1,3,5"`` into 0-based indices ``[0, 2, 4]``.

    Tokens that aren't integers become ``INVALID_INDEX`` instead of failing
    the batch. At most ``limit`` tokens are read.
    """
    indices: list[int] = []
    for token in raw.split(",")[:limit]:
        try:
            indices.append(int(token.strip()) - 1)
        except ValueError:
            indices.append(INVALID_INDEX)
    return indices


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a mutating operation.

    Attributes:
        affected: Number of notes added, changed or removed.
        saved: Whether the store reached disk afterwards.
    """

    affected: int
    saved: bool


class NoteStore:
    """ノート一覧の保持・変更と永続化を担当する."""

    def __init__(
        self,
        path: Path,
        *,
        fmt: DbFormat = "legacy",
        capacity: int = MAX_NOTES,
        max_length: int = MAX_NOTE_LENGTH,
        notes: Optional[Iterable[Note]] = None,
    ) -> None:
        self._path = path
        self._fmt: DbFormat = fmt
        self._capacity = capacity
        self._max_length = max_length
        self._notes: list[Note] = [
            Note(content=self._fit(n.content), hidden=n.hidden) for n in notes or []
        ]
        if len(self._notes) > capacity:
            raise CapacityExceeded(capacity)
        self.last_save_ok = True

    @classmethod
    def open(
        cls,
        path: Path,
        *,
        fmt: DbFormat = "legacy",
        capacity: int = MAX_NOTES,
        max_length: int = MAX_NOTE_LENGTH,
    ) -> "NoteStore":
        """ファイルから読み込んだストアを返す（読めなければ空）."""
        notes = note_codec.load(path, fmt, capacity, max_length)
        return cls(path, fmt=fmt, capacity=capacity, max_length=max_length, notes=notes)

    # -- properties ---------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_content_bytes(self) -> int:
        return self._max_length - 1

    @property
    def notes(self) -> list[Note]:
        return [n.model_copy() for n in self._notes]

    @property
    def is_full(self) -> bool:
        return len(self._notes) >= self._capacity

    def __len__(self) -> int:
        return len(self._notes)

    # -- operations ---------------------------------------------------------

    def add(self, content: str) -> MutationResult:
        """表示状態のノートを末尾に追加して保存する.

        上限を超える本文はエラーにせず切り詰める.

        Raises:
            CapacityExceeded: すでに ``capacity`` 件ある場合.
        """
        if self.is_full:
            raise CapacityExceeded(self._capacity)
        self._notes.append(Note(content=self._fit(content), hidden=False))
        return MutationResult(affected=1, saved=self._save())

    def set_hidden(self, indices: Indices, hidden: bool) -> MutationResult:
        """有効な表示番号のノートの hidden フラグを設定して保存する.

        ``indices`` はカンマ区切り文字列、または 1 始まりの表示番号の int 列.
        無効な番号は黙って無視する.
        """
        affected = 0
        for i in self._resolve(indices):
            if self._valid(i):
                self._notes[i].hidden = hidden
                affected += 1
        return MutationResult(affected=affected, saved=self._save())

    def hide(self, indices: Indices) -> MutationResult:
        return self.set_hidden(indices, True)

    def unhide(self, indices: Indices) -> MutationResult:
        return self.set_hidden(indices, False)

    def delete(self, indices: Indices) -> MutationResult:
        """指定した表示番号のノートを削除して保存する.

        番号の大きい順に削除するので、詰め直しで未処理の番号がずれない.
        """
        removed = 0
        for i in sorted(set(self._resolve(indices)), reverse=True):
            if self._valid(i):
                del self._notes[i]
                removed += 1
        return MutationResult(affected=removed, saved=self._save())

    def list_notes(self, filter: ListFilter = "visible") -> list[NoteListing]:
        """フィルタに合うノートを現在の表示番号付きで返す."""
        want_hidden = filter == "hidden"
        return [
            NoteListing(index=i + 1, content=note.content, hidden=note.hidden)
            for i, note in enumerate(self._notes)
            if note.hidden == want_hidden
        ]

    def save(self) -> bool:
        return self._save()

    # -- internals ----------------------------------------------------------

    def _fit(self, content: str) -> str:
        content = clean_content(content)
        size = content_size(content)
        if size > self.max_content_bytes:
            logger.warning("note: %s; truncating", ContentTooLong(size, self.max_content_bytes))
            content = truncate_content(content, self.max_content_bytes)
        return content

    def _resolve(self, indices: Indices) -> list[int]:
        if isinstance(indices, str):
            return parse_indices(indices, self._capacity)
        return [i - 1 for i in indices]

    def _valid(self, i: int) -> bool:
        return 0 <= i < len(self._notes)

    def _save(self) -> bool:
        self.last_save_ok = note_codec.save(
            self._path, self._notes, self._fmt, self._capacity, self._max_length
        )
        return self.last_save_ok
