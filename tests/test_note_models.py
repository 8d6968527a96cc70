"""Unit tests for note data models."""

import pytest
from pydantic import ValidationError

from note_models import (
    MAX_CONTENT_BYTES,
    MAX_NOTE_LENGTH,
    Note,
    NoteDatabase,
    NoteListing,
    clean_content,
    content_size,
    truncate_content,
)


class TestNote:
    def test_defaults(self):
        n = Note()
        assert n.content == ""
        assert n.hidden is False

    def test_equality_by_value(self):
        assert Note(content="a", hidden=True) == Note(content="a", hidden=True)
        assert Note(content="a") != Note(content="a", hidden=True)


class TestNoteListing:
    def test_index_is_one_based(self):
        with pytest.raises(ValidationError):
            NoteListing(index=0, content="a", hidden=False)


class TestNoteDatabase:
    def test_default_is_empty_v1(self):
        db = NoteDatabase()
        assert db.version == 1
        assert db.notes == []


class TestCleanContent:
    def test_valid_text_unchanged(self):
        assert clean_content("héllo ✓") == "héllo ✓"

    def test_escaped_byte_becomes_replacement_char(self):
        assert clean_content("a\udcffb") == "a\ufffdb"

    def test_escaped_utf8_is_recovered(self):
        assert clean_content("\udce3\udc81\udc82") == "あ"

    def test_unpaired_high_surrogate(self):
        result = clean_content("x\ud800y")
        assert result.startswith("x") and result.endswith("y")
        result.encode("utf-8")

    def test_size_of_unclean_text_does_not_raise(self):
        assert content_size("a\udcff") == 2


class TestTruncateContent:
    def test_limit_leaves_room_for_terminator(self):
        assert MAX_CONTENT_BYTES == MAX_NOTE_LENGTH - 1

    def test_short_text_unchanged(self):
        assert truncate_content("abc", 10) == "abc"

    def test_cuts_to_byte_limit(self):
        assert truncate_content("abcdef", 4) == "abcd"

    def test_does_not_split_multibyte(self):
        # "あ" is 3 bytes in UTF-8
        result = truncate_content("ああ", 4)
        assert result == "あ"
        assert content_size(result) <= 4
