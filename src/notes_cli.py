"""Notes – interactive terminal entry point.

Loads the database once at startup, then loops: clear the screen, list the
visible notes, read a one-letter command and run it against the store.

Commands: [a]dd [h]ide [s]how-hidden (then [u]nhide) [d]elete [q]uit
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Iterator, Optional, TextIO

from note_config import load_config
from note_errors import CapacityExceeded, ConfigError
from note_models import MAX_NOTE_LENGTH, NoteListing, content_size
from note_store import NoteStore

log = logging.getLogger("notes")

GREEN = "\x1b[32m"
RESET = "\x1b[0m"
CLEAR_SCREEN = "\x1b[2J\x1b[H"
END_OF_NOTE = "EOF"
COMMANDS = "Commands: [a]dd [h]ide [s]how-hidden [d]elete [q]uit"


def collect_note_content(lines: Iterable[str], slot_size: int = MAX_NOTE_LENGTH) -> str:
    """Join input lines into one note body.

    Stops at a line starting with ``EOF``, at end of input, or before the
    line that would fill the slot (``position + len(line) >= slot_size``,
    counted in UTF-8 bytes). Lines keep their trailing newline.
    """
    parts: list[str] = []
    position = 0
    for line in lines:
        if line.startswith(END_OF_NOTE):
            break
        size = content_size(line)
        if position + size >= slot_size:
            break
        parts.append(line)
        position += size
    return "".join(parts)


def format_listing(entry: NoteListing) -> str:
    marker = "[HIDDEN] " if entry.hidden else "• "
    return f"{GREEN}{entry.index}.{RESET} {marker}{entry.content}"


class NotesApp:
    """NoteStore を操作するメニューループ. stdin/stdout は差し替え可能."""

    def __init__(
        self,
        store: NoteStore,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.store = store
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout
        self._status: Optional[str] = None

    # -- I/O helpers --------------------------------------------------------

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def _readline(self) -> Optional[str]:
        line = self._in.readline()
        return line if line else None

    def _clear(self) -> None:
        isatty = getattr(self._out, "isatty", None)
        if isatty is not None and isatty():
            self._write(CLEAR_SCREEN)

    def _prompted_lines(self) -> Iterator[str]:
        while True:
            self._write("> ")
            line = self._readline()
            if line is None:
                return
            yield line

    def _render(self, entries: list[NoteListing]) -> None:
        for entry in entries:
            self._write(format_listing(entry) + "\n")

    def _after_mutation(self, saved: bool) -> None:
        if not saved:
            self._status = f"Warning: changes could not be saved to {self.store.path}"

    # -- commands -----------------------------------------------------------

    def add_note(self) -> None:
        if self.store.is_full:
            self._status = "Db full!"
            return
        self._write(f"Enter note ({END_OF_NOTE} to finish):\n")
        content = collect_note_content(
            self._prompted_lines(), self.store.max_content_bytes + 1
        )
        try:
            result = self.store.add(content)
        except CapacityExceeded:
            self._status = "Db full!"
            return
        self._after_mutation(result.saved)

    def _read_indices(self, verb: str) -> Optional[str]:
        self._write(f"Enter note numbers to {verb} (comma-separated): ")
        return self._readline()

    def hide_notes(self) -> None:
        raw = self._read_indices("hide")
        if raw is not None:
            self._after_mutation(self.store.hide(raw).saved)

    def unhide_notes(self) -> None:
        raw = self._read_indices("unhide")
        if raw is not None:
            self._after_mutation(self.store.unhide(raw).saved)

    def delete_notes(self) -> None:
        raw = self._read_indices("delete")
        if raw is not None:
            self._after_mutation(self.store.delete(raw).saved)

    def show_hidden(self) -> None:
        """非表示ノートを一覧し、[u] なら再表示の番号を受け付ける."""
        self._clear()
        self._write("\nHidden notes:\n")
        self._render(self.store.list_notes("hidden"))
        self._write("\n[u]nhide or [b]ack: ")
        line = self._readline()
        if line is not None and line.startswith("u"):
            self.unhide_notes()

    # -- loop ---------------------------------------------------------------

    def run(self) -> None:
        """``q`` か入力終端までメニューを回す."""
        while True:
            self._clear()
            self._write("\nNotes:\n")
            self._render(self.store.list_notes("visible"))
            if self._status:
                self._write(f"\n{self._status}\n")
                self._status = None
            self._write(f"\n{COMMANDS}\n> ")

            line = self._readline()
            if line is None:
                self._write("\n")
                return
            command = line[:1]
            if command == "a":
                self._clear()
                self.add_note()
            elif command == "h":
                self.hide_notes()
            elif command == "s":
                self.show_hidden()
            elif command == "d":
                self.delete_notes()
            elif command == "q":
                self._clear()
                return


def main() -> int:
    try:
        config = load_config()
    except ConfigError as e:
        print(f"notes: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    log.info("Using %s (%s)", config.db_path, config.db_format)

    store = NoteStore.open(config.db_path, fmt=config.db_format)
    try:
        NotesApp(store).run()
    except KeyboardInterrupt:
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
