#!/usr/bin/env python3
"""
Command-line parser
Splits the text before the cursor into the command being completed and the
word under the cursor.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..logger import get_logger

log = get_logger("parser")

# Launchers whose first argument is itself the command to run
PREFIX_WRAPPERS = frozenset({
    "sudo", "doas", "time", "env", "nice", "nohup",
    "strace", "ltrace", "gdb", "valgrind",
})


@dataclass(frozen=True)
class ParsedCommand:
    """Snapshot of a partially typed command line"""
    command: str = ""
    subcommand: Optional[str] = None
    args: Tuple[str, ...] = ()
    current_word: str = ""
    current_word_index: int = 0
    is_option: bool = False
    previous_word: Optional[str] = None


EMPTY_PARSE = ParsedCommand()


def snap_cursor(line: str, cursor, unit: str = "char") -> int:
    """
    Clamp a cursor into ``line`` and return it as a character offset.

    With ``unit="byte"`` the cursor is a UTF-8 byte offset (what shell
    integrations report); an offset that falls inside a multi-byte
    character is moved back to the start of that character.
    """
    if isinstance(cursor, bool) or not isinstance(cursor, int):
        return len(line)
    if unit == "byte":
        # Undecodable argv bytes arrive as lone surrogates (PEP 383)
        errors = "surrogateescape"
        try:
            encoded = line.encode("utf-8", errors)
        except UnicodeEncodeError:
            errors = "surrogatepass"
            encoded = line.encode("utf-8", errors)
        offset = max(0, min(cursor, len(encoded)))
        # Continuation bytes look like 0b10xxxxxx
        while offset > 0 and offset < len(encoded) and (encoded[offset] & 0xC0) == 0x80:
            offset -= 1
        return len(encoded[:offset].decode("utf-8", errors))
    return max(0, min(cursor, len(line)))


def split_words(line: str, cursor: int) -> Tuple[Tuple[str, ...], str]:
    """Return (completed tokens, current word) for the text before ``cursor``"""
    before = line[:cursor]
    tokens = before.split()
    if not before or before[-1].isspace():
        return tuple(tokens), ""
    return tuple(tokens[:-1]), tokens[-1]


class CommandParser:
    """
    Turns ``(line, cursor)`` into a :class:`ParsedCommand`.

    The catalog is only asked one question: does a command have subcommands.
    Any object with a ``has_subcommands(name)`` method works; ``None`` means
    no command has subcommands.
    """

    def __init__(self, catalog=None):
        self.catalog = catalog

    def parse(self, line, cursor=None) -> ParsedCommand:
        if not isinstance(line, str):
            return EMPTY_PARSE
        if cursor is None:
            cursor = len(line)
        elif isinstance(cursor, bool) or not isinstance(cursor, int):
            return EMPTY_PARSE
        cursor = snap_cursor(line, cursor)

        completed, current_word = split_words(line, cursor)

        # One level of wrapper elision: "sudo apt install" completes apt
        if len(completed) >= 2 and completed[0] in PREFIX_WRAPPERS:
            completed = completed[1:]

        command = completed[0] if completed else ""
        args = completed[1:]

        subcommand = None
        if args and not args[0].startswith("-") and self._has_subcommands(command):
            subcommand = args[0]

        current_word_index = len(completed)
        previous_word = completed[-1] if current_word_index > 0 else None

        return ParsedCommand(
            command=command,
            subcommand=subcommand,
            args=tuple(args),
            current_word=current_word,
            current_word_index=current_word_index,
            is_option=current_word.startswith("-"),
            previous_word=previous_word,
        )

    def _has_subcommands(self, command: str) -> bool:
        if self.catalog is None or not command:
            return False
        try:
            return bool(self.catalog.has_subcommands(command))
        except Exception as e:
            log.debug(f"Subcommand lookup failed for {command!r}: {e}")
            return False
