"""
Tests for the command-line parser
"""

import pytest

from cmdwise.engine.parser import CommandParser, EMPTY_PARSE, snap_cursor, split_words


@pytest.fixture
def parser(catalog):
    """Fixture for a parser that knows which commands have subcommands."""
    return CommandParser(catalog)


def test_empty_line(parser):
    parsed = parser.parse("", 0)
    assert parsed.command == ""
    assert parsed.current_word == ""
    assert parsed.current_word_index == 0
    assert parsed.previous_word is None


def test_command_being_typed(parser):
    parsed = parser.parse("gi")
    assert parsed.command == ""
    assert parsed.current_word == "gi"
    assert parsed.current_word_index == 0


def test_trailing_space_completes_every_token(parser):
    parsed = parser.parse("ls -l ")
    assert parsed.command == "ls"
    assert parsed.args == ("-l",)
    assert parsed.current_word == ""
    assert parsed.current_word_index == 2
    assert parsed.previous_word == "-l"


def test_wrapper_is_elided(parser):
    parsed = parser.parse("sudo systemctl sta", 18)
    assert parsed.command == "systemctl"
    assert parsed.current_word == "sta"
    assert parsed.current_word_index == 1
    assert parsed.subcommand is None


def test_wrapper_elision_is_one_level(parser):
    parsed = parser.parse("sudo sudo ls ")
    assert parsed.command == "sudo"
    assert parsed.args == ("ls",)


def test_lone_wrapper_is_the_command(parser):
    parsed = parser.parse("sudo ")
    assert parsed.command == "sudo"
    assert parsed.current_word_index == 1


def test_subcommand_detected(parser):
    parsed = parser.parse("git commit -")
    assert parsed.command == "git"
    assert parsed.subcommand == "commit"
    assert parsed.is_option is True


def test_option_is_not_a_subcommand(parser):
    parsed = parser.parse("git -C repo ")
    assert parsed.subcommand is None


def test_no_subcommand_for_plain_commands(parser):
    parsed = parser.parse("ls src ")
    assert parsed.subcommand is None
    assert parsed.args == ("src",)


def test_cursor_limits_the_parsed_text(parser):
    parsed = parser.parse("git commit -m msg", 6)
    assert parsed.command == "git"
    assert parsed.current_word == "co"
    assert parsed.args == ()


def test_cursor_inside_line(parser):
    parsed = parser.parse("git commit -m msg", 7)
    assert parsed.command == "git"
    assert parsed.current_word == "com"
    assert parsed.current_word_index == 1


def test_cursor_is_clamped(parser):
    assert parser.parse("ls -l", 100) == parser.parse("ls -l")
    assert parser.parse("ls -l", -5) == parser.parse("", 0)


@pytest.mark.parametrize("line, cursor", [
    (None, 0),
    (42, 0),
    ("ls", "3"),
    ("ls", 1.5),
    ("ls", True),
])
def test_malformed_input_gives_empty_parse(parser, line, cursor):
    assert parser.parse(line, cursor) == EMPTY_PARSE


def test_failing_catalog_means_no_subcommand():
    class BrokenCatalog:
        def has_subcommands(self, command):
            raise RuntimeError("catalog unavailable")

    parsed = CommandParser(BrokenCatalog()).parse("git commit ")
    assert parsed.command == "git"
    assert parsed.subcommand is None


def test_parse_is_deterministic(parser):
    assert parser.parse("git commit --am", 15) == parser.parse("git commit --am", 15)


def test_split_words():
    assert split_words("git  com", 8) == (("git",), "com")
    assert split_words("git com ", 8) == (("git", "com"), "")
    assert split_words("", 0) == ((), "")


def test_snap_cursor_byte_offsets():
    line = "cat é.txt"
    # "é" is two bytes; an offset inside it moves back to its start
    assert snap_cursor(line, 5, unit="byte") == 4
    assert snap_cursor(line, 6, unit="byte") == 5
    assert snap_cursor(line, 100, unit="byte") == len(line)


def test_snap_cursor_characters():
    assert snap_cursor("héllo", 2) == 2
    assert snap_cursor("héllo", -1) == 0
    assert snap_cursor("héllo", None) == 5


def test_snap_cursor_byte_offsets_with_undecodable_bytes():
    # A Latin-1 "é" in argv becomes one escaped byte, not two
    line = "cat caf\udce9 x"
    assert snap_cursor(line, 8, unit="byte") == 8
    assert snap_cursor(line, 10, unit="byte") == len(line)
    assert snap_cursor(line, 5, unit="byte") == 5


def test_snap_cursor_byte_offsets_with_lone_surrogate():
    line = "\ud800x"
    assert snap_cursor(line, 2, unit="byte") == 0
    assert snap_cursor(line, 3, unit="byte") == 1
