"""
Shared fixtures for the cmdwise test-suite
"""

import pytest

from cmdwise.catalog import CommandCatalog
from cmdwise.engine import CommandParser, CompletionEngine
from cmdwise.engine.protocols import CompletionRequest, SourceSet
from cmdwise.sources import ArgumentSource, CommandSource, FileSource, HistorySource

CATALOG_DATA = {
    "commands": [
        {
            "name": "git",
            "description": "Distributed version control",
            "options": [
                {"short": "-C", "description": "Run as if started in <path>", "takes_value": True},
                {"long": "--version", "description": "Print the git version"},
            ],
            "subcommands": [
                {
                    "name": "commit",
                    "description": "Record changes to the repository",
                    "options": [
                        {"short": "-m", "long": "--message", "description": "Commit message", "takes_value": True},
                        {"short": "-a", "long": "--all", "description": "Stage modified files"},
                        {"long": "--cleanup", "description": "How to clean up the message",
                         "values": ["strip", "whitespace", "verbatim"]},
                    ],
                },
                {"name": "checkout", "description": "Switch branches"},
                {"name": "status", "description": "Show the working tree status"},
                {"name": "config", "description": "Get and set options"},
            ],
        },
        {
            "name": "systemctl",
            "description": "Control the systemd system and service manager",
            "subcommands": [
                {"name": "start", "description": "Start units"},
                {"name": "stop", "description": "Stop units"},
                {"name": "status", "description": "Show unit status"},
            ],
        },
        {
            "name": "ls",
            "description": "List directory contents",
            "options": [
                {"short": "-l", "description": "Long listing format"},
                {"short": "-a", "long": "--all", "description": "Include hidden entries"},
            ],
        },
        {"name": "cat", "description": "Concatenate files"},
        {"name": "column", "description": "Columnate lists"},
        {"name": "apt", "description": "Package manager"},
        {"name": "export", "description": "Set environment variables"},
        {"name": "sudo", "description": "Run a command as another user"},
        {
            "name": "tar",
            "description": "Archive files",
            "options": [
                {"short": "-x", "description": "Extract"},
                {"short": "-f", "long": "--file", "description": "Archive file", "takes_value": True},
            ],
        },
    ]
}

HISTORY = [
    "git status",
    "ls -la",
    "cat notes.txt",
    "git commit -m 'initial'",
]


@pytest.fixture
def catalog():
    """Fixture for a small command catalog."""
    return CommandCatalog.from_dict(CATALOG_DATA)


@pytest.fixture
def workdir(tmp_path):
    """Fixture for a directory with a few files to complete."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('hi')\n")
    (tmp_path / "notes.txt").write_text("notes\n")
    (tmp_path / "main.py").write_text("\n")
    (tmp_path / ".env").write_text("A=1\n")
    return tmp_path


@pytest.fixture
def history():
    """Fixture for in-memory shell history, newest first."""
    return HistorySource(entries=HISTORY)


@pytest.fixture
def engine(catalog, workdir, history):
    """Fixture for an engine without context analysis or learning."""
    sources = SourceSet(
        commands=CommandSource(catalog),
        history=history,
        arguments=ArgumentSource(catalog),
        files=FileSource(cwd=workdir),
    )
    return CompletionEngine(catalog, sources)


@pytest.fixture
def make_request(catalog):
    """Fixture returning a helper that builds a CompletionRequest for a line."""
    parser = CommandParser(catalog)

    def _make(line, context=None, recent=()):
        return CompletionRequest(parsed=parser.parse(line), context=context, recent_commands=tuple(recent))

    return _make
