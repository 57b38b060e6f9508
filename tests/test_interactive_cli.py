"""
Tests for the interactive shell loop
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from cmdwise.cli.interactive_cli import InteractiveCLI


@pytest.fixture
def cli(engine, tmp_path):
    """Fixture for an InteractiveCLI without a real terminal session."""
    with patch("cmdwise.cli.interactive_cli.PromptSession"):
        yield InteractiveCLI(engine, history_file=str(tmp_path / "history"))


@pytest.fixture
def restore_cwd():
    cwd = os.getcwd()
    yield
    os.chdir(cwd)


def test_exit_commands(cli):
    cli.handle_command("exit")
    assert cli.should_exit
    assert cli.engine.recent_commands == ()


def test_blank_input_is_ignored(cli):
    cli.handle_command("   ")
    assert cli.engine.recent_commands == ()


def test_cd_changes_directory(cli, tmp_path, restore_cwd):
    cli.handle_command(f"cd {tmp_path}")
    assert os.path.realpath(os.getcwd()) == os.path.realpath(tmp_path)
    assert cli.last_status == 0
    assert cli.engine.recent_commands == (f"cd {tmp_path}",)


def test_cd_to_missing_directory(cli, tmp_path, restore_cwd):
    cli.handle_command(f"cd {tmp_path / 'missing'}")
    assert cli.last_status == 1


def test_commands_are_run_and_recorded(cli):
    with patch("cmdwise.cli.interactive_cli.subprocess.run") as run:
        run.return_value = MagicMock(returncode=3)
        cli.handle_command("make test")
    run.assert_called_once_with("make test", shell=True)
    assert cli.last_status == 3
    assert cli.engine.recent_commands == ("make test",)


def test_prompt_shows_failed_status(cli):
    cli.last_status = 2
    assert cli.get_prompt().endswith("[2]$ ")
