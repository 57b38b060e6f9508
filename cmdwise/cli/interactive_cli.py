#!/usr/bin/env python3
"""
cmdwise interactive shell
A small command loop with inline completion: lines are run by the system
shell and every executed line teaches the engine.
"""

import asyncio
import os
import subprocess
import sys

from rich.console import Console
from rich.table import Table

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.formatted_text import HTML

from ..bootstrap import create_engine
from ..logger import get_logger
from .prompt_completer import CmdwiseCompleter

console = Console()
log = get_logger("cli.interactive")


class InteractiveCLI:
    """Prompt loop; ``cd``, ``exit``/``quit`` and ``:history`` are handled here"""

    def __init__(self, engine=None, history_file=None):
        self.engine = engine or create_engine()
        self.history_file = history_file or os.path.expanduser("~/.cmdwise_history")
        self.should_exit = False
        self.last_status = 0

        self.session = PromptSession(
            history=FileHistory(self.history_file),
            auto_suggest=AutoSuggestFromHistory(),
            completer=CmdwiseCompleter(self.engine),
            complete_while_typing=True,
            complete_in_thread=True,
        )

    def get_prompt(self):
        cwd = os.getcwd()
        home = os.path.expanduser("~")
        if cwd.startswith(home):
            cwd = "~" + cwd[len(home):]
        marker = "$" if self.last_status == 0 else f"[{self.last_status}]$"
        return f"(cmdwise) {cwd} {marker} "

    async def run(self):
        """Main loop for the interactive shell"""
        print_formatted_text(HTML("<b>cmdwise</b> <dim>interactive shell. Tab completes, 'exit' quits.</dim>"))

        while not self.should_exit:
            try:
                user_input = await self.session.prompt_async(self.get_prompt())
                self.handle_command(user_input)
            except KeyboardInterrupt:
                continue
            except EOFError:
                self.should_exit = True

        if not self.engine.save():
            console.print("[yellow]Some learned data could not be saved, see the log for details[/yellow]")
        print_formatted_text(HTML("<yellow>Goodbye!</yellow>"))

    def handle_command(self, user_input: str):
        line = user_input.strip()
        if not line:
            return

        parts = line.split()
        command = parts[0]

        if command in ("exit", "quit"):
            self.should_exit = True
            return
        if command == "cd":
            self.do_cd(parts[1] if len(parts) > 1 else "~")
        elif command == ":history":
            self.do_history()
            return
        else:
            self.execute(line)

        self.engine.record_command(line)

    def do_cd(self, target: str):
        path = os.path.expanduser(target)
        try:
            os.chdir(path)
            self.last_status = 0
        except OSError as e:
            console.print(f"[red]cd: {target}: {e.strerror or e}[/red]")
            self.last_status = 1

    def do_history(self):
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Command", style="cyan")
        for i, command in enumerate(self.engine.recent_commands, 1):
            table.add_row(str(i), command)
        console.print(table)

    def execute(self, line: str):
        try:
            result = subprocess.run(line, shell=True)
            self.last_status = result.returncode
        except OSError as e:
            console.print(f"[red]Failed to run command: {e}[/red]")
            log.warning(f"Failed to run {line!r}: {e}")
            self.last_status = 127


def run_interactive_cli(engine=None):
    """Main function to run the interactive shell"""
    try:
        interactive_cli = InteractiveCLI(engine)
        asyncio.run(interactive_cli.run())
    except Exception as e:
        console.print(f"[red]Fatal error in interactive shell: {str(e)}[/red]")
        log.error(f"Interactive shell crashed: {e}", exc_info=True)
        sys.exit(1)
