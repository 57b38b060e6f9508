#!/usr/bin/env python3
"""
cmdwise - context-aware command-line completion
Main entry point using Typer; the scripts from ``cmdwise init`` call
``cmdwise complete`` and ``cmdwise record``
"""

import typer
from typing import List, Optional
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cmdwise import __version__, __status__
from cmdwise.bootstrap import create_engine
from cmdwise.catalog import bundled_catalog
from cmdwise.cli.interactive_cli import run_interactive_cli
from cmdwise.cli.output import render_completions
from cmdwise.config import config
from cmdwise.engine.parser import snap_cursor
from cmdwise.exceptions import CmdwiseException, get_user_friendly_message
from cmdwise.logger import logger
from cmdwise.shell import SUPPORTED_SHELLS, load_script

console = Console()

app = typer.Typer(
    name="cmdwise",
    help="cmdwise - context-aware command-line completion",
    no_args_is_help=True,
    add_completion=False
)


def show_version():
    """Show version information"""
    console.print(f"[bold cyan]cmdwise[/bold cyan] v{__version__} ({__status__})")
    console.print("[dim]Context-aware command-line completion[/dim]")


@app.command("version", help="Show version information")
def version():
    """Show version information"""
    show_version()


@app.command("complete", help="Print completions for a partially typed line")
def complete(
    line: str = typer.Option(..., "--line", "-l", help="The command line typed so far"),
    cursor: Optional[int] = typer.Option(None, "--cursor", "-c", help="Cursor position (defaults to end of line)"),
    shell: str = typer.Option("bash", "--shell", "-s", help="Output style: bash, zsh or color"),
    use_bytes: bool = typer.Option(False, "--bytes", help="Treat the cursor as a UTF-8 byte offset"),
):
    """Print one ``text<TAB>description`` line per completion"""
    engine = create_engine()
    if use_bytes and cursor is not None:
        cursor = snap_cursor(line, cursor, unit="byte")
    output = render_completions(engine.complete(line, cursor), shell=shell)
    if output:
        typer.echo(output, color=True)


@app.command("record", help="Record an executed command so future completions learn from it")
def record(command: List[str] = typer.Argument(..., help="The executed command line")):
    """Record an executed command"""
    engine = create_engine()
    engine.record_command(" ".join(command))
    if not engine.save():
        raise typer.Exit(code=1)


def _print_catalog_overview(catalog):
    table = Table(title="Known commands", show_header=True, header_style="bold cyan")
    table.add_column("Command", style="green", no_wrap=True)
    table.add_column("Description")
    for spec in catalog.all_commands():
        table.add_row(spec.name, escape(spec.description))
    console.print(table)


def _print_command_help(spec):
    console.print(f"[bold yellow]{escape(spec.name)}[/bold yellow] [dim]{escape(spec.description)}[/dim]\n")

    if spec.subcommands:
        table = Table(title="Subcommands", show_header=True, header_style="bold cyan")
        table.add_column("Subcommand", style="cyan", no_wrap=True)
        table.add_column("Description")
        for sub in spec.subcommands:
            table.add_row(sub.name, escape(sub.description))
        console.print(table)

    if spec.options:
        table = Table(title="Options", show_header=True, header_style="bold cyan")
        table.add_column("Option", style="yellow", no_wrap=True)
        table.add_column("Description")
        table.add_column("Values", style="magenta")
        for option in spec.options:
            names = ", ".join(option.names)
            if option.takes_value:
                names += " <value>"
            table.add_row(escape(names), escape(option.description), ", ".join(option.values))
        console.print(table)


@app.command("help", help="Show known commands, or the subcommands and options of one command")
def help_command(command: Optional[str] = typer.Argument(None, help="Command to describe")):
    """Show catalog help"""
    catalog = bundled_catalog()
    if command is None:
        _print_catalog_overview(catalog)
        return

    spec = catalog.get_command(command)
    if spec is None:
        console.print(f"[yellow]No help found for '{escape(command)}'[/yellow]")
        raise typer.Exit(code=1)
    _print_command_help(spec)


@app.command("init", help="Print the bash or zsh integration script")
def init(shell: str = typer.Argument(..., help="Shell to integrate with: bash or zsh")):
    """Print the shell integration script for eval in the shell rc file"""
    if shell not in SUPPORTED_SHELLS:
        console.print(f"[red]Unsupported shell: {escape(shell)}. Supported: {', '.join(SUPPORTED_SHELLS)}[/red]")
        raise typer.Exit(code=1)
    typer.echo(load_script(shell), nl=False)


@app.command("shell", help="Start the interactive shell with inline completion")
def shell_cmd():
    """Start the interactive shell"""
    run_interactive_cli()


@app.command("config", help="Show the active configuration")
def config_cmd(
    reset: bool = typer.Option(False, "--reset", help="Write the default configuration to the config file"),
):
    """Show or reset the configuration"""
    if reset:
        config.reset_to_defaults()
        path = config.save()
        console.print(f"[green]Configuration reset: {path}[/green]")
        return
    console.print(f"[dim]{config.config_file}[/dim]")
    config.print_config(console)


@app.command("logs", help="Show where logs are written, or remove old log files")
def logs_cmd(
    clear: bool = typer.Option(False, "--clear", help="Remove log files older than --days"),
    days: int = typer.Option(30, "--days", min=0, help="Age in days for --clear"),
):
    """Show or clear the log directory"""
    logs_dir = config.get_path("logging.directory")
    if logs_dir is not None:
        logger.set_directory(logs_dir)
    if clear:
        removed = logger.clear_old_logs(days)
        console.print(f"[green]Removed {removed} log file(s) older than {days} days[/green]")
        return
    console.print(str(logger.logs_dir))


def main():
    """
    Main entry point for cmdwise.
    Parses arguments using Typer and routes to the matching command.
    """
    try:
        config.validate()
        logger.debug("cmdwise started")

        app()

    except CmdwiseException as e:
        console.print(f"\n[bold red]Error: {escape(get_user_friendly_message(e))}[/bold red]")
        if e.details:
            console.print(f"[dim]Details: {e.details}[/dim]")
        logger.error(f"{e.code}: {e.message}", extra={"details": e.details})
        raise typer.Exit(code=1)

    except KeyboardInterrupt:
        console.print("\n[bold yellow]Operation cancelled by user[/bold yellow]")
        logger.info("User interrupted operation (Ctrl+C)")
        raise typer.Exit(code=0)

    except Exception as e:
        console.print(f"\n[bold red]{escape(get_user_friendly_message(e))}[/bold red]")
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        console.print(f"[dim]Check logs for more details: {logger.logs_dir}[/dim]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    main()
