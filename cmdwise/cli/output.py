#!/usr/bin/env python3
"""
Completion output for shell integration

Plain mode prints ``text<TAB>description`` per line. Color mode keeps the
same two fields and wraps each one in ANSI styles; the zsh widget from
``cmdwise init zsh`` strips them before inserting the text.
"""

from typing import Iterable, List, Optional

from rich.console import Console
from rich.text import Text

from ..engine.models import Completion, CompletionKind

KIND_STYLES = {
    CompletionKind.COMMAND: "bold green",
    CompletionKind.SUBCOMMAND: "bold cyan",
    CompletionKind.OPTION: "yellow",
    CompletionKind.ARGUMENT: "magenta",
    CompletionKind.FILE: "white",
    CompletionKind.DIRECTORY: "bold blue",
    CompletionKind.HISTORY: "dim",
}

DESCRIPTION_STYLE = "dim"

COLOR_SHELLS = ("zsh", "color")


def _clean(value: str) -> str:
    # One completion per line, two tab-separated fields
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


def _ansi_console() -> Console:
    return Console(force_terminal=True, color_system="standard", highlight=False, soft_wrap=True)


def _styled(console: Console, value: str, style: str) -> str:
    if not value:
        return ""
    with console.capture() as capture:
        console.print(Text(value, style=style), end="")
    return capture.get()


def format_plain(completions: Iterable[Completion]) -> List[str]:
    return [f"{_clean(c.text)}\t{_clean(c.description)}" for c in completions]


def format_colored(completion: Completion, console: Optional[Console] = None) -> str:
    """
    One ANSI-styled line. The tab is joined outside rich so it is never
    expanded, and each field carries only its own style.
    """
    console = console or _ansi_console()
    text = _styled(console, _clean(completion.text), KIND_STYLES[completion.kind])
    description = _styled(console, _clean(completion.description), DESCRIPTION_STYLE)
    return f"{text}\t{description}"


def render_completions(completions: Iterable[Completion], shell: str = "bash",
                       console: Optional[Console] = None) -> str:
    """Render completions the way ``shell`` expects them"""
    completions = list(completions)
    if shell not in COLOR_SHELLS:
        return "\n".join(format_plain(completions))

    console = console or _ansi_console()
    return "\n".join(format_colored(c, console) for c in completions)
