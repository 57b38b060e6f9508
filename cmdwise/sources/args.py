#!/usr/bin/env python3
"""Options, option values and subcommands from the catalog"""

from typing import List

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest

SUBCOMMAND_SCORE = 95
VALUE_SCORE = 90
SHORT_OPTION_SCORE = 85
LONG_OPTION_SCORE = 80


class ArgumentSource:
    """
    Completes what follows a known command.

    Options are looked up on the subcommand first, then on the command.
    Options already present on the line are not offered again.
    """

    def __init__(self, catalog, limit: int = 50):
        self.catalog = catalog
        self.limit = limit

    def complete(self, request: CompletionRequest) -> List[Completion]:
        parsed = request.parsed
        spec = None
        if parsed.subcommand:
            spec = self.catalog.get_subcommand(parsed.command, parsed.subcommand)
        if spec is None:
            spec = self.catalog.get_command(parsed.command)
        if spec is None:
            return []

        completions: List[Completion] = []

        if parsed.is_option or not parsed.current_word:
            for option in spec.options:
                if any(option.matches(arg) for arg in parsed.args):
                    continue
                if option.short:
                    completions.append(Completion(
                        text=option.short,
                        description=option.description,
                        score=SHORT_OPTION_SCORE,
                        kind=CompletionKind.OPTION,
                    ))
                if option.long:
                    completions.append(Completion(
                        text=option.long,
                        description=option.description,
                        score=LONG_OPTION_SCORE,
                        kind=CompletionKind.OPTION,
                    ))

        if parsed.previous_word:
            option = spec.find_option(parsed.previous_word)
            if option is not None:
                label = option.long or option.short
                for value in option.values:
                    completions.append(Completion(
                        text=value,
                        description=f"value for {label}",
                        score=VALUE_SCORE,
                        kind=CompletionKind.ARGUMENT,
                    ))

        if parsed.subcommand is None and parsed.current_word_index == 1:
            for sub in self.catalog.get_subcommands(parsed.command):
                completions.append(Completion(
                    text=sub.name,
                    description=sub.description,
                    score=SUBCOMMAND_SCORE,
                    kind=CompletionKind.SUBCOMMAND,
                ))

        return completions[:self.limit]
