#!/usr/bin/env python3
"""
Completion engine

Decides whether the cursor completes a command name or an argument, asks the
matching sources for candidates in a fixed order, then filters, scores,
personalizes, deduplicates and truncates the merged list.
"""

from collections import deque
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..logger import get_logger
from .matching import Strategy, rank_candidate
from .models import Completion, CompletionKind
from .parser import CommandParser, ParsedCommand, PREFIX_WRAPPERS, snap_cursor, split_words
from .protocols import (
    CommandRecorder,
    CompletionRequest,
    CompletionSource,
    ContextProvider,
    Personalizer,
    SourceSet,
)

log = get_logger("engine")

MAX_RESULTS = 20
DEFAULT_SOURCE_LIMIT = 50
RECENT_COMMANDS = 10
MAX_PERSONAL_BOOST = 280
FILE_OPERATION_BOOST = 20

# Commands whose arguments are almost always paths
FILE_OPERATION_COMMANDS = frozenset({
    "touch", "cat", "less", "head", "tail", "more", "bat",
    "ls", "cd", "cp", "mv", "rm", "mkdir", "rmdir",
    "chmod", "chown", "grep", "find", "locate",
    "vim", "vi", "nano", "emacs", "code",
    "tar", "zip", "unzip", "gzip", "gunzip",
    "python", "python3", "node", "bash", "sh",
})

ENV_ASSIGNMENT_COMMANDS = frozenset({"export"})

Ranked = List[Tuple[int, Completion]]


def looks_like_path(word: str) -> bool:
    return word.startswith(("/", ".", "~")) or "/" in word


class CompletionEngine:
    """
    Ranks completions for a partially typed command line.

    ``complete()`` never raises and never changes what a later call returns;
    only ``record_command()`` updates the recent-command buffer and the
    learning collaborators.
    """

    def __init__(
        self,
        catalog=None,
        sources: Optional[SourceSet] = None,
        *,
        parser: Optional[CommandParser] = None,
        context_provider: Optional[ContextProvider] = None,
        personalizer: Optional[Personalizer] = None,
        recorders: Iterable[CommandRecorder] = (),
        strategies: Optional[Sequence[Strategy]] = None,
        source_limit: int = DEFAULT_SOURCE_LIMIT,
        max_results: int = MAX_RESULTS,
        recent_limit: int = RECENT_COMMANDS,
        save_every: int = 0,
    ):
        self.catalog = catalog
        self.parser = parser or CommandParser(catalog)
        self.sources = sources or SourceSet()
        self.context_provider = context_provider
        self.personalizer = personalizer
        self.recorders = list(recorders)
        self.strategies = strategies
        self.source_limit = source_limit
        self.max_results = max(1, min(max_results, MAX_RESULTS))
        self.save_every = save_every
        self._recent = deque(maxlen=max(1, min(recent_limit, RECENT_COMMANDS)))
        self._recorded = 0

    @property
    def recent_commands(self) -> Tuple[str, ...]:
        return tuple(self._recent)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def complete(self, line, cursor=None) -> List[Completion]:
        """Return at most ``max_results`` ranked, unique completions"""
        try:
            return self._complete(line, cursor)
        except Exception as e:
            log.debug(f"Completion failed for {line!r}: {e}", exc_info=True)
            return []

    def _complete(self, line, cursor) -> List[Completion]:
        parsed = self.parser.parse(line, cursor)
        completed, current = self._raw_words(line, cursor)

        recent = self.recent_commands
        context = self._analyze(recent)
        request = CompletionRequest(parsed=parsed, context=context, recent_commands=recent)

        merged: List[Completion] = []
        if self.is_command_position(parsed, completed, current):
            self._collect_commands(request, merged)
        else:
            self._collect_arguments(request, merged)

        ranked: Ranked = list(enumerate(merged))
        if parsed.current_word:
            ranked = self._filter_and_rank(ranked, parsed.current_word)
        ranked = self._personalize(ranked, context)
        return self._deduplicate(ranked)

    @staticmethod
    def _raw_words(line, cursor) -> Tuple[Tuple[str, ...], str]:
        if not isinstance(line, str):
            return (), ""
        if cursor is None:
            cursor = len(line)
        elif isinstance(cursor, bool) or not isinstance(cursor, int):
            return (), ""
        return split_words(line, snap_cursor(line, cursor))

    @staticmethod
    def is_command_position(parsed: ParsedCommand, completed: Tuple[str, ...], current: str) -> bool:
        """
        True when the cursor completes a program name.

        ``completed`` and ``current`` are the raw tokens before wrapper
        elision, so ``sudo ap`` is still completing the command.
        """
        words = completed + ((current,) if current else ())
        if not words:
            return True
        if len(words) == 1:
            return words[0] in PREFIX_WRAPPERS or parsed.current_word_index == 0
        if len(words) == 2:
            return words[0] in PREFIX_WRAPPERS and len(completed) == 1
        return parsed.current_word_index == 0

    def _collect_commands(self, request: CompletionRequest, merged: List[Completion]):
        word = request.word
        if word:
            merged.extend(self._query("semantic", request))
        merged.extend(self._query("prediction", request))
        merged.extend(self._query("context", request))
        merged.extend(self._query("learning", request))
        merged.extend(self._query("commands", request))
        if word:
            merged.extend(self._query("history", request))
        if word and self._looks_like_intent(word):
            merged.extend(self._query("phrase", request))

    def _collect_arguments(self, request: CompletionRequest, merged: List[Completion]):
        parsed = request.parsed
        if parsed.command in ENV_ASSIGNMENT_COMMANDS:
            merged.extend(self._query("environment", request))

        is_file_operation = parsed.command in FILE_OPERATION_COMMANDS
        if not is_file_operation or parsed.is_option:
            merged.extend(self._query("arguments", request))

        has_subcommands = any(c.kind is CompletionKind.SUBCOMMAND for c in merged)
        if is_file_operation or not has_subcommands or looks_like_path(parsed.current_word):
            files = self._query("files", request)
            if is_file_operation:
                files = [c.with_score(c.score + FILE_OPERATION_BOOST) for c in files]
            merged.extend(files)

    def _query(self, role: str, request: CompletionRequest) -> List[Completion]:
        source: Optional[CompletionSource] = getattr(self.sources, role)
        if source is None:
            return []
        try:
            results = source.complete(request) or []
            return [c for c in results if isinstance(c, Completion) and c.text][:self.source_limit]
        except Exception as e:
            log.debug(f"Source '{role}' failed: {e}", exc_info=True)
            return []

    def _looks_like_intent(self, word: str) -> bool:
        phrase = self.sources.phrase
        if phrase is None:
            return False
        try:
            return bool(phrase.looks_like_intent(word))
        except Exception as e:
            log.debug(f"Intent check failed for {word!r}: {e}")
            return False

    def _analyze(self, recent: Tuple[str, ...]) -> Any:
        if self.context_provider is None:
            return None
        try:
            return self.context_provider.analyze(recent)
        except Exception as e:
            log.debug(f"Context analysis failed: {e}")
            return None

    def _filter_and_rank(self, ranked: Ranked, word: str) -> Ranked:
        scored: Ranked = []
        for seq, completion in ranked:
            match = rank_candidate(completion.text, word, self.strategies)
            if match is not None:
                scored.append((seq, completion.with_match(match.score, match.indices)))
        scored.sort(key=lambda item: item[1].score, reverse=True)
        return scored

    def _personalize(self, ranked: Ranked, context: Any) -> Ranked:
        if self.personalizer is not None:
            boosted: Ranked = []
            for seq, completion in ranked:
                try:
                    boost = int(self.personalizer.score_boost(completion.text, context))
                except Exception as e:
                    log.debug(f"Personalization failed for {completion.text!r}: {e}")
                    boost = 0
                boost = max(0, min(boost, MAX_PERSONAL_BOOST))
                boosted.append((seq, completion.with_score(completion.score + boost) if boost else completion))
            ranked = boosted
        return sorted(ranked, key=lambda item: item[1].score, reverse=True)

    def _deduplicate(self, ranked: Ranked) -> List[Completion]:
        # The earliest merged candidate for a text wins, wherever it ranks
        first_seen = {}
        for seq, completion in ranked:
            if completion.text not in first_seen or seq < first_seen[completion.text]:
                first_seen[completion.text] = seq
        unique = [c for seq, c in ranked if first_seen[c.text] == seq]
        return unique[:self.max_results]

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def record_command(self, command) -> None:
        """Remember an executed command; never raises"""
        if not isinstance(command, str) or not command.strip():
            return
        command = command.strip()
        self._recent.append(command)
        context = self._analyze(self.recent_commands)

        for recorder in self.recorders:
            try:
                recorder.record_command(command, context)
            except Exception as e:
                log.debug(f"Recorder {type(recorder).__name__} failed: {e}")

        self._recorded += 1
        if self.save_every and self._recorded % self.save_every == 0:
            self.save()

    def save(self) -> bool:
        """Persist learned data; returns False if any collaborator failed"""
        ok = True
        for recorder in self.recorders:
            save = getattr(recorder, "save", None)
            if save is None:
                continue
            try:
                save()
            except Exception as e:
                log.warning(f"Could not save {type(recorder).__name__} data: {e}")
                ok = False
        return ok
