#!/usr/bin/env python3
"""
Completion core: line parsing, candidate matching and result ranking.
Nothing in this package performs I/O.
"""

from .models import Completion, CompletionKind
from .parser import CommandParser, ParsedCommand, PREFIX_WRAPPERS, snap_cursor
from .models import Match
from .matching import rank_candidate, build_strategies
from .orchestrator import CompletionEngine

__all__ = [
    "Completion",
    "CompletionKind",
    "CommandParser",
    "ParsedCommand",
    "PREFIX_WRAPPERS",
    "snap_cursor",
    "Match",
    "rank_candidate",
    "build_strategies",
    "CompletionEngine",
]
