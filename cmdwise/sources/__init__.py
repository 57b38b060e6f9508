#!/usr/bin/env python3
"""
Completion sources
Each source turns a parsed line into candidate completions; the engine
decides which sources to ask and ranks what they return.
"""

from .args import ArgumentSource
from .commands import CommandSource
from .context import ContextAnalyzer, ContextSource, WorkContext
from .environment import EnvironmentSource
from .files import FileSource
from .history import HistorySource
from .learning import LearningEngine, LearningSource
from .prediction import PredictionSource, SequencePredictor
from .semantic import IntentPhraseSource, SemanticMatcher, SemanticSource

__all__ = [
    "ArgumentSource",
    "CommandSource",
    "ContextAnalyzer",
    "ContextSource",
    "WorkContext",
    "EnvironmentSource",
    "FileSource",
    "HistorySource",
    "LearningEngine",
    "LearningSource",
    "PredictionSource",
    "SequencePredictor",
    "IntentPhraseSource",
    "SemanticMatcher",
    "SemanticSource",
]
