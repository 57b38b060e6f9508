#!/usr/bin/env python3
"""
Engine assembly
Builds a fully wired CompletionEngine from the configuration.
"""

import os
from typing import Iterable, Optional

from .catalog import CommandCatalog, bundled_catalog
from .config import ConfigManager, config as default_config
from .engine import CompletionEngine
from .engine.protocols import SourceSet
from .logger import get_logger, logger
from .sources import (
    ArgumentSource,
    CommandSource,
    ContextAnalyzer,
    ContextSource,
    EnvironmentSource,
    FileSource,
    HistorySource,
    IntentPhraseSource,
    LearningEngine,
    LearningSource,
    PredictionSource,
    SemanticMatcher,
    SemanticSource,
    SequencePredictor,
)

log = get_logger("bootstrap")


def create_engine(config: Optional[ConfigManager] = None,
                  catalog: Optional[CommandCatalog] = None,
                  history_entries: Optional[Iterable[str]] = None,
                  environ=None) -> CompletionEngine:
    """
    Wire the catalog, all sources and the learning collaborators.

    ``history_entries`` (newest first) replaces the shell history files;
    tests use it to keep the user's real history out of the picture.
    """
    config = config or default_config
    config.validate()
    logger.set_level(config.get("logging.level", "WARNING"))
    logs_dir = config.get_path("logging.directory")
    if logs_dir is not None:
        logger.set_directory(logs_dir)

    catalog = catalog or bundled_catalog()
    source_limit = config.get("engine.source_limit")

    history = HistorySource(
        files=config.get("history.files"),
        entries=history_entries,
        max_entries=config.get("history.max_entries"),
    )

    data_dir = None
    if config.get("learning.enabled"):
        data_dir = config.get_path("learning.data_directory")

    predictor = SequencePredictor(data_dir)
    predictor.learn_from_history(list(reversed(history.entries())))
    learning = LearningEngine(data_dir)

    analyzer = ContextAnalyzer(
        git_timeout=config.get("context.git_timeout_seconds"),
        cache_ttl=config.get("context.cache_ttl_seconds"),
    )

    environment = EnvironmentSource(
        history_lines=history.exports(),
        environ=os.environ if environ is None else environ,
        limit=source_limit,
    )

    matcher = SemanticMatcher()
    sources = SourceSet(
        semantic=SemanticSource(matcher),
        prediction=PredictionSource(predictor, history),
        context=ContextSource(analyzer, predictor),
        learning=LearningSource(learning),
        commands=CommandSource(catalog, limit=source_limit),
        history=history,
        phrase=IntentPhraseSource(matcher),
        environment=environment,
        arguments=ArgumentSource(catalog, limit=source_limit),
        files=FileSource(limit=source_limit),
    )

    log.debug(f"Engine ready with {len(catalog)} known commands and {len(history.entries())} history entries")

    return CompletionEngine(
        catalog,
        sources,
        context_provider=analyzer,
        personalizer=learning,
        recorders=[predictor, learning, history, environment],
        source_limit=source_limit,
        max_results=config.get("engine.max_results"),
        recent_limit=config.get("engine.recent_commands"),
        save_every=config.get("learning.save_every"),
    )
