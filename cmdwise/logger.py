#!/usr/bin/env python3
"""
cmdwise Logging System
Centralized logging with file rotation; console output goes to stderr so that
completion results on stdout stay machine-readable
"""

import logging
import os
import time
from logging.handlers import RotatingFileHandler
from datetime import datetime
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler


DEFAULT_LOGS_DIR = Path.home() / ".cmdwise" / "logs"

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class CmdwiseLogger:
    """Centralized logging system for cmdwise"""

    _instance = None
    _initialized = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, logs_dir=None):
        if CmdwiseLogger._initialized:
            return

        self.console = Console(stderr=True)
        self.logs_dir = Path(logs_dir or os.environ.get("CMDWISE_LOGGING_DIRECTORY") or DEFAULT_LOGS_DIR)

        self.logger = logging.getLogger("cmdwise")
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.file_handler = self._open_file_handler(self.logs_dir)
        if self.file_handler is not None:
            self.logger.addHandler(self.file_handler)

        # Console handler only surfaces problems
        self.console_handler = RichHandler(console=self.console, show_level=True, show_time=False)
        self.console_handler.setLevel(logging.WARNING)
        self.logger.addHandler(self.console_handler)

        CmdwiseLogger._initialized = True

    @staticmethod
    def _open_file_handler(logs_dir):
        # A read-only home must not break completion
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            log_file = logs_dir / f"cmdwise_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=5*1024*1024,  # 5MB
                backupCount=3
            )
        except OSError:
            return None

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        return file_handler

    def set_directory(self, logs_dir):
        """Move file logging to ``logs_dir``; keeps the old file if it cannot be opened"""
        logs_dir = Path(logs_dir)
        if logs_dir == self.logs_dir and self.file_handler is not None:
            return
        file_handler = self._open_file_handler(logs_dir)
        if file_handler is None:
            return
        if self.file_handler is not None:
            self.logger.removeHandler(self.file_handler)
            self.file_handler.close()
        self.file_handler = file_handler
        self.logs_dir = logs_dir
        self.logger.addHandler(file_handler)

    def get_logger(self, name=None):
        """Get a logger instance"""
        if name:
            return logging.getLogger(f"cmdwise.{name}")
        return self.logger

    def debug(self, message, **kwargs):
        self.logger.debug(message, **kwargs)

    def info(self, message, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message, **kwargs):
        self.logger.error(message, **kwargs)

    def set_level(self, level):
        """Set the console logging level (file logging always keeps DEBUG)"""
        if isinstance(level, str):
            level = level.upper()
            if level not in LEVEL_NAMES:
                raise ValueError(f"Unknown logging level: {level}")
        self.console_handler.setLevel(level)

    def clear_old_logs(self, days=7):
        """Clear logs older than specified days; returns how many were removed"""
        current_time = time.time()
        removed = 0
        for log_file in self.logs_dir.glob("*.log*"):
            if os.path.getmtime(log_file) < current_time - days * 86400:
                try:
                    os.remove(log_file)
                    removed += 1
                    self.info(f"Removed old log file: {log_file}")
                except OSError as e:
                    self.error(f"Failed to remove old log file: {e}")
        return removed


# Singleton instance
logger = CmdwiseLogger()


def get_logger(name=None):
    """Shortcut for ``logger.get_logger``"""
    return logger.get_logger(name)
