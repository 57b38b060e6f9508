#!/usr/bin/env python3
"""
cmdwise Exception Hierarchy
Errors raised outside the completion path (catalog loading, config, persistence)
"""


class CmdwiseException(Exception):
    """Base exception for all cmdwise errors"""
    def __init__(self, message, code=None, details=None):
        self.message = message
        self.code = code or "UNKNOWN_ERROR"
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Convert exception to dict for logging/output"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(CmdwiseException):
    """Raised when configuration is invalid or cannot be saved"""
    def __init__(self, message, config_key=None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, "CONFIG_ERROR", details)


class CatalogError(CmdwiseException):
    """Raised when command definitions are missing or malformed"""
    def __init__(self, message, command=None, source=None):
        details = {}
        if command:
            details["command"] = command
        if source:
            details["source"] = str(source)
        super().__init__(message, "CATALOG_ERROR", details)


class PersistenceError(CmdwiseException):
    """Raised when learned data cannot be read or written"""
    def __init__(self, message, path=None, operation=None):
        details = {}
        if path:
            details["path"] = str(path)
        if operation:
            details["operation"] = operation
        super().__init__(message, "PERSISTENCE_ERROR", details)


def get_user_friendly_message(exception):
    """Convert an exception into a one-line message for terminal output"""
    if isinstance(exception, CmdwiseException):
        return f"{exception.message} ({exception.code})"
    return f"Unexpected error: {exception}"
