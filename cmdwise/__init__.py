#!/usr/bin/env python3
"""
cmdwise - context-aware command-line completion engine
"""

from .version import __version__, __status__

__all__ = ["__version__", "__status__"]
