#!/usr/bin/env python3
"""Known commands, options and subcommands"""

from .registry import CommandCatalog, CommandSpec, OptionSpec, bundled_catalog

__all__ = ["CommandCatalog", "CommandSpec", "OptionSpec", "bundled_catalog"]
