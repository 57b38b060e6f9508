#!/usr/bin/env python3
"""
Command catalog for cmdwise.

Commands, their options and their subcommands are described declaratively in
bundled JSON files and loaded once per process. The catalog is read-only
after construction and is handed to the parser, the engine and the sources
by reference.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..exceptions import CatalogError
from ..logger import get_logger

log = get_logger("catalog")

DATA_PACKAGE = "cmdwise.catalog.data"


# ---------------------------------------------------------------------------
# Option and command specs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OptionSpec:
    short: Optional[str] = None
    long: Optional[str] = None
    description: str = ""
    takes_value: bool = False
    values: Tuple[str, ...] = ()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name in (self.short, self.long) if name)

    def matches(self, flag: str) -> bool:
        """True if ``flag`` (``-m``, ``--message`` or ``--message=x``) names this option"""
        if not flag:
            return False
        if flag.startswith("--") and "=" in flag:
            flag = flag.split("=", 1)[0]
        return flag in self.names

    @classmethod
    def from_dict(cls, data: Dict[str, Any], command: str = "") -> "OptionSpec":
        if not isinstance(data, dict):
            raise CatalogError("Option definition must be an object", command=command)
        short = data.get("short")
        long = data.get("long")
        if not short and not long:
            raise CatalogError("Option needs a short or long name", command=command)
        values = data.get("values") or ()
        return cls(
            short=short,
            long=long,
            description=data.get("description", ""),
            takes_value=bool(data.get("takes_value", bool(values))),
            values=tuple(str(v) for v in values),
        )


@dataclass(frozen=True)
class CommandSpec:
    name: str
    description: str = ""
    options: Tuple[OptionSpec, ...] = ()
    subcommands: Tuple["CommandSpec", ...] = field(default_factory=tuple)

    def find_option(self, flag: str) -> Optional[OptionSpec]:
        for option in self.options:
            if option.matches(flag):
                return option
        return None

    def find_subcommand(self, name: str) -> Optional["CommandSpec"]:
        for sub in self.subcommands:
            if sub.name == name:
                return sub
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandSpec":
        if not isinstance(data, dict) or not data.get("name"):
            raise CatalogError("Command definition needs a name")
        name = str(data["name"])
        options = tuple(OptionSpec.from_dict(o, command=name) for o in data.get("options", ()))
        subcommands = tuple(cls.from_dict(s) for s in data.get("subcommands", ()))
        return cls(
            name=name,
            description=data.get("description", ""),
            options=options,
            subcommands=subcommands,
        )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CommandCatalog:
    """Read-only lookup of known commands"""

    def __init__(self, commands: Iterable[CommandSpec] = ()) -> None:
        table: Dict[str, CommandSpec] = {}
        for spec in commands:
            if spec.name in table:
                log.debug(f"Duplicate command definition for {spec.name}, keeping the first")
                continue
            table[spec.name] = spec
        self._commands: Mapping[str, CommandSpec] = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def get_command(self, name: str) -> Optional[CommandSpec]:
        return self._commands.get(name)

    def get_subcommand(self, command: str, subcommand: str) -> Optional[CommandSpec]:
        spec = self._commands.get(command)
        if spec is None:
            return None
        return spec.find_subcommand(subcommand)

    def get_subcommands(self, command: str) -> Tuple[CommandSpec, ...]:
        spec = self._commands.get(command)
        return spec.subcommands if spec else ()

    def has_subcommands(self, command: str) -> bool:
        return bool(self.get_subcommands(command))

    def all_commands(self) -> List[CommandSpec]:
        """All commands in definition order"""
        return list(self._commands.values())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandCatalog":
        """Build a catalog from ``{"commands": [...]}``"""
        if not isinstance(data, dict) or not isinstance(data.get("commands"), list):
            raise CatalogError("Catalog data must contain a 'commands' list")
        return cls(CommandSpec.from_dict(entry) for entry in data["commands"])

    @classmethod
    def from_json_files(cls, texts: Iterable[Tuple[str, str]]) -> "CommandCatalog":
        """Build a catalog from ``(source name, JSON text)`` pairs, in order"""
        commands: List[CommandSpec] = []
        for source, text in texts:
            try:
                data = json.loads(text)
            except ValueError as e:
                raise CatalogError(f"Invalid command definitions: {e}", source=source)
            try:
                commands.extend(cls.from_dict(data).all_commands())
            except CatalogError as e:
                e.details.setdefault("source", source)
                raise
        return cls(commands)


def _bundled_texts() -> List[Tuple[str, str]]:
    texts = []
    for entry in sorted(resources.files(DATA_PACKAGE).iterdir(), key=lambda p: p.name):
        if entry.name.endswith(".json"):
            texts.append((entry.name, entry.read_text(encoding="utf-8")))
    return texts


@lru_cache(maxsize=1)
def bundled_catalog() -> CommandCatalog:
    """The catalog built from the definitions shipped with cmdwise"""
    catalog = CommandCatalog.from_json_files(_bundled_texts())
    log.debug(f"Loaded {len(catalog)} command definitions")
    return catalog
