#!/usr/bin/env python3
"""
Path completion
Lists the directory named by the word under the cursor.
"""

import os
from pathlib import Path
from typing import List, Optional, Tuple

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from ..logger import get_logger

log = get_logger("sources.files")

DIRECTORY_SCORE = 80
FILE_SCORE = 70

FILE_TYPES = {
    "txt": "Text file",
    "md": "Markdown file",
    "rst": "reStructuredText file",
    "rs": "Rust source",
    "py": "Python script",
    "js": "JavaScript file",
    "ts": "TypeScript file",
    "c": "C source",
    "h": "C header",
    "cpp": "C++ source",
    "hpp": "C++ header",
    "cc": "C++ source",
    "go": "Go source",
    "java": "Java source",
    "sh": "Shell script",
    "bash": "Shell script",
    "json": "JSON file",
    "yaml": "YAML file",
    "yml": "YAML file",
    "toml": "TOML file",
    "ini": "INI file",
    "cfg": "Config file",
    "xml": "XML file",
    "html": "HTML file",
    "htm": "HTML file",
    "css": "CSS file",
    "sql": "SQL file",
    "log": "Log file",
    "csv": "CSV file",
    "tar": "Archive",
    "gz": "Archive",
    "tgz": "Archive",
    "zip": "Archive",
    "7z": "Archive",
    "rar": "Archive",
    "pdf": "PDF document",
    "doc": "Word document",
    "docx": "Word document",
    "xls": "Spreadsheet",
    "xlsx": "Spreadsheet",
    "png": "Image",
    "jpg": "Image",
    "jpeg": "Image",
    "gif": "Image",
    "svg": "Image",
    "mp3": "Audio file",
    "wav": "Audio file",
    "flac": "Audio file",
    "mp4": "Video file",
    "mkv": "Video file",
    "avi": "Video file",
}


def describe_file(name: str) -> str:
    suffix = Path(name).suffix.lower().lstrip(".")
    return FILE_TYPES.get(suffix, "File")


class FileSource:
    """
    Suggests entries of a directory.

    The typed directory part is kept in the suggested text, so ``src/ma``
    completes to ``src/main.py``. Hidden entries are only offered when the
    typed name starts with a dot.
    """

    def __init__(self, cwd: Optional[Path] = None, limit: int = 50):
        self.cwd = Path(cwd) if cwd else None
        self.limit = limit

    def _base(self) -> Path:
        return self.cwd if self.cwd is not None else Path.cwd()

    def split_word(self, word: str) -> Tuple[str, str]:
        """Return (typed directory part including trailing '/', name prefix)"""
        if not word:
            return "", ""
        if word.endswith("/"):
            return word, ""
        if word in ("~", ".", ".."):
            directory = self._resolve(word)
            if directory.is_dir() and word != ".":
                return word + "/", ""
        head, sep, tail = word.rpartition("/")
        if sep:
            return head + "/", tail
        return "", word

    def _resolve(self, typed_dir: str) -> Path:
        if not typed_dir:
            return self._base()
        expanded = Path(os.path.expanduser(typed_dir))
        if expanded.is_absolute():
            return expanded
        return self._base() / expanded

    def complete(self, request: CompletionRequest) -> List[Completion]:
        word = request.word
        typed_dir, name_prefix = self.split_word(word)
        directory = self._resolve(typed_dir)

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            log.debug(f"Cannot list {directory}: {e}")
            return []

        completions: List[Completion] = []
        for entry in entries:
            name = entry.name
            if name.startswith(".") and not name_prefix.startswith("."):
                continue
            if name_prefix and not name.startswith(name_prefix):
                continue
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False

            text = typed_dir + name
            if is_dir:
                completions.append(Completion(
                    text=text + "/",
                    description="Directory",
                    score=DIRECTORY_SCORE,
                    kind=CompletionKind.DIRECTORY,
                ))
            else:
                completions.append(Completion(
                    text=text,
                    description=describe_file(name),
                    score=FILE_SCORE,
                    kind=CompletionKind.FILE,
                ))
            if len(completions) >= self.limit:
                break
        return completions
