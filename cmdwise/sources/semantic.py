#!/usr/bin/env python3
"""
Intent matching
Maps what the user is trying to do ("view", "compress", "查看日志") to the
commands that do it.
"""

import difflib
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from .context import ProjectType, WorkContext

INTENT_COMMANDS: Dict[str, List[str]] = {
    "view_file": ["cat", "less", "head", "tail", "more", "bat"],
    "search_text": ["grep", "rg", "ag", "ack"],
    "list_files": ["ls", "tree", "exa", "fd"],
    "edit_file": ["vim", "vi", "nano", "emacs", "code"],
    "copy_file": ["cp", "rsync"],
    "move_file": ["mv"],
    "delete_file": ["rm", "trash"],
    "find_file": ["find", "fd", "locate"],
    "compress": ["tar", "zip", "gzip", "bzip2", "xz"],
    "extract": ["tar", "unzip", "gunzip", "bunzip2", "unxz"],
    "http_request": ["curl", "wget"],
    "process_manage": ["ps", "top", "htop", "kill", "pkill"],
    "system_info": ["uname", "hostname", "uptime", "df", "du", "free"],
    "git_operations": ["git"],
}

INTENT_KEYWORDS: Dict[str, List[str]] = {
    "view_file": ["view", "查看", "显示", "看", "file", "文件"],
    "search_text": ["search", "搜索", "查找", "找", "text", "文本"],
    "list_files": ["list", "列表", "列出", "files", "文件"],
    "edit_file": ["edit", "编辑", "修改"],
    "copy_file": ["copy", "复制", "拷贝"],
    "move_file": ["move", "移动"],
    "delete_file": ["delete", "删除", "移除"],
    "find_file": ["find", "查找", "找"],
    "compress": ["compress", "压缩", "打包"],
    "extract": ["extract", "解压", "解包"],
    "http_request": ["http", "download", "下载", "请求"],
    "process_manage": ["process", "进程", "kill"],
    "system_info": ["info", "信息", "system", "系统"],
    "git_operations": ["commit", "push", "branch", "提交", "推送", "分支"],
}

COMMAND_ARGS: Dict[str, List[str]] = {
    "git": ["status", "add", "commit -m", "push", "pull"],
    "docker": ["ps", "images", "run", "build"],
    "cargo": ["build", "run", "test", "check"],
    "tail": ["-f", "-n 100", "-F"],
    "grep": ["-r", "-i", "-n", "-E"],
}

INTENT_VERBS = (
    "view", "show", "display", "read",
    "search", "find", "look",
    "list", "ls",
    "edit", "modify",
    "copy", "cp",
    "move", "mv",
    "delete", "remove", "rm",
)

# Project types that make "run"/"test"/"install" style requests more likely
PROJECT_BOOST_WORDS = {
    ProjectType.RUST: ("run", "build", "运行", "构建"),
    ProjectType.PYTHON: ("run", "test", "运行", "测试"),
    ProjectType.NODEJS: ("install", "run", "安装", "运行"),
}

FUZZY_THRESHOLD = 0.6
MAX_INTENTS = 5


@dataclass
class IntentMatch:
    intent: str
    commands: List[str] = field(default_factory=list)
    score: int = 0
    has_args: bool = False


def similarity(a: str, b: str) -> float:
    """Rough similarity of two words in [0, 1]"""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.8
    return difflib.SequenceMatcher(None, a, b).ratio()


def has_non_latin_letters(text: str) -> bool:
    for ch in text:
        if ch.isalpha() and not unicodedata.name(ch, "").startswith("LATIN"):
            return True
    return False


class SemanticMatcher:
    """Scores the typed text against a fixed table of intents"""

    def _match(self, intent: str, score: int) -> IntentMatch:
        commands = INTENT_COMMANDS[intent]
        return IntentMatch(intent=intent, commands=list(commands), score=score,
                           has_args=commands[0] in COMMAND_ARGS)

    def identify_intent(self, text: str) -> List[str]:
        """Commands for every recognised intent, best first"""
        commands = []
        for match in self.identify_intent_advanced(text):
            commands.extend(match.commands)
        return commands

    def identify_intent_advanced(self, text: str, context: Optional[WorkContext] = None) -> List[IntentMatch]:
        text = text.lower()
        if not text:
            return []
        matches: List[IntentMatch] = []

        for intent in INTENT_COMMANDS:
            score = self.calculate_intent_score(text, intent, context)
            if score > 0:
                matches.append(self._match(intent, score))

        matches.extend(self.identify_composite_intent(text))
        matches.extend(self.fuzzy_match_intent(text))

        matches.sort(key=lambda m: m.score, reverse=True)
        seen = set()
        unique = []
        for match in matches:
            if match.intent in seen:
                continue
            seen.add(match.intent)
            unique.append(match)
        return unique[:MAX_INTENTS]

    def calculate_intent_score(self, text: str, intent: str, context: Optional[WorkContext] = None) -> int:
        score = 0
        if intent in text:
            score += 80
        for keyword in INTENT_KEYWORDS.get(intent, []):
            if keyword in text:
                score += 20
        # Context only strengthens an intent that already matched
        if score and context is not None:
            score += self.context_boost(text, intent, context)
        return min(score, 100)

    def context_boost(self, text: str, intent: str, context: WorkContext) -> int:
        boost = 0
        if context.is_git_repo:
            if intent == "git_operations" or "commit" in text or "提交" in text:
                boost += 15
            if "status" in text or "状态" in text:
                boost += 10
        words = PROJECT_BOOST_WORDS.get(context.project_type, ())
        if any(word in text for word in words):
            boost += 10
        return boost

    def identify_composite_intent(self, text: str) -> List[IntentMatch]:
        matches = []
        if "日志" in text or "log" in text:
            if any(word in text for word in ("实时", "follow", "tail")):
                matches.append(IntentMatch("view_log_realtime", ["tail -f", "journalctl -f"], 90, True))
            elif any(word in text for word in ("最近", "recent", "last")):
                matches.append(IntentMatch("view_log_recent", ["tail -n 100", "journalctl -n 100"], 85, True))
        if ("查找" in text or "find" in text) and any(w in text for w in ("内容", "content", "文本", "text")):
            matches.append(IntentMatch("find_and_grep", ["find . -type f -exec grep -l"], 80, True))
        return matches

    def fuzzy_match_intent(self, text: str) -> List[IntentMatch]:
        matches = []
        for intent, keywords in INTENT_KEYWORDS.items():
            for keyword in keywords:
                ratio = similarity(text, keyword)
                if ratio > FUZZY_THRESHOLD:
                    matches.append(self._match(intent, int(ratio * 100)))
                    break
        return matches

    def infer_command_args(self, match: IntentMatch, context: Optional[WorkContext] = None) -> List[str]:
        """Full command lines for an intent"""
        suggestions = []
        for command in match.commands:
            for arg in COMMAND_ARGS.get(command, []):
                suggestions.append(f"{command} {arg}")

        if context is not None:
            git = context.git
            if git is not None and match.intent == "git_operations":
                if git.has_uncommitted_changes:
                    suggestions.extend(["git add", "git commit -m"])
                if git.has_unpushed_commits:
                    suggestions.append("git push")
            if context.project_type is ProjectType.RUST and "cargo" in match.commands:
                suggestions.extend(["cargo build", "cargo run"])
            elif context.project_type is ProjectType.PYTHON and any("python" in c for c in match.commands):
                suggestions.append("python -m pytest")
            elif context.project_type is ProjectType.NODEJS and "npm" in match.commands:
                suggestions.extend(["npm install", "npm run"])

        unique = []
        for suggestion in suggestions:
            if suggestion not in unique:
                unique.append(suggestion)
        return unique

    def looks_like_intent(self, text: str) -> bool:
        """True for text that reads like a request rather than a command name"""
        if len(text) < 2:
            return False
        if has_non_latin_letters(text):
            return True
        lowered = text.lower()
        return any(verb in lowered for verb in INTENT_VERBS)


class SemanticSource:
    """Intent matches with their scores, plus full command-line suggestions"""

    def __init__(self, matcher: Optional[SemanticMatcher] = None):
        self.matcher = matcher or SemanticMatcher()

    def complete(self, request: CompletionRequest) -> List[Completion]:
        if not request.word:
            return []
        context = request.context if isinstance(request.context, WorkContext) else None
        completions: List[Completion] = []
        for i, match in enumerate(self.matcher.identify_intent_advanced(request.word, context)):
            for command in match.commands:
                completions.append(Completion(
                    text=command,
                    description=f"intent: {match.intent} (score {match.score})",
                    score=130 + match.score - i,
                    kind=CompletionKind.COMMAND,
                ))
            if match.has_args:
                for j, line in enumerate(self.matcher.infer_command_args(match, context)):
                    completions.append(Completion(
                        text=line,
                        description="suggested command line",
                        score=120 - j,
                        kind=CompletionKind.COMMAND,
                    ))
        return completions


class IntentPhraseSource:
    """Second pass for words that read like a natural-language request"""

    def __init__(self, matcher: Optional[SemanticMatcher] = None):
        self.matcher = matcher or SemanticMatcher()

    def looks_like_intent(self, text: str) -> bool:
        return self.matcher.looks_like_intent(text)

    def complete(self, request: CompletionRequest) -> List[Completion]:
        return [
            Completion(
                text=command,
                description=f"matches '{request.word}'",
                score=110 - i,
                kind=CompletionKind.COMMAND,
            )
            for i, command in enumerate(self.matcher.identify_intent(request.word))
        ]
