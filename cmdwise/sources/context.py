#!/usr/bin/env python3
"""
Working-context analysis
Looks at the current directory (git state, project markers), the commands
run recently and the time of day, and suggests commands that fit.
"""

import subprocess
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from ..logger import get_logger

log = get_logger("sources.context")


class ProjectType(Enum):
    RUST = "rust"
    PYTHON = "python"
    NODEJS = "nodejs"
    GO = "go"
    JAVA = "java"
    DOCKER = "docker"
    KUBERNETES = "kubernetes"
    TERRAFORM = "terraform"
    ANSIBLE = "ansible"


class WorkflowPattern(Enum):
    GIT = "git"
    TESTING = "testing"
    BUILD = "build"
    DEBUGGING = "debugging"
    DEPLOYMENT = "deployment"
    DEVELOPMENT = "development"


# Checked in order; the first project whose marker exists wins
PROJECT_MARKERS: List[Tuple[ProjectType, Tuple[str, ...]]] = [
    (ProjectType.RUST, ("Cargo.toml", "Cargo.lock")),
    (ProjectType.PYTHON, ("setup.py", "pyproject.toml", "requirements.txt", "Pipfile")),
    (ProjectType.NODEJS, ("package.json",)),
    (ProjectType.GO, ("go.mod", "Gopkg.toml")),
    (ProjectType.JAVA, ("pom.xml", "build.gradle", "build.gradle.kts")),
    (ProjectType.DOCKER, ("Dockerfile", "docker-compose.yml", "compose.yaml")),
    (ProjectType.KUBERNETES, ("k8s", "kubernetes")),
    (ProjectType.TERRAFORM, ("main.tf", "terraform.tf", ".terraform")),
    (ProjectType.ANSIBLE, ("ansible.cfg", "playbook.yml")),
]

WORKFLOW_KEYWORDS: List[Tuple[WorkflowPattern, Tuple[str, ...]]] = [
    (WorkflowPattern.GIT, ("git",)),
    (WorkflowPattern.TESTING, ("test", "pytest")),
    (WorkflowPattern.BUILD, ("build", "make")),
    (WorkflowPattern.DEBUGGING, ("debug", "gdb", "strace")),
    (WorkflowPattern.DEPLOYMENT, ("deploy", "docker", "kubectl")),
    (WorkflowPattern.DEVELOPMENT, ("run", "python")),
]

PROJECT_COMMANDS: Dict[ProjectType, List[str]] = {
    ProjectType.RUST: ["cargo build", "cargo run", "cargo test"],
    ProjectType.PYTHON: ["python", "pip install", "python -m pytest"],
    ProjectType.NODEJS: ["npm install", "npm run", "node"],
    ProjectType.GO: ["go build", "go run", "go test"],
    ProjectType.JAVA: ["mvn", "gradle"],
    ProjectType.DOCKER: ["docker build", "docker-compose up"],
    ProjectType.KUBERNETES: ["kubectl", "helm"],
    ProjectType.TERRAFORM: ["terraform"],
    ProjectType.ANSIBLE: ["ansible-playbook"],
}

WORKFLOW_COMMANDS: Dict[WorkflowPattern, List[str]] = {
    WorkflowPattern.DEVELOPMENT: ["cargo run", "python", "npm run dev"],
    WorkflowPattern.TESTING: ["cargo test", "pytest", "npm test"],
    WorkflowPattern.BUILD: ["cargo build --release", "make", "npm run build"],
    WorkflowPattern.DEBUGGING: ["gdb", "strace", "valgrind"],
    WorkflowPattern.DEPLOYMENT: ["docker build", "kubectl apply", "terraform apply"],
    WorkflowPattern.GIT: ["git status", "git add", "git commit"],
}

MAX_SUGGESTIONS = 10


@dataclass(frozen=True)
class GitContext:
    branch: Optional[str] = None
    has_uncommitted_changes: bool = False
    has_untracked_files: bool = False
    has_unpushed_commits: bool = False


@dataclass(frozen=True)
class TimeContext:
    hour: int = 12

    @property
    def is_work_hours(self) -> bool:
        return 9 <= self.hour < 18

    @property
    def is_morning(self) -> bool:
        return 6 <= self.hour < 12

    @property
    def is_afternoon(self) -> bool:
        return 12 <= self.hour < 18

    @property
    def is_evening(self) -> bool:
        return self.hour >= 18 or self.hour < 6


@dataclass(frozen=True)
class WorkContext:
    cwd: str = ""
    git: Optional[GitContext] = None
    project_type: Optional[ProjectType] = None
    recent_commands: Tuple[str, ...] = field(default_factory=tuple)
    workflow: Optional[WorkflowPattern] = None
    time: TimeContext = field(default_factory=TimeContext)

    @property
    def is_git_repo(self) -> bool:
        return self.git is not None


def parse_git_status(output: str) -> GitContext:
    """Parse ``git status --porcelain --branch`` output"""
    branch = None
    ahead = False
    uncommitted = False
    untracked = False
    for line in output.splitlines():
        if line.startswith("## "):
            header = line[3:]
            ahead = "[ahead" in header
            if header.startswith("No commits yet on "):
                header = header[len("No commits yet on "):]
            name = header.split("...", 1)[0].split(" ", 1)[0]
            if name and name != "HEAD":
                branch = name
        elif line.startswith("??"):
            untracked = True
        elif line.strip():
            uncommitted = True
    return GitContext(
        branch=branch,
        has_uncommitted_changes=uncommitted,
        has_untracked_files=untracked,
        has_unpushed_commits=ahead,
    )


def find_git_root(cwd: Path) -> Optional[Path]:
    for directory in (cwd, *cwd.parents):
        if (directory / ".git").exists():
            return directory
    return None


def detect_project_type(cwd: Path) -> Optional[ProjectType]:
    for project_type, markers in PROJECT_MARKERS:
        if any((cwd / marker).exists() for marker in markers):
            return project_type
    return None


def detect_workflow(recent_commands) -> Optional[WorkflowPattern]:
    if not recent_commands:
        return None
    joined = " ".join(recent_commands).lower()
    for pattern, keywords in WORKFLOW_KEYWORDS:
        if any(keyword in joined for keyword in keywords):
            return pattern
    return None


class ContextAnalyzer:
    """
    Builds a :class:`WorkContext` for the current directory.

    Directory inspection (git status, project markers) is cached per
    directory for ``cache_ttl`` seconds, since completion runs on every
    key press.
    """

    def __init__(self, cwd_provider: Callable[[], Path] = Path.cwd,
                 clock: Callable[[], datetime] = datetime.now,
                 git_timeout: float = 0.5, cache_ttl: float = 5.0,
                 run_git: bool = True):
        self.cwd_provider = cwd_provider
        self.clock = clock
        self.git_timeout = git_timeout
        self.run_git = run_git
        self._cache_ttl = cache_ttl
        self._cache: Dict[str, Tuple[Optional[GitContext], Optional[ProjectType]]] = {}
        self._cache_timestamps: Dict[str, float] = {}

    def _get_cached(self, cache_key: str):
        """Get cached directory facts if still valid"""
        if cache_key in self._cache:
            timestamp = self._cache_timestamps.get(cache_key, 0)
            if time.monotonic() - timestamp < self._cache_ttl:
                return self._cache[cache_key]
        return None

    def _set_cached(self, cache_key: str, value) -> None:
        self._cache[cache_key] = value
        self._cache_timestamps[cache_key] = time.monotonic()

        if len(self._cache) > 32:
            oldest = min(self._cache_timestamps.items(), key=lambda x: x[1])
            del self._cache[oldest[0]]
            del self._cache_timestamps[oldest[0]]

    def analyze(self, recent_commands: Tuple[str, ...] = ()) -> WorkContext:
        try:
            cwd = Path(self.cwd_provider())
        except OSError as e:
            log.debug(f"Cannot determine working directory: {e}")
            cwd = Path(".")

        key = str(cwd)
        cached = self._get_cached(key)
        if cached is None:
            cached = (self.detect_git_context(cwd), detect_project_type(cwd))
            self._set_cached(key, cached)
        git, project_type = cached

        return WorkContext(
            cwd=key,
            git=git,
            project_type=project_type,
            recent_commands=tuple(recent_commands),
            workflow=detect_workflow(recent_commands),
            time=TimeContext(hour=self.clock().hour),
        )

    def detect_git_context(self, cwd: Path) -> Optional[GitContext]:
        if find_git_root(cwd) is None:
            return None
        if not self.run_git:
            return GitContext()
        try:
            result = subprocess.run(
                ["git", "status", "--porcelain", "--branch"],
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self.git_timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.debug(f"git status failed in {cwd}: {e}")
            return GitContext()
        if result.returncode != 0:
            return GitContext()
        return parse_git_status(result.stdout)

    def suggest_commands(self, context: WorkContext) -> List[str]:
        """Full command lines that fit the context, sorted and unique"""
        suggestions: List[str] = []

        git = context.git
        if git is not None:
            if git.has_uncommitted_changes:
                suggestions.extend(["git status", "git add", "git diff"])
            if git.has_untracked_files:
                suggestions.append("git add")
            if git.has_unpushed_commits:
                suggestions.append("git push")
            suggestions.append("git log")

        if context.project_type is not None:
            suggestions.extend(PROJECT_COMMANDS.get(context.project_type, []))

        if context.workflow is not None:
            suggestions.extend(WORKFLOW_COMMANDS.get(context.workflow, []))

        if context.time.is_morning:
            suggestions.extend(["cargo build", "make"])
        elif context.time.is_evening:
            suggestions.extend(["cargo test", "make clean"])

        return sorted(set(suggestions))[:MAX_SUGGESTIONS]


class ContextSource:
    """
    Completion source backed by the analyzer and, optionally, the
    per-directory command memory of a :class:`SequencePredictor`.
    """

    def __init__(self, analyzer: ContextAnalyzer, predictor=None):
        self.analyzer = analyzer
        self.predictor = predictor

    def complete(self, request: CompletionRequest) -> List[Completion]:
        context = request.context
        if not isinstance(context, WorkContext):
            context = self.analyzer.analyze(request.recent_commands)
        word = request.word.lower()
        suggestions = self.analyzer.suggest_commands(context)
        completions: List[Completion] = []

        for i, command in enumerate(suggestions):
            name = command.split()[0]
            if word and not name.lower().startswith(word):
                continue
            completions.append(Completion(
                text=name,
                description=f"context: {command}",
                score=110 - i,
                kind=CompletionKind.COMMAND,
            ))

        if self.predictor is not None:
            predicted = self.predictor.predict_from_context(context.cwd, request.recent_commands[-5:])
            for i, name in enumerate(predicted):
                if word and not name.lower().startswith(word):
                    continue
                completions.append(Completion(
                    text=name,
                    description="used in this directory",
                    score=100 - i,
                    kind=CompletionKind.COMMAND,
                ))

        if not word:
            for i, command in enumerate(suggestions):
                completions.append(Completion(
                    text=command,
                    description="suggested for this directory",
                    score=90 - i,
                    kind=CompletionKind.COMMAND,
                ))

        return completions
