"""
Tests for the completion engine
"""

import pytest

from cmdwise.catalog import CommandCatalog
from cmdwise.engine import Completion, CompletionEngine, CompletionKind
from cmdwise.engine.orchestrator import MAX_PERSONAL_BOOST
from cmdwise.engine.parser import ParsedCommand
from cmdwise.engine.protocols import SourceSet
from cmdwise.sources import ArgumentSource, CommandSource, EnvironmentSource


class StaticSource:
    """Returns the same completions for every request"""

    def __init__(self, *completions):
        self.completions = list(completions)
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        return list(self.completions)


class BrokenSource:
    def complete(self, request):
        raise RuntimeError("source exploded")


class RecordingCollaborator:
    def __init__(self, fail_save=False):
        self.commands = []
        self.saved = 0
        self.fail_save = fail_save

    def record_command(self, command, context=None):
        self.commands.append(command)

    def save(self):
        if self.fail_save:
            raise OSError("disk full")
        self.saved += 1


def texts(completions):
    return [c.text for c in completions]


class TestCommandPosition:

    def test_empty_line_lists_catalog_commands(self, engine):
        result = engine.complete("", 0)
        assert "git" in texts(result)
        assert all(c.kind is CompletionKind.COMMAND for c in result)

    def test_prefix_filtered_and_ranked(self, engine):
        result = engine.complete("co")
        assert texts(result)[0] == "column"

    def test_history_only_with_a_word(self, engine):
        assert "git status" not in texts(engine.complete(""))
        result = engine.complete("git")
        assert result[0].text == "git"
        assert "git status" in texts(result)

    def test_wrapper_keeps_command_position(self, engine):
        result = engine.complete("sudo ap")
        assert texts(result)[0] == "apt"

    def test_lone_wrapper_word(self, engine):
        result = engine.complete("sud")
        assert texts(result)[0] == "sudo"


class TestArgumentPosition:

    def test_git_com_offers_commit(self, engine):
        result = engine.complete("git com", 7)
        assert result[0].text == "commit"
        assert result[0].kind is CompletionKind.SUBCOMMAND
        assert result[0].match_indices == (0, 1, 2)
        assert all(c.kind is not CompletionKind.COMMAND for c in result)

    def test_subcommand_outranks_unrelated_commands(self, catalog):
        class ArgumentsWithBuiltins:
            """Catalog arguments plus shell builtins that also start with com"""

            def __init__(self):
                self.arguments = ArgumentSource(catalog)

            def complete(self, request):
                return self.arguments.complete(request) + [
                    Completion("compgen", "bash builtin", 95, CompletionKind.COMMAND),
                    Completion("command", "bash builtin", 95, CompletionKind.COMMAND),
                ]

        engine = CompletionEngine(catalog, SourceSet(arguments=ArgumentsWithBuiltins()))
        result = engine.complete("git com", 7)
        assert texts(result) == ["commit", "compgen", "command"]
        assert result[0].kind is CompletionKind.SUBCOMMAND
        assert result[0].score > result[1].score

    def test_wrapped_subcommands(self, engine):
        result = engine.complete("sudo systemctl sta", 18)
        assert texts(result) == ["start", "status"]

    def test_options_of_subcommand(self, engine):
        result = engine.complete("git commit --")
        assert "--message" in texts(result)
        assert "--version" not in texts(result)

    def test_used_options_are_not_repeated(self, engine):
        result = engine.complete("git commit -m msg -")
        assert "-m" not in texts(result)
        assert "--message" not in texts(result)
        assert "-a" in texts(result)

    def test_option_values(self, engine):
        result = engine.complete("git commit --cleanup ")
        values = [c for c in result if c.kind is CompletionKind.ARGUMENT]
        assert texts(values) == ["strip", "whitespace", "verbatim"]

    def test_file_operation_gets_boosted_files(self, engine):
        result = engine.complete("cat ")
        by_text = {c.text: c for c in result}
        assert by_text["src/"].score == 80 + 20
        assert by_text["notes.txt"].score == 70 + 20
        assert ".env" not in by_text

    def test_file_operation_skips_arguments_unless_option(self, engine):
        assert all(c.kind in (CompletionKind.FILE, CompletionKind.DIRECTORY) for c in engine.complete("ls "))
        assert "-l" in texts(engine.complete("ls -"))

    def test_paths_are_offered_next_to_subcommands(self, engine):
        result = engine.complete("git ./")
        assert "./src/" in texts(result)

    def test_no_files_when_subcommands_exist(self, engine):
        result = engine.complete("git ")
        assert "notes.txt" not in texts(result)
        assert "commit" in texts(result)

    def test_unknown_command_falls_back_to_files(self, engine):
        result = engine.complete("frobnicate no")
        assert texts(result) == ["notes.txt"]

    def test_export_queries_environment_first(self, catalog):
        environment = EnvironmentSource(
            history_lines=["export JAVA_HOME=/opt/jdk"],
            environ={},
            path_finder=lambda name: [],
        )
        engine = CompletionEngine(catalog, SourceSet(environment=environment))
        result = engine.complete("export PATH=")
        assert result[0].text == "PATH=$PATH:$JAVA_HOME/bin"


class TestRankingPipeline:

    def test_source_precedence_wins_duplicates(self, catalog):
        sources = SourceSet(
            prediction=StaticSource(Completion("ls", "predicted", 10)),
            commands=StaticSource(Completion("ls", "from catalog", 50)),
        )
        result = CompletionEngine(catalog, sources).complete("")
        assert len(result) == 1
        assert result[0].description == "predicted"

    def test_equal_scores_keep_merge_order(self, catalog):
        sources = SourceSet(
            prediction=StaticSource(Completion("beta", score=10)),
            commands=StaticSource(Completion("alpha", score=10)),
        )
        result = CompletionEngine(catalog, sources).complete("")
        assert texts(result) == ["beta", "alpha"]

    def test_results_are_capped_and_unique(self):
        catalog = CommandCatalog.from_dict({"commands": [{"name": f"cmd{i:02d}"} for i in range(40)]})
        engine = CompletionEngine(catalog, SourceSet(commands=CommandSource(catalog)))
        result = engine.complete("cmd")
        assert len(result) == 20
        assert len(set(texts(result))) == 20

    def test_max_results_cannot_be_raised_past_twenty(self):
        catalog = CommandCatalog.from_dict({"commands": [{"name": f"cmd{i:02d}"} for i in range(40)]})
        engine = CompletionEngine(catalog, SourceSet(commands=CommandSource(catalog)), max_results=60)
        assert len(engine.complete("cmd")) == 20

    def test_complete_is_idempotent(self, engine):
        assert engine.complete("git c") == engine.complete("git c")

    def test_failing_source_is_ignored(self, catalog):
        sources = SourceSet(
            semantic=BrokenSource(),
            commands=CommandSource(catalog),
        )
        result = CompletionEngine(catalog, sources).complete("gi")
        assert texts(result) == ["git"]

    def test_non_completion_results_are_dropped(self, catalog):
        sources = SourceSet(commands=StaticSource("git", None, Completion("", "empty"), Completion("ls")))
        result = CompletionEngine(catalog, sources).complete("")
        assert texts(result) == ["ls"]

    @pytest.mark.parametrize("line, cursor", [(None, None), (12, 0), ("git", "x")])
    def test_malformed_input(self, engine, line, cursor):
        assert isinstance(engine.complete(line, cursor), list)

    def test_personal_boost_is_clamped(self, catalog):
        class GreedyPersonalizer:
            def score_boost(self, text, context=None):
                return 10_000 if text == "cat" else 0

        sources = SourceSet(commands=CommandSource(catalog))
        engine = CompletionEngine(catalog, sources, personalizer=GreedyPersonalizer())
        result = engine.complete("")
        assert result[0].text == "cat"
        assert result[0].score == 50 + MAX_PERSONAL_BOOST

    def test_broken_personalizer_is_ignored(self, catalog):
        class BrokenPersonalizer:
            def score_boost(self, text, context=None):
                raise ValueError("bad profile")

        engine = CompletionEngine(catalog, SourceSet(commands=CommandSource(catalog)),
                                  personalizer=BrokenPersonalizer())
        assert texts(engine.complete("gi")) == ["git"]

    def test_sources_see_the_context(self, catalog):
        class FixedContext:
            def analyze(self, recent_commands=()):
                return {"cwd": "/tmp", "recent": recent_commands}

        source = StaticSource(Completion("ls"))
        engine = CompletionEngine(catalog, SourceSet(commands=source), context_provider=FixedContext())
        engine.record_command("make")
        engine.complete("")
        request = source.requests[-1]
        assert request.context == {"cwd": "/tmp", "recent": ("make",)}
        assert request.recent_commands == ("make",)


class TestRecording:

    def test_record_updates_recent_commands(self, catalog):
        engine = CompletionEngine(catalog, recent_limit=2)
        for command in ("ls", "  cd src  ", "", "make"):
            engine.record_command(command)
        assert engine.recent_commands == ("cd src", "make")

    def test_recent_commands_keep_at_most_ten(self, catalog):
        engine = CompletionEngine(catalog, recent_limit=50)
        for i in range(15):
            engine.record_command(f"cmd{i}")
        assert engine.recent_commands == tuple(f"cmd{i}" for i in range(5, 15))

    def test_complete_does_not_record(self, catalog):
        recorder = RecordingCollaborator()
        engine = CompletionEngine(catalog, recorders=[recorder])
        engine.complete("git ")
        assert recorder.commands == []
        assert engine.recent_commands == ()

    def test_recorders_receive_commands(self, catalog):
        recorder = RecordingCollaborator()
        engine = CompletionEngine(catalog, recorders=[BrokenSource(), recorder])
        engine.record_command("git status")
        assert recorder.commands == ["git status"]

    def test_record_never_raises(self, catalog):
        class ExplodingRecorder:
            def record_command(self, command, context=None):
                raise RuntimeError("nope")

        engine = CompletionEngine(catalog, recorders=[ExplodingRecorder()])
        engine.record_command("ls")
        engine.record_command(None)
        assert engine.recent_commands == ("ls",)

    def test_periodic_save(self, catalog):
        recorder = RecordingCollaborator()
        engine = CompletionEngine(catalog, recorders=[recorder], save_every=2)
        for command in ("a", "b", "c", "d", "e"):
            engine.record_command(command)
        assert recorder.saved == 2

    def test_save_reports_failures(self, catalog):
        good, bad = RecordingCollaborator(), RecordingCollaborator(fail_save=True)
        engine = CompletionEngine(catalog, recorders=[good, bad])
        assert engine.save() is False
        assert good.saved == 1
        assert CompletionEngine(catalog, recorders=[good]).save() is True


CLASSIFICATION_CASES = [
    ((), "", 0, True),
    ((), "gi", 0, True),
    (("sudo",), "", 1, True),
    (("sudo",), "ap", 1, True),
    (("sudo", "apt"), "", 1, False),
    (("git",), "co", 1, False),
    (("sudo", "apt"), "in", 1, False),
]


@pytest.mark.parametrize("completed, current, index, expected", CLASSIFICATION_CASES)
def test_command_position_classification(completed, current, index, expected):
    parsed = ParsedCommand(current_word=current, current_word_index=index)
    assert CompletionEngine.is_command_position(parsed, completed, current) is expected
