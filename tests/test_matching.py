"""
Tests for candidate matching and scoring
"""

import pytest

from cmdwise.engine.fuzzy import chunk_match, is_word_start
from cmdwise.engine.matching import (
    abbreviation_match,
    build_strategies,
    exact_match,
    fold,
    prefix_match,
    rank_candidate,
    subsequence_match,
    substring_match,
)
from cmdwise.engine.models import Match


class TestStrategyChain:
    """The first matching strategy decides the score"""

    def test_exact_is_case_insensitive(self):
        match = rank_candidate("README", "readme")
        assert match == Match(300, (0, 1, 2, 3, 4, 5))

    def test_prefix(self):
        match = rank_candidate("docker", "doc")
        assert match.score == 200 + 94
        assert match.indices == (0, 1, 2)

    def test_prefix_prefers_shorter_text(self):
        assert rank_candidate("ls", "l").score > rank_candidate("lsblk", "l").score

    def test_substring(self):
        match = rank_candidate("systemctl", "tem")
        assert match.score == 150 + 47
        assert match.indices == (3, 4, 5)

    def test_abbreviation_on_separators(self):
        match = rank_candidate("git-commit-amend", "gca")
        assert match.score == 150
        assert match.indices == (0, 4, 11)

    def test_abbreviation_on_upper_case(self):
        match = rank_candidate("getFooBar", "gfb")
        assert match.score == 150
        assert match.indices == (0, 3, 6)

    def test_fuzzy_slot(self):
        match = rank_candidate("dockerCompose", "doco")
        assert match.indices == (0, 1, 6, 7)
        assert match.score == 92

    def test_subsequence(self):
        match = rank_candidate("abcdef", "ace")
        assert match.score == 70
        assert match.indices == (0, 2, 4)

    def test_no_match(self):
        assert rank_candidate("docker", "xyz") is None

    @pytest.mark.parametrize("text, query", [("", "a"), ("abc", "")])
    def test_empty_input(self, text, query):
        assert rank_candidate(text, query) is None

    def test_custom_fuzzy_matcher(self):
        strategies = build_strategies(lambda text, query: Match(42, (0,)))
        assert rank_candidate("abcdef", "ace", strategies) == Match(42, (0,))


@pytest.mark.parametrize("text, query", [
    ("docker", "doc"),
    ("git-commit", "git-c"),
    ("systemctl", "sys"),
    ("kubectl", "kub"),
    ("python3", "py"),
])
def test_prefix_beats_other_strategies(text, query):
    prefix = prefix_match(text, query).score
    for strategy in (substring_match, abbreviation_match, chunk_match, subsequence_match):
        result = strategy(text, query)
        if result is not None:
            assert prefix > result.score


def test_fold_keeps_length():
    # "İ".lower() is two characters; folding must not shift indices
    text = "İstanbul"
    assert len(fold(text)) == len(text)
    assert fold("GiT") == "git"


def test_strategies_return_none_when_not_applicable():
    assert exact_match("git", "gi") is None
    assert prefix_match("git", "it") is None
    assert substring_match("git", "tig") is None
    assert abbreviation_match("git", "gt") is None
    assert subsequence_match("git", "tg") is None


class TestChunkMatcher:
    """Boundary-anchored fuzzy matching"""

    def test_word_starts(self):
        assert is_word_start("foo", 0)
        assert is_word_start("foo-bar", 4)
        assert is_word_start("fooBar", 3)
        assert not is_word_start("foobar", 3)
        assert not is_word_start("FOO", 1)

    def test_matches_word_chunks(self):
        match = chunk_match("kubectl get pods", "kgp")
        assert match.indices == (0, 8, 12)
        assert 1 <= match.score <= 199

    def test_consecutive_characters(self):
        match = chunk_match("docker-compose-up", "dcu")
        assert match.indices == (0, 7, 15)

    def test_scattered_match_is_rejected(self):
        assert chunk_match("abcdef", "ace") is None

    def test_query_longer_than_text(self):
        assert chunk_match("ab", "abc") is None

    def test_score_stays_below_prefix_band(self):
        text = "abcdefghijklmnop"
        assert chunk_match(text, text).score == 199
