"""
Tests for seed vocabulary construction: the suffix-array substring index,
required characters and the seed builder.
"""

import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from x_unigram.vocab.errors import EmptyCorpusError
from x_unigram.vocab.seed import (
    SeedBuilder,
    is_valid_sentencepiece,
    make_seed_sentence_pieces,
    required_chars,
)
from x_unigram.vocab.suffix import iter_repeated_substrings, lcp_array, suffix_array


class TestSuffixIndex:
    """Test suffix array, LCP and repeated-substring enumeration."""

    def test_suffix_array_banana(self):
        assert suffix_array("banana").tolist() == [5, 3, 1, 0, 4, 2]

    def test_suffix_array_empty(self):
        assert suffix_array("").tolist() == []

    def test_lcp_banana(self):
        sa = suffix_array("banana")
        assert lcp_array("banana", sa) == [0, 1, 3, 0, 0, 2]

    def test_repeated_substrings_banana(self):
        """Only right-branching repeats are reported ("an" is always followed by "a")."""
        result = set(iter_repeated_substrings("banana"))
        assert result == {("a", 3), ("ana", 2), ("na", 2)}

    def test_repeated_substrings_run(self):
        result = set(iter_repeated_substrings("aaaa"))
        assert result == {("a", 4), ("aa", 3), ("aaa", 2)}

    def test_no_repeats(self):
        assert list(iter_repeated_substrings("abc")) == []
        assert list(iter_repeated_substrings("a")) == []


class TestRequiredChars:
    """Test the required character set."""

    def test_mixed_scripts(self):
        word_counts = {"This is a": 1, "こんにちは友達": 1}
        assert len(required_chars(word_counts)) == 13

    def test_initial_alphabet(self):
        chars = required_chars({"ab": 1}, initial_alphabet=["z", "xy"])
        assert chars == {"a", "b", "z"}


class TestSeedBuilder:
    """Test seed piece construction."""

    word_counts = {"This is a": 1, "こんにちは友達": 1}

    def test_seed_order(self):
        """Characters by descending (count, char), then substrings by descending score."""
        table = make_seed_sentence_pieces(self.word_counts)
        strings = [piece for piece, _ in table]
        assert strings == [
            "s", "i", " ", "達", "友", "ん", "は", "に", "ち", "こ", "h", "a", "T", "is ", "s ",
        ]

    def test_seed_scores(self):
        table = make_seed_sentence_pieces(self.word_counts)
        target_scores = [-2.5649493574615367] * 3 + [-3.258096538021482] * 10 + [
            -1.4663370687934272,
            -1.8718021769015916,
        ]
        for (_, score), target in zip(table, target_scores):
            assert score == pytest.approx(target, abs=0.01)

    def test_seed_is_distribution(self):
        table = make_seed_sentence_pieces(self.word_counts)
        assert math.fsum(math.exp(s) for _, s in table) == pytest.approx(1.0, abs=1e-6)

    def test_piece_length_bounds(self):
        word_counts = {"abcdefghijklmnopqrstuvwxyz" * 2: 3, "abcdefghijklmnopqrstuvwxyz": 1}
        table = SeedBuilder().build(word_counts)
        assert all(1 <= len(piece) <= 16 for piece, _ in table)
        assert "abcdefghijklmnop" not in {p for p, _ in table}

    def test_custom_max_piece_length(self):
        table = SeedBuilder(max_piece_length=2).build({"abab": 1, "abc": 1})
        assert all(len(piece) <= 2 for piece, _ in table)

    def test_seed_size_ceiling(self):
        """Characters always survive; substrings are cut at the ceiling."""
        table = SeedBuilder(seed_size=14).build(self.word_counts)
        assert [p for p, _ in table][-1] == "is "
        assert len(table) == 14

    def test_single_char_words(self):
        table = make_seed_sentence_pieces({"a": 1, "b": 1, "c": 1})
        assert sorted(p for p, _ in table) == ["a", "b", "c"]
        for _, score in table:
            assert score == pytest.approx(math.log(1 / 3))

    def test_no_piece_crosses_boundary(self):
        table = make_seed_sentence_pieces({"ab": 5, "ba": 5, "abba": 1})
        assert all("\0" not in piece for piece, _ in table)

    def test_empty_corpus(self):
        with pytest.raises(EmptyCorpusError):
            make_seed_sentence_pieces({})
        with pytest.raises(EmptyCorpusError):
            make_seed_sentence_pieces({"": 3})


class TestValidity:
    """Test the minimal validity predicate."""

    def test_length_only(self):
        assert is_valid_sentencepiece("a")
        assert is_valid_sentencepiece("has space")
        assert is_valid_sentencepiece("x" * 16)
        assert not is_valid_sentencepiece("x" * 17)
        assert not is_valid_sentencepiece("")
