"""
Tests for vocabulary validation helpers.
"""

import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from x_unigram.vocab import UnigramModel, make_seed_sentence_pieces
from x_unigram.vocab.validation import (
    validate_log_probabilities,
    validate_segmentation_consistency,
    validate_vocabulary_completeness,
    validate_vocabulary_structure,
)


def make_model(pieces):
    return UnigramModel([("<bos>", 0.0), ("<eos>", 0.0), ("<unk>", 0.0)] + pieces, 0, 1, 2)


class TestValidateVocabularyCompleteness:
    def test_complete(self):
        validate_vocabulary_completeness({"a", "b"}, make_model([("a", -1.0), ("b", -1.0)]))

    def test_missing(self):
        with pytest.raises(ValueError, match=r"\['c'\]"):
            validate_vocabulary_completeness({"a", "c"}, make_model([("a", -1.0)]))


class TestValidateLogProbabilities:
    def test_seed_pieces_are_a_distribution(self):
        validate_log_probabilities(make_seed_sentence_pieces({"hello": 3, "yellow": 2}))

    def test_empty(self):
        with pytest.raises(ValueError, match="empty"):
            validate_log_probabilities([])

    def test_positive_score(self):
        with pytest.raises(ValueError, match="<= 0"):
            validate_log_probabilities([("a", 0.5)])

    def test_not_finite(self):
        with pytest.raises(ValueError, match="finite"):
            validate_log_probabilities([("a", float("nan"))])

    def test_does_not_sum_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            validate_log_probabilities([("a", math.log(0.3)), ("b", math.log(0.3))])


class TestValidateSegmentationConsistency:
    def test_stats(self):
        model = make_model([("ab", -1.0), ("a", -2.0), ("b", -2.0)])
        stats = validate_segmentation_consistency(["ab", "ba"], model)
        assert stats == {"total_words": 2, "total_tokens": 3}

    def test_unknown_character(self):
        model = make_model([("a", -1.0)])
        with pytest.raises(ValueError, match="unknown token"):
            validate_segmentation_consistency(["ax"], model)


class TestValidateVocabularyStructure:
    def test_stats(self):
        stats = validate_vocabulary_structure(make_model([("ab", -1.0), ("a", -2.0), ("b", -2.0)]))
        assert stats["total_pieces"] == 6
        assert stats["single_chars"] == 2
        assert stats["multi_chars"] == 1
        assert stats["avg_length"] == pytest.approx(4 / 3)

    def test_unsorted(self):
        with pytest.raises(ValueError, match="sorted"):
            validate_vocabulary_structure(make_model([("a", -2.0), ("ab", -1.0)]))

    def test_misplaced_reserved_token(self):
        model = UnigramModel([("<eos>", 0.0), ("<bos>", 0.0), ("<unk>", 0.0), ("a", -1.0)], 1, 0, 2)
        with pytest.raises(ValueError, match="Reserved token"):
            validate_vocabulary_structure(model)
