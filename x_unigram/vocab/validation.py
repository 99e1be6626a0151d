"""
Validation functions for trained Unigram vocabularies.

These checks back the guarantees of the trainer: every corpus character
survives into the final vocabulary, seed scores form a proper distribution
and the reserved tokens sit at ids 0, 1, 2.
"""

import math
from typing import Dict, Iterable, Sequence, Union

from .model import RESERVED_TOKENS, UnigramModel
from .numeric import SentencePiece


def validate_vocabulary_completeness(required: Iterable[str], model: UnigramModel) -> None:
    """
    Validate that the model contains every required character.

    Raises:
        ValueError: If some characters are missing
    """
    missing = sorted(c for c in set(required) if c not in model)
    if missing:
        raise ValueError(f"Vocabulary missing required single codepoints: {missing}")


def validate_log_probabilities(pieces: Sequence[SentencePiece], tolerance: float = 1e-6) -> None:
    """
    Validate that scores are finite log-probabilities summing to one.

    Raises:
        ValueError: If a score is not finite or positive, or if
            sum(exp(score)) deviates from 1 by more than `tolerance`
    """
    if not pieces:
        raise ValueError("Piece list is empty")

    for piece, score in pieces:
        if not math.isfinite(score):
            raise ValueError(f"Invalid score {score} for piece '{piece}' - must be a finite number")
        if score > 0:
            raise ValueError(f"Invalid score {score} for piece '{piece}' - log-probability must be <= 0")

    total = math.fsum(math.exp(score) for _, score in pieces)
    if abs(total - 1.0) > tolerance:
        raise ValueError(f"Probabilities do not sum to 1.0: {total}")


def validate_segmentation_consistency(words: Iterable[str], model: UnigramModel) -> Dict[str, int]:
    """
    Validate that every word segments back into itself without unknowns.

    Returns:
        Dictionary with validation statistics

    Raises:
        ValueError: If a segmentation does not reconstruct its word or
            falls back to the unknown token
    """
    stats = {"total_words": 0, "total_tokens": 0}
    for word in words:
        lattice = model.make_lattice(word)
        path = lattice.viterbi()
        tokens = [lattice.surface(node) for node in path]
        if "".join(tokens) != word:
            raise ValueError(f"Segmentation failed to reconstruct '{word}': {tokens}")
        if any(node.piece_id == model.unk_id for node in path):
            raise ValueError(f"Segmentation of '{word}' required the unknown token")
        stats["total_words"] += 1
        stats["total_tokens"] += len(tokens)
    return stats


def validate_vocabulary_structure(model: UnigramModel) -> Dict[str, Union[int, float]]:
    """
    Validate the structure of a finalized vocabulary.

    Returns:
        Dictionary with vocabulary statistics

    Raises:
        ValueError: If pieces are empty, reserved tokens are misplaced or
            the pieces are not sorted by descending score
    """
    pieces = model.pieces
    if not pieces:
        raise ValueError("Vocabulary is empty")

    for idx, token in enumerate(RESERVED_TOKENS):
        if model.token_to_id(token) != idx:
            raise ValueError(f"Reserved token {token} must have id {idx}, got {model.token_to_id(token)}")

    regular = pieces[len(RESERVED_TOKENS):]
    empty = [p for p, _ in regular if not p]
    if empty:
        raise ValueError(f"Vocabulary contains {len(empty)} empty pieces")

    scores = [s for _, s in regular]
    if any(a < b for a, b in zip(scores, scores[1:])):
        raise ValueError("Vocabulary pieces are not sorted by descending score")

    return {
        "total_pieces": len(pieces),
        "single_chars": sum(1 for p, _ in regular if len(p) == 1),
        "multi_chars": sum(1 for p, _ in regular if len(p) > 1),
        "avg_length": sum(len(p) for p, _ in regular) / len(regular) if regular else 0.0,
    }
