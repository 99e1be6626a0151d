"""
Seed vocabulary construction.

Turns raw word counts into an over-sized candidate piece set: every single
character plus every repeated substring found by the suffix-array index,
scored heuristically and normalized to log-probabilities.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Set, Tuple

from rich.progress import track

from .errors import EmptyCorpusError
from .numeric import SentencePiece, to_log_prob
from .suffix import iter_repeated_substrings

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = "\0"
DEFAULT_MAX_PIECE_LENGTH = 16
DEFAULT_SEED_SIZE = 1_000_000


def is_valid_sentencepiece(candidate: str, max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH) -> bool:
    """
    Check whether a substring may become a seed piece.

    Only the length is checked. Rejecting embedded whitespace or mixed
    scripts is left to callers that need it.
    """
    return 0 < len(candidate) <= max_piece_length


def required_chars(word_counts: Dict[str, int], initial_alphabet: Iterable[str] = ()) -> Set[str]:
    """
    Collect every character that must survive into the final vocabulary.

    Args:
        word_counts: Mapping of word -> count
        initial_alphabet: Extra characters to force in

    Returns:
        Set of single-character strings
    """
    chars = {c for word in word_counts for c in word}
    chars.update(c for c in initial_alphabet if len(c) == 1)
    return chars


class SeedBuilder:
    """
    Builds the initial candidate pieces from word counts.

    Args:
        max_piece_length: Longest substring (in characters) kept as a candidate
        seed_size: Ceiling on the number of seed pieces
        show_progress: Render a rich progress bar while scoring substrings
    """

    def __init__(
        self,
        max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
        seed_size: int = DEFAULT_SEED_SIZE,
        show_progress: bool = False,
    ):
        self.max_piece_length = max_piece_length
        self.seed_size = seed_size
        self.show_progress = show_progress

    def build(self, word_counts: Dict[str, int]) -> List[SentencePiece]:
        """
        Build log-probability scored seed pieces.

        Single characters come first (by descending count), followed by
        substrings scored as count * length (by descending score). The list
        is truncated at `seed_size` and normalized so that
        sum(exp(score)) == 1.

        Raises:
            EmptyCorpusError: If the words contain no characters
        """
        flat, char_counts = self._flatten(word_counts)
        if not char_counts:
            raise EmptyCorpusError("No characters found in word counts - nothing to seed from")

        # Descending by (count, char) so ties are broken deterministically
        sorted_chars = sorted(((count, c) for c, count in char_counts.items()), reverse=True)

        substrings = self._score_substrings(flat)
        substrings.sort(reverse=True)

        seed: List[Tuple[str, float]] = [(c, float(count)) for count, c in sorted_chars]
        for score, substring in substrings:
            if len(seed) >= self.seed_size:
                break
            seed.append((substring, float(score)))

        logger.info(
            f"Seed pieces: {len(sorted_chars):,} characters + "
            f"{len(seed) - len(sorted_chars):,}/{len(substrings):,} substrings"
        )
        return to_log_prob(seed)

    def _flatten(self, word_counts: Dict[str, int]) -> Tuple[str, Counter]:
        """Join the distinct words with the boundary character and count characters."""
        char_counts: Counter = Counter()
        parts = []
        for word in word_counts:
            parts.append(word)
            parts.append(SENTENCE_BOUNDARY)
            char_counts.update(c for c in word if c != SENTENCE_BOUNDARY)
        return "".join(parts), char_counts

    def _score_substrings(self, flat: str) -> List[Tuple[int, str]]:
        candidates = iter_repeated_substrings(flat)
        if self.show_progress:
            candidates = track(candidates, description="Updating frequent sub strings...")

        scored = []
        for substring, freq in candidates:
            if len(substring) <= 1:
                continue
            if SENTENCE_BOUNDARY in substring:
                continue
            if not is_valid_sentencepiece(substring, self.max_piece_length):
                continue
            scored.append((freq * len(substring), substring))
        return scored


def make_seed_sentence_pieces(
    word_counts: Dict[str, int],
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
    seed_size: int = DEFAULT_SEED_SIZE,
    show_progress: Optional[bool] = False,
) -> List[SentencePiece]:
    """Functional shortcut for `SeedBuilder(...).build(word_counts)`."""
    return SeedBuilder(max_piece_length, seed_size, bool(show_progress)).build(word_counts)
