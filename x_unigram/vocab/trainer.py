"""
Unigram-LM trainer.

Drives the full training run: seed vocabulary -> repeated sub-EM rounds
with pruning -> finalization to an exact-size vocabulary that contains the
reserved tokens and every character of the corpus.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import ValidationError

from x_unigram.schema.trainer_config import UnigramTrainerConfig
from x_unigram.schema.vocab import VocabStats

from .em_algorithm import Sentence, run_e_step, run_m_step, total_frequency
from .errors import ConfigurationError, EmptyCorpusError
from .model import RESERVED_TOKENS, UnigramModel
from .numeric import SentencePiece
from .pruning import PruningStrategy, get_pruning_strategy
from .seed import SeedBuilder, required_chars

logger = logging.getLogger(__name__)

BOS_ID, EOS_ID, UNK_ID = 0, 1, 2
NUM_RESERVED = len(RESERVED_TOKENS)
MIN_SCORE_PENALTY_DELTA = 0.0001
# Base score for injected characters when no trained piece is left
EMPTY_MODEL_MIN_SCORE = -10.0


def build_config(config: Optional[UnigramTrainerConfig] = None, **overrides) -> UnigramTrainerConfig:
    """
    Merge keyword overrides into a config and validate it.

    Raises:
        ConfigurationError: If any value is invalid (e.g. a vocab_size that
            does not fit the unsigned 32-bit sizing type)
    """
    values = config.model_dump() if config is not None else {}
    values.update(overrides)
    try:
        return UnigramTrainerConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid trainer configuration: {e}") from e


class UnigramTrainer:
    """
    Trains a `UnigramModel` from word counts.

    Args:
        config: Trainer hyperparameters
        pruning_strategy: Overrides the strategy named in `config.pruning`
        **overrides: Individual config fields, e.g. `vocab_size=1000`
    """

    def __init__(
        self,
        config: Optional[UnigramTrainerConfig] = None,
        pruning_strategy: Optional[PruningStrategy] = None,
        **overrides,
    ):
        self.config = build_config(config, **overrides)
        self.pruning_strategy = pruning_strategy or get_pruning_strategy(self.config.pruning)
        self.words: Dict[str, int] = {}
        self.stats: Optional[VocabStats] = None

    @property
    def vocab_size(self) -> int:
        return self.config.vocab_size

    @property
    def desired_vocab_size(self) -> int:
        return (self.config.vocab_size * 11) // 10

    def should_show_progress(self) -> bool:
        return self.config.show_progress

    # ------------------------------------------------------------------
    # Corpus accumulation

    @staticmethod
    def process_tokens(words: Dict[str, int], tokens: Iterable[str]) -> None:
        """Count tokens into `words` (insert with 1, otherwise add one)."""
        for token in tokens:
            words[token] = words.get(token, 0) + 1

    def feed(self, iterator: Iterable[str], process: Callable[[str], Iterable[str]]) -> None:
        """Pre-tokenize every text with `process` and accumulate the word counts."""
        for text in iterator:
            self.process_tokens(self.words, process(text))

    # ------------------------------------------------------------------
    # Building blocks

    def required_chars(self, word_counts: Dict[str, int]) -> Set[str]:
        return required_chars(word_counts, self.config.initial_alphabet)

    def make_seed_sentence_pieces(self, word_counts: Dict[str, int]) -> List[SentencePiece]:
        builder = SeedBuilder(
            max_piece_length=self.config.max_piece_length,
            seed_size=self.config.seed_size,
            show_progress=self.config.show_progress,
        )
        return builder.build(word_counts)

    @staticmethod
    def make_model(pieces: Sequence[SentencePiece]) -> UnigramModel:
        """Scoring model over the reserved tokens followed by `pieces`."""
        reserved = [(token, 0.0) for token in RESERVED_TOKENS]
        return UnigramModel(reserved + list(pieces), BOS_ID, EOS_ID, UNK_ID)

    def run_e_step(self, model: UnigramModel, sentences: Sequence[Sentence]) -> Tuple[float, int, List[float]]:
        return run_e_step(
            model,
            sentences,
            num_workers=self.config.num_workers,
            show_progress=self.config.show_progress and self.config.num_workers == 1,
        )

    def run_m_step(self, pieces: Sequence[SentencePiece], expected: Sequence[float]) -> List[SentencePiece]:
        return run_m_step(pieces, expected)

    def prune_sentence_pieces(self, pieces: List[SentencePiece], sentences: Sequence[Sentence]) -> List[SentencePiece]:
        target = max(self.desired_vocab_size, int(self.config.shrinking_factor * len(pieces)))
        return self.pruning_strategy.prune(pieces, target, sentences)

    def finalize(self, model: UnigramModel, required: Set[str]) -> UnigramModel:
        """
        Produce the final fixed-size vocabulary.

        Reserved tokens get score 0 and ids 0, 1, 2. Required characters
        keep their trained score, or are injected at the lowest trained score
        (EMPTY_MODEL_MIN_SCORE when nothing was trained) plus a penalty with
        the penalty growing by MIN_SCORE_PENALTY_DELTA per injected character
        (characters are visited in sorted order). Remaining capacity is
        filled in model order. The rest is then sorted by descending score
        with a stable sort, so equal scores keep their insertion order.
        """
        trained_scores = [score for token, score in model if token not in RESERVED_TOKENS]
        min_score = min(trained_scores) if trained_scores else EMPTY_MODEL_MIN_SCORE

        pieces: Dict[str, float] = {}
        penalty = 0.0
        for c in sorted(required):
            score = model.get_score(c)
            if score is None:
                score = min_score + penalty
                penalty += MIN_SCORE_PENALTY_DELTA
            pieces[c] = score

        for token, score in model:
            if NUM_RESERVED + len(pieces) >= self.vocab_size:
                break
            if token in RESERVED_TOKENS or token in pieces:
                continue
            pieces[token] = score

        ordered = sorted(pieces.items(), key=lambda item: item[1], reverse=True)
        reserved = [(token, 0.0) for token in RESERVED_TOKENS]
        return UnigramModel(reserved + ordered, BOS_ID, EOS_ID, UNK_ID)

    # ------------------------------------------------------------------
    # Training

    def train(self, word_counts: Dict[str, int]) -> Tuple[UnigramModel, List[str]]:
        """
        Train a Unigram model.

        Args:
            word_counts: Mapping of word -> occurrence count

        Returns:
            Tuple of (finalized model, pass-through special tokens)

        Raises:
            EmptyCorpusError: If there is no training data
            NumericInstabilityError: If an E-step produces a NaN likelihood
            SizeMismatchError: If E-step and M-step get out of alignment
        """
        if not word_counts:
            raise EmptyCorpusError("No training data: word counts are empty")
        sentences: List[Sentence] = list(word_counts.items())
        total_frequency(sentences)

        logger.info("Starting Unigram-LM training")
        logger.info(
            f"Corpus: {len(sentences):,} distinct words, target vocab_size={self.vocab_size:,}, "
            f"desired={self.desired_vocab_size:,}"
        )

        required = self.required_chars(word_counts)
        pieces = [p for p in self.make_seed_sentence_pieces(word_counts) if p[0] not in RESERVED_TOKENS]
        seed_count = len(pieces)
        logger.info(f"Using {seed_count:,} seed pieces for EM training ({len(required):,} required chars)")

        model = self.make_model(pieces)
        em_iterations = 0
        pruning_rounds = 0
        objective, num_tokens = 0.0, 0

        while True:
            for iteration in range(self.config.n_sub_iterations):
                objective, num_tokens, expected = self.run_e_step(model, sentences)
                pieces = self.run_m_step(pieces, expected[NUM_RESERVED:])
                model = self.make_model(pieces)
                em_iterations += 1
                logger.info(
                    f"  EM iter={iteration} size={len(model):,} obj={objective:.6f} "
                    f"num_tokens={num_tokens:,} num_tokens/piece={num_tokens / len(model):.4f}"
                )

            if len(pieces) <= self.desired_vocab_size:
                break

            pruned = self.prune_sentence_pieces(pieces, sentences)
            if len(pruned) >= len(pieces):
                logger.warning(
                    f"Pruning could not shrink {len(pieces):,} pieces toward {self.desired_vocab_size:,}; stopping"
                )
                break
            logger.info(f"  Pruned {len(pieces):,} -> {len(pruned):,} pieces")
            pieces = pruned
            model = self.make_model(pieces)
            pruning_rounds += 1

        final_model = self.finalize(model, required)
        self.stats = VocabStats(
            total_pieces=len(final_model),
            seed_pieces=seed_count,
            required_chars=len(required),
            em_iterations=em_iterations,
            pruning_rounds=pruning_rounds,
            final_objective=objective,
            num_tokens=num_tokens,
        )
        logger.info(f"Training complete: {seed_count:,} seed pieces -> {len(final_model):,} final pieces")
        return final_model, list(self.config.special_tokens)

    def train_from_feed(self) -> Tuple[UnigramModel, List[str]]:
        """Train on the counts accumulated by `feed`."""
        return self.train(self.words)
