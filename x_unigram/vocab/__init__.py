"""
X-Unigram Vocabulary Training Package

This package contains the Unigram-LM subword trainer: suffix-array seed
construction, EM over segmentation lattices with Bayesian re-scoring, and
pruning down to a fixed-size vocabulary.

Key modules:
- numeric: digamma approximation and log-probability normalization
- seed: seed vocabulary construction from word counts
- lattice / model: segmentation lattice and scoring model
- em_algorithm: E-step (map/reduce) and M-step
- pruning: pluggable pruning strategies
- trainer: the training control loop and finalizer
- validation: vocabulary validation and consistency checks
"""

from .numeric import digamma, to_log_prob
from .seed import SeedBuilder, make_seed_sentence_pieces, required_chars, is_valid_sentencepiece
from .lattice import Lattice, Node
from .model import UnigramModel, RESERVED_TOKENS, BOS_TOKEN, EOS_TOKEN, UNK_TOKEN
from .em_algorithm import run_e_step, run_m_step
from .pruning import PruningStrategy, LeaveOneOutPruning, ScorePruning, get_pruning_strategy
from .trainer import UnigramTrainer
from .errors import (
    ErrorKind,
    UnigramTrainerError,
    NumericInstabilityError,
    SizeMismatchError,
    ConfigurationError,
    EmptyCorpusError
)
from .validation import (
    validate_vocabulary_completeness,
    validate_log_probabilities,
    validate_segmentation_consistency,
    validate_vocabulary_structure
)

__all__ = [
    # Numeric
    "digamma",
    "to_log_prob",

    # Seed
    "SeedBuilder",
    "make_seed_sentence_pieces",
    "required_chars",
    "is_valid_sentencepiece",

    # Collaborators
    "Lattice",
    "Node",
    "UnigramModel",
    "RESERVED_TOKENS",
    "BOS_TOKEN",
    "EOS_TOKEN",
    "UNK_TOKEN",

    # EM Algorithm
    "run_e_step",
    "run_m_step",
    "PruningStrategy",
    "LeaveOneOutPruning",
    "ScorePruning",
    "get_pruning_strategy",
    "UnigramTrainer",

    # Errors
    "ErrorKind",
    "UnigramTrainerError",
    "NumericInstabilityError",
    "SizeMismatchError",
    "ConfigurationError",
    "EmptyCorpusError",

    # Validation
    "validate_vocabulary_completeness",
    "validate_log_probabilities",
    "validate_segmentation_consistency",
    "validate_vocabulary_structure"
]
