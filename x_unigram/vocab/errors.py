"""
Typed failures raised by the Unigram-LM trainer.

Every failure is either fatal for the training run or surfaced to the caller
before training starts; none of them is retried.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NUMERIC_INSTABILITY = "numeric_instability"
    SIZE_MISMATCH = "size_mismatch"
    CONFIGURATION = "configuration"
    EMPTY_CORPUS = "empty_corpus"


class UnigramTrainerError(ValueError):
    """Base class for trainer failures. `kind` tags the failure variant."""

    kind: ErrorKind


class NumericInstabilityError(UnigramTrainerError):
    """The log-partition of a word came out as NaN."""

    kind = ErrorKind.NUMERIC_INSTABILITY

    def __init__(self, word: str):
        self.word = word
        preview = word if len(word) <= 50 else word[:47] + "..."
        super().__init__(f"Likelihood is NaN for '{preview}'. Input sentence may be too long.")

    def __reduce__(self):
        return (self.__class__, (self.word,))


class SizeMismatchError(UnigramTrainerError):
    """Piece list and expected counts are not index-aligned."""

    kind = ErrorKind.SIZE_MISMATCH

    def __init__(self, num_pieces: int, num_expected: int):
        self.num_pieces = num_pieces
        self.num_expected = num_expected
        super().__init__(
            f"Pieces and expected counts must have the same length: "
            f"pieces={num_pieces} expected={num_expected}"
        )

    def __reduce__(self):
        return (self.__class__, (self.num_pieces, self.num_expected))


class ConfigurationError(UnigramTrainerError):
    """Invalid trainer configuration."""

    kind = ErrorKind.CONFIGURATION


class EmptyCorpusError(UnigramTrainerError):
    """No training data, or a corpus whose total frequency is zero."""

    kind = ErrorKind.EMPTY_CORPUS
