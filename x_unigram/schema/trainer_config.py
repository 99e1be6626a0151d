from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

# vocab_size is held in an unsigned 32-bit sizing type
MAX_VOCAB_SIZE = 2**32 - 1


class UnigramTrainerConfig(BaseModel):
    """
    Hyperparameters for Unigram-LM training.

    Defaults follow the classic sentencepiece-style trainer: an 8k vocabulary,
    two EM sub-iterations per pruning round and 16-character pieces.
    """
    vocab_size: int = Field(default=8000, gt=0, le=MAX_VOCAB_SIZE, description="Final vocabulary size")
    n_sub_iterations: int = Field(default=2, ge=1, description="EM sub-iterations per pruning round")
    show_progress: bool = Field(default=True, description="Render rich progress bars")
    special_tokens: List[str] = Field(default_factory=list, description="Pass-through added tokens")
    initial_alphabet: List[str] = Field(default_factory=list, description="Characters always kept in the vocabulary")
    max_piece_length: int = Field(default=16, ge=1, description="Longest seed piece, in characters")
    seed_size: int = Field(default=1_000_000, ge=1, description="Ceiling on the number of seed pieces")
    shrinking_factor: float = Field(default=0.75, gt=0.0, lt=1.0, description="Fraction of pieces kept per pruning round")
    pruning: Literal["leave_one_out", "score"] = Field(default="leave_one_out", description="Pruning strategy")
    num_workers: int = Field(default=1, ge=0, description="E-step worker processes (0 = one per core)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Console logging level for training runs")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "vocab_size": 8000,
                "n_sub_iterations": 2,
                "show_progress": True,
                "special_tokens": ["<pad>"],
                "initial_alphabet": [],
                "max_piece_length": 16,
                "seed_size": 1000000,
                "shrinking_factor": 0.75,
                "pruning": "leave_one_out",
                "num_workers": 1,
                "log_level": "INFO"
            }
        }
    )
