from pydantic import BaseModel, Field, ConfigDict


class VocabPiece(BaseModel):
    """
    A trained vocabulary entry.

    - piece: the substring itself
    - score: its log-probability-like score (reserved tokens
      score 0)
    """
    piece: str = Field(..., min_length=1, description="The vocabulary piece (substring)")
    score: float = Field(..., description="Piece score from Unigram-LM training")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "piece": "the",
                "score": -4.3952
            }
        }
    )


class VocabStats(BaseModel):
    """
    Statistics about a Unigram-LM training run.

    Captures the final vocabulary size, the size of the seed set, the last
    EM objective and the Viterbi token count it was measured with.
    """
    total_pieces: int = Field(..., ge=0, description="Final vocabulary size")
    seed_pieces: int = Field(..., ge=0, description="Number of seed pieces before EM")
    required_chars: int = Field(..., ge=0, description="Distinct characters in the corpus")
    em_iterations: int = Field(..., ge=0, description="Number of EM sub-iterations performed")
    pruning_rounds: int = Field(default=0, ge=0, description="Number of pruning rounds performed")
    final_objective: float = Field(default=0.0, description="Objective of the last E-step")
    num_tokens: int = Field(default=0, ge=0, description="Viterbi tokens in the last E-step")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_pieces": 8000,
                "seed_pieces": 215634,
                "required_chars": 412,
                "em_iterations": 12,
                "pruning_rounds": 5,
                "final_objective": 11.42,
                "num_tokens": 1534211
            }
        }
    )
