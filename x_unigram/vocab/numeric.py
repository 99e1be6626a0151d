"""
Numeric helpers for the Unigram-LM trainer.

Contains the digamma approximation used by the Bayesian M-step and the
log-probability normalization applied to seed scores.
"""

import math
from typing import List, Tuple

SentencePiece = Tuple[str, float]


def digamma(x: float) -> float:
    """
    Approximate the digamma function psi(x).

    The argument is shifted upward with the recurrence psi(x) = psi(x + 1) - 1/x
    until x >= 7, then the asymptotic series is evaluated around x - 1/2:

        ln(x) + 1/(24x^2) - 7/(960x^4) + 31/(8064x^6) - 127/(30720x^8)

    Args:
        x: Positive argument (accurate to double precision for x >= 0.5)

    Returns:
        psi(x)
    """
    result = 0.0
    while x < 7.0:
        result -= 1.0 / x
        x += 1.0
    x -= 0.5
    xx = 1.0 / x
    xx2 = xx * xx
    xx4 = xx2 * xx2
    result += (
        math.log(x)
        + (1.0 / 24.0) * xx2
        - (7.0 / 960.0) * xx4
        + (31.0 / 8064.0) * xx4 * xx2
        - (127.0 / 30720.0) * xx4 * xx4
    )
    return result


def to_log_prob(pieces: List[SentencePiece]) -> List[SentencePiece]:
    """
    Convert positive raw scores into log-probabilities.

    score_i <- ln(score_i) - ln(sum_j score_j)

    Args:
        pieces: List of (piece, positive score)

    Returns:
        New list of (piece, log-probability); sum(exp(score)) == 1

    Raises:
        ValueError: If the scores do not sum to a positive value
    """
    total = sum(score for _, score in pieces)
    if total <= 0:
        raise ValueError(f"Cannot normalize scores with non-positive sum {total}")
    logsum = math.log(total)
    return [(piece, math.log(score) - logsum) for piece, score in pieces]


def log_sum_exp(a: float, b: float) -> float:
    """Numerically stable log(exp(a) + exp(b))."""
    if a == -math.inf:
        return b
    if b == -math.inf:
        return a
    if a < b:
        a, b = b, a
    return a + math.log1p(math.exp(b - a))
