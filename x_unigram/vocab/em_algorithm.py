"""
EM steps for Unigram-LM training.

The E-step maps every (word, frequency) pair to a partial result
(objective, token count, expected counts) and reduces the partials by
addition, either in-process or across a process pool. The M-step applies
the Bayesian (digamma) re-scoring and drops pieces with negligible usage.
"""

import asyncio
import concurrent.futures
import logging
import math
import multiprocessing
from functools import partial
from typing import List, Optional, Sequence, Tuple

from rich.progress import track

from .errors import EmptyCorpusError, NumericInstabilityError, SizeMismatchError
from .model import UnigramModel
from .numeric import SentencePiece, digamma

logger = logging.getLogger(__name__)

MAX_WORKERS_LIMIT = 32  # Upper bound on E-step worker processes
EXPECTED_FREQUENCY_THRESHOLD = 0.5

Sentence = Tuple[str, int]
EStepResult = Tuple[float, int, List[float]]


def total_frequency(sentences: Sequence[Sentence]) -> int:
    """
    Sum of word frequencies.

    Raises:
        EmptyCorpusError: If there are no sentences or the frequencies sum to zero
    """
    if not sentences:
        raise EmptyCorpusError("No training data: the corpus is empty")
    total = sum(freq for _, freq in sentences)
    if total <= 0:
        raise EmptyCorpusError("No training data: total corpus frequency is zero")
    return total


def _process_sentence_batch(
    batch: Sequence[Sentence],
    model: UnigramModel,
    all_sentence_freq: int,
    show_progress: bool = False,
) -> EStepResult:
    """
    E-step over a batch of words (used by worker processes).

    Returns:
        Tuple of (partial objective, partial token count, partial expected counts)

    Raises:
        NumericInstabilityError: If a word's log-partition is NaN
    """
    expected = [0.0] * len(model)
    objective = 0.0
    num_tokens = 0

    items = track(batch, description="E-step...") if show_progress else batch
    for word, freq in items:
        lattice = model.make_lattice(word)
        z = lattice.populate_marginal(freq, expected)
        if math.isnan(z):
            raise NumericInstabilityError(word)
        num_tokens += len(lattice.viterbi())
        objective -= z / all_sentence_freq

    return objective, num_tokens, expected


def _merge_results(results: Sequence[EStepResult], size: int) -> EStepResult:
    objective = 0.0
    num_tokens = 0
    expected = [0.0] * size
    for partial_objective, partial_tokens, partial_expected in results:
        objective += partial_objective
        num_tokens += partial_tokens
        for i, value in enumerate(partial_expected):
            expected[i] += value
    return objective, num_tokens, expected


async def _process_sentences_parallel(
    sentences: Sequence[Sentence],
    model: UnigramModel,
    all_sentence_freq: int,
    num_workers: int,
    batch_size: Optional[int] = None,
) -> List[EStepResult]:
    """
    Run the E-step map phase across a process pool.

    Results come back in batch order so the reduction is reproducible.
    """
    if batch_size is None:
        # ~2x more batches than workers for load balancing
        batch_size = max(1, len(sentences) // (num_workers * 2))

    batches = [sentences[i:i + batch_size] for i in range(0, len(sentences), batch_size)]
    logger.debug(f"    Processing {len(batches)} batches across {num_workers} workers")

    loop = asyncio.get_running_loop()
    with concurrent.futures.ProcessPoolExecutor(max_workers=num_workers) as executor:
        process_func = partial(_process_sentence_batch, model=model, all_sentence_freq=all_sentence_freq)
        tasks = [loop.run_in_executor(executor, process_func, batch) for batch in batches]
        return await asyncio.gather(*tasks)


def resolve_num_workers(num_workers: int) -> int:
    """Clamp a requested worker count; 0 means one per CPU core."""
    if num_workers <= 0:
        num_workers = multiprocessing.cpu_count() or 1
    return max(1, min(MAX_WORKERS_LIMIT, num_workers))


def run_e_step(
    model: UnigramModel,
    sentences: Sequence[Sentence],
    num_workers: int = 1,
    show_progress: bool = False,
) -> EStepResult:
    """
    Expectation step.

    For each word: build its lattice, add freq-weighted marginals to the
    expected counts, subtract Z / total_frequency from the objective and
    count the tokens of its Viterbi segmentation.

    Args:
        model: Current scoring model
        sentences: Deduplicated (word, frequency) pairs
        num_workers: Worker processes; 1 runs in-process
        show_progress: Show a rich progress bar (in-process only)

    Returns:
        Tuple of (objective, num_tokens, expected counts aligned to the model)

    Raises:
        EmptyCorpusError: If there is nothing to train on
        NumericInstabilityError: If any word's log-partition is NaN
    """
    all_sentence_freq = total_frequency(sentences)
    num_workers = resolve_num_workers(num_workers)

    if num_workers == 1 or len(sentences) < 2:
        results = [_process_sentence_batch(sentences, model, all_sentence_freq, show_progress)]
    else:
        results = asyncio.run(
            _process_sentences_parallel(sentences, model, all_sentence_freq, num_workers)
        )

    objective, num_tokens, expected = _merge_results(results, len(model))
    logger.debug(f"    E-step: {len(sentences):,} words, obj={objective:.6f}, ntokens={num_tokens:,}")
    return objective, num_tokens, expected


def run_m_step(
    pieces: Sequence[SentencePiece],
    expected: Sequence[float],
    threshold: float = EXPECTED_FREQUENCY_THRESHOLD,
) -> List[SentencePiece]:
    """
    Maximization step.

    Drops pieces whose expected count is below `threshold` and re-scores the
    rest with digamma(count) - digamma(sum). This is the Bayesian/DP variant
    of EM and acts as a sparse prior.

    Args:
        pieces: Current pieces, index-aligned with `expected`
        expected: Expected counts from the E-step
        threshold: Minimum expected count to keep a piece

    Returns:
        New list of (piece, score) in the original order

    Raises:
        SizeMismatchError: If the two sequences differ in length
    """
    if len(pieces) != len(expected):
        raise SizeMismatchError(len(pieces), len(expected))

    kept = []
    total = 0.0
    for (piece, _), freq in zip(pieces, expected):
        if freq < threshold:
            continue
        kept.append((piece, freq))
        total += freq

    if not kept:
        logger.warning("M-step: no piece reached the expected frequency threshold")
        return []

    logsum = digamma(total)
    return [(piece, digamma(freq) - logsum) for piece, freq in kept]
