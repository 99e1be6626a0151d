"""
Pruning strategies for the Unigram-LM control loop.

The control loop only relies on the `PruningStrategy` contract: given scored
pieces and a target size, return a subset (in the original order) that is
no larger than the target, dropping the least valuable pieces first. Pieces
a strategy cannot remove without losing coverage may keep the result above
the target; the control loop stops when a round no longer shrinks the list.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Sequence, Set, Tuple

from .model import RESERVED_TOKENS, UnigramModel
from .numeric import SentencePiece

logger = logging.getLogger(__name__)

Sentence = Tuple[str, int]


class PruningStrategy:
    """Removes the lowest-value pieces down toward a target size."""

    name = "base"

    def prune(
        self,
        pieces: Sequence[SentencePiece],
        target_size: int,
        sentences: Sequence[Sentence],
    ) -> List[SentencePiece]:
        """
        Args:
            pieces: Trainable pieces (reserved tokens excluded)
            target_size: Desired number of pieces after pruning
            sentences: Deduplicated (word, frequency) corpus

        Returns:
            Surviving pieces in their original order
        """
        raise NotImplementedError

    @staticmethod
    def _keep_in_order(pieces: Sequence[SentencePiece], keep: Set[int]) -> List[SentencePiece]:
        return [p for i, p in enumerate(pieces) if i in keep]


class ScorePruning(PruningStrategy):
    """Keep the `target_size` highest-scoring pieces; ties keep the earlier piece."""

    name = "score"

    def prune(self, pieces, target_size, sentences):
        if len(pieces) <= target_size:
            return list(pieces)
        ranked = sorted(range(len(pieces)), key=lambda i: pieces[i][1], reverse=True)
        return self._keep_in_order(pieces, set(ranked[:max(0, target_size)]))


class LeaveOneOutPruning(PruningStrategy):
    """
    Likelihood-loss pruning.

    For each piece, the alternative is the second-best segmentation of the
    piece's own string. The loss of removing a piece is the change in
    log-likelihood when its Viterbi frequency is redistributed to that
    alternative, weighted by the fraction of the corpus using it. Pieces
    never used in a Viterbi path, or whose own best path is split, go
    first; pieces without any alternative are always kept.
    """

    name = "leave_one_out"

    def prune(self, pieces, target_size, sentences):
        if len(pieces) <= target_size:
            return list(pieces)

        offset = len(RESERVED_TOKENS)
        model = UnigramModel([(token, 0.0) for token in RESERVED_TOKENS] + list(pieces), 0, 1, 2)

        always_keep: List[bool] = [True] * len(pieces)
        alternatives: List[List[int]] = [[] for _ in pieces]
        for i, (piece, _) in enumerate(pieces):
            lattice = model.make_lattice(piece)
            best = lattice.viterbi()
            if len(best) >= 2:
                # Removable: its own Viterbi path already splits it
                always_keep[i] = False
                continue
            second = lattice.viterbi(excluded={best[0].node_id}) if best else []
            alternatives[i] = [node.piece_id for node in second]

        freq: Dict[int, float] = defaultdict(float)
        inverted: Dict[int, List[int]] = defaultdict(list)
        for n, (word, count) in enumerate(sentences):
            for node in model.make_lattice(word).viterbi():
                freq[node.piece_id] += count
                inverted[node.piece_id].append(n)

        vsum = sum(freq.values())
        if vsum <= 0:
            logger.warning("Pruning: no Viterbi usage found, keeping all pieces")
            return list(pieces)
        logsum = math.log(vsum)

        keep: Set[int] = set()
        candidates: List[Tuple[int, float]] = []
        for i in range(len(pieces)):
            piece_id = i + offset
            piece_freq = freq.get(piece_id, 0.0)
            if piece_freq == 0 or not always_keep[i]:
                continue
            if not alternatives[i]:
                keep.add(i)
                continue

            usage = sum(sentences[n][1] for n in inverted[piece_id]) / vsum
            logprob_sp = math.log(piece_freq) - logsum
            logsum_alt = math.log(vsum + piece_freq * (len(alternatives[i]) - 1))
            logprob_alt = sum(math.log(freq.get(n, 0.0) + piece_freq) - logsum_alt for n in alternatives[i])
            candidates.append((i, usage * (logprob_sp - logprob_alt)))

        candidates.sort(key=lambda c: c[1], reverse=True)
        for i, _ in candidates:
            if len(keep) >= target_size:
                break
            keep.add(i)

        logger.debug(
            f"Pruning: {len(pieces):,} -> {len(keep):,} pieces "
            f"(target {target_size:,}, {len(candidates):,} candidates)"
        )
        return self._keep_in_order(pieces, keep)


PRUNING_STRATEGIES = {
    LeaveOneOutPruning.name: LeaveOneOutPruning,
    ScorePruning.name: ScorePruning,
}


def get_pruning_strategy(name: str) -> PruningStrategy:
    """Instantiate a pruning strategy by name."""
    if name not in PRUNING_STRATEGIES:
        raise ValueError(f"Unknown pruning strategy '{name}'. Choose from {sorted(PRUNING_STRATEGIES)}")
    return PRUNING_STRATEGIES[name]()
