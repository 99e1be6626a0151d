"""
Segmentation lattice.

A lattice holds every candidate piece occurrence of a single word as a node
keyed by its start position. It answers the two questions the trainer asks:
the expected usage of each piece under the current scores (forward-backward)
and the single best segmentation (Viterbi).
"""

import math
from dataclasses import dataclass, field
from typing import Collection, List, Optional

from .numeric import log_sum_exp


@dataclass
class Node:
    """A piece occurrence spanning sentence[pos:pos + length]."""
    node_id: int
    pos: int
    length: int
    piece_id: int
    score: float
    backtrace_score: float = field(default=-math.inf, repr=False)
    prev: Optional["Node"] = field(default=None, repr=False)

    @property
    def end(self) -> int:
        return self.pos + self.length


class Lattice:
    """
    Lattice over the characters of `sentence`.

    Args:
        sentence: Word to segment
        bos_id: Id of the beginning-of-sentence piece
        eos_id: Id of the end-of-sentence piece
        unk_id: Id of the unknown piece
    """

    def __init__(self, sentence: str, bos_id: int = 0, eos_id: int = 1, unk_id: int = 2):
        self.sentence = sentence
        self.bos_id = bos_id
        self.eos_id = eos_id
        self.unk_id = unk_id
        self.nodes: List[Node] = []
        self.begin_nodes: List[List[Node]] = [[] for _ in range(len(sentence) + 1)]
        self.end_nodes: List[List[Node]] = [[] for _ in range(len(sentence) + 1)]

    def __len__(self) -> int:
        return len(self.sentence)

    def surface(self, node: Node) -> str:
        return self.sentence[node.pos:node.end]

    def insert(self, pos: int, length: int, piece_id: int, score: float) -> Node:
        """Add a node covering sentence[pos:pos + length]."""
        if length <= 0 or pos < 0 or pos + length > len(self.sentence):
            raise ValueError(
                f"Node ({pos}, {length}) out of bounds for sentence of length {len(self.sentence)}"
            )
        node = Node(len(self.nodes), pos, length, piece_id, score)
        self.nodes.append(node)
        self.begin_nodes[pos].append(node)
        self.end_nodes[node.end].append(node)
        return node

    def viterbi(self, excluded: Optional[Collection[int]] = None) -> List[Node]:
        """
        Best-scoring segmentation.

        Args:
            excluded: Node ids that may not be used

        Returns:
            Nodes of the best path in sentence order, or [] if the end of the
            sentence is unreachable
        """
        n = len(self.sentence)
        if n == 0:
            return []
        excluded = excluded or ()

        for node in self.nodes:
            node.backtrace_score = -math.inf
            node.prev = None

        best_at = [-math.inf] * (n + 1)
        best_node: List[Optional[Node]] = [None] * (n + 1)
        best_at[0] = 0.0

        for pos in range(n):
            if best_at[pos] == -math.inf:
                continue
            for node in self.begin_nodes[pos]:
                if node.node_id in excluded:
                    continue
                candidate = best_at[pos] + node.score
                if candidate > node.backtrace_score:
                    node.backtrace_score = candidate
                    node.prev = best_node[pos]
                if candidate > best_at[node.end]:
                    best_at[node.end] = candidate
                    best_node[node.end] = node

        path = []
        current = best_node[n]
        while current is not None:
            path.append(current)
            current = current.prev
        path.reverse()
        return path

    def tokens(self) -> List[str]:
        """Surface strings of the Viterbi path."""
        return [self.surface(node) for node in self.viterbi()]

    def populate_marginal(self, freq: float, expected: List[float]) -> float:
        """
        Accumulate freq * P(node is used) into expected[piece_id].

        Runs forward-backward in log space over all segmentations.

        Args:
            freq: Weight of this word (its corpus frequency)
            expected: Per-piece accumulator, indexed by piece id

        Returns:
            Log partition value Z of the word
        """
        n = len(self.sentence)
        if n == 0:
            return 0.0

        alpha = [-math.inf] * (n + 1)
        alpha[0] = 0.0
        for pos in range(n):
            if alpha[pos] == -math.inf:
                continue
            for node in self.begin_nodes[pos]:
                alpha[node.end] = log_sum_exp(alpha[node.end], alpha[pos] + node.score)

        beta = [-math.inf] * (n + 1)
        beta[n] = 0.0
        for pos in range(n, 0, -1):
            if beta[pos] == -math.inf:
                continue
            for node in self.end_nodes[pos]:
                beta[node.pos] = log_sum_exp(beta[node.pos], beta[pos] + node.score)

        z = alpha[n]
        if not math.isfinite(z):
            return z

        for node in self.nodes:
            log_marginal = alpha[node.pos] + node.score + beta[node.end] - z
            if log_marginal == -math.inf:
                continue
            expected[node.piece_id] += freq * math.exp(log_marginal)

        return z
