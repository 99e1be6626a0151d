"""
Unigram scoring model.

Stores an ordered piece -> score table, answers lookups and fills lattices
with every vocabulary piece that matches a word.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .lattice import Lattice
from .numeric import SentencePiece

logger = logging.getLogger(__name__)

BOS_TOKEN = "<bos>"
EOS_TOKEN = "<eos>"
UNK_TOKEN = "<unk>"
RESERVED_TOKENS = (BOS_TOKEN, EOS_TOKEN, UNK_TOKEN)

# Score offset below the minimum piece score for unknown characters
UNK_PENALTY = 10.0

_PIECE_ID = "\x00id"


class UnigramModel:
    """
    Scoring model over an ordered list of (piece, score).

    Args:
        pieces: Ordered pieces; duplicates are rejected
        bos_id: Index of the beginning-of-sentence piece in `pieces`
        eos_id: Index of the end-of-sentence piece in `pieces`
        unk_id: Index of the unknown piece in `pieces`

    Raises:
        ValueError: On duplicate pieces or reserved ids out of range
    """

    def __init__(self, pieces: Sequence[SentencePiece], bos_id: int = 0, eos_id: int = 1, unk_id: int = 2):
        self._pieces: List[SentencePiece] = [(piece, float(score)) for piece, score in pieces]
        for name, idx in (("bos_id", bos_id), ("eos_id", eos_id), ("unk_id", unk_id)):
            if not 0 <= idx < len(self._pieces):
                raise ValueError(f"{name}={idx} is out of range for {len(self._pieces)} pieces")
        self.bos_id = bos_id
        self.eos_id = eos_id
        self.unk_id = unk_id
        self._reserved_ids = {bos_id, eos_id, unk_id}

        self._token_to_id: Dict[str, int] = {}
        for i, (piece, _) in enumerate(self._pieces):
            if piece in self._token_to_id:
                raise ValueError(f"Duplicate piece '{piece}' in model")
            self._token_to_id[piece] = i

        self.min_score = min(score for _, score in self._pieces)
        self._build_trie()

    def _build_trie(self) -> None:
        self._trie: Dict[str, Any] = {}
        for i, (piece, _) in enumerate(self._pieces):
            if i in self._reserved_ids or not piece:
                continue
            node = self._trie
            for char in piece:
                node = node.setdefault(char, {})
            node[_PIECE_ID] = i

    def __len__(self) -> int:
        return len(self._pieces)

    def __iter__(self) -> Iterator[SentencePiece]:
        return iter(self._pieces)

    def __contains__(self, piece: str) -> bool:
        return piece in self._token_to_id

    @property
    def pieces(self) -> List[SentencePiece]:
        return list(self._pieces)

    def get_score(self, piece: str) -> Optional[float]:
        idx = self._token_to_id.get(piece)
        return None if idx is None else self._pieces[idx][1]

    def token_to_id(self, piece: str) -> Optional[int]:
        return self._token_to_id.get(piece)

    def id_to_token(self, idx: int) -> Optional[str]:
        if 0 <= idx < len(self._pieces):
            return self._pieces[idx][0]
        return None

    def get_vocab(self) -> Dict[str, int]:
        return dict(self._token_to_id)

    def populate_nodes(self, lattice: Lattice) -> None:
        """
        Insert a node for every piece matching the lattice's sentence.

        Positions without a single-character piece get an unknown node so
        the sentence always stays segmentable.
        """
        sentence = lattice.sentence
        unk_score = self.min_score - UNK_PENALTY
        for pos in range(len(sentence)):
            node = self._trie
            has_single_char = False
            end = pos
            while end < len(sentence) and sentence[end] in node:
                node = node[sentence[end]]
                end += 1
                piece_id = node.get(_PIECE_ID)
                if piece_id is not None:
                    lattice.insert(pos, end - pos, piece_id, self._pieces[piece_id][1])
                    if end - pos == 1:
                        has_single_char = True
            if not has_single_char:
                lattice.insert(pos, 1, self.unk_id, unk_score)

    def make_lattice(self, word: str) -> Lattice:
        lattice = Lattice(word, self.bos_id, self.eos_id, self.unk_id)
        self.populate_nodes(lattice)
        return lattice

    def encode(self, word: str) -> List[str]:
        """Viterbi segmentation of `word` as surface strings."""
        return self.make_lattice(word).tokens()

    def __repr__(self) -> str:
        return f"UnigramModel(pieces={len(self._pieces)}, min_score={self.min_score:.4f})"
