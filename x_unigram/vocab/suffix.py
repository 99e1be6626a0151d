"""
Suffix-array based substring frequency index.

Builds a suffix array by prefix doubling (numpy lexsort), derives the LCP
array with Kasai's algorithm and walks the LCP intervals bottom-up. Every
LCP interval is an internal node of the implicit suffix tree: a substring
occurring at least twice whose occurrences diverge right after it.
"""

import logging
from typing import Iterator, List, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def suffix_array(text: str) -> np.ndarray:
    """
    Compute the suffix array of `text`.

    Shorter suffixes sort before longer suffixes sharing the same prefix.

    Args:
        text: Input string

    Returns:
        Array of suffix start positions in lexicographic order
    """
    n = len(text)
    if n == 0:
        return np.zeros(0, dtype=np.int64)

    rank = np.fromiter((ord(c) for c in text), dtype=np.int64, count=n)
    sa = np.argsort(rank, kind="stable")
    k = 1
    while True:
        # -1 marks "past the end" and sorts before every codepoint
        second = np.full(n, -1, dtype=np.int64)
        if k < n:
            second[: n - k] = rank[k:]
        sa = np.lexsort((second, rank))

        sorted_rank = rank[sa]
        sorted_second = second[sa]
        boundary = np.empty(n, dtype=bool)
        boundary[0] = True
        boundary[1:] = (sorted_rank[1:] != sorted_rank[:-1]) | (sorted_second[1:] != sorted_second[:-1])

        new_rank = np.empty(n, dtype=np.int64)
        new_rank[sa] = np.cumsum(boundary) - 1
        rank = new_rank

        if rank[sa[-1]] == n - 1:
            break
        k *= 2

    return sa


def lcp_array(text: str, sa: np.ndarray) -> List[int]:
    """
    Kasai's algorithm. lcp[i] is the longest common prefix length of the
    suffixes at sa[i - 1] and sa[i]; lcp[0] is 0.
    """
    n = len(text)
    lcp = [0] * n
    if n == 0:
        return lcp

    rank = [0] * n
    for i, start in enumerate(sa.tolist()):
        rank[start] = i

    positions = sa.tolist()
    h = 0
    for start in range(n):
        r = rank[start]
        if r == 0:
            h = 0
            continue
        prev = positions[r - 1]
        while start + h < n and prev + h < n and text[start + h] == text[prev + h]:
            h += 1
        lcp[r] = h
        if h > 0:
            h -= 1
    return lcp


def iter_repeated_substrings(text: str) -> Iterator[Tuple[str, int]]:
    """
    Enumerate repeated substrings of `text` with their occurrence counts.

    Yields one (substring, count) pair per LCP interval, count >= 2.

    Args:
        text: Buffer to index

    Yields:
        Tuples of (substring, occurrence_count)
    """
    n = len(text)
    if n < 2:
        return

    sa = suffix_array(text)
    lcp = lcp_array(text, sa)
    positions = sa.tolist()
    logger.debug(f"Suffix array built over {n:,} characters")

    # Each stack entry is (lcp value, left bound of the interval)
    stack: List[Tuple[int, int]] = [(0, 0)]
    for i in range(1, n + 1):
        current = lcp[i] if i < n else 0
        left = i - 1
        while current < stack[-1][0]:
            depth, left = stack.pop()
            start = positions[left]
            yield text[start:start + depth], i - left
        if current > stack[-1][0]:
            stack.append((current, left))
