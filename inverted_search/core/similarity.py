"""Character similarity used for fuzzy token matching."""

from typing import List, Tuple

import structlog

logger = structlog.get_logger(__name__)


def _longest_common_substring(
    a: str, a_start: int, a_end: int,
    b: str, b_start: int, b_end: int
) -> Tuple[int, int, int]:
    """
    Find the longest common substring of a[a_start:a_end] and b[b_start:b_end].

    Ties go to the match starting first in ``a``, then first in ``b``.

    Returns:
        Tuple of (position in a, position in b, length)
    """
    best_a, best_b, best_len = a_start, b_start, 0
    width = b_end - b_start
    previous = [0] * (width + 1)

    for i in range(a_start, a_end):
        current = [0] * (width + 1)
        char = a[i]
        for j in range(b_start, b_end):
            if char == b[j]:
                col = j - b_start + 1
                length = previous[col - 1] + 1
                current[col] = length
                if length > best_len:
                    best_len = length
                    best_a = i - length + 1
                    best_b = j - length + 1
        previous = current

    return best_a, best_b, best_len


def matching_characters(a: str, b: str) -> int:
    """
    Count the characters shared by two strings.

    The longest common substring is matched first, then the regions on
    either side of it are matched the same way until nothing is left.
    Regions are kept on an explicit stack so long inputs cannot exhaust
    the interpreter's recursion limit.

    Args:
        a: First string
        b: Second string

    Returns:
        Total length of all matched substrings
    """
    total = 0
    stack: List[Tuple[int, int, int, int]] = [(0, len(a), 0, len(b))]

    while stack:
        a_start, a_end, b_start, b_end = stack.pop()
        if a_start >= a_end or b_start >= b_end:
            continue

        pos_a, pos_b, length = _longest_common_substring(
            a, a_start, a_end, b, b_start, b_end
        )
        if length == 0:
            continue

        total += length
        stack.append((a_start, pos_a, b_start, pos_b))
        stack.append((pos_a + length, a_end, pos_b + length, b_end))

    return total


def similarity(a: str, b: str) -> float:
    """
    Calculate the similarity percentage between two strings.

    Comparison is case-sensitive and works on the raw characters given.

    Args:
        a: First string
        b: Second string

    Returns:
        Similarity between 0 and 100; 0 when both strings are empty
    """
    if not isinstance(a, str) or not isinstance(b, str):
        raise TypeError(
            f"similarity() expects two strings, got {type(a).__name__} "
            f"and {type(b).__name__}"
        )

    combined = len(a) + len(b)
    if combined == 0:
        return 0.0

    return matching_characters(a, b) * 2 / combined * 100


class StringSimilarity:
    """Scores candidate words against query words by shared characters."""

    def score(self, a: str, b: str) -> float:
        """Similarity percentage between ``a`` and ``b``."""
        return similarity(a, b)

    def matches(self, a: str, b: str, confidence: float) -> bool:
        """Whether ``a`` and ``b`` are at least ``confidence`` percent similar."""
        return similarity(a, b) >= confidence
