"""Utility helpers shared across chance_music components.

Usage Example
-------------
>>> from chance_music.utils import coalesce
>>> coalesce([(0, 2), (0, 1), (4, 3), (0, 1)])
[(0, 3), (4, 3), (0, 1)]
"""

from __future__ import annotations

from typing import Hashable, Iterable, List, Tuple, TypeVar

__all__ = ["coalesce"]

K = TypeVar("K", bound=Hashable)


def coalesce(pairs: Iterable[Tuple[K, int]]) -> List[Tuple[K, int]]:
    """Merge neighbouring ``(key, duration)`` pairs that share a key.

    Durations of merged pairs are summed. New tuples are returned so the
    caller's data is left untouched.

    @param pairs (Iterable[Tuple]): Ordered ``(key, duration)`` pairs.
    @returns List[Tuple]: Pairs with no two adjacent keys equal.
    """

    result: List[Tuple[K, int]] = []
    for key, duration in pairs:
        if result and result[-1][0] == key:
            result[-1] = (key, result[-1][1] + duration)
        else:
            result.append((key, duration))
    return result
