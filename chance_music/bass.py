"""Bass line placement by recursive bisection.

Given a series of chord roots and the bass notes for its two ends, choose a
bass note for the middle chord, then recurse on the first and last halves.
The middle note is picked among the three nearest triad tones on either side
of the midpoint between the end notes, weighted by the inverse of their
combined distance to both ends. Notes use the same scale-degree offsets as
melodies.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import DegenerateInputError
from .sampling import wchoose
from .utils import coalesce

__all__ = ["MAX_TRIAD_JUMP", "TRIAD", "random_bassline", "bass_events"]

logger = logging.getLogger(__name__)

# Candidates collected on each side of the midpoint.
MAX_TRIAD_JUMP = 3

# Degrees above the root that belong to a triad.
TRIAD = frozenset({0, 2, 4})


def _scan(
    choices: Dict[int, float],
    candidate: int,
    direction: int,
    limit: int,
    root: int,
    start: int,
    stop: int,
) -> None:
    """Add triad tones to ``choices`` walking from ``candidate`` until it holds ``limit``."""

    while len(choices) < limit:
        if (candidate - root) % 7 in TRIAD:
            choices[candidate] = 1.0 / (abs(candidate - start) + abs(candidate - stop) + 1)
        candidate += direction


def random_bassline(
    roots: Sequence[int],
    start: int,
    stop: int,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Return bass notes for ``roots`` running from ``start`` to ``stop``.

    Sequences of fewer than three roots need no interior note and yield
    ``[start, stop]``. Longer sequences yield one note per root, each
    interior note a member of its chord's triad.
    """

    if len(roots) < 3:
        return [start, stop]

    mid_idx = len(roots) // 2
    mid_root = roots[mid_idx]
    choices: Dict[int, float] = {}
    _scan(choices, math.ceil((start + stop) / 2), 1, MAX_TRIAD_JUMP, mid_root, start, stop)
    _scan(choices, math.floor((start + stop) / 2), -1, 2 * MAX_TRIAD_JUMP, mid_root, start, stop)

    mid_note = wchoose(choices, rng)
    left = random_bassline(roots[: mid_idx + 1], start, mid_note, rng)
    right = random_bassline(roots[mid_idx:], mid_note, stop, rng)
    return left + right[1:]


def bass_events(
    roots: Sequence[int],
    durations: Sequence[int],
    start: int = 0,
    stop: int = 0,
    rng: Optional[random.Random] = None,
) -> List[Tuple[int, int]]:
    """Return coalesced ``(note, duration)`` bass events under a chord sequence.

    A bass line always has at least two notes while a harmony may consist of
    a single chord, so the durations are padded with a zero that coalesces
    away in that case and is never reached otherwise.
    """

    if len(roots) != len(durations):
        raise DegenerateInputError(
            f"roots and durations lengths differ ({len(roots)} != {len(durations)})"
        )
    line = random_bassline(roots, start, stop, rng)
    logger.debug("Placed %d bass notes under %d chords", len(line), len(roots))
    return coalesce(zip(line, list(durations) + [0]))
