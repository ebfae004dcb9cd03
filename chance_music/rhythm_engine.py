"""Rhythm generation by random interval partitions.

A melody of ``n`` notes is spread over ``ceil(n / RHYTHM_DENSITY)`` beats.
The beats are split into ``n`` contiguous segments by choosing ``n - 1``
distinct cut points uniformly at random; each segment's length is the
duration of one note. Rhythm depends only on the number of notes, never on
their pitches, so onsets evolve separately from the melody.

Whether this yields the uniform distribution over interval partitions has not
been established; the sampling procedure itself is what is kept stable.
"""

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Set

from .errors import DegenerateInputError

__all__ = [
    "RHYTHM_DENSITY",
    "random_attacks",
    "random_partition",
    "beat_count",
    "RhythmGenerator",
    "generate_rhythm",
]

logger = logging.getLogger(__name__)

# Notes per beat on average. Must be less than 1 so every note gets at least
# one beat.
RHYTHM_DENSITY = 5.0 / 16


def random_attacks(total: int, count: int, rng: Optional[random.Random] = None) -> Set[int]:
    """Sample ``count`` distinct integers from ``range(total)``.

    Uses rejection sampling, which is fast while ``count`` is well below
    ``total`` as it is for rhythm densities under one.
    """

    if not 0 <= count <= total:
        raise DegenerateInputError(f"cannot draw {count} distinct values from {total}")
    source = rng if rng is not None else random
    result: Set[int] = set()
    while len(result) < count:
        result.add(source.randrange(total))
    return result


def random_partition(
    total_beats: int, segments: int, rng: Optional[random.Random] = None
) -> List[int]:
    """Split ``total_beats`` into ``segments`` positive integer lengths.

    @param total_beats (int): Length of the interval to partition.
    @param segments (int): Number of parts, between ``1`` and ``total_beats``.
    @param rng (random.Random|None): Random source, the :mod:`random` module
        when omitted.
    @returns List[int]: Segment lengths in order; they sum to ``total_beats``.
    """

    if not 1 <= segments <= total_beats:
        raise DegenerateInputError(
            f"segments must be between 1 and total_beats ({total_beats}), got {segments}"
        )
    attacks = sorted(n + 1 for n in random_attacks(total_beats - 1, segments - 1, rng))
    return [stop - start for start, stop in zip([0] + attacks, attacks + [total_beats])]


def beat_count(num_notes: int, density: float = RHYTHM_DENSITY) -> int:
    """Return the number of beats a melody of ``num_notes`` notes spans."""

    if not 0 < density < 1:
        raise DegenerateInputError(f"rhythm density must be in (0, 1), got {density}")
    if num_notes <= 0:
        raise DegenerateInputError("num_notes must be positive")
    return math.ceil(num_notes / density)


class RhythmGenerator:
    """Generate note durations for melodies of a given length."""

    def __init__(self, density: float = RHYTHM_DENSITY) -> None:
        """Create a generator placing ``density`` notes per beat on average.

        ``DegenerateInputError`` is raised when ``density`` is not strictly
        between ``0`` and ``1``.
        """

        if not 0 < density < 1:
            raise DegenerateInputError(f"rhythm density must be in (0, 1), got {density}")
        self.density = density

    def generate(self, num_notes: int, rng: Optional[random.Random] = None) -> List[int]:
        """Return ``num_notes`` durations, in beats."""

        beats = beat_count(num_notes, self.density)
        logger.debug("Partitioning %d beats among %d notes", beats, num_notes)
        return random_partition(beats, num_notes, rng)


_DEFAULT_GENERATOR = RhythmGenerator()


def generate_rhythm(num_notes: int, rng: Optional[random.Random] = None) -> List[int]:
    """Return a rhythm for ``num_notes`` notes at :data:`RHYTHM_DENSITY`."""

    return _DEFAULT_GENERATOR.generate(num_notes, rng)
