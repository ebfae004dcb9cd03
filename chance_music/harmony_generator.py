"""Chord-root harmonization of melodies.

Chords are identified by the scale degree of their root (``0`` = I through
``6`` = vii). A seven-state hidden Markov model describes how roots follow one
another and which melody pitch classes each chord tends to support. The
melody's pitch classes are the observations; one path sampled from the
posterior gives a root for every melody note.

Example
-------
>>> harmonize([0])
[0]
"""

# The progression table mirrors common-practice tendencies: ii goes to V,
# V resolves to I, IV moves to ii or V and so on. Self edges are added
# afterwards so chords tend to last for several notes.

from __future__ import annotations

import logging
import random
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import DegenerateInputError, ModelingPreconditionError
from .hmm import hmm_sample
from .utils import coalesce

__all__ = [
    "CHORD_PROGRESSION_RAW",
    "SELF_PROBABILITY",
    "CHORD_PROGRESSION",
    "CHORD_ELEMENTS",
    "add_self_edges",
    "HarmonyGenerator",
    "harmonize",
]

logger = logging.getLogger(__name__)

# Degrees in the diatonic scale; pitch classes are melody notes modulo this.
SCALE_LENGTH = 7

CHORD_PROGRESSION_RAW: Dict[int, Dict[int, float]] = {
    0: {1: 0.15, 2: 0.1, 3: 0.25, 4: 0.25, 5: 0.2, 6: 0.05},
    1: {4: 0.9, 6: 0.1},
    2: {1: 0.2, 3: 0.3, 5: 0.5},
    3: {0: 0.05, 1: 0.4, 4: 0.4, 6: 0.15},
    4: {0: 0.95, 5: 0.05},
    5: {1: 0.7, 3: 0.3},
    6: {4: 1.0},
}

# Probability that a chord is held for the next melody note.
SELF_PROBABILITY = 0.5

# Pitch classes each chord root is likely to sound under. Chord tones carry
# most of the weight; a few passing tones keep every melody harmonizable.
CHORD_ELEMENTS: Dict[int, Dict[int, float]] = {
    0: {0: 0.5, 2: 0.225, 4: 0.225, 6: 0.04, 1: 0.01},
    1: {1: 0.32, 3: 0.32, 5: 0.32, 0: 0.03, 2: 0.01},
    2: {2: 0.32, 4: 0.32, 6: 0.32, 1: 0.03, 3: 0.01},
    3: {3: 0.32, 5: 0.32, 0: 0.32, 2: 0.04},
    4: {4: 0.16, 6: 0.6, 1: 0.16, 3: 0.08},
    5: {5: 0.32, 0: 0.32, 2: 0.32, 4: 0.03, 6: 0.01},
    6: {6: 0.25, 1: 0.25, 3: 0.25, 5: 0.25},
}


def add_self_edges(
    transitions: Mapping[int, Mapping[int, float]], p: float
) -> Dict[int, Dict[int, float]]:
    """Return ``transitions`` with every state looping to itself with weight ``p``.

    Each row becomes ``p`` on the state itself plus ``1 - p`` times the
    original row, so rows that summed to one still do.
    """

    if not 0 <= p <= 1:
        raise DegenerateInputError(f"self probability must be in [0, 1], got {p}")
    boosted: Dict[int, Dict[int, float]] = {}
    for state, row in transitions.items():
        new_row = {state: p}
        for target, q in row.items():
            new_row[target] = new_row.get(target, 0) + (1 - p) * q
        boosted[state] = new_row
    return boosted


CHORD_PROGRESSION = add_self_edges(CHORD_PROGRESSION_RAW, SELF_PROBABILITY)


class HarmonyGenerator:
    """Assign a chord root to every note of a melody.

    Parameters
    ----------
    transitions:
        Chord-to-chord transition table. Defaults to :data:`CHORD_PROGRESSION`.
    emissions:
        Chord-to-pitch-class table. Defaults to :data:`CHORD_ELEMENTS`.
    tonic:
        Chord the harmonization starts from and resolves to.
    """

    def __init__(
        self,
        transitions: Optional[Mapping[int, Mapping[int, float]]] = None,
        emissions: Optional[Mapping[int, Mapping[int, float]]] = None,
        tonic: int = 0,
    ) -> None:
        self.transitions = CHORD_PROGRESSION if transitions is None else transitions
        self.emissions = CHORD_ELEMENTS if emissions is None else emissions
        self.tonic = tonic

    def harmonize(self, melody: Sequence[int], rng: Optional[random.Random] = None) -> List[int]:
        """Return one chord root per note of ``melody``.

        The observation for position ``i`` is the pitch class of note
        ``i + 1`` and a final tonic observation is appended, so the path the
        model samples ends on the tonic chord. That trailing anchor is
        dropped from the result.
        """

        if not melody:
            raise DegenerateInputError("melody must contain at least one note")
        observations = [n % SCALE_LENGTH for n in melody[1:]] + [self.tonic % SCALE_LENGTH]
        _final, paths = hmm_sample(
            {self.tonic: 1.0}, self.transitions, self.emissions, observations, rng
        )
        roots = paths.get(self.tonic)
        if roots is None:
            raise ModelingPreconditionError("melody cannot be harmonized to end on the tonic")
        return roots[:-1]

    def generate(
        self,
        melody: Sequence[int],
        rhythm: Sequence[int],
        rng: Optional[random.Random] = None,
    ) -> List[Tuple[int, int]]:
        """Return ``(root, duration)`` chord events for ``melody`` and ``rhythm``.

        Consecutive notes sharing a root are merged into one longer chord.
        """

        if len(melody) != len(rhythm):
            raise DegenerateInputError(
                f"melody and rhythm lengths differ ({len(melody)} != {len(rhythm)})"
            )
        roots = self.harmonize(melody, rng)
        events = coalesce(zip(roots, rhythm))
        logger.debug("Harmonized %d notes into %d chords", len(melody), len(events))
        return events


_DEFAULT_HARMONIZER = HarmonyGenerator()


def harmonize(melody: Sequence[int], rng: Optional[random.Random] = None) -> List[int]:
    """Return chord roots for ``melody`` using the default model."""

    return _DEFAULT_HARMONIZER.harmonize(melody, rng)
