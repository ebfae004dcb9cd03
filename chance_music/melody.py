"""Biased random-walk melody generation.

Melodies are sequences of scale-degree offsets from the tonic (``0``). The
walk has two phases:

1. **Ascent.** Starting on the tonic, take steps whose most likely size is
   ``UPWARD_STEP``. Whenever a new peak is reached, stop ascending with a
   probability that grows as the peak approaches ``MAX_NOTE``.
2. **Descent.** Step toward the tonic one degree at a time on average while
   avoiding the peak, until the tonic is reached.

Each step draws its delta from :func:`melody_transition_weights` and is
shifted away from the bounds so the walk can never leave
``[MIN_NOTE, MAX_NOTE]``.

Algorithm Pseudocode
--------------------
::

    note, peak = 0, 0
    loop:
        emit note
        note = step(note, desired=+2)
        if note > peak:
            peak = note
            stop with probability note / MAX_NOTE
    while note != 0:
        emit note
        note = step(note, desired=sign(-note), top=peak or peak - 1)
    emit 0
"""

from __future__ import annotations

import logging
import random
from typing import List, Mapping, Optional

from .errors import DegenerateInputError
from .sampling import DEFAULT_CACHE, STEP_RANGE, TransitionWeightCache, wchoose

__all__ = [
    "MIN_NOTE",
    "MAX_NOTE",
    "UPWARD_STEP",
    "clip",
    "melody_step",
    "MelodyWalker",
    "generate_melody",
]

logger = logging.getLogger(__name__)

# An octave and a half ought to be enough for anybody. The bounds must be
# more than ``2 * STEP_RANGE`` apart so one step can always stay in range.
MIN_NOTE = -4
MAX_NOTE = 10

# Desired delta during the ascent; slightly favours stepping up.
UPWARD_STEP = 2


def clip(lo: int, hi: int, n: int) -> int:
    """Return ``n`` clamped into ``[lo, hi]``."""

    return max(lo, min(hi, n))


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def melody_step(
    lo: int,
    hi: int,
    n: int,
    step: int,
    weights: Mapping[int, Mapping[int, float]] = DEFAULT_CACHE,
    rng: Optional[random.Random] = None,
) -> int:
    """Take a random step from ``n`` of roughly ``step`` degrees.

    When ``n`` sits within ``STEP_RANGE`` of a bound the step is re-centred
    (``offset``) so every possible delta lands inside ``[lo, hi]``. The
    desired step is adjusted by the same amount and clipped to the range the
    transition tables cover. The low bound takes precedence when both are
    close, so a window narrower than ``2 * STEP_RANGE`` (the descent below a
    low peak) keeps ``lo`` and lets ``hi`` give.
    """

    offset = 0
    if lo + STEP_RANGE >= n:
        offset = lo + STEP_RANGE - n
    elif hi - STEP_RANGE <= n:
        offset = max(lo + STEP_RANGE, hi - STEP_RANGE) - n
    step = clip(-STEP_RANGE, STEP_RANGE, step - offset)
    return n + wchoose(weights[step], rng) + offset


class MelodyWalker:
    """Generate melodies by a bounded, biased random walk.

    Parameters
    ----------
    min_note, max_note:
        Inclusive bounds of the walk. ``max_note - min_note`` must exceed
        ``2 * STEP_RANGE`` and ``max_note`` must be positive so the ascent
        can terminate.
    cache:
        Transition table cache shared with other walkers. Defaults to the
        process-wide :data:`~chance_music.sampling.DEFAULT_CACHE`.
    """

    def __init__(
        self,
        min_note: int = MIN_NOTE,
        max_note: int = MAX_NOTE,
        cache: Optional[TransitionWeightCache] = None,
    ) -> None:
        if max_note - min_note <= 2 * STEP_RANGE:
            raise DegenerateInputError(
                f"note bounds must be more than {2 * STEP_RANGE} apart, "
                f"got [{min_note}, {max_note}]"
            )
        if not min_note <= 0 < max_note:
            raise DegenerateInputError(
                f"note bounds must satisfy min_note <= 0 < max_note, got [{min_note}, {max_note}]"
            )
        self.min_note = min_note
        self.max_note = max_note
        self.cache = cache if cache is not None else DEFAULT_CACHE

    def _step(self, hi: int, n: int, step: int, rng: Optional[random.Random]) -> int:
        return melody_step(self.min_note, hi, n, step, self.cache, rng)

    def generate(self, rng: Optional[random.Random] = None) -> List[int]:
        """Return a melody that starts and ends on the tonic."""

        source = rng if rng is not None else random
        current = 0
        peak = 0
        melody: List[int] = []

        while True:
            melody.append(current)
            current = self._step(self.max_note, current, UPWARD_STEP, rng)
            if current > peak:
                peak = current
                if source.random() < current / self.max_note:
                    break
        logger.debug("Ascent peaked at %d after %d notes", peak, len(melody))

        while current != 0:
            melody.append(current)
            top = peak if current == peak else peak - 1
            current = self._step(top, current, _sign(-current), rng)
        melody.append(current)

        logger.debug("Generated melody of %d notes", len(melody))
        return melody


_DEFAULT_WALKER = MelodyWalker()


def generate_melody(rng: Optional[random.Random] = None) -> List[int]:
    """Return a melody from the default :class:`MelodyWalker`."""

    return _DEFAULT_WALKER.generate(rng)
