"""Weighted sampling primitives.

``wchoose`` draws one outcome from a mapping of outcomes to non-negative
weights. ``melody_transition_weights`` builds the step-size distributions used
by the melody walker: a Fisher noncentral hypergeometric distribution whose
odds ratio is tuned so the mode lands on a requested step.

Example
-------
>>> import random
>>> rng = random.Random(3)
>>> wchoose({"a": 1.0, "b": 0.0}, rng)
'a'
>>> max(melody_transition_weights(2).items(), key=lambda kv: kv[1])[0]
2
"""

from __future__ import annotations

import logging
import math
import random
import threading
from itertools import accumulate
from typing import Dict, Hashable, Mapping, Optional, TypeVar

from .errors import DegenerateInputError, InvariantViolation

__all__ = [
    "STEP_RANGE",
    "wchoose",
    "cchoose",
    "melody_transition_weights",
    "TransitionWeightCache",
    "DEFAULT_CACHE",
]

logger = logging.getLogger(__name__)

# Largest melodic step, in scale degrees, the walker may take in one move.
# Jumps of more than a fifth rarely sound good.
STEP_RANGE = 4

T = TypeVar("T", bound=Hashable)


def wchoose(weights: Mapping[T, float], rng: Optional[random.Random] = None) -> T:
    """Return one key of ``weights`` with probability proportional to its value.

    Parameters
    ----------
    weights:
        Mapping of outcome to non-negative weight. Zero weights are allowed
        and are never selected. The mapping's iteration order decides which
        outcome owns each slice of the cumulative range.
    rng:
        Random source. Defaults to the process-wide :mod:`random` module.
        Exactly one ``random()`` draw is consumed.

    Raises
    ------
    DegenerateInputError
        If ``weights`` is empty, has a negative weight or sums to zero.
    InvariantViolation
        If the draw falls past the cumulative total, which cannot happen for
        a valid mapping.
    """

    if not weights:
        raise DegenerateInputError("weights must be non-empty")
    if any(w < 0 for w in weights.values()):
        raise DegenerateInputError(f"weights must be non-negative: {dict(weights)}")

    # The total is the last running sum so the final comparison uses exactly
    # the same floating point value as the scan below.
    cumulative = list(accumulate(weights.values()))
    total = cumulative[-1]
    if total <= 0:
        raise DegenerateInputError(f"weights must have a positive sum: {dict(weights)}")

    source = rng if rng is not None else random
    target = source.random() * total
    for outcome, running in zip(weights, cumulative):
        if target < running:
            return outcome
    raise InvariantViolation(
        f"wchoose drew {target} beyond the weight total {total}; weights: {dict(weights)}"
    )


def cchoose(m: int, n: int) -> int:
    """Return the binomial coefficient ``m`` choose ``n``.

    Computed as the falling product ``m * (m-1) * ... * (m-n+1)`` divided by
    ``n!`` so the result is an exact integer.
    """

    return math.prod(range(m - n + 1, m + 1)) // math.prod(range(2, n + 1))


def melody_transition_weights(step: int) -> Dict[int, float]:
    """Return relative weights for each delta in ``[-STEP_RANGE, STEP_RANGE]``.

    The urn holds ``2 * STEP_RANGE`` red and as many white balls and exactly
    ``2 * STEP_RANGE`` balls are drawn. The mode of Fisher's noncentral
    hypergeometric distribution is ``floor(f(ratio))``; the odds ratio is
    chosen so that ``f(ratio) == step + 0.5`` which makes ``step`` the clear
    mode. Deltas are shifted into ``[0, 2 * STEP_RANGE]`` for the computation
    and back again for the keys.
    """

    if not -STEP_RANGE <= step <= STEP_RANGE:
        raise DegenerateInputError(
            f"step must lie in [{-STEP_RANGE}, {STEP_RANGE}], got {step}"
        )
    top = 2 * STEP_RANGE
    shifted = step + STEP_RANGE
    ratio = ((shifted + 0.5) / (top - shifted + 0.5)) ** 2
    weights: Dict[int, float] = {}
    for delta in range(-STEP_RANGE, STEP_RANGE + 1):
        k = delta + STEP_RANGE
        weights[delta] = cchoose(top, k) * cchoose(top, top - k) * ratio ** k
    return weights


class TransitionWeightCache:
    """Lazily computed table of :func:`melody_transition_weights` results.

    The tables are a pure function of the desired step so entries never need
    invalidating. A lock guards population so a single cache can be shared by
    walkers running on different threads.
    """

    def __init__(self) -> None:
        self._tables: Dict[int, Dict[int, float]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __getitem__(self, step: int) -> Dict[int, float]:
        with self._lock:
            table = self._tables.get(step)
            if table is None:
                self.misses += 1
                table = melody_transition_weights(step)
                self._tables[step] = table
                logger.debug("Computed transition weights for step %d", step)
            else:
                self.hits += 1
            return table

    def __len__(self) -> int:
        return len(self._tables)

    def __contains__(self, step: object) -> bool:
        return step in self._tables

    def clear(self) -> None:
        """Drop every cached table and reset the counters."""

        with self._lock:
            self._tables.clear()
            self.hits = 0
            self.misses = 0


# Shared by the convenience helpers that do not take an explicit cache.
DEFAULT_CACHE = TransitionWeightCache()
