"""Exact posterior sampling for small hidden Markov models.

This is a mild variant of the Viterbi algorithm. Instead of keeping the most
likely path into each state, the forward pass keeps one *sampled* path per
state: at every step the path into a state is redrawn from its candidate
extensions in proportion to their joint probability. After the last
observation, the path stored for state ``s`` is an exact sample from the
hidden-state sequences conditioned on the observations and on ending in
``s``.

Model tables are plain nested mappings:

* ``initial[s]`` gives ``P(s_0 = s)``;
* ``transitions[s0][s1]`` gives ``P(s_{i+1} = s1 | s_i = s0)``;
* ``emissions[s][o]`` gives ``P(o_i = o | s_i = s)``.

Rows need not sum to one. Missing entries mean probability zero; nothing is
ever treated as uniform.

Example
-------
>>> final, paths = hmm_sample({"a": 1.0}, {"a": {"a": 1.0}}, {"a": {"x": 1.0}}, ["x", "x"])
>>> final
{'a': 1.0}
>>> paths["a"]
['a', 'a', 'a']
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Tuple, TypeVar

from .errors import ModelingPreconditionError
from .sampling import wchoose

__all__ = ["hmm_sample"]

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Hashable)
O = TypeVar("O", bound=Hashable)


def _prob(table: Mapping, key: Hashable) -> float:
    """Return ``table[key]`` or ``0`` when absent."""

    return table.get(key, 0)


def hmm_sample(
    initial: Mapping[S, float],
    transitions: Mapping[S, Mapping[S, float]],
    emissions: Mapping[S, Mapping[O, float]],
    observations: Sequence[O],
    rng: Optional[random.Random] = None,
) -> Tuple[Dict[S, float], Dict[S, List[S]]]:
    """Sample hidden-state paths conditioned on ``observations``.

    Parameters
    ----------
    initial:
        Initial state distribution.
    transitions:
        Transition distribution for each source state. Only states with a
        row here can be left, so every state should have one.
    emissions:
        Observation distribution for each state.
    observations:
        Observed symbols in order.
    rng:
        Random source for the path draws.

    Returns
    -------
    tuple(dict, dict)
        ``(final, paths)``. ``final[s]`` is the posterior probability of ending
        in ``s`` and ``paths[s]`` one sampled path of length
        ``len(observations) + 1`` ending in ``s``. States with zero posterior
        mass may be absent from both.

    Raises
    ------
    ModelingPreconditionError
        If the observations have zero probability under the model.
    """

    dist: Dict[S, float] = dict(initial)
    paths: Dict[S, Tuple[S, ...]] = {s: (s,) for s in transitions}
    for s in initial:
        paths.setdefault(s, (s,))

    for index, obs in enumerate(observations):
        # Extend every path by one transition, ignoring ``obs``. Candidates
        # are grouped by destination in order of first appearance.
        groups: Dict[S, Dict[Tuple[S, ...], float]] = {}
        for s0, row in transitions.items():
            mass = _prob(dist, s0)
            for s1, p in row.items():
                if not p:
                    continue
                group = groups.setdefault(s1, {})
                weight = p * mass
                if weight > 0:
                    group[paths[s0] + (s1,)] = weight

        new_dist: Dict[S, float] = {}
        new_paths: Dict[S, Tuple[S, ...]] = {}
        for s1, group in groups.items():
            if not group:
                # Unreachable given the observations so far.
                new_dist[s1] = 0.0
                continue
            new_dist[s1] = sum(group.values())
            new_paths[s1] = wchoose(group, rng)

        # Condition on having seen ``obs``; the sampled paths stay as they are.
        for s1 in new_dist:
            new_dist[s1] *= _prob(emissions.get(s1, {}), obs)
        norm = sum(new_dist.values())
        if norm <= 0:
            raise ModelingPreconditionError(
                f"observation {obs!r} at position {index} has zero probability under the model"
            )
        dist = {s: w / norm for s, w in new_dist.items()}
        paths = new_paths

    logger.debug("Sampled HMM posterior over %d observations", len(observations))
    return dist, {s: list(path) for s, path in paths.items()}
