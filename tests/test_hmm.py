"""Tests for the HMM posterior sampler."""

import copy
import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from chance_music.errors import ModelingPreconditionError  # noqa: E402
from chance_music.hmm import hmm_sample  # noqa: E402

TWO_STATE = {
    "initial": {0: 1.0},
    "transitions": {0: {0: 0.5, 1: 0.5}, 1: {0: 0.5, 1: 0.5}},
    "emissions": {0: {"x": 0.9, "y": 0.1}, 1: {"x": 0.2, "y": 0.8}},
}


def test_single_state_model():
    observations = ["x", "y", "z"]
    final, paths = hmm_sample(
        {"s": 1.0},
        {"s": {"s": 1.0}},
        {"s": {o: 1.0 for o in observations}},
        observations,
        random.Random(0),
    )
    assert final == {"s": 1.0}
    assert paths == {"s": ["s"] * 4}


def test_no_observations_returns_initial():
    final, paths = hmm_sample({"a": 1.0}, {"a": {"b": 1.0}, "b": {"a": 1.0}}, {}, [])
    assert final == {"a": 1.0}
    assert paths["a"] == ["a"]


def test_deterministic_chain():
    final, paths = hmm_sample(
        {"a": 1.0},
        {"a": {"b": 1.0}, "b": {"a": 1.0}},
        {"a": {"o": 1.0}, "b": {"o": 1.0}},
        ["o", "o", "o"],
        random.Random(1),
    )
    assert final["b"] == 1.0
    assert final.get("a", 0) == 0
    assert paths["b"] == ["a", "b", "a", "b"]
    assert "a" not in paths


def test_final_distribution_is_exact_posterior():
    final, _paths = hmm_sample(
        TWO_STATE["initial"],
        TWO_STATE["transitions"],
        TWO_STATE["emissions"],
        ["x"],
        random.Random(2),
    )
    assert final[0] == pytest.approx(0.45 / 0.55)
    assert final[1] == pytest.approx(0.10 / 0.55)
    assert sum(final.values()) == pytest.approx(1.0)


def test_paths_are_conditional_samples():
    """Paths into a state follow the posterior, not the most likely path."""

    rng = random.Random(77)
    draws = 5000
    via_zero = 0
    for _ in range(draws):
        _final, paths = hmm_sample(
            TWO_STATE["initial"],
            TWO_STATE["transitions"],
            TWO_STATE["emissions"],
            ["x", "x"],
            rng,
        )
        path = paths[0]
        assert len(path) == 3
        assert path[0] == 0 and path[-1] == 0
        via_zero += path[1] == 0
    # P(middle = 0 | end = 0) = 0.2025 / 0.2475
    assert via_zero / draws == pytest.approx(0.2025 / 0.2475, abs=0.03)


def test_path_lengths_match_observations():
    observations = ["x", "y", "y", "x", "y"]
    _final, paths = hmm_sample(
        TWO_STATE["initial"],
        TWO_STATE["transitions"],
        TWO_STATE["emissions"],
        observations,
        random.Random(5),
    )
    assert set(paths) == {0, 1}
    for state, path in paths.items():
        assert len(path) == len(observations) + 1
        assert path[0] == 0
        assert path[-1] == state


def test_zero_probability_observation_raises():
    with pytest.raises(ModelingPreconditionError):
        hmm_sample(
            TWO_STATE["initial"],
            TWO_STATE["transitions"],
            TWO_STATE["emissions"],
            ["x", "unseen"],
            random.Random(0),
        )


def test_missing_emission_row_counts_as_zero():
    with pytest.raises(ModelingPreconditionError):
        hmm_sample({"a": 1.0}, {"a": {"a": 1.0}}, {}, ["o"], random.Random(0))


def test_inputs_are_not_mutated():
    snapshot = copy.deepcopy(TWO_STATE)
    hmm_sample(
        TWO_STATE["initial"],
        TWO_STATE["transitions"],
        TWO_STATE["emissions"],
        ["y", "x"],
        random.Random(9),
    )
    assert TWO_STATE == snapshot


def test_same_seed_same_paths():
    args = (TWO_STATE["initial"], TWO_STATE["transitions"], TWO_STATE["emissions"], ["x", "y", "x"])
    assert hmm_sample(*args, random.Random(4)) == hmm_sample(*args, random.Random(4))
