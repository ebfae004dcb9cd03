"""Tests for recursive bass line placement."""

import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from chance_music import bass  # noqa: E402
from chance_music.errors import DegenerateInputError  # noqa: E402


@pytest.mark.parametrize("roots", [[0], [4], [0, 4], [3, 3]])
def test_short_progressions_return_endpoints(roots):
    assert bass.random_bassline(roots, 0, 0, random.Random(0)) == [0, 0]


def test_endpoints_passed_through_for_short_input():
    assert bass.random_bassline([1, 2], -3, 5) == [-3, 5]


@pytest.mark.parametrize("seed", range(30))
def test_interior_notes_are_triad_tones(seed):
    rng = random.Random(seed)
    roots = [rng.randrange(7) for _ in range(rng.randint(3, 25))]
    line = bass.random_bassline(roots, 0, 0, rng)
    assert len(line) == len(roots)
    assert line[0] == 0 and line[-1] == 0
    for note, root in zip(line[1:-1], roots[1:-1]):
        assert (note - root) % 7 in bass.TRIAD


def test_midpoint_stays_near_the_ends():
    """Candidates come from the three nearest triad tones on each side."""

    rng = random.Random(1)
    for _ in range(200):
        line = bass.random_bassline([0, 4, 0], 0, 0, rng)
        assert -7 <= line[1] <= 7


def test_bass_events_single_chord():
    assert bass.bass_events([0], [12], rng=random.Random(0)) == [(0, 12)]


def test_bass_events_cover_harmony_duration():
    rng = random.Random(6)
    roots = [0, 3, 4, 0, 5, 1, 4, 0]
    durations = [4, 2, 3, 1, 5, 2, 2, 6]
    events = bass.bass_events(roots, durations, rng=rng)
    assert sum(d for _, d in events) == sum(durations)
    assert all(a[0] != b[0] for a, b in zip(events, events[1:]))


def test_bass_events_rejects_mismatch():
    with pytest.raises(DegenerateInputError):
        bass.bass_events([0, 1], [1])
