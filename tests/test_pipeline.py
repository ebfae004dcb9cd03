"""End-to-end tests for ``generate_song``."""

import json
import random
import sys
from dataclasses import asdict
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import chance_music  # noqa: E402


def _dump(song):
    return json.dumps(asdict(song))


def test_seeded_generation_is_reproducible():
    random.seed(42)
    first = _dump(chance_music.generate_song())
    random.seed(42)
    second = _dump(chance_music.generate_song())
    assert first == second


def test_explicit_rng_is_reproducible():
    first = chance_music.generate_song(rng=random.Random(7))
    second = chance_music.generate_song(rng=random.Random(7))
    assert _dump(first) == _dump(second)


def test_explicit_rng_leaves_global_random_alone():
    random.seed(5)
    expected = random.random()
    random.seed(5)
    chance_music.generate_song(rng=random.Random(1))
    assert random.random() == expected


@pytest.mark.parametrize("seed", range(25))
def test_song_structure(seed):
    song = chance_music.generate_song(repeats=3, rng=random.Random(seed))
    assert len(song.rhythm) == len(song.melody)
    assert song.total_beats == chance_music.beat_count(len(song.melody))
    assert len(song.arrangements) == 3
    for arrangement in song.arrangements:
        assert sum(d for _, d in arrangement.harmony) == song.total_beats
        assert sum(d for _, d in arrangement.bass) == song.total_beats
        assert arrangement.harmony[0][0] == 0
        assert arrangement.bass[0][0] == 0


def test_generate_arrangement_uses_supplied_harmonizer():
    class Tonic(chance_music.HarmonyGenerator):
        def harmonize(self, melody, rng=None):
            return [0] * len(melody)

    arrangement = chance_music.generate_arrangement([0, 2, 0], [3, 3, 4], Tonic(), random.Random(0))
    assert arrangement.harmony == [(0, 10)]
    assert arrangement.bass == [(0, 10)]


def test_repeats_must_be_positive():
    with pytest.raises(chance_music.DegenerateInputError):
        chance_music.generate_song(repeats=0)
