"""Tests for scale-degree to MIDI conversion."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from chance_music import note_utils  # noqa: E402


@pytest.mark.parametrize(
    "note, expected",
    [("C4", 60), ("C5", 72), ("c#4", 61), ("Db4", 61), ("C-1", 0), ("G9", 127)],
)
def test_note_to_midi(note, expected):
    assert note_utils.note_to_midi(note) == expected


@pytest.mark.parametrize("note", ["H4", "C", "C10", "4C"])
def test_note_to_midi_rejects_bad_input(note):
    with pytest.raises(ValueError):
        note_utils.note_to_midi(note)


@pytest.mark.parametrize(
    "degree, expected",
    [(0, 72), (1, 74), (6, 83), (7, 84), (-1, 71), (-7, 60), (-14, 48), (10, 89)],
)
def test_degree_to_midi(degree, expected):
    assert note_utils.degree_to_midi("C5", degree) == expected


def test_degree_to_midi_accepts_midi_tonic():
    assert note_utils.degree_to_midi(62, 2) == 66


def test_degree_to_midi_range_checked():
    with pytest.raises(ValueError):
        note_utils.degree_to_midi("G9", 1)


def test_short_range_triad_members_are_triad_tones():
    for root, members in enumerate(note_utils.SHORT_RANGE_TRIAD_MEMBERS):
        assert members
        for degree in members:
            assert (degree - root) % 7 in {0, 2, 4}
