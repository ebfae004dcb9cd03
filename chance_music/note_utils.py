"""Utility functions for translating scale degrees to MIDI numbers.

The generation engine works in scale-degree offsets relative to a tonic.
These helpers map such offsets onto the major scale above a concrete tonic
pitch so the results can be rendered.

Example
-------
>>> from chance_music.note_utils import note_to_midi, degree_to_midi
>>> note_to_midi("C5")
72
>>> degree_to_midi("C5", -1)
71
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import List, Union

__all__ = [
    "NOTE_TO_SEMITONE",
    "MAJOR_SCALE_STEPS",
    "SHORT_RANGE_TRIAD_MEMBERS",
    "note_to_midi",
    "degree_to_midi",
]

# Both sharp and flat spellings map to their semitone within the octave so
# enharmonic tonic names (``Db`` and ``C#``) are equally accepted.
NOTE_TO_SEMITONE = {
    "C": 0,
    "B#": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "Fb": 4,
    "E#": 5,
    "F": 5,
    "F#": 6,
    "Gb": 6,
    "G": 7,
    "G#": 8,
    "Ab": 8,
    "A": 9,
    "A#": 10,
    "Bb": 10,
    "B": 11,
    "Cb": 11,
}

# Semitone offset of each degree of the major scale.
MAJOR_SCALE_STEPS = [0, 2, 4, 5, 7, 9, 11]

# Tones of each diatonic triad, as degree offsets, clipped to a range a tiny
# bit bigger than the octave below the tonic. Indexed by chord root.
SHORT_RANGE_TRIAD_MEMBERS: List[List[int]] = [
    [-7, -5, -3, 0, 2],
    [-9, -6, -4, -2, 1],
    [-8, -5, -3, -1, 2],
    [-9, -7, -4, -2, 0],
    [-8, -6, -3, -1, 1],
    [-9, -7, -5, -2, 0, 2],
    [-8, -6, -4, -1, 1],
]


@lru_cache(maxsize=None)
def note_to_midi(note: str) -> int:
    """Convert a note string such as ``C#4`` into a MIDI number.

    Parameters
    ----------
    note:
        Note name including octave. Octaves may be negative.

    Returns
    -------
    int
        MIDI note number in the range ``0-127``.

    Raises
    ------
    ValueError
        If ``note`` is malformed or lies outside the MIDI range.
    """

    match = re.fullmatch(r"([A-Ga-g][#b]?)(-?\d+)", note.strip())
    if not match:
        logging.error("Invalid note format: %s", note)
        raise ValueError(f"Invalid note format: {note}")

    name, octave_str = match.groups()
    name = name[0].upper() + name[1:]
    # MIDI octaves are offset by one relative to scientific pitch notation.
    midi_val = NOTE_TO_SEMITONE[name] + (int(octave_str) + 1) * 12
    if not 0 <= midi_val <= 127:
        logging.error("MIDI value out of range: %s -> %d", note, midi_val)
        raise ValueError(f"Computed MIDI value {midi_val} out of range 0-127 for note {note}")
    return midi_val


def degree_to_midi(tonic: Union[str, int], degree: int) -> int:
    """Return the MIDI number of major-scale ``degree`` above ``tonic``.

    ``degree`` may be negative; ``-1`` is the leading tone below the tonic and
    ``7`` the tonic an octave up. ``tonic`` is a note name or a MIDI number.
    """

    base = note_to_midi(tonic) if isinstance(tonic, str) else tonic
    octave, step = divmod(degree, len(MAJOR_SCALE_STEPS))
    midi_val = base + 12 * octave + MAJOR_SCALE_STEPS[step]
    if not 0 <= midi_val <= 127:
        raise ValueError(f"degree {degree} above {tonic} is outside the MIDI range")
    return midi_val
