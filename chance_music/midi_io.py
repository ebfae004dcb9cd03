"""Utilities for writing generated songs as MIDI files.

A :class:`~chance_music.Song` becomes a type-1 MIDI file with three tracks:

* the melody, played once per arrangement;
* the harmony, each chord arpeggiated in sixteenth-step notes drawn at random
  from its triad tones below the tonic;
* the bass, two scale octaves below the bass line's degree offsets.

One unit of rhythm (one "beat" of the partition) lasts an eighth of a
quarter note, so at 60 BPM every unit takes 0.125 seconds.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

from .note_utils import SHORT_RANGE_TRIAD_MEMBERS, degree_to_midi

if TYPE_CHECKING:
    from mido import MidiFile

    from . import Song

__all__ = ["create_midi_file", "TICKS_PER_BEAT", "UNIT_TICKS"]

logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480
# Ticks per rhythm unit.
UNIT_TICKS = TICKS_PER_BEAT // 8

MELODY_CHANNEL = 0
HARMONY_CHANNEL = 1
BASS_CHANNEL = 2

MELODY_VELOCITY = 80
HARMONY_VELOCITY = 32
BASS_VELOCITY = 120

# The bass sounds two octaves of scale degrees below the melody register.
BASS_DEGREE_OFFSET = -14


def _to_track(events: List[Tuple[int, int, object]], track) -> None:
    """Append absolute-time ``(tick, order, message)`` events to ``track`` as deltas."""

    events.sort(key=lambda e: (e[0], e[1]))
    last = 0
    for tick, _order, msg in events:
        msg.time = tick - last
        track.append(msg)
        last = tick


def create_midi_file(
    song: "Song",
    output_file: str,
    bpm: int = 60,
    tonic: str = "C5",
    program: int = 0,
    rng: Optional[random.Random] = None,
) -> "MidiFile":
    """Write ``song`` to ``output_file`` and return the ``MidiFile``.

    Parameters
    ----------
    song:
        Generated song. Each arrangement is played in turn under a fresh pass
        of the melody.
    output_file:
        Destination path. Missing parent directories are created.
    bpm:
        Tempo in quarter notes per minute. Must be positive.
    tonic:
        Pitch of scale degree ``0``, e.g. ``"C5"``.
    program:
        General MIDI program used on all three channels.
    rng:
        Random source for the harmony arpeggios.

    Raises
    ------
    ValueError
        If ``bpm`` or ``program`` is out of range or a note falls outside the
        MIDI range.
    ImportError
        If ``mido`` is not installed.
    """

    try:
        import mido
        from mido import Message, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to create MIDI files; install it with 'pip install mido'"
        ) from exc

    if bpm <= 0:
        raise ValueError("bpm must be a positive integer")
    if not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")

    source = rng if rng is not None else random
    mid = MidiFile(type=1, ticks_per_beat=TICKS_PER_BEAT)
    melody_track = MidiTrack()
    harmony_track = MidiTrack()
    bass_track = MidiTrack()
    mid.tracks.extend([melody_track, harmony_track, bass_track])

    melody_track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))
    for track, channel in (
        (melody_track, MELODY_CHANNEL),
        (harmony_track, HARMONY_CHANNEL),
        (bass_track, BASS_CHANNEL),
    ):
        track.append(Message("program_change", program=program, channel=channel, time=0))

    # ``order`` sorts note_off before note_on at equal ticks so repeated
    # pitches retrigger cleanly.
    melody_events: List[Tuple[int, int, object]] = []
    harmony_events: List[Tuple[int, int, object]] = []
    bass_events: List[Tuple[int, int, object]] = []

    def _note(events, channel, note, velocity, start, length):
        events.append((start, 1, Message("note_on", note=note, velocity=velocity, channel=channel)))
        events.append(
            (start + length, 0, Message("note_off", note=note, velocity=velocity, channel=channel))
        )

    pass_ticks = song.total_beats * UNIT_TICKS
    for index, arrangement in enumerate(song.arrangements):
        offset = index * pass_ticks

        tick = offset
        for degree, duration in zip(song.melody, song.rhythm):
            length = duration * UNIT_TICKS
            _note(melody_events, MELODY_CHANNEL, degree_to_midi(tonic, degree),
                  MELODY_VELOCITY, tick, length)
            tick += length

        tick = offset
        half = UNIT_TICKS // 2
        for root, duration in arrangement.harmony:
            for _ in range(2 * duration):
                degree = source.choice(SHORT_RANGE_TRIAD_MEMBERS[root])
                _note(harmony_events, HARMONY_CHANNEL, degree_to_midi(tonic, degree),
                      HARMONY_VELOCITY, tick, half)
                tick += half

        tick = offset
        for degree, duration in arrangement.bass:
            if duration <= 0:
                continue
            length = duration * UNIT_TICKS
            _note(bass_events, BASS_CHANNEL, degree_to_midi(tonic, degree + BASS_DEGREE_OFFSET),
                  BASS_VELOCITY, tick, length)
            tick += length

    _to_track(melody_events, melody_track)
    _to_track(harmony_events, harmony_track)
    _to_track(bass_events, bass_track)

    Path(output_file).expanduser().parent.mkdir(parents=True, exist_ok=True)
    mid.save(output_file)
    logger.info("MIDI file saved to %s", output_file)
    return mid
