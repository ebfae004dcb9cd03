#!/usr/bin/env python3
"""chance_music library.

This package generates short pieces of music from nothing but a random
source. A typical workflow is to call :func:`generate_song`, optionally after
seeding :mod:`random`, and hand the result to :func:`create_midi_file` to
obtain a MIDI file.

Underlying Algorithm
--------------------
Each stage feeds the next:

* **Melody.** A biased random walk over scale degrees climbs to a peak and
  then wanders back to the tonic (:mod:`chance_music.melody`). Step sizes are
  drawn from noncentral hypergeometric weights so small steps dominate.
* **Rhythm.** The melody's notes are spread over a fixed number of beats by
  cutting the beats at random distinct points
  (:mod:`chance_music.rhythm_engine`).
* **Harmony.** A seven-state hidden Markov model over chord roots is
  conditioned on the melody's pitch classes and one posterior path is
  sampled (:mod:`chance_music.hmm`, :mod:`chance_music.harmony_generator`).
* **Bass.** The chord roots are bisected recursively, placing a triad tone
  near the middle of each span (:mod:`chance_music.bass`).

The melody and rhythm are generated once per song while harmony and bass are
resampled for each repetition, so repeats sound related but not identical.

Algorithm Pseudocode
--------------------
::

    melody = generate_melody()
    rhythm = random_partition(ceil(len(melody) / RHYTHM_DENSITY), len(melody))
    repeat N times:
        harmony = coalesce(zip(harmonize(melody), rhythm))
        bass = coalesce(zip(random_bassline(roots(harmony), 0, 0),
                            durations(harmony) + [0]))
"""

__version__ = "0.1.0"

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import (  # noqa: F401
    GenerationError,
    InvariantViolation,
    ModelingPreconditionError,
    DegenerateInputError,
)
from .sampling import (  # noqa: F401
    STEP_RANGE,
    DEFAULT_CACHE,
    TransitionWeightCache,
    cchoose,
    melody_transition_weights,
    wchoose,
)
from .utils import coalesce
from .melody import MIN_NOTE, MAX_NOTE, MelodyWalker, generate_melody  # noqa: F401
from .rhythm_engine import (  # noqa: F401
    RHYTHM_DENSITY,
    RhythmGenerator,
    beat_count,
    random_partition,
)
from .hmm import hmm_sample  # noqa: F401
from .harmony_generator import HarmonyGenerator, harmonize  # noqa: F401
from .bass import bass_events, random_bassline  # noqa: F401
from .note_utils import degree_to_midi, note_to_midi  # noqa: F401

logger = logging.getLogger(__name__)

# Number of harmonizations played over each melody.
DEFAULT_REPEATS = 4


@dataclass
class Arrangement:
    """One accompaniment for a melody.

    ``harmony`` holds ``(chord_root, duration)`` events and ``bass`` holds
    ``(note, duration)`` events; both span the same total duration as the
    melody.
    """

    harmony: List[Tuple[int, int]]
    bass: List[Tuple[int, int]]


@dataclass
class Song:
    """A melody, its rhythm and the accompaniments played under it."""

    melody: List[int]
    rhythm: List[int]
    arrangements: List[Arrangement] = field(default_factory=list)

    @property
    def total_beats(self) -> int:
        """Duration of one pass through the melody."""

        return sum(self.rhythm)


def generate_arrangement(
    melody: List[int],
    rhythm: List[int],
    harmonizer: Optional[HarmonyGenerator] = None,
    rng: Optional[random.Random] = None,
) -> Arrangement:
    """Return a fresh harmony and bass line for ``melody`` played with ``rhythm``."""

    harmonizer = harmonizer or HarmonyGenerator()
    harmony = harmonizer.generate(melody, rhythm, rng)
    roots = [root for root, _ in harmony]
    durations = [duration for _, duration in harmony]
    bass = bass_events(roots, durations, 0, 0, rng)
    return Arrangement(harmony=harmony, bass=bass)


def generate_song(
    repeats: int = DEFAULT_REPEATS,
    rng: Optional[random.Random] = None,
    *,
    walker: Optional[MelodyWalker] = None,
    rhythm_generator: Optional[RhythmGenerator] = None,
    harmonizer: Optional[HarmonyGenerator] = None,
) -> Song:
    """Generate a complete :class:`Song`.

    @param repeats (int): Number of arrangements to generate for the melody.
        Must be positive or ``DegenerateInputError`` is raised.
    @param rng (random.Random|None): Random source shared by every stage. The
        process-wide :mod:`random` module is used when omitted, so
        ``random.seed`` makes the output reproducible.
    @param walker (MelodyWalker|None): Melody model, default bounds when
        omitted.
    @param rhythm_generator (RhythmGenerator|None): Rhythm model, default
        density when omitted.
    @param harmonizer (HarmonyGenerator|None): Harmony model, default tables
        when omitted.
    @returns Song: The generated melody, rhythm and arrangements.
    """

    if repeats <= 0:
        raise DegenerateInputError("repeats must be positive")

    walker = walker or MelodyWalker()
    rhythm_generator = rhythm_generator or RhythmGenerator()
    harmonizer = harmonizer or HarmonyGenerator()

    melody = walker.generate(rng)
    rhythm = rhythm_generator.generate(len(melody), rng)
    song = Song(melody=melody, rhythm=rhythm)
    for _ in range(repeats):
        song.arrangements.append(generate_arrangement(melody, rhythm, harmonizer, rng))
    logger.info(
        "Generated song: %d notes over %d beats, %d arrangements",
        len(melody),
        song.total_beats,
        repeats,
    )
    return song


from .midi_io import create_midi_file  # noqa: E402,F401


def main():
    from .cli import main as _main
    _main()


if __name__ == "__main__":
    main()
