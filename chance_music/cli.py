"""Command line helpers for chance_music.

The ``chance-music`` console script (also ``python -m chance_music``)
generates one song, optionally writes it as MIDI and optionally prints the
raw sequences as JSON.

Example
-------
Running ``chance-music --seed 7 --output out/song.mid --json`` creates
``out/song.mid`` and prints the melody, rhythm, harmony and bass events that
produced it. The same seed always yields the same song.

The ``CHANCE_MUSIC_SEED`` environment variable provides a default seed when
``--seed`` is not given.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import random
import sys
from dataclasses import asdict
from typing import List, Optional

from . import DEFAULT_REPEATS, GenerationError, generate_song
from .note_utils import note_to_midi

__all__ = ["run_cli", "main"]

SEED_ENV_VAR = "CHANCE_MUSIC_SEED"


def _default_seed() -> Optional[int]:
    """Return the seed from :data:`SEED_ENV_VAR` or ``None`` when unset."""

    value = os.environ.get(SEED_ENV_VAR)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        logging.warning("Ignoring non-integer %s=%r", SEED_ENV_VAR, value)
        return None


def _seed_rng(seed: Optional[int]) -> None:
    """Seed the process-wide random source when ``seed`` is given."""

    if seed is None:
        return
    random.seed(seed)
    logging.debug("Random seed set to %d", seed)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chance-music",
        description="Generate a random melody with harmony and bass line.",
    )
    parser.add_argument("--seed", type=int, default=_default_seed(),
                        help=f"Random seed for reproducible output (default: ${SEED_ENV_VAR}).")
    parser.add_argument("--repeats", type=int, default=DEFAULT_REPEATS,
                        help=f"Number of harmonizations of the melody (default: {DEFAULT_REPEATS}).")
    parser.add_argument("--output", type=str, help="Write the song to this MIDI file.")
    parser.add_argument("--bpm", type=int, default=60, help="Tempo in quarter notes per minute (default: 60).")
    parser.add_argument("--tonic", type=str, default="C5", help="Pitch of the tonic (default: C5).")
    parser.add_argument("--program", type=int, default=0, help="MIDI program number for all tracks.")
    parser.add_argument("--json", action="store_true", help="Print the generated sequences as JSON.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def run_cli(argv: Optional[List[str]] = None) -> None:
    """Parse ``argv`` and generate a song.

    Invalid options and generation failures are logged and terminate the
    process with exit status ``1``.
    """

    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.repeats <= 0:
        logging.error("Repeats must be a positive integer.")
        sys.exit(1)
    if args.bpm <= 0:
        logging.error("BPM must be a positive integer.")
        sys.exit(1)
    if not 0 <= args.program <= 127:
        logging.error("Program must be between 0 and 127.")
        sys.exit(1)
    try:
        note_to_midi(args.tonic)
    except ValueError:
        logging.error("Invalid tonic: %s", args.tonic)
        sys.exit(1)
    if not args.output and not args.json:
        logging.info("Neither --output nor --json given; printing JSON.")
        args.json = True

    _seed_rng(args.seed)

    try:
        song = generate_song(args.repeats)
    except GenerationError:
        logging.exception("Song generation failed.")
        sys.exit(1)

    if args.output:
        from . import create_midi_file

        try:
            create_midi_file(song, args.output, bpm=args.bpm, tonic=args.tonic, program=args.program)
        except (OSError, ValueError) as exc:
            logging.error("Could not write MIDI file: %s", exc)
            sys.exit(1)

    if args.json:
        print(json.dumps(asdict(song)))
    logging.info("Song generation complete.")


def main(argv: Optional[List[str]] = None) -> None:
    """Console entry point: configure logging and run the CLI."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli(argv)
