"""Exception types raised by the generation engine.

Every failure aborts the current generation call; nothing here is retried.
"""

from __future__ import annotations

__all__ = [
    "GenerationError",
    "InvariantViolation",
    "ModelingPreconditionError",
    "DegenerateInputError",
]


class GenerationError(RuntimeError):
    """Base class for errors raised while generating a song."""


class InvariantViolation(GenerationError):
    """An internal invariant failed. This indicates a bug, not bad input."""


class ModelingPreconditionError(GenerationError):
    """The model assigns zero probability to the requested observations."""


class DegenerateInputError(GenerationError, ValueError):
    """Parameters that make sampling impossible, such as an empty weight map."""
