"""
nmsimplex - Nelder-Mead simplex optimizer

Synchronous, asyncio, completion-callback and lazy-sequence schedulers, plus a
memoizing wrapper for expensive objective functions.
"""

from nmsimplex.model.memoize import memoize, memoize_callback
from nmsimplex.optimization import (
    AsyncSimplexSequence,
    InvalidSimplexError,
    ObjectiveFailure,
    SimplexSequence,
    initial_simplex,
    iterate,
    iterate_async,
    step,
    step_async,
    step_callback,
)

__version__ = "0.1.0"

__all__ = [
    "memoize", "memoize_callback",
    "step", "step_async", "step_callback",
    "iterate", "iterate_async", "SimplexSequence", "AsyncSimplexSequence",
    "initial_simplex", "InvalidSimplexError", "ObjectiveFailure",
]
